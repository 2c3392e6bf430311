from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from dronesim.api.routes_flights import router as flights_router
from dronesim.api.routes_telemetry import router as telemetry_router
from dronesim.api.routes_websocket import router as websocket_router
from dronesim.drone.orchestrator import Orchestrator

logger = logging.getLogger(__name__)


def create_command_app(orch: Orchestrator) -> FastAPI:
    """Command ingestion app (POST /fly) plus read-only status routes."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Command API listening")
        yield
        logger.info("Command API shutting down")

    app = FastAPI(title="dronesim commands", lifespan=lifespan)
    app.state.orchestrator = orch
    app.include_router(flights_router)
    app.include_router(telemetry_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "pipeline_running": orch.running,
            "sink_connected": orch.sink_manager.connected,
        }

    return app


def create_stream_app(orch: Orchestrator) -> FastAPI:
    """Realtime telemetry app (websocket /ws)."""
    app = FastAPI(title="dronesim telemetry stream")
    app.state.sink_manager = orch.sink_manager
    app.include_router(websocket_router)
    return app
