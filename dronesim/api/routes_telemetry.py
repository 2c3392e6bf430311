from fastapi import APIRouter, Depends

from dronesim.api.routes_flights import get_orchestrator
from dronesim.drone.orchestrator import Orchestrator

router = APIRouter(prefix="/telemetry", tags=["telemetry"])


@router.get("/status")
async def get_telemetry_status(orch: Orchestrator = Depends(get_orchestrator)):
    """Latest drone snapshot plus pipeline counters"""
    return orch.status()
