from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from dronesim.drone.models import Coordinate, PathType, TrajectoryCommand
from dronesim.drone.orchestrator import Orchestrator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["flights"])


# --------------------
# Schemas
# --------------------
class LocationIn(BaseModel):
    lat: float
    lon: float
    alt: float = 0.0

    def to_coordinate(self) -> Coordinate:
        return Coordinate(lat=self.lat, lon=self.lon, alt=self.alt)


class FlightPatternIn(BaseModel):
    path: str
    props: str = ""
    start: LocationIn
    end: LocationIn
    points: List[LocationIn] = Field(default_factory=list)
    data: List[float] = Field(default_factory=list)
    speed: Optional[float] = Field(default=None, gt=0)

    def to_command(self) -> TrajectoryCommand:
        return TrajectoryCommand(
            path=PathType.parse(self.path),
            props=self.props,
            start=self.start.to_coordinate(),
            end=self.end.to_coordinate(),
            points=tuple(p.to_coordinate() for p in self.points),
            data=tuple(self.data),
            speed=self.speed,
        )


class FlightQueuedOut(BaseModel):
    status: str
    path: str
    queued: int


def get_orchestrator(request: Request) -> Orchestrator:
    return request.app.state.orchestrator


# --------------------
# Endpoint
# --------------------
@router.post("/fly", response_model=FlightQueuedOut)
async def fly(payload: FlightPatternIn, orch: Orchestrator = Depends(get_orchestrator)):
    """Queue a flight pattern. Blocks while the command queue is full."""
    command = payload.to_command()
    if command.path == PathType.UNRECOGNIZED:
        logger.warning(f"Unrecognized path type {payload.path!r}, drone will fly to the end point")

    await orch.submit(command)

    return FlightQueuedOut(
        status="queued",
        path=command.path.value,
        queued=orch.commands.qsize(),
    )
