from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any, Tuple


class AgentStatus(str, Enum):
    READY = "Ready"
    FLYING = "Flying"


class PathType(str, Enum):
    SINE = "sine"
    FIGURE8 = "figure8"
    CLOCKWISE = "clockwise"
    COUNTER_CLOCKWISE = "counter-clockwise"
    PATROL = "patrol"
    RANDOM = "random"
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def parse(cls, value: str) -> "PathType":
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.UNRECOGNIZED


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lon: float
    alt: float = 0.0


@dataclass(frozen=True)
class TargetPoint:
    lat: float
    lon: float
    alt: float = 0.0
    speed: float = 0.0  # 0 = agent top speed

    @classmethod
    def from_coordinate(cls, coord: Coordinate, speed: float = 0.0) -> "TargetPoint":
        return cls(lat=coord.lat, lon=coord.lon, alt=coord.alt, speed=speed)


@dataclass(frozen=True)
class TelemetryEvent:
    id: int
    name: str
    lat: float
    lon: float
    alt: float
    state: str
    batt: float
    ts: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "lat": self.lat,
            "lon": self.lon,
            "alt": self.alt,
            "state": self.state,
            "batt": self.batt,
            "ts": self.ts,
        }


@dataclass
class AgentState:
    """The simulated drone. Only the waypoint follower writes to it."""

    id: int
    name: str
    lat: float
    lon: float
    alt: float = 0.0
    state: AgentStatus = AgentStatus.READY
    battery: float = 10800.0
    speed: float = 0.000129726

    def snapshot(self) -> TelemetryEvent:
        return TelemetryEvent(
            id=self.id,
            name=self.name,
            lat=self.lat,
            lon=self.lon,
            alt=self.alt,
            state=self.state.value,
            batt=self.battery,
        )


@dataclass(frozen=True)
class TrajectoryCommand:
    path: PathType
    start: Coordinate
    end: Coordinate
    props: str = ""
    points: Tuple[Coordinate, ...] = ()
    data: Tuple[float, ...] = ()
    speed: Optional[float] = None

    @property
    def left(self) -> Optional[Coordinate]:
        return self.points[0] if len(self.points) > 0 else None

    @property
    def right(self) -> Optional[Coordinate]:
        return self.points[1] if len(self.points) > 1 else None

    @property
    def frequencies(self) -> Tuple[float, float]:
        outer = self.data[0] if len(self.data) > 0 else 0.0
        inner = self.data[1] if len(self.data) > 1 else 0.0
        return float(outer), float(inner)
