import asyncio
import logging
from typing import Optional

from .models import AgentState, AgentStatus, TargetPoint, TelemetryEvent
from dronesim.utils.geo import planar_delta, planar_norm
from dronesim.utils.logging_utils import RateLimitLogger

logger = logging.getLogger(__name__)


class WaypointFollower:
    """Moves the agent toward each target in fixed steps, one telemetry tick per step."""

    def __init__(
        self,
        state: AgentState,
        events: "asyncio.Queue[TelemetryEvent]",
        tick_interval: float = 2.0,
        battery_decrement: float = 0.01,
    ):
        self.state = state
        self.events = events
        self.tick_interval = tick_interval
        self.battery_decrement = battery_decrement
        self.last_event: Optional[TelemetryEvent] = None
        self.ticks = 0
        self._log_limiter = RateLimitLogger(5.0)

    def step_size(self, target: TargetPoint) -> float:
        if target.speed > 0:
            return min(target.speed, self.state.speed)
        return self.state.speed

    async def follow(self, target: TargetPoint) -> None:
        step = self.step_size(target)
        dy, dx = planar_delta(self.state.lat, self.state.lon, target.lat, target.lon)
        norm = planar_norm(dy, dx)

        while step > 0 and norm > step:
            self.state.lat += dy / norm * step
            self.state.lon += dx / norm * step
            await self._tick()
            dy, dx = planar_delta(self.state.lat, self.state.lon, target.lat, target.lon)
            norm = planar_norm(dy, dx)

        # close enough (or nothing to normalize): land exactly on the target
        self.state.lat = target.lat
        self.state.lon = target.lon
        self.state.alt = target.alt
        self.state.state = AgentStatus.FLYING
        await self._tick()

    async def _tick(self) -> None:
        event = self.state.snapshot()
        self.last_event = event
        self.ticks += 1
        if self._log_limiter.should_log():
            logger.debug(
                f"Tick {self.ticks}: lat={event.lat:.7f} lon={event.lon:.7f} batt={event.batt:.2f}"
            )
        await self.events.put(event)
        if self.tick_interval > 0:
            await asyncio.sleep(self.tick_interval)
        self.state.battery -= self.battery_decrement

    async def run(self, targets: "asyncio.Queue[TargetPoint]") -> None:
        logger.info("Waypoint follower started")
        try:
            while True:
                target = await targets.get()
                try:
                    await self.follow(target)
                finally:
                    targets.task_done()
        except asyncio.CancelledError:
            logger.info("Waypoint follower stopped")
            raise
