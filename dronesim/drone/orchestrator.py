import asyncio
import logging
from typing import Any, Dict, List, Optional

from .models import AgentState, AgentStatus, TargetPoint, TelemetryEvent, TrajectoryCommand
from .navigator import CommandQueue, Navigator
from .telemetry import Publisher, TelemetryFanout
from .waypoint import WaypointFollower
from dronesim.config import Settings
from dronesim.messaging.websocket import TelemetrySinkManager

logger = logging.getLogger(__name__)


class Orchestrator:
    """Wires command queue -> navigator -> waypoint follower -> telemetry fan-out."""

    def __init__(
        self,
        settings: Settings,
        publisher: Optional[Publisher] = None,
        sink_manager: Optional[TelemetrySinkManager] = None,
    ):
        self.settings = settings
        self.state = AgentState(
            id=settings.drone_id,
            name=settings.drone_name,
            lat=settings.latitude,
            lon=settings.longitude,
            alt=settings.altitude,
            state=AgentStatus.READY,
            battery=settings.initial_battery,
            speed=settings.top_speed,
        )
        self.sink_manager = sink_manager or TelemetrySinkManager(settings.sink_buffer_size)

        self.commands = CommandQueue(maxsize=settings.command_queue_size)
        # capacity 1: each stage runs at most one item ahead of the next
        self._targets: asyncio.Queue[TargetPoint] = asyncio.Queue(maxsize=1)
        self._events: asyncio.Queue[TelemetryEvent] = asyncio.Queue(maxsize=1)

        self.navigator = Navigator(self.commands, self._targets, default_speed=settings.top_speed)
        self.follower = WaypointFollower(
            self.state,
            self._events,
            tick_interval=settings.tick_interval_sec,
            battery_decrement=settings.battery_decrement,
        )
        self.fanout = TelemetryFanout(publisher, self.sink_manager, settings.telemetry_topic_prefix)
        self._tasks: List[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks)

    def start(self) -> None:
        if self.running:
            logger.warning("Pipeline already running")
            return
        self._tasks = [
            asyncio.create_task(self.navigator.run(), name="navigator"),
            asyncio.create_task(self.follower.run(self._targets), name="waypoint"),
            asyncio.create_task(self.fanout.run(self._events), name="telemetry"),
        ]
        for task in self._tasks:
            task.add_done_callback(self._on_stage_done)
        logger.info(f"Drone {self.state.id} ({self.state.name}) ready at {self.state.lat}, {self.state.lon}")

    def _on_stage_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Pipeline stage {task.get_name()} crashed: {exc}", exc_info=exc)

    async def stop(self) -> None:
        self.navigator.stop()
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self.sink_manager.close()
        self._tasks = []
        logger.info("Pipeline stopped")

    async def submit(self, command: TrajectoryCommand) -> None:
        """Queue a command, waiting while the queue is full."""
        await self.commands.submit(command)
        logger.info(f"Queued {command.path.value} command ({self.commands.qsize()}/{self.commands.maxsize})")

    def status(self) -> Dict[str, Any]:
        last = self.follower.last_event or self.state.snapshot()
        current = self.navigator.current
        return {
            "drone": last.to_dict(),
            "current_path": current.path.value if current else None,
            "queued_commands": self.commands.qsize(),
            "command_capacity": self.commands.maxsize,
            "sink_connected": self.sink_manager.connected,
            "telemetry": dict(self.fanout.stats),
            "last_error": self.fanout.last_error,
            "running": self.running,
        }
