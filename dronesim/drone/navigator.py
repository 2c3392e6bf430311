import asyncio
import logging
from typing import Optional

from .models import PathType, TargetPoint, TrajectoryCommand
from .patterns import CURVE_PATHS, sweep

logger = logging.getLogger(__name__)


class CommandQueue:
    """Bounded FIFO of trajectory commands; a full queue blocks the submitter."""

    def __init__(self, maxsize: int = 2):
        if maxsize < 1:
            raise ValueError("command queue needs a capacity of at least 1")
        self._q: "asyncio.Queue[TrajectoryCommand]" = asyncio.Queue(maxsize=maxsize)

    @property
    def maxsize(self) -> int:
        return self._q.maxsize

    async def submit(self, command: TrajectoryCommand) -> None:
        await self._q.put(command)

    async def next(self) -> TrajectoryCommand:
        command = await self._q.get()
        self._q.task_done()
        return command

    def is_empty(self) -> bool:
        return self._q.empty()

    def qsize(self) -> int:
        return self._q.qsize()


class Navigator:
    """
    Expands trajectory commands into target points for the waypoint follower.

    A newer command only takes over between full pattern sweeps (or full
    patrol cycles), never in the middle of one.
    """

    def __init__(
        self,
        commands: CommandQueue,
        targets: "asyncio.Queue[TargetPoint]",
        default_speed: float,
    ):
        if default_speed <= 0:
            raise ValueError("default_speed must be positive")
        self.commands = commands
        self.targets = targets
        self.default_speed = default_speed
        self.current: Optional[TrajectoryCommand] = None
        self._running = True

    def stop(self) -> None:
        self._running = False

    def _keep_going(self) -> bool:
        return self._running and self.commands.is_empty()

    def _speed_for(self, command: TrajectoryCommand) -> float:
        if command.speed is not None and command.speed > 0:
            return command.speed
        return self.default_speed

    async def _emit(self, target: TargetPoint) -> None:
        await self.targets.put(target)

    async def _sweep_until_preempted(self, command: TrajectoryCommand, speed: float) -> int:
        sweeps = 0
        while self._keep_going():
            emitted = 0
            for target in sweep(command, speed):
                await self._emit(target)
                emitted += 1
            sweeps += 1
            if emitted == 0:
                logger.warning(f"{command.path.value} pattern collapsed to a point, not repeating it")
                break
        return sweeps

    async def expand(self, command: TrajectoryCommand) -> None:
        speed = self._speed_for(command)
        await self._emit(TargetPoint.from_coordinate(command.start, speed))

        if command.path in CURVE_PATHS:
            sweeps = await self._sweep_until_preempted(command, speed)
            logger.info(f"{command.path.value} pattern preempted after {sweeps} sweep(s)")
            if command.path == PathType.SINE:
                await self._emit(TargetPoint.from_coordinate(command.end, speed))

        elif command.path == PathType.PATROL:
            if command.points:
                cycles = 0
                while self._keep_going():
                    for wp in command.points:
                        await self._emit(TargetPoint(lat=wp.lat, lon=wp.lon, alt=wp.alt, speed=speed))
                    cycles += 1
                logger.info(f"Patrol preempted after {cycles} cycle(s)")
            else:
                logger.warning("Patrol command without points, flying straight to the end point")
            await self._emit(TargetPoint.from_coordinate(command.end, speed))

        else:
            await self._emit(TargetPoint.from_coordinate(command.end, speed))

    async def run(self) -> None:
        logger.info("Navigator started")
        try:
            while self._running:
                command = await self.commands.next()
                self.current = command
                logger.info(
                    f"Executing {command.path.value} command "
                    f"({self.commands.qsize()} more queued)"
                )
                try:
                    await self.expand(command)
                finally:
                    self.current = None
        except asyncio.CancelledError:
            logger.info("Navigator stopped")
            raise
