import asyncio
import logging
from typing import Any, Dict, Optional, Protocol

import orjson

from .models import TelemetryEvent

logger = logging.getLogger(__name__)


class TelemetrySerializationError(Exception):
    """A telemetry snapshot could not be encoded for the wire."""


class Publisher(Protocol):
    def publish(self, topic: str, payload, qos: int = 0, retain: bool = False): ...


class TelemetryFanout:
    """Forwards every telemetry tick to pub/sub and to the realtime sink, if one is attached."""

    def __init__(self, publisher: Optional[Publisher], sink_manager=None, topic_prefix: str = "drone"):
        self.publisher = publisher
        self.sink_manager = sink_manager
        self.topic_prefix = topic_prefix
        self.stats: Dict[str, Any] = {"published": 0, "forwarded": 0, "errors": 0}
        self.last_error: Optional[str] = None

    def topic_for(self, agent_id: int) -> str:
        return f"{self.topic_prefix}-{agent_id}"

    @staticmethod
    def serialize(event: TelemetryEvent) -> bytes:
        try:
            return orjson.dumps(event.to_dict())
        except (TypeError, orjson.JSONEncodeError) as e:
            raise TelemetrySerializationError(f"cannot serialize telemetry for drone {event.id}: {e}") from e

    async def emit(self, event: TelemetryEvent) -> None:
        payload = self.serialize(event)

        if self.publisher is not None:
            try:
                self.publisher.publish(self.topic_for(event.id), payload)
                self.stats["published"] += 1
            except Exception as e:
                # the sink still gets this tick
                self._report_error(event, e)

        if self.sink_manager is not None and await self.sink_manager.forward(payload):
            self.stats["forwarded"] += 1

    def _report_error(self, event: TelemetryEvent, exc: Exception) -> None:
        self.stats["errors"] += 1
        self.last_error = str(exc)
        logger.error(f"Telemetry tick for drone {event.id} not delivered: {exc}", exc_info=exc)
        if self.publisher is None:
            return
        try:
            self.publisher.publish(
                f"{self.topic_for(event.id)}/errors",
                orjson.dumps({"error": type(exc).__name__, "message": str(exc), "ts": event.ts}),
            )
        except Exception as e:
            logger.error(f"Failed to report telemetry error: {e}")

    async def run(self, events: "asyncio.Queue[TelemetryEvent]") -> None:
        logger.info("Telemetry fan-out started")
        try:
            while True:
                event = await events.get()
                try:
                    await self.emit(event)
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    self._report_error(event, e)
                finally:
                    events.task_done()
        except asyncio.CancelledError:
            logger.info("Telemetry fan-out stopped")
            raise
