import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)


@dataclass
class Client:
    ws: WebSocket
    q: asyncio.Queue
    task: asyncio.Task


class TelemetrySinkManager:
    """Holds the (single) realtime websocket sink and feeds it telemetry."""

    def __init__(self, buffer_size: int = 2):
        self.buffer_size = buffer_size
        self._client: Optional[Client] = None

    @property
    def connected(self) -> bool:
        return self._client is not None

    async def connect(self, websocket: WebSocket) -> asyncio.Task:
        """Attach an accepted websocket, replacing any previous sink."""
        if self._client is not None:
            logger.info("New telemetry sink connected, dropping the previous one")
            self.disconnect(self._client.ws)

        q: asyncio.Queue[bytes] = asyncio.Queue(maxsize=self.buffer_size)

        async def writer():
            try:
                while True:
                    payload = await q.get()
                    await websocket.send_text(payload.decode("utf-8"))
            except WebSocketDisconnect:
                logger.info("Telemetry sink disconnected")
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Telemetry sink write failed: {e}")
            self.disconnect(websocket)

        task = asyncio.create_task(writer())
        self._client = Client(ws=websocket, q=q, task=task)
        logger.info("Websocket monitor connected")
        return task

    def disconnect(self, websocket: WebSocket) -> None:
        client = self._client
        if client is None or client.ws is not websocket:
            return
        self._client = None
        if client.task is not asyncio.current_task():
            client.task.cancel()
        # unblock a fan-out waiting on the dead sink's full buffer
        while not client.q.empty():
            client.q.get_nowait()

    def close(self) -> None:
        """Detach the current sink, if any, and stop its writer."""
        if self._client is not None:
            self.disconnect(self._client.ws)

    async def forward(self, payload: bytes) -> bool:
        """Queue a payload for the sink; waits while its buffer is full."""
        client = self._client
        if client is None:
            return False
        await client.q.put(payload)
        return True
