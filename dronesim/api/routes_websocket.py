import logging
from datetime import datetime, timezone

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from dronesim.messaging.websocket import TelemetrySinkManager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])


def echo_message(message: str) -> str:
    received = datetime.now(timezone.utc).isoformat()
    return f"Your message is: {message}. Time received : {received}"


@router.websocket("/ws")
async def websocket_telemetry(websocket: WebSocket):
    """
    Realtime telemetry. Every tick is pushed as a JSON text frame; any text
    sent by the client is echoed back.
    """
    sink_manager: TelemetrySinkManager = websocket.app.state.sink_manager

    try:
        await websocket.accept()
    except Exception as e:
        logger.error(f"Failed to accept WebSocket: {e}")
        return

    await sink_manager.connect(websocket)

    try:
        while True:
            message = await websocket.receive_text()
            logger.info(f"WebSocket message: {message}")
            await websocket.send_text(echo_message(message))
    except WebSocketDisconnect:
        logger.info("WebSocket client disconnected")
    except Exception as e:
        logger.error(f"WebSocket error: {e}")
    finally:
        sink_manager.disconnect(websocket)
