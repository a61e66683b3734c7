"""
WebSocket change feed.

Clients connect to ``/api/ws`` and receive every change event as
``{"type": event, "data": payload, "ts": ...}``. The socket is read-only;
the only client message understood is a ``ping`` keepalive.
"""
import json
import logging
from datetime import datetime, timezone
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)

router = APIRouter()


def _is_ping(raw_message: str) -> bool:
    if raw_message.strip() == "ping":
        return True
    try:
        data = json.loads(raw_message)
    except ValueError:
        return False
    return isinstance(data, dict) and data.get("type") == "ping"


@router.websocket("/ws")
async def change_feed(websocket: WebSocket):
    hub = websocket.app.state.hub

    await websocket.accept()
    await hub.register(websocket)
    await websocket.send_json({
        "type": "connected",
        "ts": datetime.now(timezone.utc).isoformat(),
    })
    logger.info("[WS] Client connected")

    try:
        while True:
            raw_message = await websocket.receive_text()
            if _is_ping(raw_message):
                await websocket.send_json({
                    "type": "pong",
                    "ts": datetime.now(timezone.utc).isoformat(),
                })
            else:
                logger.debug(f"[WS] Ignoring client message: {raw_message[:100]}")
    except WebSocketDisconnect:
        logger.info("[WS] Client disconnected")
    finally:
        await hub.unregister(websocket)
