"""
In-process change feed for connected scorecard clients.

Every WebSocket registered with the hub receives every change event; clients
react by re-fetching what they display. Sockets that fail on send are pruned.
"""
from datetime import datetime, timezone
from typing import Any, Set
import asyncio
import logging

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ChangeHub:
    """
    Broadcast hub for entity-change events.

    Handles WebSocket lifecycle: register, notify, unregister.
    """

    def __init__(self):
        self._sockets: Set[WebSocket] = set()
        self._lock = asyncio.Lock()

    async def register(self, websocket: WebSocket) -> None:
        async with self._lock:
            self._sockets.add(websocket)
            logger.debug(f"[HUB] Client connected. Total: {len(self._sockets)}")

    async def unregister(self, websocket: WebSocket) -> None:
        async with self._lock:
            self._sockets.discard(websocket)
            logger.debug(f"[HUB] Client disconnected. Remaining: {len(self._sockets)}")

    async def connection_count(self) -> int:
        async with self._lock:
            return len(self._sockets)

    async def notify(self, event: str, payload: Any) -> None:
        """
        Send ``{"type": event, "data": payload, "ts": ...}`` to every client.

        Args:
            event: Event name, e.g. ``weeks_updated``
            payload: JSON-serializable event data
        """
        async with self._lock:
            if not self._sockets:
                return
            # Copy set to avoid modification during iteration
            sockets = self._sockets.copy()

        message = {
            "type": event,
            "data": payload,
            "ts": datetime.now(timezone.utc).isoformat(),
        }

        dead_sockets = []
        for ws in sockets:
            try:
                await ws.send_json(message)
            except Exception as e:
                logger.debug(f"[HUB] Failed to send {event} to socket: {e}")
                dead_sockets.append(ws)

        if dead_sockets:
            async with self._lock:
                for ws in dead_sockets:
                    self._sockets.discard(ws)
            logger.debug(f"[HUB] Pruned {len(dead_sockets)} dead sockets")
        logger.debug(f"[HUB] Broadcast {event} to {len(sockets) - len(dead_sockets)} client(s)")
