"""Fan-out of simulation events to live WebSocket clients.

Every connected client of ``/api/live`` receives every broadcast. Clients
whose socket has closed, or whose send fails, are dropped.
"""

import logging
import time
from typing import Any, Optional, Set

import orjson
from fastapi import WebSocket
from starlette.websockets import WebSocketState

from backend.models import LiveMessage

logger = logging.getLogger("backend.broadcast")


def encode_message(message_type: str, data: Any = None, message: Optional[str] = None) -> bytes:
    """Serialize a live-channel envelope to JSON bytes."""
    envelope = LiveMessage(type=message_type, data=data, message=message)
    return orjson.dumps(envelope.model_dump(exclude_none=True))


class LiveBroadcaster:
    """Tracks live clients and sends them JSON text frames."""

    def __init__(self) -> None:
        self._clients: Set[WebSocket] = set()

    @property
    def client_count(self) -> int:
        self._prune_closed_clients()
        return len(self._clients)

    def add_client(self, websocket: WebSocket) -> None:
        self._prune_closed_clients()
        self._clients.add(websocket)
        logger.info("Live client connected. Total clients: %d", len(self._clients))

    def remove_client(self, websocket: WebSocket) -> None:
        self._clients.discard(websocket)
        logger.info("Live client disconnected. Total clients: %d", len(self._clients))

    def _prune_closed_clients(self) -> None:
        stale_clients = {
            websocket
            for websocket in self._clients
            if websocket.client_state not in {WebSocketState.CONNECTED, WebSocketState.CONNECTING}
        }
        if stale_clients:
            self._clients.difference_update(stale_clients)
            logger.debug("Pruned %d stale live clients", len(stale_clients))

    async def broadcast(self, message_type: str, data: Any = None) -> int:
        """Send one message to every live client.

        Returns:
            Number of clients the message was delivered to.
        """
        self._prune_closed_clients()
        if not self._clients:
            return 0

        payload = encode_message(message_type, data).decode("utf-8")
        disconnected = set()
        delivered = 0
        send_start = time.perf_counter()

        # Copy to avoid modification during iteration
        for client in list(self._clients):
            try:
                await client.send_text(payload)
                delivered += 1
            except Exception as e:
                logger.warning("Error sending %s to live client, dropping it: %s", message_type, e)
                disconnected.add(client)

        self._clients.difference_update(disconnected)

        send_ms = (time.perf_counter() - send_start) * 1000
        if send_ms > 50:
            logger.warning(
                "Broadcast of %s to %d clients took %.2f ms", message_type, delivered, send_ms
            )
        return delivered
