"""Live WebSocket channel for simulation events."""

from __future__ import annotations

import logging

import orjson
from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from backend.broadcast import LiveBroadcaster, encode_message
from backend.security import LiveConnectionLimiter, get_client_ip

logger = logging.getLogger(__name__)

CONNECTED_MESSAGE = "Successfully connected to simulation server"


async def _handle_live_socket(
    websocket: WebSocket,
    broadcaster: LiveBroadcaster,
    limiter: LiveConnectionLimiter,
) -> None:
    client_ip = get_client_ip(websocket.headers, websocket.client)
    slot_held = False
    client_added = False

    try:
        await websocket.accept()

        if not limiter.acquire(client_ip):
            await websocket.send_json(
                {"type": "error", "message": "Too many WebSocket connections from this IP."}
            )
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return

        slot_held = True

        broadcaster.add_client(websocket)
        client_added = True

        await websocket.send_text(
            encode_message("connected", message=CONNECTED_MESSAGE).decode("utf-8")
        )

        while True:
            try:
                message = await websocket.receive()
            except WebSocketDisconnect:
                break

            if message["type"] == "websocket.disconnect":
                break
            if message["type"] != "websocket.receive":
                continue

            raw = message.get("text") or message.get("bytes")
            if not raw:
                continue

            try:
                payload = orjson.loads(raw)
            except orjson.JSONDecodeError as e:
                logger.warning("Invalid live message from %s: %s", client_ip, e)
                continue

            # Clients may relay their own progress to every other viewer
            if isinstance(payload, dict) and payload.get("type") == "simulation_update":
                await broadcaster.broadcast("simulation_state", payload.get("payload"))
    except Exception:
        logger.exception("WebSocket error for client %s", client_ip)
    finally:
        if client_added:
            broadcaster.remove_client(websocket)
        if slot_held:
            limiter.release(client_ip)


def setup_router(broadcaster: LiveBroadcaster, limiter: LiveConnectionLimiter) -> APIRouter:
    """Create the live websocket router."""
    router = APIRouter()

    @router.websocket("/api/live")
    async def live(websocket: WebSocket) -> None:
        await _handle_live_socket(websocket, broadcaster, limiter)

    return router
