"""Tests for the /api/live WebSocket channel."""

import asyncio

from fastapi.testclient import TestClient

from backend.app_factory import AppContext, create_app
from backend.broadcast import LiveBroadcaster, encode_message
from backend.security import LiveConnectionLimiter

CONNECTED = {"type": "connected", "message": "Successfully connected to simulation server"}


def test_connect_greeting(client):
    with client.websocket_connect("/api/live") as websocket:
        assert websocket.receive_json() == CONNECTED


def test_relays_client_updates_to_all_clients(client):
    with client.websocket_connect("/api/live") as first:
        first.receive_json()
        with client.websocket_connect("/api/live") as second:
            second.receive_json()

            first.send_json({"type": "simulation_update", "payload": {"prey": 12}})

            expected = {"type": "simulation_state", "data": {"prey": 12}}
            assert first.receive_json() == expected
            assert second.receive_json() == expected


def test_ignores_other_messages(client):
    with client.websocket_connect("/api/live") as websocket:
        websocket.receive_json()
        websocket.send_text("not json")
        websocket.send_json({"type": "chat", "payload": "hi"})
        websocket.send_json({"type": "simulation_update", "payload": 1})
        assert websocket.receive_json() == {"type": "simulation_state", "data": 1}


def test_run_broadcasts_completion(client, balanced_params):
    with client.websocket_connect("/api/live") as websocket:
        websocket.receive_json()
        client.post("/api/simulation/run", json={"parameters": balanced_params})

        message = websocket.receive_json()
        assert message["type"] == "simulation_complete"
        assert message["data"]["parameters"]["prey"]["initialPopulation"] == 1000
        assert len(message["data"]["results"]["timeSteps"]) == 10
        assert message["data"]["results"]["extinctionOccurred"] is True


def test_connection_limit_per_ip():
    context = AppContext(live_limiter=LiveConnectionLimiter(max_per_client=1))
    with TestClient(create_app(context=context, production_mode=False)) as client:
        with client.websocket_connect("/api/live") as first:
            assert first.receive_json() == CONNECTED
            with client.websocket_connect("/api/live") as second:
                assert second.receive_json()["type"] == "error"
        assert context.live_limiter.active["testclient"] == 0


class TestLiveBroadcaster:
    def test_broadcast_without_clients(self):
        assert asyncio.run(LiveBroadcaster().broadcast("simulation_update", {})) == 0

    def test_encode_message_omits_empty_fields(self):
        assert encode_message("connected", message="hi") == b'{"type":"connected","message":"hi"}'
        assert encode_message("simulation_state", {"a": 1}) == (
            b'{"type":"simulation_state","data":{"a":1}}'
        )
