"""Tests for the simulation and health endpoints."""

import orjson
import pytest

from ecosim.presets import get_preset


def _parse_sse(body: bytes):
    events = []
    for frame in body.split(b"\n\n"):
        if frame.startswith(b"data: "):
            events.append(orjson.loads(frame[len(b"data: "):]))
    return events


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"] == "in-memory"
    assert "timestamp" in data


class TestRun:
    """POST /api/simulation/run"""

    def test_run_balanced(self, client, balanced_params):
        response = client.post("/api/simulation/run", json={"parameters": balanced_params})
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["statistics"]["totalTimeSteps"] == len(data["results"]["timeSteps"]) == 25
        assert data["statistics"]["extinctionOccurred"] is True
        assert data["statistics"]["equilibriumReached"] is False
        assert data["results"]["equilibriumPoint"] is None
        first = data["results"]["timeSteps"][0]
        assert set(first) == {"time", "preyPopulation", "predatorPopulation", "resourceLevel"}
        assert first["time"] == 0.11

    def test_run_reports_equilibrium(self, client, fixed_point_params):
        data = client.post("/api/simulation/run", json={"parameters": fixed_point_params}).json()
        assert data["statistics"]["equilibriumReached"] is True
        assert set(data["results"]["equilibriumPoint"]) == {"prey", "predator", "timeToReach"}

    def test_missing_parameters(self, client):
        response = client.post("/api/simulation/run", json={})
        assert response.status_code == 400
        assert "Required: prey, predator, and environment" in response.json()["error"]

    def test_resource_availability_above_one(self, client, balanced_params):
        balanced_params["environment"]["resourceAvailability"] = 1.5
        response = client.post("/api/simulation/run", json={"parameters": balanced_params})
        assert response.status_code == 400
        assert "resourceAvailability" in response.json()["error"]

    def test_malformed_parameters(self, client, balanced_params):
        balanced_params["prey"]["birthRate"] = "fast"
        response = client.post("/api/simulation/run", json={"parameters": balanced_params})
        assert response.status_code == 400
        assert "prey.birthRate" in response.json()["error"]

    def test_zero_carrying_capacity(self, client, balanced_params):
        balanced_params["prey"]["carryingCapacity"] = 0
        response = client.post("/api/simulation/run", json={"parameters": balanced_params})
        assert response.status_code == 422
        assert "carryingCapacity" in response.json()["error"]

    def test_save_results_to_scenario(self, client, balanced_params):
        response = client.post(
            "/api/simulation/run",
            json={"parameters": balanced_params, "saveResults": True, "scenarioId": "1"},
        )
        assert response.status_code == 200
        scenario = client.get("/api/scenarios/1").json()
        assert scenario["simulationResults"] == response.json()["results"]

    def test_results_not_saved_by_default(self, client, balanced_params):
        client.post("/api/simulation/run", json={"parameters": balanced_params, "scenarioId": "1"})
        assert "simulationResults" not in client.get("/api/scenarios/1").json()


class TestStream:
    """POST /api/simulation/stream"""

    def test_stream_events(self, client, fixed_point_params):
        response = client.post(
            "/api/simulation/stream",
            json={"parameters": fixed_point_params, "updateInterval": 0},
        )
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"

        events = _parse_sse(response.content)
        updates, complete = events[:-1], events[-1]
        assert updates
        assert all(e["type"] == "update" for e in updates)
        assert [e["step"] for e in updates] == list(range(len(updates)))
        assert updates[0]["populations"] == {"prey": 100.0, "predator": 68.0}
        assert updates[0]["time"] == pytest.approx(0.1)
        assert complete["type"] == "complete"
        assert complete["results"]["equilibriumReached"] is True

    def test_stream_matches_run(self, client, predator_dominant_params):
        run = client.post("/api/simulation/run", json={"parameters": predator_dominant_params})
        stream = client.post(
            "/api/simulation/stream",
            json={"parameters": predator_dominant_params, "updateInterval": 0},
        )
        assert _parse_sse(stream.content)[-1]["results"] == run.json()["results"]

    def test_stream_requires_parameters(self, client):
        response = client.post("/api/simulation/stream", json={"updateInterval": 0})
        assert response.status_code == 400

    def test_stream_rejects_invalid_parameters(self, client):
        response = client.post("/api/simulation/stream", json={"parameters": {"prey": {}}})
        assert response.status_code == 400


class TestPredict:
    """POST /api/simulation/predict"""

    def test_stable_prediction(self, client, balanced_params):
        response = client.post("/api/simulation/predict", json={"parameters": balanced_params})
        assert response.status_code == 200
        data = response.json()
        assert data["prediction"]["isStable"] is True
        assert data["prediction"]["prey"] == pytest.approx(100.0)
        assert data["confidence"] == 0.8
        assert "stable equilibrium" in data["explanation"]

    def test_unstable_prediction(self, client, balanced_params):
        balanced_params["predator"]["deathRate"] = 0
        data = client.post("/api/simulation/predict", json={"parameters": balanced_params}).json()
        assert data["prediction"]["isStable"] is False
        assert data["confidence"] == 0.3
        assert "unstable" in data["explanation"]

    def test_zero_hunting_efficiency(self, client, balanced_params):
        balanced_params["predator"]["huntingEfficiency"] = 0
        response = client.post("/api/simulation/predict", json={"parameters": balanced_params})
        assert response.status_code == 422
        assert "huntingEfficiency" in response.json()["error"]

    def test_requires_parameters(self, client):
        assert client.post("/api/simulation/predict", json={}).status_code == 400


class TestPhaseSpace:
    """POST /api/simulation/phase-space"""

    def test_default_resolution(self, client, balanced_params):
        response = client.post("/api/simulation/phase-space", json={"parameters": balanced_params})
        assert response.status_code == 200
        data = response.json()
        assert data["resolution"] == 15
        assert len(data["phaseSpace"]) == 225
        assert data["bounds"] == {"preyMax": 5000.0, "predatorMax": 1000.0}
        assert set(data["phaseSpace"][0]) == {"x", "y", "dx", "dy"}

    def test_custom_resolution(self, client, balanced_params):
        data = client.post(
            "/api/simulation/phase-space",
            json={"parameters": balanced_params, "resolution": 3},
        ).json()
        assert len(data["phaseSpace"]) == 9

    def test_rejects_non_positive_resolution(self, client, balanced_params):
        response = client.post(
            "/api/simulation/phase-space",
            json={"parameters": balanced_params, "resolution": 0},
        )
        assert response.status_code == 422


def test_presets_endpoint(client):
    response = client.get("/api/simulation/presets")
    assert response.status_code == 200
    presets = response.json()
    assert len(presets) == 4
    assert presets[2] == {
        "name": "Boom and Bust",
        "description": get_preset("Boom and Bust")["description"],
        "parameters": get_preset("Boom and Bust")["parameters"],
    }
