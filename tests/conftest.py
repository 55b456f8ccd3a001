"""Pytest configuration and fixtures for ecosystem simulation tests."""

from copy import deepcopy

import pytest

from ecosim.parameters import SimulationParameters
from ecosim.presets import get_preset

# Starts exactly at the coexistence fixed point, so both derivatives vanish
FIXED_POINT_PARAMETERS = {
    "prey": {"initialPopulation": 100, "birthRate": 1.0, "carryingCapacity": 5000},
    "predator": {"initialPopulation": 68, "huntingEfficiency": 0.01, "deathRate": 0.5},
    "environment": {"resourceAvailability": 0.7, "seasonalVariation": False},
}

# Damped oscillation that settles around prey≈101, predator≈89
DAMPED_PARAMETERS = {
    "prey": {"initialPopulation": 500, "birthRate": 1.0, "carryingCapacity": 1000},
    "predator": {"initialPopulation": 20, "huntingEfficiency": 0.01, "deathRate": 0.5},
    "environment": {"resourceAvailability": 1.0, "seasonalVariation": False},
}


@pytest.fixture
def balanced_params():
    """Wire-format parameters of the Balanced Ecosystem preset."""
    return get_preset("Balanced Ecosystem")["parameters"]


@pytest.fixture
def predator_dominant_params():
    return get_preset("Predator Dominant")["parameters"]


@pytest.fixture
def seasonal_params():
    """Boom and Bust: the only preset with seasonal forcing."""
    return get_preset("Boom and Bust")["parameters"]


@pytest.fixture
def fixed_point_params():
    return deepcopy(FIXED_POINT_PARAMETERS)


@pytest.fixture
def damped_params():
    return deepcopy(DAMPED_PARAMETERS)


@pytest.fixture
def parsed_balanced(balanced_params):
    return SimulationParameters.from_dict(balanced_params)


@pytest.fixture
def client():
    """TestClient over an app with a fresh context and no rate limiting."""
    from fastapi.testclient import TestClient

    from backend.app_factory import AppContext, create_app
    from backend.scenario_store import ScenarioStore

    context = AppContext(scenario_store=ScenarioStore(), production_mode=False)
    app = create_app(context=context)
    with TestClient(app) as test_client:
        yield test_client
