"""Request and event models for the HTTP and live channels.

Field names follow the camelCase wire format of the web client. Parameter
sets stay untyped here: the engine itself decides whether they are
structurally valid and the routers turn its errors into 400 responses.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ecosim.config.server import (
    DEFAULT_HTTP_PHASE_SPACE_RESOLUTION,
    DEFAULT_STREAM_UPDATE_INTERVAL_MS,
)


class CamelModel(BaseModel):
    """Accept both camelCase aliases and snake_case field names."""

    model_config = ConfigDict(populate_by_name=True)


class SimulationRunRequest(CamelModel):
    """Run a simulation to completion."""

    parameters: Optional[Any] = None
    save_results: bool = Field(False, alias="saveResults")
    scenario_id: Optional[str] = Field(None, alias="scenarioId")


class SimulationStreamRequest(CamelModel):
    """Stream a simulation as Server-Sent Events."""

    parameters: Optional[Any] = None
    update_interval: int = Field(
        DEFAULT_STREAM_UPDATE_INTERVAL_MS, alias="updateInterval", ge=0, le=10_000
    )


class PredictRequest(CamelModel):
    """Predict the equilibrium of a parameter set."""

    parameters: Optional[Any] = None


class PhaseSpaceRequest(CamelModel):
    """Sample the derivative field on a square grid."""

    parameters: Optional[Any] = None
    resolution: int = Field(DEFAULT_HTTP_PHASE_SPACE_RESOLUTION, ge=1, le=200)


class ScenarioCreateRequest(CamelModel):
    """Create a scenario. ``name`` and ``parameters`` are checked by the router."""

    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    parameters: Optional[Dict[str, Any]] = None
    simulation_results: Optional[Dict[str, Any]] = Field(None, alias="simulationResults")
    metadata: Optional[Dict[str, Any]] = None


class ScenarioUpdateRequest(ScenarioCreateRequest):
    """Partial scenario update; omitted fields are left unchanged."""


class DuplicateScenarioRequest(CamelModel):
    created_by: Optional[str] = Field(None, alias="createdBy")


class PopulationData(BaseModel):
    prey: float
    predator: float


class StreamUpdate(CamelModel):
    """One progress event of a streamed simulation."""

    type: str = "update"
    step: int
    time: float
    populations: PopulationData
    resource_level: float = Field(alias="resourceLevel")


class StreamComplete(CamelModel):
    """Final event of a streamed simulation."""

    type: str = "complete"
    results: Dict[str, Any]


class LiveMessage(CamelModel):
    """Envelope of every message sent on the live WebSocket channel."""

    type: str
    message: Optional[str] = None
    data: Optional[Any] = None


class PresetData(BaseModel):
    name: str
    description: str
    parameters: Dict[str, Any]
