"""Simulation API endpoints.

Endpoints:
    POST /api/simulation/run - Run a simulation to completion
    POST /api/simulation/stream - Stream a simulation as Server-Sent Events
    POST /api/simulation/predict - Analytic equilibrium estimate
    POST /api/simulation/phase-space - Derivative field on a grid
    GET /api/simulation/presets - Named parameter presets
"""

import logging
from typing import List

from fastapi import APIRouter
from fastapi.responses import JSONResponse, StreamingResponse

from backend.broadcast import LiveBroadcaster
from backend.models import (
    PhaseSpaceRequest,
    PredictRequest,
    PresetData,
    SimulationRunRequest,
    SimulationStreamRequest,
)
from backend.scenario_store import ScenarioStore
from backend.simulation_runner import SimulationStreamRunner, run_to_completion
from ecosim.analysis import phase_space_bounds, predict_equilibrium, sample_phase_space
from ecosim.config.server import BROADCAST_PREVIEW_RECORDS
from ecosim.exceptions import InvalidParametersError, NumericDegeneracyError
from ecosim.presets import list_presets
from ecosim.simulator import EcosystemSimulator

logger = logging.getLogger(__name__)

# Confidence attached to a prediction is host policy, not engine output
STABLE_CONFIDENCE = 0.8
UNSTABLE_CONFIDENCE = 0.3


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def setup_router(scenario_store: ScenarioStore, broadcaster: LiveBroadcaster) -> APIRouter:
    """Create the simulation router.

    Args:
        scenario_store: Store receiving results when ``saveResults`` is set
        broadcaster: Live channel for run and stream events

    Returns:
        Configured APIRouter
    """
    router = APIRouter(prefix="/api/simulation", tags=["simulation"])

    @router.post("/run")
    async def run_simulation(request: SimulationRunRequest):
        """Run a simulation with the given parameters."""
        try:
            simulator = EcosystemSimulator(request.parameters)
        except InvalidParametersError as e:
            return _error(str(e), 400)

        try:
            result = await run_to_completion(simulator)
        except NumericDegeneracyError as e:
            return _error(str(e), 422)
        except Exception as e:
            logger.error("Simulation error: %s", e, exc_info=True)
            return _error(str(e), 500)

        results = result.to_dict()

        await broadcaster.broadcast(
            "simulation_complete",
            {
                "parameters": simulator.params.to_dict(),
                "results": {
                    **results,
                    "timeSteps": results["timeSteps"][:BROADCAST_PREVIEW_RECORDS],
                },
            },
        )

        if request.save_results and request.scenario_id:
            scenario_store.set_results(request.scenario_id, results)

        return JSONResponse(
            {
                "success": True,
                "results": results,
                "statistics": {
                    "totalTimeSteps": len(result.time_steps),
                    "simulationDuration": result.summary.duration,
                    "equilibriumReached": result.equilibrium_reached,
                    "extinctionOccurred": result.extinction_occurred,
                },
            }
        )

    @router.post("/stream")
    async def stream_simulation(request: SimulationStreamRequest):
        """Stream a simulation as it runs."""
        if request.parameters is None:
            return _error("Parameters required", 400)
        try:
            simulator = EcosystemSimulator(request.parameters)
        except InvalidParametersError as e:
            return _error(str(e), 400)

        runner = SimulationStreamRunner(
            simulator,
            broadcaster=broadcaster,
            update_interval_ms=request.update_interval,
        )
        return StreamingResponse(
            runner.events(),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
        )

    @router.post("/predict")
    async def predict(request: PredictRequest):
        """Predict the equilibrium populations."""
        if request.parameters is None:
            return _error("Parameters required", 400)
        try:
            prediction = predict_equilibrium(request.parameters)
        except InvalidParametersError as e:
            return _error(str(e), 400)
        except NumericDegeneracyError as e:
            return _error(str(e), 422)

        if prediction.is_stable:
            explanation = (
                "The system is likely to reach a stable equilibrium with these parameters."
            )
        else:
            explanation = (
                "The system may be unstable or lead to extinction with these parameters."
            )

        return JSONResponse(
            {
                "prediction": prediction.to_dict(),
                "confidence": STABLE_CONFIDENCE if prediction.is_stable else UNSTABLE_CONFIDENCE,
                "explanation": explanation,
            }
        )

    @router.post("/phase-space")
    async def phase_space(request: PhaseSpaceRequest):
        """Sample the phase-space derivative field."""
        if request.parameters is None:
            return _error("Parameters required", 400)
        try:
            vectors = sample_phase_space(request.parameters, request.resolution)
            prey_max, predator_max = phase_space_bounds(request.parameters)
        except InvalidParametersError as e:
            return _error(str(e), 400)
        except NumericDegeneracyError as e:
            return _error(str(e), 422)

        return JSONResponse(
            {
                "phaseSpace": [vector.to_dict() for vector in vectors],
                "resolution": request.resolution,
                "bounds": {"preyMax": prey_max, "predatorMax": predator_max},
            }
        )

    @router.get("/presets", response_model=List[PresetData])
    async def presets():
        """List the named parameter presets."""
        return list_presets()

    return router
