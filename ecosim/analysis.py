"""Static analyses that need parameters only, never a trajectory.

Both functions are pure and reentrant; they may run concurrently with any
simulation.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Union

from ecosim.config.ecology import (
    DEFAULT_PHASE_SPACE_RESOLUTION,
    PHASE_SPACE_PREDATOR_SPAN,
    PREDATION_CREDIT,
    PREDICTED_PREY_CAPACITY_FRACTION,
)
from ecosim.dynamics import derivatives
from ecosim.exceptions import DivisionByZeroError, InvalidParametersError
from ecosim.parameters import SimulationParameters

ParametersLike = Union[SimulationParameters, Mapping[str, Any]]


@dataclass(frozen=True)
class EquilibriumPrediction:
    """Closed-form equilibrium estimate."""

    prey: float
    predator: float
    is_stable: bool

    def to_dict(self) -> dict[str, Any]:
        return {"prey": self.prey, "predator": self.predator, "isStable": self.is_stable}


@dataclass(frozen=True)
class PhaseVector:
    """Derivative vector at one point of the phase plane."""

    x: float
    y: float
    dx: float
    dy: float

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "dx": self.dx, "dy": self.dy}


def predict_equilibrium(parameters: ParametersLike) -> EquilibriumPrediction:
    """Estimate the coexistence equilibrium from the unforced isoclines.

    This is a heuristic: it linearizes the classic Lotka-Volterra fixed point
    and ignores the logistic term, the starvation penalty and seasonal
    forcing. The prey estimate is capped at 80% of carrying capacity. A
    stable verdict is not a guarantee that a simulation will settle.

    Raises:
        DivisionByZeroError: If ``huntingEfficiency`` is zero.
    """
    params = SimulationParameters.coerce(parameters)
    hunting_efficiency = params.predator.hunting_efficiency
    if hunting_efficiency == 0:
        raise DivisionByZeroError(
            "predator.huntingEfficiency must be non-zero to predict an equilibrium"
        )

    prey_eq = params.predator.death_rate / (hunting_efficiency * PREDATION_CREDIT)
    predator_eq = (
        params.prey.birth_rate * params.environment.resource_availability
    ) / hunting_efficiency

    adjusted_prey_eq = min(
        prey_eq, params.prey.carrying_capacity * PREDICTED_PREY_CAPACITY_FRACTION
    )

    return EquilibriumPrediction(
        prey=adjusted_prey_eq,
        predator=predator_eq,
        is_stable=adjusted_prey_eq > 0 and predator_eq > 0,
    )


def phase_space_bounds(parameters: ParametersLike) -> tuple[float, float]:
    """Upper bounds of the sampled (prey, predator) plane."""
    params = SimulationParameters.coerce(parameters)
    return (
        params.prey.carrying_capacity,
        params.predator.initial_population * PHASE_SPACE_PREDATOR_SPAN,
    )


def sample_phase_space(
    parameters: ParametersLike,
    resolution: int = DEFAULT_PHASE_SPACE_RESOLUTION,
) -> list[PhaseVector]:
    """Evaluate the derivative field on a ``resolution`` x ``resolution`` grid.

    Grid points are ``(i / N) * preyMax`` by ``(j / N) * predatorMax`` for
    ``i, j`` in ``[0, N)``, prey-major, using the base (non-seasonal)
    resource level.

    Raises:
        InvalidParametersError: If ``resolution`` is not a positive integer.
        DivisionByZeroError: If the prey carrying capacity is zero.
    """
    if isinstance(resolution, bool) or not isinstance(resolution, int) or resolution < 1:
        raise InvalidParametersError(f"resolution must be a positive integer, got {resolution!r}")

    params = SimulationParameters.coerce(parameters)
    prey_range, predator_range = phase_space_bounds(params)
    resource = params.environment.resource_availability

    vectors = []
    for i in range(resolution):
        prey = (i / resolution) * prey_range
        for j in range(resolution):
            predator = (j / resolution) * predator_range
            rates = derivatives(prey, predator, resource, params)
            vectors.append(PhaseVector(x=prey, y=predator, dx=rates.d_prey, dy=rates.d_predator))
    return vectors
