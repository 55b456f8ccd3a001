"""Modified Lotka-Volterra dynamics with seasonal resource forcing.

Both functions here are pure: the resource level depends only on time and
the environment, and the derivatives depend only on the populations, the
resource level and the parameters.

Prey grow logistically with a birth rate scaled by resource availability and
are removed by predation. Predators grow from a fixed fraction of predation
and die at a constant rate, doubled while prey is critically scarce.
"""

import math
from dataclasses import dataclass

from ecosim.config.ecology import (
    PREDATION_CREDIT,
    SEASON_LENGTH,
    STARVATION_MULTIPLIER,
    STARVATION_THRESHOLD,
)
from ecosim.exceptions import DivisionByZeroError
from ecosim.parameters import EnvironmentParameters, SimulationParameters


@dataclass(frozen=True)
class Derivatives:
    """Rates of change of both populations."""

    d_prey: float
    d_predator: float


def resource_level(time: float, environment: EnvironmentParameters) -> float:
    """Resource availability at ``time``.

    Constant without seasonal variation; otherwise a sine over a 12-unit year
    around the base level. Either way the level is clamped to [0, 1].
    """
    base = environment.resource_availability

    if not environment.seasonal_variation:
        return max(0.0, min(1.0, base))

    seasonal_factor = math.sin(2 * math.pi * time / SEASON_LENGTH)
    return max(0.0, min(1.0, base + environment.seasonal_amplitude * seasonal_factor))


def derivatives(
    prey: float,
    predator: float,
    resource: float,
    params: SimulationParameters,
) -> Derivatives:
    """Evaluate dP/dt and dQ/dt.

    Raises:
        DivisionByZeroError: If the prey carrying capacity is zero.
    """
    carrying_capacity = params.prey.carrying_capacity
    if carrying_capacity == 0:
        raise DivisionByZeroError("prey.carryingCapacity must be non-zero")

    birth_rate = params.prey.birth_rate
    hunting_efficiency = params.predator.hunting_efficiency

    effective_birth_rate = birth_rate * resource
    prey_growth = effective_birth_rate * prey
    predation = hunting_efficiency * prey * predator
    prey_competition = (birth_rate * prey * prey) / carrying_capacity

    d_prey = prey_growth - predation - prey_competition

    predator_growth = hunting_efficiency * PREDATION_CREDIT * prey * predator
    predator_death = params.predator.death_rate * predator
    starvation_factor = STARVATION_MULTIPLIER if prey < STARVATION_THRESHOLD else 1.0

    d_predator = predator_growth - predator_death * starvation_factor

    return Derivatives(d_prey, d_predator)
