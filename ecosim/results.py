"""Result types produced by the simulation driver.

All types are immutable. ``to_dict`` methods emit the camelCase wire shape
consumed by the HTTP host and stored on scenarios.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from ecosim.config.simulation import RECORD_POPULATION_DECIMALS, RECORD_TIME_DECIMALS
from ecosim.statistics_utils import descriptive_stats


def round_half_up(value: float, decimals: int) -> float:
    """Round to ``decimals`` places with ties going up.

    Python's ``round`` uses banker's rounding; recorded output rounds ties
    toward positive infinity instead.
    """
    factor = 10**decimals
    return math.floor(value * factor + 0.5) / factor


@dataclass(frozen=True)
class TimeStepRecord:
    """One recorded sample of the trajectory (rounded for output)."""

    time: float
    prey_population: float
    predator_population: float
    resource_level: float

    @classmethod
    def capture(
        cls, time: float, prey: float, predator: float, resource_level: float
    ) -> "TimeStepRecord":
        """Build a record from raw full-precision state."""
        return cls(
            time=round_half_up(time, RECORD_TIME_DECIMALS),
            prey_population=round_half_up(prey, RECORD_POPULATION_DECIMALS),
            predator_population=round_half_up(predator, RECORD_POPULATION_DECIMALS),
            resource_level=resource_level,
        )

    def to_dict(self) -> dict[str, float]:
        return {
            "time": self.time,
            "preyPopulation": self.prey_population,
            "predatorPopulation": self.predator_population,
            "resourceLevel": self.resource_level,
        }


@dataclass(frozen=True)
class EquilibriumPoint:
    """Window means at the moment stability was first detected."""

    prey: float
    predator: float
    time_reached: float

    def to_dict(self) -> dict[str, float]:
        return {
            "prey": self.prey,
            "predator": self.predator,
            "timeToReach": self.time_reached,
        }


@dataclass(frozen=True)
class SimulationSummary:
    """Aggregate figures over a finished trajectory.

    Extremes and the average resource level are taken over recorded samples;
    ``final_prey``/``final_predator`` are the unrounded internal populations.
    """

    duration: float
    max_prey: float
    max_predator: float
    min_prey: float
    min_predator: float
    final_prey: float
    final_predator: float
    average_resource_level: float

    @classmethod
    def from_records(
        cls,
        records: Sequence[TimeStepRecord],
        duration: float,
        final_prey: float,
        final_predator: float,
    ) -> "SimulationSummary":
        prey_stats = descriptive_stats([r.prey_population for r in records])
        predator_stats = descriptive_stats([r.predator_population for r in records])
        resource_stats = descriptive_stats([r.resource_level for r in records])
        return cls(
            duration=duration,
            max_prey=prey_stats.max,
            max_predator=predator_stats.max,
            min_prey=prey_stats.min,
            min_predator=predator_stats.min,
            final_prey=final_prey,
            final_predator=final_predator,
            average_resource_level=resource_stats.mean,
        )

    def to_dict(self) -> dict[str, float]:
        return {
            "duration": self.duration,
            "maxPrey": self.max_prey,
            "maxPredator": self.max_predator,
            "minPrey": self.min_prey,
            "minPredator": self.min_predator,
            "finalPrey": self.final_prey,
            "finalPredator": self.final_predator,
            "averageResourceLevel": self.average_resource_level,
        }


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of one run: the recorded trajectory plus terminal flags."""

    time_steps: tuple[TimeStepRecord, ...]
    equilibrium_reached: bool
    equilibrium_point: Optional[EquilibriumPoint]
    extinction_occurred: bool
    summary: SimulationSummary

    def to_dict(self) -> dict[str, Any]:
        """Camelcase dictionary matching the API's result schema."""
        return {
            "timeSteps": [record.to_dict() for record in self.time_steps],
            "equilibriumReached": self.equilibrium_reached,
            "equilibriumPoint": (
                self.equilibrium_point.to_dict() if self.equilibrium_point else None
            ),
            "extinctionOccurred": self.extinction_occurred,
            "summary": self.summary.to_dict(),
        }
