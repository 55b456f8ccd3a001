"""Immutable parameter sets for the predator-prey engine.

Parameters arrive from hosts as nested camelCase mappings (the wire shape
used by the HTTP API and scenario store). ``SimulationParameters.from_dict``
performs the only validation the engine does: it rejects structurally
invalid sets (missing blocks, non-numeric or negative values, a base
resource level above 1) before any state is built.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Union

from ecosim.exceptions import InvalidParametersError

DEFAULT_SEASONAL_VARIATION = False
DEFAULT_SEASONAL_AMPLITUDE = 0.2


def _require_block(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    block = data.get(name)
    if block is None:
        raise InvalidParametersError(
            "Invalid parameters. Required: prey, predator, and environment configurations"
        )
    if not isinstance(block, Mapping):
        raise InvalidParametersError(f"'{name}' must be an object, got {type(block).__name__}")
    return block


def _number(
    block: Mapping[str, Any],
    block_name: str,
    key: str,
    default: Any = None,
    maximum: float | None = None,
) -> float:
    value = block.get(key, default)
    if value is None:
        raise InvalidParametersError(f"Missing required field '{block_name}.{key}'")
    # bool is an int subclass; true/false are never valid magnitudes
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidParametersError(
            f"'{block_name}.{key}' must be a number, got {type(value).__name__}"
        )
    value = float(value)
    if not math.isfinite(value):
        raise InvalidParametersError(f"'{block_name}.{key}' must be finite")
    if value < 0:
        raise InvalidParametersError(f"'{block_name}.{key}' must be >= 0, got {value}")
    if maximum is not None and value > maximum:
        raise InvalidParametersError(f"'{block_name}.{key}' must be <= {maximum}, got {value}")
    return value


@dataclass(frozen=True)
class PreyParameters:
    """Prey species settings.

    Attributes:
        initial_population: Prey count at time zero.
        birth_rate: Intrinsic per-capita birth rate before resource scaling.
        carrying_capacity: Logistic ceiling on the prey population.
    """

    initial_population: float
    birth_rate: float
    carrying_capacity: float

    def to_dict(self) -> dict[str, float]:
        return {
            "initialPopulation": self.initial_population,
            "birthRate": self.birth_rate,
            "carryingCapacity": self.carrying_capacity,
        }


@dataclass(frozen=True)
class PredatorParameters:
    """Predator species settings.

    Attributes:
        initial_population: Predator count at time zero.
        hunting_efficiency: Predation rate per prey-predator encounter.
        death_rate: Per-capita predator death rate.
    """

    initial_population: float
    hunting_efficiency: float
    death_rate: float

    def to_dict(self) -> dict[str, float]:
        return {
            "initialPopulation": self.initial_population,
            "huntingEfficiency": self.hunting_efficiency,
            "deathRate": self.death_rate,
        }


@dataclass(frozen=True)
class EnvironmentParameters:
    """Resource environment settings.

    Attributes:
        resource_availability: Base resource level in [0, 1].
        seasonal_variation: Whether the resource level oscillates yearly.
        seasonal_amplitude: Amplitude of the seasonal oscillation.
    """

    resource_availability: float
    seasonal_variation: bool = DEFAULT_SEASONAL_VARIATION
    seasonal_amplitude: float = DEFAULT_SEASONAL_AMPLITUDE

    def to_dict(self) -> dict[str, Any]:
        return {
            "resourceAvailability": self.resource_availability,
            "seasonalVariation": self.seasonal_variation,
            "seasonalAmplitude": self.seasonal_amplitude,
        }


@dataclass(frozen=True)
class SimulationParameters:
    """Complete, immutable parameter set for one simulation."""

    prey: PreyParameters
    predator: PredatorParameters
    environment: EnvironmentParameters

    @classmethod
    def from_dict(cls, data: Any) -> "SimulationParameters":
        """Build parameters from a nested camelCase mapping.

        Raises:
            InvalidParametersError: If a block is missing or a field is
                missing, non-numeric, non-finite or negative, or if the base
                resource availability exceeds 1.
        """
        if not isinstance(data, Mapping):
            raise InvalidParametersError(
                "Invalid parameters. Required: prey, predator, and environment configurations"
            )

        prey = _require_block(data, "prey")
        predator = _require_block(data, "predator")
        environment = _require_block(data, "environment")

        seasonal_variation = environment.get("seasonalVariation", DEFAULT_SEASONAL_VARIATION)
        if seasonal_variation is None:
            seasonal_variation = DEFAULT_SEASONAL_VARIATION
        if not isinstance(seasonal_variation, bool):
            raise InvalidParametersError(
                "'environment.seasonalVariation' must be a boolean, "
                f"got {type(seasonal_variation).__name__}"
            )

        return cls(
            prey=PreyParameters(
                initial_population=_number(prey, "prey", "initialPopulation"),
                birth_rate=_number(prey, "prey", "birthRate"),
                carrying_capacity=_number(prey, "prey", "carryingCapacity"),
            ),
            predator=PredatorParameters(
                initial_population=_number(predator, "predator", "initialPopulation"),
                hunting_efficiency=_number(predator, "predator", "huntingEfficiency"),
                death_rate=_number(predator, "predator", "deathRate"),
            ),
            environment=EnvironmentParameters(
                resource_availability=_number(
                    environment, "environment", "resourceAvailability", maximum=1.0
                ),
                seasonal_variation=seasonal_variation,
                seasonal_amplitude=_number(
                    environment,
                    "environment",
                    "seasonalAmplitude",
                    default=DEFAULT_SEASONAL_AMPLITUDE,
                ),
            ),
        )

    @classmethod
    def coerce(cls, value: Union["SimulationParameters", Mapping[str, Any]]) -> "SimulationParameters":
        """Return ``value`` unchanged if already parsed, else parse it."""
        if isinstance(value, cls):
            return value
        return cls.from_dict(value)

    def to_dict(self) -> dict[str, Any]:
        """Nested camelCase representation matching the wire format."""
        return {
            "prey": self.prey.to_dict(),
            "predator": self.predator.to_dict(),
            "environment": self.environment.to_dict(),
        }
