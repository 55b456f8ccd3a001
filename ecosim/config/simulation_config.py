"""Lightweight simulation configuration helpers."""

from dataclasses import dataclass

from ecosim.config.simulation import (
    DEFAULT_HORIZON,
    DT,
    EQUILIBRIUM_TOLERANCE,
    EQUILIBRIUM_WINDOW,
    EXTINCTION_THRESHOLD,
    POST_EQUILIBRIUM_GRACE,
    RECORD_INTERVAL,
)
from ecosim.exceptions import InvalidParametersError


@dataclass(frozen=True)
class SimulationConfig:
    """Driver settings for a single run.

    The defaults reproduce the reference behavior exactly; override them only
    for experiments.

    Attributes:
        dt: RK4 step size.
        horizon: Time at which a run stops unless equilibrium shortens it.
        record_interval: Minimum elapsed time between recorded samples.
        equilibrium_window: Recorded samples inspected for stability.
        equilibrium_tolerance: Coefficient-of-variation ceiling for stability.
        post_equilibrium_grace: Time simulated after equilibrium is detected.
        extinction_threshold: Population below which a species is extinct.
    """

    dt: float = DT
    horizon: float = DEFAULT_HORIZON
    record_interval: float = RECORD_INTERVAL
    equilibrium_window: int = EQUILIBRIUM_WINDOW
    equilibrium_tolerance: float = EQUILIBRIUM_TOLERANCE
    post_equilibrium_grace: float = POST_EQUILIBRIUM_GRACE
    extinction_threshold: float = EXTINCTION_THRESHOLD

    def __post_init__(self) -> None:
        if self.dt <= 0:
            raise InvalidParametersError(f"dt must be positive, got {self.dt}")
        if self.horizon < 0:
            raise InvalidParametersError(f"horizon must be non-negative, got {self.horizon}")
        if self.equilibrium_window < 1:
            raise InvalidParametersError(
                f"equilibrium_window must be at least 1, got {self.equilibrium_window}"
            )
