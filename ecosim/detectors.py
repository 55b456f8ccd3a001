"""Stateful monitors over a running trajectory.

``EquilibriumDetector`` watches the trailing window of recorded samples and
latches once both populations are stable. ``ExtinctionDetector`` watches raw
state after every integration step.
"""

import logging
from collections import deque
from typing import Optional

from ecosim.config.simulation import (
    EQUILIBRIUM_TOLERANCE,
    EQUILIBRIUM_WINDOW,
    EXTINCTION_THRESHOLD,
)
from ecosim.results import EquilibriumPoint, TimeStepRecord
from ecosim.statistics_utils import population_mean_std

logger = logging.getLogger(__name__)


def _is_stable(mean: float, std: float, tolerance: float) -> bool:
    # A zero mean leaves the coefficient of variation undefined
    return mean > 0 and std / mean < tolerance


class EquilibriumDetector:
    """Detects when recorded populations stop varying.

    Stability requires a full window and a coefficient of variation
    (population stddev / mean) below ``tolerance`` for both species. The first
    detection latches: ``point`` is set once and never overwritten.

    Attributes:
        window: Number of trailing recorded samples inspected.
        tolerance: Coefficient-of-variation ceiling.
        point: Equilibrium point once detected, else None.
    """

    def __init__(
        self,
        window: int = EQUILIBRIUM_WINDOW,
        tolerance: float = EQUILIBRIUM_TOLERANCE,
    ) -> None:
        self.window = window
        self.tolerance = tolerance
        self.point: Optional[EquilibriumPoint] = None
        self._prey: deque = deque(maxlen=window)
        self._predator: deque = deque(maxlen=window)
        self._window_changed = False

    @property
    def reached(self) -> bool:
        return self.point is not None

    def observe(self, record: TimeStepRecord) -> None:
        """Add a recorded sample to the trailing window."""
        self._prey.append(record.prey_population)
        self._predator.append(record.predator_population)
        self._window_changed = True

    def check(self, time: float) -> Optional[EquilibriumPoint]:
        """Test the window for stability at ``time``.

        The verdict depends only on the window contents, so it is recomputed
        only after a new sample arrives.

        Returns:
            The equilibrium point on the call that first detects stability,
            None on every other call (including all calls after the latch).
        """
        if self.point is not None or not self._window_changed:
            return None
        self._window_changed = False

        if len(self._prey) < self.window:
            return None

        prey_mean, prey_std = population_mean_std(self._prey)
        predator_mean, predator_std = population_mean_std(self._predator)
        if not (
            _is_stable(prey_mean, prey_std, self.tolerance)
            and _is_stable(predator_mean, predator_std, self.tolerance)
        ):
            return None

        self.point = EquilibriumPoint(prey=prey_mean, predator=predator_mean, time_reached=time)
        logger.debug(
            "Equilibrium detected at t=%.2f (prey=%.1f, predator=%.1f)",
            time,
            prey_mean,
            predator_mean,
        )
        return self.point


class ExtinctionDetector:
    """Latches once either population drops below ``threshold`` individuals."""

    def __init__(self, threshold: float = EXTINCTION_THRESHOLD) -> None:
        self.threshold = threshold
        self.occurred = False

    def check(self, prey: float, predator: float) -> bool:
        """Return True if extinction has occurred (now or earlier)."""
        if prey < self.threshold or predator < self.threshold:
            self.occurred = True
        return self.occurred
