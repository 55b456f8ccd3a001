"""Summary statistics over population windows and trajectories.

Empty input yields zeros and a single value has zero spread, so detectors
and result summaries never special-case short series.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class DescriptiveStats:
    """Basic descriptive statistics for a dataset.

    Attributes:
        mean: Arithmetic mean of values
        std: Population standard deviation (0.0 if n <= 1)
        min: Minimum value
        max: Maximum value
        count: Number of values
    """

    mean: float = 0.0
    std: float = 0.0
    min: float = 0.0
    max: float = 0.0
    count: int = 0


def population_mean_std(values: Sequence[float]) -> tuple[float, float]:
    """Mean and population standard deviation (divides by n, not n - 1).

    Sums accumulate left to right (builtin ``sum`` compensates float error
    on newer interpreters), so results are identical on every version.
    """
    if not values:
        return 0.0, 0.0
    count = len(values)

    total = 0.0
    for value in values:
        total += value
    mean_val = total / count

    squared = 0.0
    for value in values:
        squared += (value - mean_val) ** 2
    return mean_val, math.sqrt(squared / count)


def descriptive_stats(values: Sequence[float]) -> DescriptiveStats:
    """Calculate descriptive statistics for a list of values.

    Mean and spread come from ``population_mean_std``, so summaries accumulate
    in the same left-to-right order as the detectors.
    """
    if not values:
        return DescriptiveStats()
    mean_val, std_val = population_mean_std(values)
    return DescriptiveStats(
        mean=float(mean_val),
        std=float(std_val),
        min=float(min(values)),
        max=float(max(values)),
        count=len(values),
    )
