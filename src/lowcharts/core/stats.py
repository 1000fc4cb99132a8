"""Running statistics over an unbounded stream of samples."""

import math
from collections.abc import Iterable

from lowcharts.core.exceptions import EmptyInputError, InvalidSampleError
from lowcharts.core.models import StatsSnapshot

PERCENTILES = (50, 90, 95, 99)


class StatsAccumulator:
    """Single-pass count, min, max, mean and variance (Welford's algorithm).

    Example:
        ```python
        acc = StatsAccumulator()
        for value in (1.0, 2.0, 3.0):
            acc.push(value)
        acc.mean  # 2.0
        ```
    """

    def __init__(self) -> None:
        self._count = 0
        self._min = math.inf
        self._max = -math.inf
        self._mean = 0.0
        self._m2 = 0.0

    def push(self, value: float) -> None:
        """Accumulate a sample.

        Raises:
            InvalidSampleError: If value is NaN or infinite. The accumulator
                is left unchanged.
        """
        if not math.isfinite(value):
            raise InvalidSampleError(f"sample must be finite (was {value})")
        self._count += 1
        delta = value - self._mean
        self._mean += delta / self._count
        self._m2 += delta * (value - self._mean)
        self._min = min(self._min, value)
        self._max = max(self._max, value)

    def extend(self, values: Iterable[float]) -> None:
        for value in values:
            self.push(value)

    def _require_samples(self) -> None:
        if self._count == 0:
            raise EmptyInputError("no samples accumulated")

    @property
    def count(self) -> int:
        return self._count

    @property
    def min(self) -> float:
        self._require_samples()
        return self._min

    @property
    def max(self) -> float:
        self._require_samples()
        return self._max

    @property
    def mean(self) -> float:
        self._require_samples()
        return self._mean

    @property
    def variance(self) -> float:
        """Population variance of the accumulated samples."""
        self._require_samples()
        # m2 may drift a hair below zero on identical samples
        return max(self._m2, 0.0) / self._count

    @property
    def std_dev(self) -> float:
        return math.sqrt(self.variance)

    def snapshot(self, percentiles: dict[int, float] | None = None) -> StatsSnapshot:
        """Return an immutable copy of the current statistics.

        Args:
            percentiles: Optional percentiles computed over the full sample.

        Raises:
            EmptyInputError: If no sample was accumulated.
        """
        return StatsSnapshot(
            count=self.count,
            min=self.min,
            max=self.max,
            mean=self.mean,
            variance=self.variance,
            std_dev=self.std_dev,
            percentiles=percentiles,
        )


def compute_percentiles(values: Iterable[float]) -> dict[int, float]:
    """Compute p50, p90, p95 and p99 by nearest rank.

    Args:
        values: Finite samples, in any order.

    Returns:
        Mapping of percentile to sample value.

    Raises:
        EmptyInputError: If values is empty.
    """
    ordered = sorted(values)
    if not ordered:
        raise EmptyInputError("cannot compute percentiles of no samples")
    size = len(ordered)
    return {p: ordered[size * p // 100] for p in PERCENTILES}
