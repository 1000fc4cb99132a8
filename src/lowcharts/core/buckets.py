"""Bucket boundaries for histograms.

A BucketSet holds N + 1 ordered edges defining N intervals
[edge[i], edge[i + 1]), the last one closed on both ends.
"""

import bisect
import math
from collections.abc import Iterator
from dataclasses import dataclass

from lowcharts.core.exceptions import InvalidRangeError, InvalidSampleError
from lowcharts.core.models import Scale


@dataclass(frozen=True)
class BucketSet:
    """Immutable, ordered bucket boundaries.

    Attributes:
        edges: bucket_count + 1 non-decreasing boundaries.
        scale: Spacing used to compute the edges.
    """

    edges: tuple[float, ...]
    scale: Scale = Scale.LINEAR

    @property
    def bucket_count(self) -> int:
        """Number of intervals."""
        return len(self.edges) - 1

    @property
    def low(self) -> float:
        return self.edges[0]

    @property
    def high(self) -> float:
        return self.edges[-1]

    @property
    def is_degenerate(self) -> bool:
        """True when the range collapses to a single value."""
        return self.low == self.high

    def intervals(self) -> Iterator[tuple[float, float]]:
        """Yield (lower, upper) edges of every bucket, in order."""
        for i in range(self.bucket_count):
            yield self.edges[i], self.edges[i + 1]

    def classify(self, value: float) -> int | None:
        """Return the index of the bucket value belongs to.

        The index is the greatest i such that edge[i] <= value, clamped to
        the last bucket so that value == high never overflows.

        Args:
            value: Sample to classify.

        Returns:
            Bucket index, or None when value lies outside [low, high].

        Raises:
            InvalidSampleError: If value is not finite, or is not strictly
                positive on a logarithmic scale.
        """
        if not math.isfinite(value):
            raise InvalidSampleError(f"sample must be finite (was {value})")
        if self.scale is Scale.LOGARITHMIC and value <= 0:
            raise InvalidSampleError(
                f"logarithmic scale needs positive samples (was {value})"
            )
        if value < self.low or value > self.high:
            return None
        # bisect_right, since buckets are of [lower, upper) form
        index = bisect.bisect_right(self.edges, value) - 1
        return min(index, self.bucket_count - 1)


def _linear_edges(low: float, high: float, bucket_count: int) -> list[float]:
    step = (high - low) / bucket_count
    edges = [min(low + i * step, high) for i in range(bucket_count)]
    edges.append(high)
    return edges


def _logarithmic_edges(low: float, high: float, bucket_count: int) -> list[float]:
    ratio = high / low
    edges = [
        min(low * ratio ** (i / bucket_count), high) for i in range(bucket_count)
    ]
    edges.append(high)
    return edges


def build_buckets(
    low: float,
    high: float,
    bucket_count: int,
    scale: Scale = Scale.LINEAR,
) -> BucketSet:
    """Compute bucket boundaries for the range [low, high].

    Args:
        low: Lower bound of the range.
        high: Upper bound of the range (may equal low).
        bucket_count: Number of buckets wanted.
        scale: Linear or logarithmic (geometric) spacing.

    Returns:
        A BucketSet. When low == high, a single bucket [low, low] whatever
        bucket_count is.

    Raises:
        ValueError: If bucket_count < 1.
        InvalidRangeError: If bounds are not finite, low > high, or a
            logarithmic scale is requested with low <= 0.
    """
    if bucket_count < 1:
        raise ValueError(f"bucket_count must be >= 1 (was {bucket_count})")
    if not (math.isfinite(low) and math.isfinite(high)):
        raise InvalidRangeError(f"range bounds must be finite ({low}, {high})")
    if low > high:
        raise InvalidRangeError(f"minimum {low} is bigger than maximum {high}")
    if scale is Scale.LOGARITHMIC and low <= 0:
        raise InvalidRangeError(
            f"logarithmic scale needs a positive minimum (was {low})"
        )

    if low == high:
        return BucketSet(edges=(low, high), scale=scale)
    if scale is Scale.LOGARITHMIC:
        edges = _logarithmic_edges(low, high, bucket_count)
    else:
        edges = _linear_edges(low, high, bucket_count)
    return BucketSet(edges=tuple(edges), scale=scale)
