"""Histogram of numerical samples.

Bucket edges need the value range before any sample can be classified, so
a Histogram is built in one of two explicit modes:

- ``Histogram.from_samples``: the full sample set is materialized, the range
  is resolved from declared bounds and a pre-scan, then every sample is
  inserted.
- ``Histogram.with_bounds``: both bounds are declared up front and samples
  are streamed in with ``insert``.
"""

import logging
import math
from collections.abc import Iterable

from lowcharts.core.buckets import BucketSet, build_buckets
from lowcharts.core.exceptions import (
    EmptyInputError,
    InvalidRangeError,
    InvalidSampleError,
)
from lowcharts.core.models import BucketCount, HistogramOptions, StatsSnapshot
from lowcharts.core.stats import StatsAccumulator, compute_percentiles
from lowcharts.core.units import UnitFormatter

logger = logging.getLogger(__name__)


class Histogram:
    """Bucket counts plus running statistics over a value stream.

    Args:
        buckets: Bucket boundaries, fixed for the life of the histogram.
        precision: Decimals used for labels. None selects human units.
    """

    def __init__(self, buckets: BucketSet, precision: int | None = None) -> None:
        self._buckets = buckets
        self._precision = precision
        self._counts = [0] * buckets.bucket_count
        self._stats = StatsAccumulator()
        self._percentiles: dict[int, float] | None = None
        self.discarded = 0
        self.rejected = 0

    @classmethod
    def with_bounds(
        cls, low: float, high: float, options: HistogramOptions | None = None
    ) -> "Histogram":
        """Create an empty histogram for streaming samples within [low, high].

        Raises:
            InvalidRangeError: If the range is unusable for the scale.
        """
        options = options or HistogramOptions()
        buckets = build_buckets(low, high, options.intervals, options.scale)
        return cls(buckets, precision=options.precision)

    @classmethod
    def from_samples(
        cls, samples: Iterable[float], options: HistogramOptions | None = None
    ) -> "Histogram":
        """Create a histogram from a complete sample set.

        Declared bounds in options win; missing bounds come from the valid
        samples. Non-finite samples are skipped and counted as rejected,
        samples outside declared bounds are counted as discarded. The number
        of buckets is capped to the number of valid samples.

        Raises:
            EmptyInputError: If no valid sample is left.
            InvalidRangeError: If the declared minimum is bigger than the
                declared maximum, or the resolved range is unusable for the
                scale.
        """
        options = options or HistogramOptions()
        if (
            options.min is not None
            and options.max is not None
            and options.min > options.max
        ):
            raise InvalidRangeError(
                f"minimum {options.min} is bigger than maximum {options.max}"
            )
        values: list[float] = []
        rejected = 0
        discarded = 0
        for value in samples:
            if not math.isfinite(value):
                rejected += 1
                logger.debug("Skipping non-finite sample %r", value)
            elif (options.min is not None and value < options.min) or (
                options.max is not None and value > options.max
            ):
                discarded += 1
            else:
                values.append(value)
        if not values:
            raise EmptyInputError("Not enough data to process")

        low = options.min if options.min is not None else min(values)
        high = options.max if options.max is not None else max(values)
        intervals = max(1, min(options.intervals, len(values)))
        buckets = build_buckets(low, high, intervals, options.scale)

        histogram = cls(buckets, precision=options.precision)
        histogram.rejected = rejected
        histogram.discarded = discarded
        histogram.load(values)
        histogram._percentiles = compute_percentiles(values)
        return histogram

    @property
    def buckets(self) -> BucketSet:
        return self._buckets

    @property
    def precision(self) -> int | None:
        return self._precision

    @property
    def top(self) -> int:
        """Largest bucket count."""
        return max(self._counts)

    @property
    def total(self) -> int:
        """Number of samples classified into a bucket."""
        return sum(self._counts)

    def insert(self, value: float) -> int | None:
        """Add a single sample.

        Returns:
            Index of the bucket the sample landed in, or None if it lies
            outside the histogram range (the sample is then discarded).

        Raises:
            InvalidSampleError: If the sample cannot be classified. Counts
                and statistics are left unchanged.
        """
        try:
            slot = self._buckets.classify(value)
        except InvalidSampleError:
            self.rejected += 1
            raise
        if slot is None:
            self.discarded += 1
            return None
        self._counts[slot] += 1
        self._stats.push(value)
        return slot

    def load(self, values: Iterable[float]) -> None:
        """Insert every value, skipping invalid samples."""
        for value in values:
            try:
                self.insert(value)
            except InvalidSampleError as error:
                logger.debug("Skipping sample: %s", error)

    @property
    def formatter(self) -> UnitFormatter:
        """Formatter shared by every label of this histogram."""
        return UnitFormatter.create(
            self._buckets.low, self._buckets.high, self._precision
        )

    def counts(self) -> list[BucketCount]:
        """Return buckets in order, with their labels and counts."""
        formatter = self.formatter
        return [
            BucketCount(
                lower=lower,
                upper=upper,
                count=count,
                label=f"{formatter.format(lower)} .. {formatter.format(upper)}",
            )
            for (lower, upper), count in zip(
                self._buckets.intervals(), self._counts, strict=True
            )
        ]

    def summary(self) -> StatsSnapshot:
        """Statistics of the classified samples.

        Raises:
            EmptyInputError: If no sample was classified.
        """
        return self._stats.snapshot(self._percentiles)

    def scale_factor(self, max_bar_width: int) -> int:
        """Count represented by one bar glyph so the top bar fits max_bar_width."""
        if max_bar_width < 1:
            raise ValueError(f"max_bar_width must be >= 1 (was {max_bar_width})")
        return max(1, math.ceil(self.top / max_bar_width))
