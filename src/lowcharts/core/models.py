"""Core domain models for chart data."""

from dataclasses import dataclass
from enum import Enum


class Scale(Enum):
    """Spacing of bucket boundaries."""

    LINEAR = "linear"
    LOGARITHMIC = "logarithmic"


@dataclass(frozen=True)
class HistogramOptions:
    """Options to build a Histogram.

    Attributes:
        intervals: Number of buckets (capped to the number of samples when
            the histogram is built from a materialized sample set).
        scale: Linear or logarithmic bucket spacing.
        precision: Number of decimals to display. None selects human units.
        min: Declared lower bound. None derives it from the samples.
        max: Declared upper bound. None derives it from the samples.
    """

    intervals: int = 20
    scale: Scale = Scale.LINEAR
    precision: int | None = None
    min: float | None = None
    max: float | None = None


@dataclass(frozen=True)
class BucketCount:
    """A bucket of a histogram with its sample count.

    Attributes:
        lower: Inclusive lower edge.
        upper: Upper edge (inclusive only for the last bucket).
        count: Number of samples classified into the bucket.
        label: Edges formatted with the chart's unit formatter.
    """

    lower: float
    upper: float
    count: int
    label: str


@dataclass(frozen=True)
class StatsSnapshot:
    """Summary statistics of a sample set.

    Attributes:
        count: Number of accumulated samples.
        min: Smallest sample.
        max: Largest sample.
        mean: Arithmetic mean.
        variance: Population variance.
        std_dev: Square root of the variance.
        percentiles: p50/p90/p95/p99 keyed by percentile, when the full
            sample set was available.
    """

    count: int
    min: float
    max: float
    mean: float
    variance: float
    std_dev: float
    percentiles: dict[int, float] | None = None
