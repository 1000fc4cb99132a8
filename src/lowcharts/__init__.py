"""lowcharts - charts of numbers and log timestamps for the terminal.

Example:
    ```python
    from lowcharts import Histogram, HistogramOptions

    hist = Histogram.from_samples([1.0, 2.5, 2.7, 9.0], HistogramOptions(intervals=4))
    for bucket in hist.counts():
        print(bucket.label, bucket.count)
    ```
"""

import logging

from lowcharts.core.buckets import BucketSet, build_buckets
from lowcharts.core.dateparser import BoundParser, DetectorState, TimestampDetector
from lowcharts.core.exceptions import (
    EmptyInputError,
    FormatDetectionError,
    InvalidRangeError,
    InvalidSampleError,
    LowchartsError,
    TimestampParseError,
)
from lowcharts.core.histogram import Histogram
from lowcharts.core.models import BucketCount, HistogramOptions, Scale, StatsSnapshot
from lowcharts.core.stats import StatsAccumulator, compute_percentiles
from lowcharts.core.terms import CommonTerms, MatchBar
from lowcharts.core.timehist import SplitTimeHistogram, TimeHistogram
from lowcharts.core.units import UnitFormatter, format_timestamp, format_value
from lowcharts.core.xy import XyPlot


def get_logger(name: str) -> logging.Logger:
    """Return a logger below the ``lowcharts`` namespace."""
    if name == "lowcharts" or name.startswith("lowcharts."):
        return logging.getLogger(name)
    return logging.getLogger(f"lowcharts.{name}")


__all__ = [
    # Buckets
    "BucketSet",
    "build_buckets",
    # Timestamps
    "BoundParser",
    "DetectorState",
    "TimestampDetector",
    # Errors
    "EmptyInputError",
    "FormatDetectionError",
    "InvalidRangeError",
    "InvalidSampleError",
    "LowchartsError",
    "TimestampParseError",
    # Charts
    "CommonTerms",
    "Histogram",
    "MatchBar",
    "SplitTimeHistogram",
    "TimeHistogram",
    "XyPlot",
    # Models
    "BucketCount",
    "HistogramOptions",
    "Scale",
    "StatsSnapshot",
    # Statistics and formatting
    "StatsAccumulator",
    "UnitFormatter",
    "compute_percentiles",
    "format_timestamp",
    "format_value",
    "get_logger",
]
