"""Error kinds raised by the charting core.

Construction-time errors (InvalidRangeError, FormatDetectionError,
EmptyInputError) abort building a chart. Per-sample and per-line errors
(InvalidSampleError, TimestampParseError) are local: callers decide whether
to skip the offending value or abort.
"""


class LowchartsError(Exception):
    """Base class for all lowcharts errors."""


class InvalidRangeError(LowchartsError, ValueError):
    """Bucket range cannot be built (e.g. logarithmic scale with min <= 0)."""


class InvalidSampleError(LowchartsError, ValueError):
    """A sample cannot be accumulated (non-finite, or non-positive on log scale)."""


class EmptyInputError(LowchartsError):
    """No valid samples are available to build a chart or read statistics."""


class FormatDetectionError(LowchartsError):
    """No known timestamp format matched the line used for detection."""


class TimestampParseError(LowchartsError, ValueError):
    """A line does not hold a timestamp where the bound format expects one."""
