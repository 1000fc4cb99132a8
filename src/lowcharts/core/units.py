"""Human-friendly number and timestamp formatting for chart labels.

A chart formats all of its numbers (bucket edges, statistics) through a
single UnitFormatter, so every label of the chart shares one unit.
"""

import math
from dataclasses import dataclass
from datetime import datetime

# Units-based suffixes, one per power of 1000.
UNITS = ("", " K", " M", " G", " T", " P", " E", " Z", " Y")

_DEGENERATE_DECIMALS = 3
_MAX_DECIMALS = 12

_SECONDS_PER_DAY = 86400
_SECONDS_PER_FIVE_MINUTES = 300


@dataclass(frozen=True)
class UnitFormatter:
    """Formats floats with a fixed number of decimals and a unit suffix.

    Attributes:
        decimals: Number of fractional digits.
        exponent: Power of 1000 the value is divided by before formatting.
    """

    decimals: int
    exponent: int = 0

    @property
    def suffix(self) -> str:
        """Unit suffix appended to every formatted value."""
        return UNITS[self.exponent]

    @classmethod
    def fixed(cls, precision: int) -> "UnitFormatter":
        """Create a formatter printing plain fixed-point numbers.

        Args:
            precision: Exact number of fractional digits.

        Raises:
            ValueError: If precision is negative.
        """
        if precision < 0:
            raise ValueError(f"precision must be >= 0 (was {precision})")
        return cls(decimals=precision)

    @classmethod
    def for_range(cls, low: float, high: float) -> "UnitFormatter":
        """Create a formatter suited to every value in [low, high].

        The unit is the largest power of 1000 that keeps the biggest
        magnitude of the range >= 1. Decimals keep three significant digits
        of the span, so that neighbouring bucket edges stay distinguishable.

        Args:
            low: Lowest value that will be displayed.
            high: Highest value that will be displayed.
        """
        magnitude = max(abs(low), abs(high))
        exponent = 0
        while exponent < len(UNITS) - 1 and magnitude / 1000 ** (exponent + 1) >= 1:
            exponent += 1
        span = abs(high - low) / 1000**exponent
        if span == 0 or not math.isfinite(span):
            return cls(decimals=_DEGENERATE_DECIMALS, exponent=exponent)
        decimals = 2 - math.floor(math.log10(span))
        return cls(decimals=min(max(decimals, 0), _MAX_DECIMALS), exponent=exponent)

    @classmethod
    def create(
        cls, low: float, high: float, precision: int | None = None
    ) -> "UnitFormatter":
        """Pick fixed precision when requested, human units otherwise."""
        if precision is not None:
            return cls.fixed(precision)
        return cls.for_range(low, high)

    def format(self, value: float) -> str:
        """Format a value using this formatter's unit and decimals."""
        scaled = value / 1000**self.exponent
        return f"{scaled:.{self.decimals}f}{self.suffix}"


def format_value(
    value: float, low: float, high: float, precision: int | None = None
) -> str:
    """Format a single value for a chart displaying the range [low, high].

    Args:
        value: Number to format.
        low: Lowest displayed value of the chart.
        high: Highest displayed value of the chart.
        precision: Fixed number of decimals; None selects human units.

    Returns:
        The formatted string.
    """
    return UnitFormatter.create(low, high, precision).format(value)


def time_label_format(span_seconds: float) -> str:
    """Return the strftime layout used for labels of a time chart.

    Args:
        span_seconds: Time covered by the whole chart.
    """
    seconds = int(span_seconds)
    if seconds > _SECONDS_PER_DAY:
        return "%Y-%m-%d %H:%M:%S"
    if seconds > _SECONDS_PER_FIVE_MINUTES:
        return "%H:%M:%S"
    return "%H:%M:%S.%f"


def format_timestamp(moment: datetime, span_seconds: float) -> str:
    """Format a bucket start instant for a time chart spanning span_seconds.

    Charts spanning more than a second show milliseconds, shorter ones
    show microseconds.
    """
    text = moment.strftime(time_label_format(span_seconds))
    if 1 < int(span_seconds) <= _SECONDS_PER_FIVE_MINUTES:
        # %f always renders microseconds
        return text[:-3]
    return text
