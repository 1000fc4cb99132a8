"""XY plots where every column averages a run of consecutive samples."""

import math
from collections.abc import Sequence
from dataclasses import dataclass

from lowcharts.core.exceptions import EmptyInputError
from lowcharts.core.models import StatsSnapshot
from lowcharts.core.stats import StatsAccumulator, compute_percentiles
from lowcharts.core.units import UnitFormatter


@dataclass(frozen=True)
class XyRow:
    """A plot row: its value range and which columns fall into it.

    Attributes:
        lower: Inclusive lower bound of the row.
        upper: Exclusive upper bound (infinite for the top row).
        label: Lower bound formatted with the plot's formatter.
        marks: One flag per column, True when the column value is in range.
    """

    lower: float
    upper: float
    label: str
    marks: tuple[bool, ...]


class XyPlot:
    """A 2D plot of input values in input order.

    Args:
        values: Samples, in input order.
        width: Maximum number of columns (capped to the number of samples).
        height: Number of rows.
        precision: Decimals used for labels. None selects human units.

    Raises:
        EmptyInputError: If values is empty.
        InvalidSampleError: If a value is not finite.
    """

    def __init__(
        self,
        values: Sequence[float],
        width: int,
        height: int,
        precision: int | None = None,
    ) -> None:
        if width < 1 or height < 1:
            raise ValueError(f"width and height must be >= 1 ({width}, {height})")
        if not values:
            raise EmptyInputError("Not enough data to process")
        self._stats = StatsAccumulator()
        self._stats.extend(values)
        self._percentiles = compute_percentiles(values)
        self.height = height
        self.precision = precision

        chunk = math.ceil(len(values) / min(width, len(values)))
        self.columns = [
            sum(values[i : i + chunk]) / len(values[i : i + chunk])
            for i in range(0, len(values), chunk)
        ]
        step = (self._stats.max - self._stats.min) / height
        self.row_edges = [self._stats.min + step * i for i in range(height)]

    @property
    def formatter(self) -> UnitFormatter:
        return UnitFormatter.create(self._stats.min, self._stats.max, self.precision)

    def summary(self) -> StatsSnapshot:
        return self._stats.snapshot(self._percentiles)

    def rows(self) -> list[XyRow]:
        """Rows from the top of the plot to the bottom."""
        formatter = self.formatter
        uppers = [*self.row_edges[1:], math.inf]
        result = []
        for lower, upper in zip(self.row_edges, uppers, strict=True):
            marks = tuple(lower <= value < upper for value in self.columns)
            result.append(XyRow(lower, upper, formatter.format(lower), marks))
        result.reverse()
        return result
