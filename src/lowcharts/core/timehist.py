"""Histograms of timestamps.

Timestamps are reduced to second offsets from the earliest one and bucketed
linearly. When every timestamp is the same instant the histogram collapses
to a single bucket.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from lowcharts.core.buckets import BucketSet, build_buckets
from lowcharts.core.dateparser import as_aware
from lowcharts.core.exceptions import EmptyInputError
from lowcharts.core.histogram import Histogram
from lowcharts.core.units import format_timestamp

_ONE_SECOND = timedelta(seconds=1)

# Every term is drawn with its own color
MAX_SPLIT_TERMS = 5


@dataclass(frozen=True)
class TimeBucketCount:
    """A time bucket: its start instant, label and count."""

    start: datetime
    count: int
    label: str


@dataclass(frozen=True)
class SplitTimeRow:
    """A time bucket with one count per term."""

    start: datetime
    counts: tuple[int, ...]
    label: str

    @property
    def total(self) -> int:
        return sum(self.counts)


def _time_range(stamps: Sequence[datetime]) -> tuple[datetime, float]:
    if not stamps:
        raise EmptyInputError("Not enough data to process")
    start = min(stamps)
    return start, (max(stamps) - start) / _ONE_SECOND


class TimeHistogram:
    """Counts of timestamps over time buckets.

    Args:
        start: Earliest timestamp, offset zero of the buckets.
        histogram: Histogram of second offsets from start.
    """

    def __init__(self, start: datetime, histogram: Histogram) -> None:
        self._start = start
        self._histogram = histogram

    @classmethod
    def from_timestamps(
        cls, timestamps: Iterable[datetime], intervals: int = 20
    ) -> "TimeHistogram":
        """Build a time histogram from a complete set of timestamps.

        Naive timestamps are taken as UTC.

        Raises:
            EmptyInputError: If there is no timestamp.
        """
        stamps = [as_aware(ts) for ts in timestamps]
        start, span = _time_range(stamps)
        timehist = cls(start, Histogram(build_buckets(0.0, span, intervals)))
        for ts in stamps:
            timehist.insert(ts)
        return timehist

    @property
    def start(self) -> datetime:
        return self._start

    @property
    def span_seconds(self) -> float:
        return self._histogram.buckets.high

    @property
    def buckets(self) -> BucketSet:
        return self._histogram.buckets

    @property
    def top(self) -> int:
        return self._histogram.top

    @property
    def total(self) -> int:
        return self._histogram.total

    def offset(self, ts: datetime) -> float:
        """Seconds elapsed from the histogram start to ts."""
        return (as_aware(ts) - self._start) / _ONE_SECOND

    def insert(self, ts: datetime) -> int | None:
        """Add a timestamp; those outside the initial range are discarded."""
        return self._histogram.insert(self.offset(ts))

    def counts(self) -> list[TimeBucketCount]:
        span = self.span_seconds
        result = []
        for bucket in self._histogram.counts():
            start = self._start + timedelta(seconds=bucket.lower)
            result.append(
                TimeBucketCount(
                    start=start,
                    count=bucket.count,
                    label=format_timestamp(start, span),
                )
            )
        return result

    def scale_factor(self, max_bar_width: int) -> int:
        return self._histogram.scale_factor(max_bar_width)


class SplitTimeHistogram:
    """Counts over time of the lines matching each of a few terms.

    Args:
        terms: The terms whose frequency is displayed.
        start: Earliest timestamp, offset zero of the buckets.
        buckets: Buckets of second offsets from start.
    """

    def __init__(
        self, terms: Sequence[str], start: datetime, buckets: BucketSet
    ) -> None:
        if not 1 <= len(terms) <= MAX_SPLIT_TERMS:
            raise ValueError(
                f"between 1 and {MAX_SPLIT_TERMS} terms are supported "
                f"(got {len(terms)})"
            )
        self.terms = tuple(terms)
        self._start = start
        self._buckets = buckets
        self._counts = [[0] * len(terms) for _ in range(buckets.bucket_count)]

    @classmethod
    def from_matches(
        cls,
        terms: Sequence[str],
        matches: Iterable[tuple[datetime, int]],
        intervals: int = 20,
    ) -> "SplitTimeHistogram":
        """Build from (timestamp, term index) pairs.

        Raises:
            EmptyInputError: If there is no match.
        """
        pairs = [(as_aware(ts), index) for ts, index in matches]
        start, span = _time_range([ts for ts, _ in pairs])
        split = cls(terms, start, build_buckets(0.0, span, intervals))
        for ts, index in pairs:
            split.insert(ts, index)
        return split

    def insert(self, ts: datetime, index: int) -> int | None:
        """Count an occurrence of terms[index] at ts."""
        slot = self._buckets.classify((as_aware(ts) - self._start) / _ONE_SECOND)
        if slot is not None:
            self._counts[slot][index] += 1
        return slot

    def rows(self) -> list[SplitTimeRow]:
        span = self._buckets.high
        result = []
        for (lower, _), counts in zip(
            self._buckets.intervals(), self._counts, strict=True
        ):
            start = self._start + timedelta(seconds=lower)
            result.append(
                SplitTimeRow(
                    start=start,
                    counts=tuple(counts),
                    label=format_timestamp(start, span),
                )
            )
        return result

    def term_totals(self) -> list[int]:
        """Total matches of every term."""
        return [sum(column) for column in zip(*self._counts, strict=True)]

    @property
    def total(self) -> int:
        return sum(self.term_totals())

    @property
    def top(self) -> int:
        """Largest bucket total."""
        return max(sum(counts) for counts in self._counts)
