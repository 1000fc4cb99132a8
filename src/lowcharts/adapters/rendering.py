"""Terminal rendering of charts as rich Text lines.

Renderers never touch global color state: styles are only applied when the
caller passes ``color=True``. Printing is left to a rich Console.
"""

import math
from dataclasses import dataclass

from rich.text import Text

from lowcharts.core.histogram import Histogram
from lowcharts.core.models import StatsSnapshot
from lowcharts.core.terms import CommonTerms, MatchBar
from lowcharts.core.timehist import SplitTimeHistogram, TimeHistogram
from lowcharts.core.units import UnitFormatter
from lowcharts.core.xy import XyPlot

BAR_CHAR = "∎"
DOT_CHAR = "●"

LABEL_STYLE = "blue"
COUNT_STYLE = "green"
BAR_STYLE = "red"

# One color per term of a split time histogram
SPLIT_STYLES = ("red", "blue", "magenta", "green", "cyan")

# Room taken by brackets and separators on a histogram row
_EXTRA_CHARS = 10
_NARROW_BAR_LEN = 75


def _styled(text: str, style: str, color: bool) -> Text:
    return Text(text, style=style if color else "")


def _line(*parts: str | Text) -> Text:
    return Text.assemble(*parts)


@dataclass(frozen=True)
class HorizontalScale:
    """How many counts a single bar glyph stands for.

    Attributes:
        scale: Counts per glyph, at least 1.
        color: Whether bars and counts are styled.
    """

    scale: int
    color: bool = False

    def __post_init__(self) -> None:
        if self.scale < 1:
            object.__setattr__(self, "scale", 1)

    @classmethod
    def fit(cls, top: int, width: int, color: bool = False) -> "HorizontalScale":
        """Smallest scale keeping a bar of top counts within width glyphs."""
        return cls(max(1, math.ceil(top / max(width, 1))), color)

    def bar_length(self, count: int) -> int:
        return count // self.scale

    def bar(self, count: int, style: str = BAR_STYLE) -> Text:
        return _styled(BAR_CHAR * self.bar_length(count), style, self.color)

    def count(self, count: int, width: int) -> Text:
        return _styled(f"{count:>{width}}", COUNT_STYLE, self.color)

    def header(self) -> Text:
        return _line(
            "Each ",
            _styled(BAR_CHAR, BAR_STYLE, self.color),
            " represents a count of ",
            _styled(str(self.scale), LABEL_STYLE, self.color),
        )


def render_stats(
    stats: StatsSnapshot, formatter: UnitFormatter, color: bool = False
) -> list[Text]:
    """Summary lines shown above histograms and plots."""

    def value(text: str) -> Text:
        return _styled(text, LABEL_STYLE, color)

    lines = [
        _line(
            "Samples = ",
            value(str(stats.count)),
            "; Min = ",
            value(formatter.format(stats.min)),
            "; Max = ",
            value(formatter.format(stats.max)),
        ),
        _line(
            "Average = ",
            value(formatter.format(stats.mean)),
            "; Variance = ",
            value(f"{stats.variance:.3f}"),
            "; STD = ",
            value(f"{stats.std_dev:.3f}"),
        ),
    ]
    if stats.percentiles:
        parts: list[str | Text] = []
        for p, sample in stats.percentiles.items():
            if parts:
                parts.append("; ")
            parts.extend((f"p{p} = ", value(formatter.format(sample))))
        lines.append(_line(*parts))
    return lines


def render_histogram(
    histogram: Histogram, width: int = 110, color: bool = False
) -> list[Text]:
    """Statistics, scale and one row per bucket.

    Rows read ``[low .. high] [count] bars``; the bar glyph scale is chosen
    so that the whole row fits width characters.
    """
    formatter = histogram.formatter
    buckets = histogram.counts()
    range_width = max(
        len(formatter.format(histogram.buckets.low)),
        len(formatter.format(histogram.buckets.high)),
    )
    count_width = len(str(histogram.top))
    fixed = 2 * range_width + count_width + _EXTRA_CHARS
    max_bar_len = width - fixed if width > fixed else _NARROW_BAR_LEN
    scale = HorizontalScale(histogram.scale_factor(max_bar_len), color)

    lines = render_stats(histogram.summary(), formatter, color)
    lines.append(scale.header())
    for bucket in buckets:
        label = (
            f"{formatter.format(bucket.lower):>{range_width}} .. "
            f"{formatter.format(bucket.upper):>{range_width}}"
        )
        lines.append(
            _line(
                "[",
                _styled(label, LABEL_STYLE, color),
                "] [",
                scale.count(bucket.count, count_width),
                "] ",
                scale.bar(bucket.count),
            )
        )
    return lines


def render_xy(plot: XyPlot, color: bool = False) -> list[Text]:
    """Statistics, then rows from the highest values to the lowest."""
    formatter = plot.formatter
    rows = plot.rows()
    label_width = max(len(row.label) for row in rows)
    lines = render_stats(plot.summary(), formatter, color)
    for row in rows:
        marks = "".join(DOT_CHAR if mark else " " for mark in row.marks)
        lines.append(
            _line(
                "[",
                _styled(f"{row.label:>{label_width}}", LABEL_STYLE, color),
                "] ",
                _styled(marks, BAR_STYLE, color),
            )
        )
    return lines


def _matches(total: int, color: bool) -> Text:
    return _line("Matches: ", _styled(str(total), LABEL_STYLE, color), ".")


def render_timehist(
    timehist: TimeHistogram, width: int = 110, color: bool = False
) -> list[Text]:
    """Total matches, scale and one row per time bucket."""
    scale = HorizontalScale(timehist.scale_factor(width), color)
    count_width = len(str(timehist.top))
    lines = [_matches(timehist.total, color), scale.header()]
    for bucket in timehist.counts():
        lines.append(
            _line(
                "[",
                _styled(bucket.label, LABEL_STYLE, color),
                "] [",
                scale.count(bucket.count, count_width),
                "] ",
                scale.bar(bucket.count),
            )
        )
    return lines


def render_split_timehist(
    split: SplitTimeHistogram, width: int = 110, color: bool = False
) -> list[Text]:
    """Per-term totals, then rows with a count and a bar per term."""
    rows = split.rows()
    scale = HorizontalScale.fit(split.top, width, color)
    widths = [
        max(len(str(row.counts[i])) for row in rows) for i in range(len(split.terms))
    ]
    lines = [_matches(split.total, color)]
    for term, total, style in zip(
        split.terms, split.term_totals(), SPLIT_STYLES, strict=False
    ):
        lines.append(_line(_styled(term, style, color), f": {total}."))
    lines.append(scale.header())
    for row in rows:
        parts: list[str | Text] = ["[", _styled(row.label, LABEL_STYLE, color), "] ["]
        for i, (count, style) in enumerate(zip(row.counts, SPLIT_STYLES, strict=False)):
            if i:
                parts.append("/")
            parts.append(_styled(f"{count:>{widths[i]}}", style, color))
        parts.append("] ")
        for count, style in zip(row.counts, SPLIT_STYLES, strict=False):
            parts.append(scale.bar(count, style))
        lines.append(_line(*parts))
    return lines


def render_matchbar(
    bar: MatchBar, width: int = 110, color: bool = False
) -> list[Text]:
    """Total matches, scale and one row per searched string."""
    rows = bar.rows()
    scale = HorizontalScale.fit(bar.top, width, color)
    label_width = max((len(row.label) for row in rows), default=0)
    count_width = len(str(bar.top))
    lines = [_matches(bar.total, color), scale.header()]
    for row in rows:
        lines.append(
            _line(
                "[",
                _styled(f"{row.label:<{label_width}}", LABEL_STYLE, color),
                "] [",
                scale.count(row.count, count_width),
                "] ",
                scale.bar(row.count),
            )
        )
    return lines


def render_common_terms(
    terms: CommonTerms, width: int = 110, color: bool = False
) -> list[Text]:
    """Most frequent terms, most frequent first."""
    rows = terms.rows()
    if not rows:
        return [Text("No data")]
    top = rows[0].count
    scale = HorizontalScale.fit(top, width, color)
    label_width = max(len(row.label) for row in rows)
    count_width = len(str(top))
    lines = [scale.header()]
    for row in rows:
        lines.append(
            _line(
                "[",
                _styled(f"{row.label:>{label_width}}", LABEL_STYLE, color),
                "] [",
                scale.count(row.count, count_width),
                "] ",
                scale.bar(row.count),
            )
        )
    return lines
