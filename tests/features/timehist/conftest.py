"""Step definitions for the time histogram feature."""

from dataclasses import dataclass, field
from datetime import datetime

import pytest
from pytest_bdd import given, parsers, then, when

from lowcharts.core.dateparser import DetectorState, TimestampDetector
from lowcharts.core.exceptions import FormatDetectionError, TimestampParseError
from lowcharts.core.timehist import TimeHistogram


@dataclass
class TimeScenarioContext:
    """Shared state between steps of a time histogram scenario."""

    lines: list[str] = field(default_factory=list)
    detector: TimestampDetector = field(default_factory=TimestampDetector)
    stamps: list[datetime] = field(default_factory=list)
    skipped: int = 0
    histogram: TimeHistogram | None = None


@pytest.fixture
def ctx() -> TimeScenarioContext:
    """Fresh scenario context for each test."""
    return TimeScenarioContext()


@given(parsers.parse('a log line "{line}"'))
def step_log_line(ctx: TimeScenarioContext, line: str) -> None:
    ctx.lines.append(line)


@when(parsers.parse("the lines are charted into {n:d} buckets"))
def step_chart(ctx: TimeScenarioContext, n: int) -> None:
    for line in ctx.lines:
        try:
            ctx.stamps.append(ctx.detector.parse(line))
        except (FormatDetectionError, TimestampParseError):
            ctx.skipped += 1
    if ctx.stamps:
        ctx.histogram = TimeHistogram.from_timestamps(ctx.stamps, intervals=n)


@then(parsers.parse('the "{name}" format is detected'))
def step_format(ctx: TimeScenarioContext, name: str) -> None:
    assert ctx.detector.bound is not None
    assert ctx.detector.bound.name == name


@then("no format is detected")
def step_no_format(ctx: TimeScenarioContext) -> None:
    assert ctx.detector.state is DetectorState.UNDETECTED
    assert ctx.histogram is None
    assert ctx.skipped == len(ctx.lines)


@then(parsers.parse("{n:d} line is skipped"))
def step_skipped(ctx: TimeScenarioContext, n: int) -> None:
    assert ctx.skipped == n


@then(parsers.parse('the bucket counts are "{counts}"'))
def step_counts(ctx: TimeScenarioContext, counts: str) -> None:
    assert ctx.histogram is not None
    expected = [int(count) for count in counts.split(",")]
    assert [bucket.count for bucket in ctx.histogram.counts()] == expected
