"""Line readers turning text input into chart data.

Every reader skips the lines it cannot use and logs them at DEBUG level, so
running with ``--verbose`` shows why a line did not make it into a chart.
"""

import logging
import math
import re
import sys
from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from datetime import date, datetime, timedelta
from typing import TextIO

from lowcharts.core.dateparser import DetectorState, TimestampDetector
from lowcharts.core.exceptions import (
    FormatDetectionError,
    InvalidRangeError,
    TimestampParseError,
)
from lowcharts.core.terms import CommonTerms, MatchBar
from lowcharts.core.timehist import MAX_SPLIT_TERMS

logger = logging.getLogger(__name__)

# Path standing for the standard input
STDIN = "-"


@contextmanager
def open_input(path: str) -> Iterator[TextIO]:
    """Open path for reading, or standard input if path is ``-``.

    Raises:
        OSError: If the file cannot be opened.
    """
    if path == STDIN:
        yield sys.stdin
        return
    with open(path, encoding="utf-8", errors="replace") as handle:
        yield handle


def iter_lines(path: str) -> Iterator[str]:
    """Yield the lines of path without their line terminator."""
    with open_input(path) as handle:
        for line in handle:
            yield line.rstrip("\r\n")


def _compile(regex: "re.Pattern[str] | str | None") -> "re.Pattern[str] | None":
    if regex is None or isinstance(regex, re.Pattern):
        return regex
    return re.compile(regex)


def _capture(match: "re.Match[str]") -> str | None:
    """Text of the group named ``value``, else of the first group."""
    if "value" in match.re.groupindex:
        return match.group("value")
    if match.re.groups >= 1:
        return match.group(1)
    return None


class DataReader:
    """Reads one float per line, or the float captured by a regex.

    Args:
        regex: Pattern searched in every line. The group named ``value`` is
            used when present, the first group otherwise. Without a regex a
            whole line must parse as a float.
        min: Lines with a smaller value are dropped.
        max: Lines with a bigger value are dropped.

    Raises:
        InvalidRangeError: If min is bigger than max.
        re.error: If regex is not a valid pattern.
    """

    def __init__(
        self,
        regex: "re.Pattern[str] | str | None" = None,
        min: float | None = None,
        max: float | None = None,
    ) -> None:
        if min is not None and max is not None and min > max:
            raise InvalidRangeError("Minimum should be smaller than maximum")
        self.regex = _compile(regex)
        self.min = min
        self.max = max

    def parse_line(self, line: str) -> float | None:
        """Value held by line, or None if it has none."""
        text: str | None = line
        if self.regex is not None:
            match = self.regex.search(line)
            if match is None:
                logger.debug("Regex does not match %r", line)
                return None
            text = _capture(match)
            if text is None:
                return None
        try:
            value = float(text)
        except ValueError as error:
            logger.debug("Cannot parse float (%s) at %r", error, line)
            return None
        if not math.isfinite(value):
            logger.debug("Skipping non-finite value at %r", line)
            return None
        return value

    def in_range(self, value: float) -> bool:
        if self.min is not None and value < self.min:
            return False
        return self.max is None or value <= self.max

    def read_lines(self, lines: Iterable[str]) -> list[float]:
        values = []
        for line in lines:
            value = self.parse_line(line)
            if value is not None and self.in_range(value):
                values.append(value)
        return values

    def read(self, path: str) -> list[float]:
        """Read every usable value of path (``-`` for standard input)."""
        return self.read_lines(iter_lines(path))


def read_matches(path: str, labels: Sequence[str]) -> MatchBar:
    """Count the lines of path holding each one of labels."""
    bar = MatchBar(labels)
    bar.load(iter_lines(path))
    return bar


def read_terms(
    path: str, regex: "re.Pattern[str] | str | None" = None, lines: int = 10
) -> CommonTerms:
    """Count the terms captured by regex in path.

    Args:
        path: Input file, ``-`` for standard input.
        regex: Pattern capturing the term (group ``value`` or the first
            group). None counts whole lines.
        lines: Number of terms the result keeps for display.
    """
    pattern = _compile(regex) or re.compile("(.*)")
    terms = CommonTerms(lines)
    for line in iter_lines(path):
        match = pattern.search(line)
        term = _capture(match) if match is not None else None
        if term is None:
            logger.debug("No term captured in %r", line)
            continue
        terms.observe(term)
    return terms


def _timestamps(
    detector: TimestampDetector, lines: Iterable[str]
) -> Iterator[tuple[datetime, str]]:
    """Yield (timestamp, line) for every line whose timestamp parses.

    Lines are used to detect the format until one binds the detector.

    Raises:
        FormatDetectionError: If the input has lines but none of them
            holds a recognizable timestamp.
    """
    seen = False
    for line in lines:
        seen = True
        try:
            moment = detector.parse(line)
        except (FormatDetectionError, TimestampParseError) as error:
            logger.debug("Skipping line: %s", error)
            continue
        yield moment, line
    if seen and detector.state is DetectorState.UNDETECTED:
        raise FormatDetectionError("Could not figure out parsing strategy")


class TimeReader:
    """Reads the timestamps of log lines.

    Args:
        regex: Only lines matching it are kept.
        ts_format: Explicit strptime format; None detects the format.
        duration: Only keep timestamps within this duration of the first one.
        early_stop: With a duration, assume timestamps grow monotonically
            and stop reading at the first one past the cap.
        reference: Date given to time-only formats. Defaults to today (UTC).
    """

    def __init__(
        self,
        regex: "re.Pattern[str] | str | None" = None,
        ts_format: str | None = None,
        duration: timedelta | None = None,
        early_stop: bool = False,
        reference: date | None = None,
    ) -> None:
        self.regex = _compile(regex)
        self.ts_format = ts_format
        self.duration = duration
        self.early_stop = early_stop
        self.reference = reference

    def read_lines(self, lines: Iterable[str]) -> list[datetime]:
        detector = TimestampDetector(self.ts_format, self.reference)
        stamps: list[datetime] = []
        cut: datetime | None = None
        for moment, line in _timestamps(detector, lines):
            if self.duration is not None and self.early_stop:
                if cut is None:
                    cut = moment + self.duration
                elif moment > cut:
                    logger.debug("Stopping at %s, past %s", moment, cut)
                    break
            if self.regex is not None and not self.regex.search(line):
                continue
            stamps.append(moment)
        if self.duration is not None and not self.early_stop and stamps:
            limit = min(stamps) + self.duration
            stamps = [moment for moment in stamps if moment <= limit]
        return stamps

    def read(self, path: str) -> list[datetime]:
        """Read the timestamps of path (``-`` for standard input).

        Raises:
            FormatDetectionError: If no line holds a recognizable timestamp.
        """
        return self.read_lines(iter_lines(path))


class SplitTimeReader:
    """Reads (timestamp, term index) pairs for lines holding some terms.

    A line holding several terms yields one pair per term.

    Raises:
        ValueError: If there are no terms or more than five.
    """

    def __init__(
        self,
        matches: Sequence[str],
        ts_format: str | None = None,
        reference: date | None = None,
    ) -> None:
        if not matches:
            raise ValueError("At least a match is needed")
        if len(matches) > MAX_SPLIT_TERMS:
            raise ValueError(
                f"Only {MAX_SPLIT_TERMS} different sub-groups are supported"
            )
        self.matches = tuple(matches)
        self.ts_format = ts_format
        self.reference = reference

    def read_lines(self, lines: Iterable[str]) -> list[tuple[datetime, int]]:
        detector = TimestampDetector(self.ts_format, self.reference)
        pairs = []
        for moment, line in _timestamps(detector, lines):
            for index, term in enumerate(self.matches):
                if term in line:
                    pairs.append((moment, index))
        return pairs

    def read(self, path: str) -> list[tuple[datetime, int]]:
        return self.read_lines(iter_lines(path))
