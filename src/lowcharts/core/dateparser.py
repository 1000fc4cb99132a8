"""Timestamp format detection for log lines.

The format of a log source is detected once, from a sample line, and the
resulting parser is reused for every other line of the run. A log source is
assumed to use a single timestamp format throughout.

Detection walks the digit runs of the sample line, first one first, and
tries a fixed, priority-ordered list of known formats anchored at each of
them. Leading fields such as the client address of an nginx access log are
skipped that way. An explicit strptime format skips detection altogether.
"""

import email.utils
import logging
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from functools import partial

from lowcharts.core.exceptions import FormatDetectionError, TimestampParseError

logger = logging.getLogger(__name__)

# Max length that a timestamp located with an explicit format can have
MAX_LEN = 56
# Timestamps are looked for at the start of a digit run, this far at most
MAX_SCAN = MAX_LEN * 2

_MONTHS = "Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec"
_DIGIT_RUN = re.compile(r"(?<!\d)\d")
_LONG_FRACTION = re.compile(r"(\.\d{6})\d+")

Converter = Callable[[str, date], datetime]


def as_aware(moment: datetime) -> datetime:
    """Interpret naive datetimes as UTC wall-clock time."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _parse_rfc3339(text: str, reference: date) -> datetime:
    normalized = text.replace("Z", "+00:00").replace("z", "+00:00")
    normalized = normalized.replace("t", "T")
    # datetime only keeps microseconds
    normalized = _LONG_FRACTION.sub(r"\1", normalized)
    return datetime.fromisoformat(normalized)


def _parse_rfc2822(text: str, reference: date) -> datetime:
    try:
        return as_aware(email.utils.parsedate_to_datetime(text))
    except (TypeError, IndexError) as error:
        raise ValueError(f"not an RFC 2822 date: {text!r}") from error


def _parse_epoch(text: str, reference: date) -> datetime:
    seconds, _, fraction = text.partition(".")
    micros = int(fraction[:6].ljust(6, "0")) if fraction else 0
    return datetime.fromtimestamp(int(seconds), tz=timezone.utc) + timedelta(
        microseconds=micros
    )


def _parse_naive_iso(text: str, reference: date) -> datetime:
    return as_aware(datetime.fromisoformat(text))


def _strptime(fmt: str) -> Converter:
    def convert(text: str, reference: date) -> datetime:
        return as_aware(datetime.strptime(text, fmt))

    return convert


def _time_of_day(fmt: str) -> Converter:
    def convert(text: str, reference: date) -> datetime:
        moment: time = datetime.strptime(text, fmt).time()
        return datetime.combine(reference, moment, tzinfo=timezone.utc)

    return convert


@dataclass(frozen=True)
class FormatCandidate:
    """A known timestamp encoding.

    Attributes:
        name: Human readable name of the format.
        pattern: Regex matching the timestamp text, anchored by the caller.
        convert: Turns the matched text into an aware datetime. Raises
            ValueError if the text is not a valid timestamp.
    """

    name: str
    pattern: re.Pattern[str]
    convert: Converter = field(repr=False)


# Those are formats common in logs, in priority order
CANDIDATES: tuple[FormatCandidate, ...] = (
    FormatCandidate(
        "rfc3339",
        re.compile(
            r"\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2}(?:\.\d+)?"
            r"(?:[Zz]|[+-]\d{2}:\d{2})"
        ),
        _parse_rfc3339,
    ),
    FormatCandidate(
        "rfc2822",
        re.compile(
            rf"\d{{1,2}} (?:{_MONTHS}) \d{{4}} \d{{2}}:\d{{2}}(?::\d{{2}})?"
            r" (?:[+-]\d{4}|UT|GMT|[ECMP][SD]T|Z)\b"
        ),
        _parse_rfc2822,
    ),
    # strace -ttt, ltrace -ttt
    FormatCandidate(
        "epoch", re.compile(r"\d{10}(?:\.\d{1,9})?(?!\d)"), _parse_epoch
    ),
    # python %(asctime)s
    FormatCandidate(
        "python",
        re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2},\d{3}(?!\d)"),
        _strptime("%Y-%m-%d %H:%M:%S,%f"),
    ),
    FormatCandidate(
        "iso8601-local",
        re.compile(r"\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}:\d{2}(?:\.\d{1,6})?(?!\d)"),
        _parse_naive_iso,
    ),
    # go log.LstdFlags | log.Lmicroseconds
    FormatCandidate(
        "go-micro",
        re.compile(r"\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2}\.\d{1,6}(?!\d)"),
        _strptime("%Y/%m/%d %H:%M:%S.%f"),
    ),
    # go log.LstdFlags, nginx error log
    FormatCandidate(
        "go",
        re.compile(r"\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2}(?!\d)"),
        _strptime("%Y/%m/%d %H:%M:%S"),
    ),
    FormatCandidate(
        "nginx-access",
        re.compile(
            rf"\d{{2}}/(?:{_MONTHS})/\d{{4}}:\d{{2}}:\d{{2}}:\d{{2}} [+-]\d{{4}}"
        ),
        _strptime("%d/%b/%Y:%H:%M:%S %z"),
    ),
    FormatCandidate(
        "rabbitmq",
        re.compile(
            rf"\d{{1,2}}-(?:{_MONTHS})-\d{{4}}::\d{{2}}:\d{{2}}:\d{{2}}(?!\d)"
        ),
        _strptime("%d-%b-%Y::%H:%M:%S"),
    ),
    # strace -tt, ltrace -tt
    FormatCandidate(
        "strace-tt",
        re.compile(r"\d{2}:\d{2}:\d{2}\.\d{1,6}(?!\d)"),
        _time_of_day("%H:%M:%S.%f"),
    ),
    # strace -t, ltrace -t
    FormatCandidate(
        "strace-t",
        re.compile(r"\d{2}:\d{2}:\d{2}(?!\d)"),
        _time_of_day("%H:%M:%S"),
    ),
)


@dataclass(frozen=True)
class BoundParser:
    """Timestamp parser bound to a format and a position in the line.

    Attributes:
        name: Name of the bound format (or the explicit strptime format).
        offset: Position in the line where the timestamp starts.
    """

    name: str
    offset: int
    _parse: Callable[[str], datetime] = field(repr=False, compare=False)

    def parse(self, line: str) -> datetime:
        """Parse the timestamp of a line.

        Raises:
            TimestampParseError: If the line has no timestamp of the bound
                format at the bound offset.
        """
        try:
            return self._parse(line)
        except ValueError as error:
            raise TimestampParseError(
                f"no {self.name} timestamp at offset {self.offset} in {line!r}"
            ) from error


def digit_runs(line: str) -> Iterator[int]:
    """Yield the start of every digit run of line, up to MAX_SCAN."""
    for found in _DIGIT_RUN.finditer(line, 0, MAX_SCAN + 1):
        yield found.start()


def _parse_candidate(
    candidate: FormatCandidate, offset: int, reference: date, line: str
) -> datetime:
    match = candidate.pattern.match(line, offset)
    if match is None:
        # leading fields (client addresses, pids) vary in width
        for start in digit_runs(line):
            match = candidate.pattern.match(line, start)
            if match is not None:
                break
    if match is None:
        raise ValueError("pattern does not match")
    return candidate.convert(match.group(0), reference)


def _parse_slice(ts_format: str, start: int, end: int, line: str) -> datetime:
    return as_aware(datetime.strptime(line[start:end], ts_format))


def detect_format(line: str, reference: date | None = None) -> BoundParser:
    """Guess the timestamp format of a log line.

    Args:
        line: Sample line holding a timestamp.
        reference: Date given to time-only formats. Defaults to today (UTC).

    Returns:
        Parser bound to the first candidate matching at the earliest digit
        run. Every candidate is tried at a digit run before moving on to the
        next one.

    Raises:
        FormatDetectionError: If no candidate matches.
    """
    reference = reference or datetime.now(timezone.utc).date()
    for offset in digit_runs(line):
        for candidate in CANDIDATES:
            match = candidate.pattern.match(line, offset)
            if match is None:
                continue
            try:
                candidate.convert(match.group(0), reference)
            except ValueError:
                continue
            return BoundParser(
                candidate.name,
                offset,
                partial(_parse_candidate, candidate, offset, reference),
            )
    raise FormatDetectionError(f"Could not parse a timestamp in {line!r}")


def locate_format(line: str, ts_format: str) -> BoundParser:
    """Find where a timestamp of an explicit strptime format sits in a line.

    Every start position is tried, longest candidate text first, so that
    no trailing precision or zone information is lost.

    Raises:
        FormatDetectionError: If no substring of the line parses.
    """
    for start in range(len(line)):
        for end in range(min(start + MAX_LEN, len(line)), start, -1):
            try:
                datetime.strptime(line[start:end], ts_format)
            except ValueError:
                continue
            return BoundParser(
                ts_format, start, partial(_parse_slice, ts_format, start, end)
            )
    raise FormatDetectionError(
        f"Could not locate a {ts_format!r} timestamp in {line!r}"
    )


class DetectorState(Enum):
    """Lifecycle of a TimestampDetector."""

    UNDETECTED = "undetected"
    BOUND = "bound"


class TimestampDetector:
    """Detect-then-freeze timestamp parsing for one run.

    The first line a format is found in binds the parser; every later line
    is parsed with that binding, which never changes.

    Args:
        ts_format: Explicit strptime format. None enables detection.
        reference: Date given to time-only formats. Defaults to today (UTC)
            at bind time.
    """

    def __init__(
        self, ts_format: str | None = None, reference: date | None = None
    ) -> None:
        self._ts_format = ts_format
        self._reference = reference
        self._bound: BoundParser | None = None

    @property
    def state(self) -> DetectorState:
        if self._bound is None:
            return DetectorState.UNDETECTED
        return DetectorState.BOUND

    @property
    def bound(self) -> BoundParser | None:
        return self._bound

    def bind(self, line: str) -> BoundParser:
        """Bind a parser from line, unless one is bound already.

        Raises:
            FormatDetectionError: If line holds no recognizable timestamp.
                The detector stays undetected.
        """
        if self._bound is not None:
            return self._bound
        if self._ts_format is not None:
            parser = locate_format(line, self._ts_format)
        else:
            parser = detect_format(line, self._reference)
        logger.debug("Using %s timestamps at offset %d", parser.name, parser.offset)
        self._bound = parser
        return parser

    def parse(self, line: str) -> datetime:
        """Parse a line's timestamp, binding a format first if needed.

        Raises:
            FormatDetectionError: While undetected, if line cannot bind.
            TimestampParseError: Once bound, if line has no timestamp.
        """
        return self.bind(line).parse(line)
