"""Command line interface.

Example:
    ```
    $ cat latencies.txt | lowcharts hist --intervals 10
    $ lowcharts timehist --regex ' 500 ' --duration '1h' access.log
    $ lowcharts split-timehist GET POST PUT access.log
    ```

Exit status is 0 on success, 1 when there is nothing to chart (or the input
cannot be read) and 2 on bad arguments.
"""

import argparse
import logging
import re
from collections.abc import Callable, Sequence
from datetime import timedelta

from rich.console import Console
from rich.text import Text

from lowcharts.adapters.logging import COLOR_CHOICES, OutputConfig, configure_output
from lowcharts.adapters.readers import (
    STDIN,
    DataReader,
    SplitTimeReader,
    TimeReader,
    read_matches,
    read_terms,
)
from lowcharts.adapters.rendering import (
    render_common_terms,
    render_histogram,
    render_matchbar,
    render_split_timehist,
    render_timehist,
    render_xy,
)
from lowcharts.core.exceptions import LowchartsError
from lowcharts.core.histogram import Histogram
from lowcharts.core.models import HistogramOptions, Scale
from lowcharts.core.terms import CommonTerms
from lowcharts.core.timehist import MAX_SPLIT_TERMS, SplitTimeHistogram, TimeHistogram
from lowcharts.core.xy import XyPlot

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NO_DATA = 1
EXIT_BAD_ARGS = 2

_DURATION_UNITS = {
    "nsec": 1e-9,
    "ns": 1e-9,
    "usec": 1e-6,
    "us": 1e-6,
    "msec": 1e-3,
    "ms": 1e-3,
    "seconds": 1,
    "second": 1,
    "sec": 1,
    "s": 1,
    "minutes": 60,
    "minute": 60,
    "min": 60,
    "m": 60,
    "hours": 3600,
    "hour": 3600,
    "hr": 3600,
    "h": 3600,
    "days": 86400,
    "day": 86400,
    "d": 86400,
    "weeks": 604800,
    "week": 604800,
    "w": 604800,
    # months and years are averaged, as in the Gregorian calendar
    "months": 2630016,
    "month": 2630016,
    "M": 2630016,
    "years": 31557600,
    "year": 31557600,
    "y": 31557600,
}
_DURATION_TOKEN = re.compile(r"\s*(\d+)\s*([A-Za-z]+)")


def parse_duration(text: str) -> timedelta:
    """Parse a human duration such as ``2h 30m 5s 100ms`` or ``3days``.

    Raises:
        ValueError: If text is empty or holds an unknown unit.
    """
    total = 0.0
    position = 0
    stripped = text.strip()
    while position < len(stripped):
        match = _DURATION_TOKEN.match(stripped, position)
        if match is None:
            raise ValueError(f"invalid duration {text!r}")
        amount, unit = match.groups()
        if unit not in _DURATION_UNITS:
            raise ValueError(f"unknown time unit {unit!r} in {text!r}")
        total += int(amount) * _DURATION_UNITS[unit]
        position = match.end()
    if position == 0:
        raise ValueError("empty duration")
    return timedelta(seconds=total)


def _positive_int(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be a positive number (was {value})")
    return value


def _precision(text: str) -> int:
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0 (was {value})")
    return value


def _add_input(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "input",
        nargs="?",
        default=STDIN,
        help="Input file. If not present or a single dash, standard input is used",
    )


def _add_width(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-w",
        "--width",
        type=_positive_int,
        default=110,
        help="Use this many characters as terminal width (default: 110)",
    )


def _add_intervals(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-i",
        "--intervals",
        type=_positive_int,
        default=20,
        help="Use no more than this amount of buckets (default: 20)",
    )


def _add_values(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-m", "--min", type=float, help="Filter out smaller values")
    parser.add_argument("-M", "--max", type=float, help="Filter out bigger values")
    parser.add_argument(
        "-R",
        "--regex",
        help=(
            "Regex capturing the values: the group named `value`, else the "
            "first group. Without it, a number per line is expected"
        ),
    )
    parser.add_argument(
        "-p",
        "--precision",
        type=_precision,
        help="Show this many decimals instead of human units",
    )


def _add_format(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-f",
        "--format",
        dest="ts_format",
        help="strptime format of the timestamps (detected when missing)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level parser with one subparser per chart kind."""
    parser = argparse.ArgumentParser(
        prog="lowcharts",
        description="Charts of numbers and log timestamps for the terminal",
    )
    parser.add_argument(
        "-c",
        "--color",
        choices=COLOR_CHOICES,
        default="auto",
        help="Use colors in the output (default: auto)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Be more verbose"
    )
    subparsers = parser.add_subparsers(title="commands", dest="command", required=True)

    hist = subparsers.add_parser("hist", help="Plot an histogram from input values")
    _add_values(hist)
    _add_intervals(hist)
    _add_width(hist)
    hist.add_argument(
        "-l",
        "--log-scale",
        action="store_true",
        help="Use a logarithmic scale for buckets (values must be positive)",
    )
    _add_input(hist)

    plot = subparsers.add_parser(
        "plot", help="Plot a 2d x-y graph where y-values are averages of input values"
    )
    _add_values(plot)
    _add_width(plot)
    plot.add_argument(
        "-H",
        "--height",
        type=_positive_int,
        default=40,
        help="Use that many rows for the plot (default: 40)",
    )
    _add_input(plot)

    matches = subparsers.add_parser(
        "matches", help="Plot a bar chart counting lines holding each string"
    )
    _add_width(matches)
    matches.add_argument("input", help="Input file, a single dash for standard input")
    matches.add_argument("match", nargs="+", help="Count lines holding this string")

    terms = subparsers.add_parser(
        "common-terms", help="Plot a bar chart of the most frequent terms"
    )
    _add_width(terms)
    terms.add_argument(
        "-R", "--regex", help="Regex capturing the term (default: the whole line)"
    )
    terms.add_argument(
        "-l",
        "--lines",
        type=_positive_int,
        default=10,
        help="Display that many terms (default: 10)",
    )
    _add_input(terms)

    timehist = subparsers.add_parser(
        "timehist", help="Plot an histogram of log lines over time"
    )
    _add_format(timehist)
    _add_intervals(timehist)
    _add_width(timehist)
    timehist.add_argument(
        "-R", "--regex", help="Only count lines where this regex is present"
    )
    timehist.add_argument(
        "--duration",
        type=parse_duration,
        help="Cap the time interval at that duration (example: '3h 5min')",
    )
    timehist.add_argument(
        "--early-stop",
        action="store_true",
        help="With --duration, assume monotonic times and stop as soon as possible",
    )
    _add_input(timehist)

    split = subparsers.add_parser(
        "split-timehist",
        help="Plot an histogram over time of lines holding each string",
    )
    _add_format(split)
    _add_intervals(split)
    _add_width(split)
    split.add_argument("input", help="Input file, a single dash for standard input")
    split.add_argument(
        "match",
        nargs="+",
        help=f"Count lines holding this string (up to {MAX_SPLIT_TERMS})",
    )
    return parser


def _print(console: Console, lines: list[Text]) -> None:
    for line in lines:
        console.print(line)


def _not_enough_data() -> int:
    logger.warning("Not enough data to process")
    return EXIT_NO_DATA


def _data_reader(args: argparse.Namespace) -> DataReader:
    return DataReader(args.regex, min=args.min, max=args.max)


def _histogram(args: argparse.Namespace, console: Console, config: OutputConfig) -> int:
    values = _data_reader(args).read(args.input)
    if not values:
        return _not_enough_data()
    options = HistogramOptions(
        intervals=args.intervals,
        scale=Scale.LOGARITHMIC if args.log_scale else Scale.LINEAR,
        precision=args.precision,
        min=args.min,
        max=args.max,
    )
    histogram = Histogram.from_samples(values, options)
    _print(console, render_histogram(histogram, args.width, config.color))
    return EXIT_OK


def _plot(args: argparse.Namespace, console: Console, config: OutputConfig) -> int:
    values = _data_reader(args).read(args.input)
    if not values:
        return _not_enough_data()
    plot = XyPlot(values, args.width, args.height, args.precision)
    _print(console, render_xy(plot, config.color))
    return EXIT_OK


def _matchbar(args: argparse.Namespace, console: Console, config: OutputConfig) -> int:
    bar = read_matches(args.input, args.match)
    _print(console, render_matchbar(bar, args.width, config.color))
    return EXIT_OK


def _common_terms(
    args: argparse.Namespace, console: Console, config: OutputConfig
) -> int:
    terms: CommonTerms = read_terms(args.input, args.regex, args.lines)
    _print(console, render_common_terms(terms, args.width, config.color))
    return EXIT_OK


def _timehist(args: argparse.Namespace, console: Console, config: OutputConfig) -> int:
    reader = TimeReader(
        regex=args.regex,
        ts_format=args.ts_format,
        duration=args.duration,
        early_stop=args.early_stop,
    )
    stamps = reader.read(args.input)
    if len(stamps) < 2:
        return _not_enough_data()
    timehist = TimeHistogram.from_timestamps(stamps, args.intervals)
    _print(console, render_timehist(timehist, args.width, config.color))
    return EXIT_OK


def _split_timehist(
    args: argparse.Namespace, console: Console, config: OutputConfig
) -> int:
    reader = SplitTimeReader(args.match, ts_format=args.ts_format)
    pairs = reader.read(args.input)
    if len(pairs) < 2:
        return _not_enough_data()
    split = SplitTimeHistogram.from_matches(args.match, pairs, args.intervals)
    _print(console, render_split_timehist(split, args.width, config.color))
    return EXIT_OK


Command = Callable[[argparse.Namespace, Console, OutputConfig], int]

COMMANDS: dict[str, Command] = {
    "hist": _histogram,
    "plot": _plot,
    "matches": _matchbar,
    "common-terms": _common_terms,
    "timehist": _timehist,
    "split-timehist": _split_timehist,
}


def _validate(args: argparse.Namespace) -> str | None:
    """Error message for argument combinations argparse cannot check."""
    low, high = getattr(args, "min", None), getattr(args, "max", None)
    if low is not None and high is not None and low > high:
        return "Minimum should be smaller than maximum"
    regex = getattr(args, "regex", None)
    if regex is not None:
        try:
            re.compile(regex)
        except re.error as error:
            return f"Failed to parse regex {regex}: {error}"
    if args.command == "split-timehist" and len(args.match) > MAX_SPLIT_TERMS:
        return f"Only {MAX_SPLIT_TERMS} different sub-groups are supported"
    return None


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line and return the exit status."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exit_:
        return exit_.code if isinstance(exit_.code, int) else EXIT_BAD_ARGS

    config = configure_output(args.color, args.verbose)
    problem = _validate(args)
    if problem is not None:
        logger.error(problem)
        return EXIT_BAD_ARGS

    console = config.console()
    try:
        return COMMANDS[args.command](args, console, config)
    except OSError as error:
        logger.error("Could not open %s: %s", args.input, error)
        return EXIT_NO_DATA
    except LowchartsError as error:
        logger.error("%s", error)
        return EXIT_NO_DATA
