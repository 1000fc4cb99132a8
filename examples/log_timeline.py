"""Time histograms of a synthetic access log.

Run with:
    python examples/log_timeline.py

The log lines use the nginx access log layout, client address first. Their
timestamp format is detected from the first line.
"""

import random
from datetime import datetime, timedelta, timezone

from rich.console import Console

from lowcharts import get_logger
from lowcharts.adapters.readers import SplitTimeReader, TimeReader
from lowcharts.adapters.rendering import render_split_timehist, render_timehist
from lowcharts.core.timehist import SplitTimeHistogram, TimeHistogram

logger = get_logger(__name__)

METHODS = ("GET", "POST", "PUT")


def access_log(count: int, seed: int = 7) -> list[str]:
    """Return access log lines spread over an hour, bursting mid-way."""
    rng = random.Random(seed)
    start = datetime(2021, 4, 15, 6, 0, tzinfo=timezone.utc)
    moments = sorted(
        start + timedelta(minutes=rng.triangular(0, 60, 30)) for _ in range(count)
    )
    lines = []
    for moment in moments:
        client = f"10.0.{rng.randint(0, 255)}.{rng.randint(1, 254)}"
        method = rng.choice(METHODS)
        status = rng.choice((200, 200, 200, 404, 500))
        stamp = moment.strftime("%d/%b/%Y:%H:%M:%S %z")
        lines.append(f'{client} - - [{stamp}] "{method} /api HTTP/1.1" {status} 512')
    return lines


def main() -> None:
    console = Console()
    lines = access_log(2000)

    stamps = TimeReader(regex=r'" 500 ').read_lines(lines)
    logger.info("%d server errors out of %d requests", len(stamps), len(lines))
    console.rule("Server errors over time")
    timehist = TimeHistogram.from_timestamps(stamps, intervals=12)
    for line in render_timehist(timehist, width=80, color=True):
        console.print(line)

    pairs = SplitTimeReader(METHODS).read_lines(lines)
    console.rule("Requests per method")
    split = SplitTimeHistogram.from_matches(METHODS, pairs, intervals=12)
    for line in render_split_timehist(split, width=80, color=True):
        console.print(line)


if __name__ == "__main__":
    main()
