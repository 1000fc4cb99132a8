"""Streaming histogram of request latencies.

Run with:
    python examples/latency_histogram.py

Latencies are drawn from a log-normal distribution and streamed into a
histogram with declared bounds, so nothing has to be kept in memory. The
same samples are then charted on a logarithmic scale.
"""

import random

from rich.console import Console

from lowcharts import (
    Histogram,
    HistogramOptions,
    InvalidSampleError,
    Scale,
    get_logger,
)
from lowcharts.adapters.rendering import render_histogram

logger = get_logger(__name__)

SAMPLES = 5000
MAX_LATENCY_MS = 2000.0


def latencies(count: int, seed: int = 42) -> list[float]:
    """Return simulated request latencies in milliseconds."""
    rng = random.Random(seed)
    return [rng.lognormvariate(4.0, 0.8) for _ in range(count)]


def main() -> None:
    console = Console()
    samples = latencies(SAMPLES)

    streaming = Histogram.with_bounds(
        0.0, MAX_LATENCY_MS, HistogramOptions(intervals=16, precision=1)
    )
    for value in samples:
        try:
            streaming.insert(value)
        except InvalidSampleError as error:
            logger.warning("Dropping sample: %s", error)
    if streaming.discarded:
        logger.info("%d samples above %s ms", streaming.discarded, MAX_LATENCY_MS)

    console.rule("Linear buckets, streamed")
    for line in render_histogram(streaming, width=100, color=True):
        console.print(line)

    logarithmic = Histogram.from_samples(
        samples, HistogramOptions(intervals=12, scale=Scale.LOGARITHMIC)
    )
    console.rule("Logarithmic buckets")
    for line in render_histogram(logarithmic, width=100, color=True):
        console.print(line)


if __name__ == "__main__":
    main()
