"""Tests for the numerical Histogram."""

import math

import pytest

from lowcharts.core.exceptions import (
    EmptyInputError,
    InvalidRangeError,
    InvalidSampleError,
)
from lowcharts.core.histogram import Histogram
from lowcharts.core.models import HistogramOptions, Scale

SAMPLES = [-1.0, -1.1, 2.0, 2.0, 2.1, -0.9, 11.0, 11.2, 1.9, 1.99, 1.98, 1.97, 1.96]


class TestStreamingHistogram:
    """Tests for histograms with declared bounds."""

    @pytest.mark.core
    @pytest.mark.tra("Core.Histogram.WithBounds")
    @pytest.mark.tier(0)
    def test_samples_are_counted_per_bucket(self) -> None:
        """Samples land in the bucket covering them."""
        hist = Histogram.with_bounds(-2, 14, HistogramOptions(intervals=8))
        hist.load(SAMPLES)
        counts = hist.counts()
        assert hist.top == 5
        assert (counts[0].lower, counts[0].upper, counts[0].count) == (-2, 0, 3)
        assert (counts[1].lower, counts[1].upper, counts[1].count) == (0, 2, 5)
        assert counts[2].count == 3
        assert counts[6].count == 2
        assert hist.total == len(SAMPLES)

    @pytest.mark.core
    @pytest.mark.tra("Core.Histogram.Discarded")
    @pytest.mark.tier(0)
    def test_out_of_range_samples_are_discarded(self) -> None:
        """Samples outside the bounds are counted as discarded."""
        hist = Histogram.with_bounds(-2, 4, HistogramOptions(intervals=6))
        hist.load([-1.0, 2.0, -1.0, 2.0, 10.0, 10.0, 10.0, -10.0])
        assert hist.top == 2
        assert hist.total == 4
        assert hist.discarded == 4

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_insert_returns_slot(self) -> None:
        """Insert reports the bucket index, or None when out of range."""
        hist = Histogram.with_bounds(0, 10, HistogramOptions(intervals=5))
        assert hist.insert(3.0) == 1
        assert hist.insert(10.0) == 4
        assert hist.insert(11.0) is None

    @pytest.mark.core
    @pytest.mark.tra("Core.Histogram.Rejected")
    @pytest.mark.tier(0)
    def test_invalid_sample_leaves_counts_unchanged(self) -> None:
        """A rejected sample changes neither counts nor statistics."""
        hist = Histogram.with_bounds(0, 10)
        hist.insert(1.0)
        with pytest.raises(InvalidSampleError):
            hist.insert(math.nan)
        assert hist.rejected == 1
        assert hist.total == 1
        assert hist.summary().count == 1

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_summary_has_no_percentiles_when_streaming(self) -> None:
        """Streaming histograms keep no samples for percentiles."""
        hist = Histogram.with_bounds(0, 10)
        hist.load([1.0, 2.0])
        assert hist.summary().percentiles is None

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_labels_use_chart_precision(self) -> None:
        """Bucket labels follow the requested precision."""
        hist = Histogram.with_bounds(0, 10, HistogramOptions(intervals=2, precision=1))
        assert [bucket.label for bucket in hist.counts()] == [
            "0.0 .. 5.0",
            "5.0 .. 10.0",
        ]

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_logarithmic_histogram_needs_positive_bounds(self) -> None:
        """A logarithmic histogram cannot start at zero."""
        options = HistogramOptions(scale=Scale.LOGARITHMIC)
        with pytest.raises(InvalidRangeError):
            Histogram.with_bounds(0, 10, options)


class TestHistogramFromSamples:
    """Tests for Histogram.from_samples()."""

    @pytest.mark.core
    @pytest.mark.tra("Core.Histogram.FromSamples")
    @pytest.mark.tier(0)
    def test_range_comes_from_samples(self) -> None:
        """Without declared bounds the samples give the range."""
        hist = Histogram.from_samples([1.0, 2.0, 3.0, 4.0, 5.0])
        assert hist.buckets.low == 1.0
        assert hist.buckets.high == 5.0

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_intervals_are_capped_to_sample_count(self) -> None:
        """There are never more buckets than samples."""
        hist = Histogram.from_samples([1.0, 2.0, 3.0], HistogramOptions(intervals=20))
        assert hist.buckets.bucket_count == 3

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_identical_samples_use_one_bucket(self) -> None:
        """A zero-width range collapses to a single bucket."""
        hist = Histogram.from_samples([4.0, 4.0, 4.0])
        assert [bucket.count for bucket in hist.counts()] == [3]

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_declared_bounds_win(self) -> None:
        """Declared bounds override the sample range."""
        options = HistogramOptions(intervals=2, min=0, max=10)
        hist = Histogram.from_samples([-5.0, 1.0, 2.0, 20.0], options)
        assert (hist.buckets.low, hist.buckets.high) == (0, 10)
        assert hist.discarded == 2
        assert [bucket.count for bucket in hist.counts()] == [2, 0]

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_inverted_declared_bounds_raise(self) -> None:
        """A minimum above the maximum is a range error, not an empty input."""
        options = HistogramOptions(min=5, max=1)
        with pytest.raises(InvalidRangeError, match="bigger than maximum"):
            Histogram.from_samples([1.0, 2.0], options)

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_non_finite_samples_are_rejected(self) -> None:
        """NaN and infinite samples are counted as rejected."""
        hist = Histogram.from_samples([1.0, math.nan, 2.0, math.inf])
        assert hist.rejected == 2
        assert hist.total == 2

    @pytest.mark.core
    @pytest.mark.tra("Core.Histogram.Empty")
    @pytest.mark.tier(0)
    @pytest.mark.parametrize("samples", [[], [math.nan]])
    def test_no_valid_sample_raises(self, samples: list[float]) -> None:
        """Histograms need at least one finite sample."""
        with pytest.raises(EmptyInputError, match="Not enough data"):
            Histogram.from_samples(samples)

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_summary_includes_percentiles(self) -> None:
        """Complete sample sets report percentiles."""
        summary = Histogram.from_samples([1.0, 2.0, 3.0, 4.0]).summary()
        assert summary.count == 4
        assert summary.mean == 2.5
        assert summary.variance == 1.25
        assert summary.percentiles == {50: 3.0, 90: 4.0, 95: 4.0, 99: 4.0}

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_logarithmic_buckets(self) -> None:
        """Logarithmic buckets count samples per decade."""
        options = HistogramOptions(intervals=3, scale=Scale.LOGARITHMIC)
        hist = Histogram.from_samples([1.0, 10.0, 100.0, 1000.0], options)
        assert [bucket.count for bucket in hist.counts()] == [1, 1, 2]

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_scale_factor_fits_top_bucket(self) -> None:
        """The scale factor keeps the top bucket within the width."""
        hist = Histogram.from_samples([1.0] * 5 + [2.0])
        assert hist.top == 5
        assert hist.scale_factor(2) == 3
        assert hist.scale_factor(100) == 1
        with pytest.raises(ValueError):
            hist.scale_factor(0)
