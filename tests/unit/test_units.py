"""Tests for number and timestamp label formatting."""

from datetime import datetime, timezone

import pytest

from lowcharts.core.units import (
    UnitFormatter,
    format_timestamp,
    format_value,
    time_label_format,
)


class TestUnitFormatterForRange:
    """Tests for human unit selection from a value range."""

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_millions_share_one_unit(self) -> None:
        """Both ends of a range in the millions are shown in M."""
        formatter = UnitFormatter.for_range(-12000003, 500000)
        assert formatter.format(-12000003) == "-12.0 M"
        assert formatter.format(500000) == "0.5 M"

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_small_numbers_keep_significant_decimals(self) -> None:
        """Tiny spans get enough decimals to tell values apart."""
        formatter = UnitFormatter.for_range(0, 0.0002)
        assert formatter.suffix == ""
        assert formatter.format(0.0000043) == "0.000004"

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_unit_span_uses_two_decimals(self) -> None:
        """A span of one shows two decimals."""
        assert UnitFormatter.for_range(0, 1).format(0.5) == "0.50"

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_wide_span_drops_decimals(self) -> None:
        """A span of hundreds needs no decimals."""
        assert UnitFormatter.for_range(0, 100).format(50) == "50"

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_thousands_use_k_suffix(self) -> None:
        """Values in the thousands are divided by 1000."""
        formatter = UnitFormatter.for_range(0, 5000)
        assert formatter.exponent == 1
        assert formatter.format(2500) == "2.50 K"

    @pytest.mark.core
    @pytest.mark.tra("Core.UnitFormatter.SharedUnit")
    @pytest.mark.tier(0)
    def test_huge_values_use_one_unit_per_chart(self) -> None:
        """Every label of a chart up to hundreds of billions is in G."""
        formatter = UnitFormatter.for_range(0, 412723763251.327)
        assert formatter.suffix == " G"
        assert formatter.format(412723763251.327) == "413 G"
        assert formatter.format(0) == "0 G"

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_degenerate_range_uses_three_decimals(self) -> None:
        """A zero-width range falls back to three decimals."""
        assert UnitFormatter.for_range(0, 0).format(0) == "0.000"
        assert UnitFormatter.for_range(1000, 1000).format(1000) == "1.000 K"


class TestUnitFormatterFixed:
    """Tests for fixed precision formatting."""

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_fixed_precision_prints_full_number(self) -> None:
        """Fixed precision never switches to units."""
        formatter = UnitFormatter.fixed(3)
        assert formatter.format(412723763251.327) == "412723763251.327"

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_negative_precision_raises(self) -> None:
        """Precision must not be negative."""
        with pytest.raises(ValueError, match="precision"):
            UnitFormatter.fixed(-1)

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_create_prefers_precision(self) -> None:
        """Create uses fixed precision when one is given."""
        assert UnitFormatter.create(0, 1e9, precision=1) == UnitFormatter(1)
        assert UnitFormatter.create(0, 1e9).exponent == 3

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_format_value_shortcut(self) -> None:
        """format_value formats against the chart range."""
        assert format_value(1500, 0, 3000) == "1.50 K"
        assert format_value(1500, 0, 3000, precision=0) == "1500"


class TestTimeLabels:
    """Tests for time chart label layouts."""

    @pytest.mark.core
    @pytest.mark.tier(0)
    @pytest.mark.parametrize(
        ("span", "layout"),
        [
            (86401, "%Y-%m-%d %H:%M:%S"),
            (86400, "%H:%M:%S"),
            (301, "%H:%M:%S"),
            (300, "%H:%M:%S.%f"),
            (0.5, "%H:%M:%S.%f"),
        ],
    )
    def test_layout_depends_on_span(self, span: float, layout: str) -> None:
        """Longer spans drop sub-second precision."""
        assert time_label_format(span) == layout

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_minutes_span_shows_milliseconds(self) -> None:
        """Spans of a few minutes are labelled to the millisecond."""
        moment = datetime(2021, 4, 15, 6, 25, 31, 123456, tzinfo=timezone.utc)
        assert format_timestamp(moment, 60) == "06:25:31.123"

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_sub_second_span_shows_microseconds(self) -> None:
        """Spans of a second or less keep microseconds."""
        moment = datetime(2021, 4, 15, 6, 25, 31, 123456, tzinfo=timezone.utc)
        assert format_timestamp(moment, 1) == "06:25:31.123456"
        assert format_timestamp(moment, 0.2) == "06:25:31.123456"

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_long_span_shows_date(self) -> None:
        """Spans over a day include the date."""
        moment = datetime(2021, 4, 15, 6, 25, 31, tzinfo=timezone.utc)
        assert format_timestamp(moment, 2 * 86400) == "2021-04-15 06:25:31"
