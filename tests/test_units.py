"""Tests for time units and conversions."""

import pytest

from appinsights_reporter.units import TimeUnit, convert_duration, convert_rate


class TestTimeUnit:
    """Tests for TimeUnit."""

    def test_str_is_upper_case_name(self):
        """Test the name used inside metric keys."""
        assert str(TimeUnit.MILLISECONDS) == "MILLISECONDS"
        assert f"{TimeUnit.SECONDS}" == "SECONDS"

    @pytest.mark.parametrize("value", ["seconds", "SECONDS", " Seconds ", TimeUnit.SECONDS])
    def test_parse(self, value):
        """Test parsing names in any case."""
        assert TimeUnit.parse(value) is TimeUnit.SECONDS

    @pytest.mark.parametrize("value", ["second", "", None, 1])
    def test_parse_invalid(self, value):
        """Test that unknown values are rejected."""
        with pytest.raises(ValueError, match="Unknown time unit"):
            TimeUnit.parse(value)

    @pytest.mark.parametrize(
        "unit,expected",
        [
            (TimeUnit.SECONDS, "second"),
            (TimeUnit.MINUTES, "minute"),
            (TimeUnit.MILLISECONDS, "millisecond"),
            (TimeUnit.DAYS, "day"),
        ],
    )
    def test_rate_name(self, unit, expected):
        """Test the singular lower-case name used in rate keys."""
        assert unit.rate_name == expected

    def test_nanos(self):
        """Test nanoseconds per unit."""
        assert TimeUnit.NANOSECONDS.nanos == 1
        assert TimeUnit.MILLISECONDS.nanos == 1_000_000
        assert TimeUnit.DAYS.nanos == 86_400 * 10 ** 9


class TestConversions:
    """Tests for rate and duration conversion."""

    @pytest.mark.parametrize(
        "unit,expected",
        [
            (TimeUnit.SECONDS, 2.0),
            (TimeUnit.MINUTES, 120.0),
            (TimeUnit.HOURS, 7200.0),
            (TimeUnit.MILLISECONDS, 0.002),
        ],
    )
    def test_convert_rate(self, unit, expected):
        """Test scaling a per-second rate."""
        assert convert_rate(2.0, unit) == pytest.approx(expected)

    @pytest.mark.parametrize(
        "unit,expected",
        [
            (TimeUnit.NANOSECONDS, 5_000_000.0),
            (TimeUnit.MICROSECONDS, 5_000.0),
            (TimeUnit.MILLISECONDS, 5.0),
            (TimeUnit.SECONDS, 0.005),
        ],
    )
    def test_convert_duration(self, unit, expected):
        """Test expressing nanoseconds in another unit."""
        assert convert_duration(5_000_000, unit) == pytest.approx(expected)
