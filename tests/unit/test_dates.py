"""Unit tests for timestamp parsing."""

from datetime import datetime, timedelta, timezone

import pytest

from cycle_time.dates import parse_timestamp, require_timestamp
from cycle_time.errors import InputError


@pytest.mark.unit
class TestParseTimestamp:
    """Test parse_timestamp with the formats git and users produce."""

    def test_strict_iso(self):
        parsed = parse_timestamp("2024-03-04T10:11:12+02:00")

        assert parsed == datetime(2024, 3, 4, 8, 11, 12, tzinfo=timezone.utc)
        assert parsed.utcoffset() == timedelta(hours=2)

    def test_plain_date_is_utc_midnight(self):
        assert parse_timestamp("2024-03-04") == datetime(2024, 3, 4, tzinfo=timezone.utc)

    def test_js_style_date_string(self):
        assert parse_timestamp("Mon Mar 04 2024") == datetime(2024, 3, 4, tzinfo=timezone.utc)

    @pytest.mark.parametrize("text", [None, "", "   ", "nonsense"])
    def test_unusable_text(self, text):
        assert parse_timestamp(text) is None


@pytest.mark.unit
class TestRequireTimestamp:
    """Test required date arguments."""

    def test_valid(self):
        assert require_timestamp("2024-01-01", "start-date") == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_invalid(self):
        with pytest.raises(InputError, match="Couldn't parse start-date argument"):
            require_timestamp("someday", "start-date")
