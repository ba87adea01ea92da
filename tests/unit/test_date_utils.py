"""Unit tests for rss2ical.feed.date_utils."""

from datetime import UTC, datetime, timedelta

import pytest

from rss2ical.feed.date_utils import DATE_GRAMMARS, normalize_pub_date, try_parse_pub_date

pytestmark = [pytest.mark.unit, pytest.mark.fast]


class TestTryParsePubDate:
    """Grammar coverage for try_parse_pub_date."""

    def test_parse_when_rfc1123_gmt_then_utc(self) -> None:
        result = try_parse_pub_date("Mon, 27 Jul 2025 12:00:00 GMT")
        assert result == datetime(2025, 7, 27, 12, 0, tzinfo=UTC)
        assert result.utcoffset() == timedelta(0)

    def test_parse_when_rfc1123_numeric_zone_then_offset_kept(self) -> None:
        result = try_parse_pub_date("Mon, 27 Jul 2025 12:00:00 -0700")
        assert result is not None
        assert result.utcoffset() == timedelta(hours=-7)
        assert result.astimezone(UTC) == datetime(2025, 7, 27, 19, 0, tzinfo=UTC)

    def test_parse_when_rfc3339_then_utc(self) -> None:
        result = try_parse_pub_date("2025-07-27T12:00:00Z")
        assert result == datetime(2025, 7, 27, 12, 0, tzinfo=UTC)

    def test_parse_when_rfc3339_with_offset_then_offset_kept(self) -> None:
        result = try_parse_pub_date("2025-07-27T12:00:00+02:00")
        assert result is not None
        assert result.astimezone(UTC) == datetime(2025, 7, 27, 10, 0, tzinfo=UTC)

    def test_parse_when_rfc3339_fractional_seconds_then_parsed(self) -> None:
        result = try_parse_pub_date("2025-07-27T12:00:00.250Z")
        assert result == datetime(2025, 7, 27, 12, 0, 0, 250000, tzinfo=UTC)

    @pytest.mark.parametrize(
        ("raw", "expected_offset_hours"),
        [
            ("Mon, 02 Jan 2006 15:04:05 EST", -5),
            ("Mon, 02 Jan 2006 15:04:05 EDT", -4),
            ("Mon, 02 Jan 2006 15:04:05 CST", -6),
            ("Mon, 02 Jan 2006 15:04:05 MST", -7),
            ("Mon, 02 Jan 2006 15:04:05 PST", -8),
            ("Mon, 02 Jan 2006 15:04:05 PDT", -7),
            ("Mon, 02 Jan 2006 15:04:05 UT", 0),
            ("Mon, 02 Jan 2006 15:04:05 UTC", 0),
        ],
    )
    def test_parse_when_named_zone_then_rfc822_offset(self, raw: str, expected_offset_hours: int) -> None:
        result = try_parse_pub_date(raw)
        assert result is not None
        assert result.utcoffset() == timedelta(hours=expected_offset_hours)
        assert (result.hour, result.minute, result.second) == (15, 4, 5)

    def test_parse_when_unknown_abbreviation_then_zero_offset(self) -> None:
        result = try_parse_pub_date("Mon, 02 Jan 2006 15:04:05 XYZ")
        assert result == datetime(2006, 1, 2, 15, 4, 5, tzinfo=UTC)

    def test_parse_when_one_digit_day_numeric_zone_then_parsed(self) -> None:
        result = try_parse_pub_date("Mon, 2 Jan 2006 15:04:05 -0700")
        assert result is not None
        assert result.day == 2
        assert result.utcoffset() == timedelta(hours=-7)

    def test_parse_when_one_digit_day_named_zone_then_parsed(self) -> None:
        result = try_parse_pub_date("Mon, 2 Jan 2006 15:04:05 GMT")
        assert result == datetime(2006, 1, 2, 15, 4, 5, tzinfo=UTC)

    def test_parse_when_surrounding_whitespace_then_parsed(self) -> None:
        result = try_parse_pub_date("  Mon, 27 Jul 2025 12:00:00 GMT\n")
        assert result == datetime(2025, 7, 27, 12, 0, tzinfo=UTC)

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "   ",
            "invalid date",
            "2025-07-27",
            "2025-07-27T12:00:00",
            "2025-07-27T12:00Z",
            "20250727T120000Z",
            "2025-07-27T12:00:00+0200",
            "27 Jul 2025 12:00:00 GMT",
            "Mon, 32 Jul 2025 12:00:00 GMT",
        ],
    )
    def test_parse_when_unrecognized_then_none(self, raw: str) -> None:
        assert try_parse_pub_date(raw) is None

    def test_grammars_when_listed_then_rfc1123_before_rfc3339(self) -> None:
        names = [name for name, _ in DATE_GRAMMARS]
        assert names[0] == "rfc1123z"
        assert names[-1] == "rfc3339"


class TestNormalizePubDate:
    """Fallback behaviour of normalize_pub_date."""

    def test_normalize_when_valid_then_parsed_value(self) -> None:
        result = normalize_pub_date("Mon, 27 Jul 2025 13:00:00 GMT")
        assert result == datetime(2025, 7, 27, 13, 0, tzinfo=UTC)

    def test_normalize_when_invalid_then_current_time(self) -> None:
        before = datetime.now(UTC)
        result = normalize_pub_date("invalid date")
        after = datetime.now(UTC)

        assert result.tzinfo is not None
        assert before - timedelta(seconds=1) <= result <= after + timedelta(seconds=1)

    def test_normalize_when_invalid_and_test_time_pinned_then_pinned_value(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("RSS2ICAL_TEST_TIME", "2025-01-01T08:30:00Z")
        assert normalize_pub_date("garbage") == datetime(2025, 1, 1, 8, 30, tzinfo=UTC)

    def test_normalize_when_empty_then_current_time_not_error(self) -> None:
        result = normalize_pub_date("")
        assert abs(datetime.now(UTC) - result) < timedelta(minutes=1)
