from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from app.domain.analytics.periods import (
    InvalidReportingWindow,
    ReportingWindow,
    bucket_label,
    business_week_start,
    checked_fallback_period,
    month_start,
    resolve_period_kind,
    window_for,
)

AMMAN = ZoneInfo("Asia/Amman")


def local(*args) -> datetime:
    """Naive UTC instant of a wall-clock time in Amman"""
    return datetime(*args, tzinfo=AMMAN).astimezone(timezone.utc).replace(tzinfo=None)


def test_week_starts_thursday_1400_local():
    # 2025-01-16 is a Thursday
    before_cutoff = datetime(2025, 1, 16, 13, 59, tzinfo=AMMAN)
    after_cutoff = datetime(2025, 1, 16, 14, 1, tzinfo=AMMAN)

    assert business_week_start(before_cutoff) == local(2025, 1, 9, 14)
    assert business_week_start(after_cutoff) == local(2025, 1, 16, 14)


def test_week_start_exactly_at_cutoff_belongs_to_new_week():
    assert business_week_start(datetime(2025, 1, 16, 14, 0, tzinfo=AMMAN)) == local(2025, 1, 16, 14)


def test_week_start_from_other_weekdays():
    # Monday and Wednesday both belong to the week that began the previous Thursday
    assert business_week_start(datetime(2025, 1, 13, 9, 0, tzinfo=AMMAN)) == local(2025, 1, 9, 14)
    assert business_week_start(datetime(2025, 1, 15, 23, 59, tzinfo=AMMAN)) == local(2025, 1, 9, 14)
    # Friday belongs to the week that began the day before
    assert business_week_start(datetime(2025, 1, 17, 1, 0, tzinfo=AMMAN)) == local(2025, 1, 16, 14)


def test_weekly_window_moves_when_now_crosses_the_cutoff():
    before = window_for("weekly", datetime(2025, 1, 16, 13, 59, tzinfo=AMMAN))
    after = window_for("weekly", datetime(2025, 1, 16, 14, 1, tzinfo=AMMAN))

    assert (before.start, before.end) == (local(2025, 1, 9, 14), local(2025, 1, 16, 14))
    assert (after.start, after.end) == (local(2025, 1, 16, 14), local(2025, 1, 23, 14))


def test_past_week_is_the_week_before():
    window = window_for("past_week", datetime(2025, 1, 17, 12, 0, tzinfo=AMMAN))

    assert window.kind == "past_week"
    assert window.start == local(2025, 1, 9, 14)
    assert window.end == local(2025, 1, 16, 14)


def test_naive_now_is_read_as_utc():
    aware = datetime(2025, 1, 16, 11, 30, tzinfo=timezone.utc)
    naive = datetime(2025, 1, 16, 11, 30)

    assert window_for("weekly", aware) == window_for("weekly", naive)


def test_weekly_window_is_half_open():
    window = window_for("weekly", datetime(2025, 1, 17, 12, 0, tzinfo=AMMAN))

    assert window.contains(window.start)
    assert window.contains(window.end - timedelta(milliseconds=1))
    assert not window.contains(window.end)
    assert not window.contains(window.start - timedelta(milliseconds=1))


def test_custom_window_end_is_inclusive_end_of_day():
    window = window_for(
        "custom", datetime(2025, 2, 1, tzinfo=AMMAN), date(2025, 1, 10), date(2025, 1, 12)
    )

    assert window.start == local(2025, 1, 10, 0, 0)
    assert window.end == local(2025, 1, 12, 23, 59, 59, 999000)
    assert window.contains(window.end)
    assert not window.contains(window.end + timedelta(milliseconds=1))


def test_custom_window_single_day():
    window = window_for("custom", datetime(2025, 2, 1), date(2025, 1, 10), date(2025, 1, 10))

    assert window.contains(local(2025, 1, 10, 0, 0))
    assert window.contains(local(2025, 1, 10, 23, 59, 59))
    assert not window.contains(local(2025, 1, 11, 0, 0))


def test_custom_window_requires_both_dates():
    with pytest.raises(InvalidReportingWindow):
        window_for("custom", datetime(2025, 2, 1), date(2025, 1, 10), None)
    with pytest.raises(InvalidReportingWindow):
        window_for("custom", datetime(2025, 2, 1))


def test_custom_window_rejects_inverted_dates():
    with pytest.raises(InvalidReportingWindow):
        window_for("custom", datetime(2025, 2, 1), date(2025, 1, 12), date(2025, 1, 10))


@pytest.mark.parametrize("kind,days", [("monthly", 30), ("quarterly", 90), ("yearly", 365)])
def test_rolling_windows_have_no_upper_bound(kind, days):
    now = datetime(2025, 6, 1, 12, 0)
    window = window_for(kind, now)

    assert window.start == now - timedelta(days=days)
    assert window.end is None
    assert window.contains(now + timedelta(days=1))
    assert not window.contains(now - timedelta(days=days, seconds=1))


def test_all_window_is_unbounded_and_admits_missing_timestamps():
    window = window_for("all", datetime(2025, 6, 1))

    assert window.is_unbounded
    assert window.contains(None)
    assert window.contains(datetime(2001, 1, 1))


def test_bounded_windows_exclude_missing_timestamps():
    assert not window_for("weekly", datetime(2025, 6, 1)).contains(None)
    assert not window_for("monthly", datetime(2025, 6, 1)).contains(None)


def test_unknown_period_falls_back_to_monthly():
    assert resolve_period_kind("fortnightly") == "monthly"
    assert resolve_period_kind(None) == "monthly"
    assert window_for("fortnightly", datetime(2025, 6, 1)).kind == "monthly"


def test_describe_echoes_iso_bounds():
    window = ReportingWindow(kind="weekly", start=datetime(2025, 1, 9, 11), end=datetime(2025, 1, 16, 11))

    assert window.describe() == {
        "type": "weekly",
        "startDate": "2025-01-09T11:00:00Z",
        "endDate": "2025-01-16T11:00:00Z",
    }
    assert ReportingWindow(kind="all").describe() == {"type": "all", "startDate": None, "endDate": None}


def test_granularity_per_period():
    now = datetime(2025, 6, 1)
    assert window_for("weekly", now).granularity == "day"
    assert window_for("monthly", now).granularity == "day"
    assert window_for("quarterly", now).granularity == "week"
    assert window_for("yearly", now).granularity == "month"
    assert window_for("all", now).granularity == "month"


def test_bucket_labels_use_reporting_timezone():
    # 22:30 UTC on the 15th is already the 16th in Amman
    late_utc = local(2025, 1, 16, 1, 30)

    assert bucket_label(late_utc, "day") == "2025-01-16"
    assert bucket_label(late_utc, "week") == "2025-W03"
    assert bucket_label(late_utc, "month") == "2025-01"


def test_month_start_in_reporting_timezone():
    now = datetime(2025, 1, 20, 12, 0, tzinfo=AMMAN)

    assert month_start(now, 0) == local(2025, 1, 1, 0, 0)
    assert month_start(now, 1) == local(2024, 12, 1, 0, 0)
    assert month_start(now, 13) == local(2023, 12, 1, 0, 0)


def test_month_start_steps_back_from_month_end():
    now = datetime(2025, 3, 31, 12, 0, tzinfo=AMMAN)

    assert month_start(now, 1) == local(2025, 2, 1, 0, 0)
    assert month_start(now, 12) == local(2024, 3, 1, 0, 0)


@pytest.mark.parametrize("kind", ["bogus", "custom", ""])
def test_fallback_period_must_be_a_resolvable_kind(kind):
    with pytest.raises(ValueError, match="UNKNOWN_PERIOD_FALLBACK"):
        checked_fallback_period(kind)


def test_fallback_period_accepts_named_kinds():
    assert checked_fallback_period("weekly") == "weekly"
    assert checked_fallback_period("all") == "all"
