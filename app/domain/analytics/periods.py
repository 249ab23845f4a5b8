"""
Reporting window calculation.

A window is recomputed from `now` on every call. The business week starts at
a fixed weekday and hour in a named timezone (Thursday 14:00 Asia/Amman by
default), so the weekly bounds move whenever `now` crosses that instant.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta

from ...config import (
    REPORTING_TIMEZONE,
    REPORTING_WEEK_START_HOUR,
    REPORTING_WEEK_START_WEEKDAY,
    UNKNOWN_PERIOD_FALLBACK,
)
from ...utils.clock import as_aware_utc, as_utc

logger = logging.getLogger(__name__)

WEEKLY = "weekly"
PAST_WEEK = "past_week"
MONTHLY = "monthly"
QUARTERLY = "quarterly"
YEARLY = "yearly"
ALL = "all"
CUSTOM = "custom"

PERIOD_KINDS = (WEEKLY, PAST_WEEK, MONTHLY, QUARTERLY, YEARLY, ALL, CUSTOM)

# Rolling periods: "within the last N days" of the moment the query runs
ROLLING_DAYS = {MONTHLY: 30, QUARTERLY: 90, YEARLY: 365}

# Time-series bucket granularity per period
GRANULARITY = {
    WEEKLY: "day",
    PAST_WEEK: "day",
    MONTHLY: "day",
    CUSTOM: "day",
    QUARTERLY: "week",
    YEARLY: "month",
    ALL: "month",
}

CUSTOM_END_OF_DAY = time(23, 59, 59, 999000)


class InvalidReportingWindow(ValueError):
    """A custom window with missing or inverted dates"""


def checked_fallback_period(kind: str) -> str:
    """
    Validate the configured fallback for unknown periods.

    custom needs explicit dates, so it cannot serve as a fallback.
    """
    if kind not in PERIOD_KINDS or kind == CUSTOM:
        allowed = ", ".join(k for k in PERIOD_KINDS if k != CUSTOM)
        raise ValueError(f"UNKNOWN_PERIOD_FALLBACK must be one of: {allowed} (got {kind!r})")
    return kind


FALLBACK_PERIOD = checked_fallback_period(UNKNOWN_PERIOD_FALLBACK)


@dataclass(frozen=True)
class ReportingWindow:
    """
    A resolved reporting period as naive UTC bounds.

    start None: unbounded below. end None: unbounded above.
    Windows are half-open [start, end) except custom windows, whose end is an
    inclusive 23:59:59.999 instant.
    """

    kind: str
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    end_inclusive: bool = False

    @property
    def is_unbounded(self) -> bool:
        return self.start is None and self.end is None

    @property
    def granularity(self) -> str:
        return GRANULARITY[self.kind]

    def contains(self, timestamp: Optional[datetime]) -> bool:
        """Period membership of a (naive UTC) timestamp; None only belongs to unbounded windows"""
        if timestamp is None:
            return self.is_unbounded
        if self.start is not None and timestamp < self.start:
            return False
        if self.end is not None:
            if self.end_inclusive:
                return timestamp <= self.end
            return timestamp < self.end
        return True

    def describe(self) -> dict:
        """Echo of the window actually used, for API responses"""
        return {
            "type": self.kind,
            "startDate": self.start.isoformat() + "Z" if self.start else None,
            "endDate": self.end.isoformat() + "Z" if self.end else None,
        }


def resolve_period_kind(kind: Optional[str]) -> str:
    """Normalize a requested period; unknown values fall back to the configured default"""
    if kind in PERIOD_KINDS:
        return kind
    logger.warning(f"⚠️ Unknown reporting period {kind!r}, using {FALLBACK_PERIOD}")
    return FALLBACK_PERIOD


def business_week_start(
    now: datetime,
    tz_name: str = REPORTING_TIMEZONE,
    weekday: int = REPORTING_WEEK_START_WEEKDAY,
    hour: int = REPORTING_WEEK_START_HOUR,
) -> datetime:
    """
    Most recent week-start instant at or before `now`, as naive UTC.

    Before the cutoff hour on the start weekday itself, the week still belongs
    to the previous start weekday.
    """
    tz = ZoneInfo(tz_name)
    local_now = as_aware_utc(now).astimezone(tz)

    days_since = (local_now.weekday() - weekday + 7) % 7
    if days_since == 0 and local_now.time() < time(hour):
        days_since = 7

    start_day = local_now.date() - timedelta(days=days_since)
    return _local_instant(start_day, time(hour), tz)


def window_for(
    kind: Optional[str],
    now: datetime,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    tz_name: str = REPORTING_TIMEZONE,
    weekday: int = REPORTING_WEEK_START_WEEKDAY,
    hour: int = REPORTING_WEEK_START_HOUR,
) -> ReportingWindow:
    """
    Resolve a named reporting period against `now`.

    Args:
        kind: weekly, past_week, monthly, quarterly, yearly, all or custom
        now: the moment the report runs (aware, or naive UTC)
        start_date, end_date: calendar dates in the reporting timezone, custom only

    Raises:
        InvalidReportingWindow: custom without both dates, or end before start
    """
    kind = resolve_period_kind(kind)
    tz = ZoneInfo(tz_name)

    if kind == CUSTOM:
        if start_date is None or end_date is None:
            raise InvalidReportingWindow("custom period requires startDate and endDate")
        if end_date < start_date:
            raise InvalidReportingWindow("endDate must not be before startDate")
        return ReportingWindow(
            kind=CUSTOM,
            start=_local_instant(start_date, time.min, tz),
            end=_local_instant(end_date, CUSTOM_END_OF_DAY, tz),
            end_inclusive=True,
        )

    if kind in (WEEKLY, PAST_WEEK):
        start = business_week_start(now, tz_name, weekday, hour)
        start_local_day = as_aware_utc(start).astimezone(tz).date()
        if kind == PAST_WEEK:
            start_local_day -= timedelta(days=7)
        # Rebuild both bounds from local dates so a DST shift cannot skew them
        return ReportingWindow(
            kind=kind,
            start=_local_instant(start_local_day, time(hour), tz),
            end=_local_instant(start_local_day + timedelta(days=7), time(hour), tz),
        )

    if kind in ROLLING_DAYS:
        return ReportingWindow(kind=kind, start=as_utc(now) - timedelta(days=ROLLING_DAYS[kind]))

    return ReportingWindow(kind=ALL)


def bucket_label(timestamp: datetime, granularity: str, tz_name: str = REPORTING_TIMEZONE) -> str:
    """Calendar bucket of a naive UTC timestamp, in the reporting timezone"""
    local = as_aware_utc(timestamp).astimezone(ZoneInfo(tz_name))
    if granularity == "week":
        iso_year, iso_week, _ = local.isocalendar()
        return f"{iso_year}-W{iso_week:02d}"
    if granularity == "month":
        return local.strftime("%Y-%m")
    return local.strftime("%Y-%m-%d")


def month_start(now: datetime, months_back: int = 0, tz_name: str = REPORTING_TIMEZONE) -> datetime:
    """First instant of the local calendar month `months_back` before now's month, as naive UTC"""
    tz = ZoneInfo(tz_name)
    local_now = as_aware_utc(now).astimezone(tz)
    first_of_month = local_now.date().replace(day=1) - relativedelta(months=months_back)
    return _local_instant(first_of_month, time.min, tz)


def _local_instant(day: date, at: time, tz: ZoneInfo) -> datetime:
    return as_utc(datetime.combine(day, at, tzinfo=tz))
