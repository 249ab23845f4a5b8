"""Analytics service - Dashboard reports over the work item event log"""

import logging
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import LEADERBOARD_SIZE
from .aggregator import PerformanceAggregator
from .periods import InvalidReportingWindow, ReportingWindow, window_for

logger = logging.getLogger(__name__)


class AnalyticsService:
    """Service layer for reporting; every call resolves its window against `now`"""

    def __init__(self, db: Session):
        self.db = db
        self.aggregator = PerformanceAggregator(db)

    def _window(
        self,
        period: Optional[str],
        now: datetime,
        start_date: Optional[date],
        end_date: Optional[date],
    ) -> ReportingWindow:
        try:
            return window_for(period, now, start_date, end_date)
        except InvalidReportingWindow as e:
            raise HTTPException(status_code=400, detail=str(e))

    def report(
        self,
        period: Optional[str],
        freelancer_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        """Per-freelancer performance for one reporting period"""
        now = now or datetime.now(timezone.utc)
        window = self._window(period, now, start_date, end_date)
        logger.info(f"📊 Building {window.kind} report (freelancer={freelancer_id})")

        reports = self.aggregator.freelancer_report(window, freelancer_id)
        skipped = self.aggregator.skipped_events
        if skipped:
            logger.warning(f"⚠️ Skipped {skipped} malformed events while building {window.kind} report")

        return {
            "period": window.describe(),
            "reports": reports,
            "skippedEvents": skipped,
            "generatedAt": now.isoformat(),
        }

    def timeseries(
        self,
        period: Optional[str],
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = LEADERBOARD_SIZE,
        now: Optional[datetime] = None,
    ) -> dict:
        """Bucketed creation/submission counts plus distribution and leaderboard"""
        now = now or datetime.now(timezone.utc)
        window = self._window(period, now, start_date, end_date)
        logger.info(f"📊 Building {window.kind} time series")

        result = self.aggregator.timeseries(window, limit)
        result["period"] = window.describe()
        result["skippedEvents"] = self.aggregator.skipped_events
        return result

    def summary(self, now: Optional[datetime] = None) -> dict:
        return self.aggregator.summary(now or datetime.now(timezone.utc))

    def departments(self, now: Optional[datetime] = None) -> dict:
        now = now or datetime.now(timezone.utc)
        return {"departments": self.aggregator.departments(), "generatedAt": now.isoformat()}
