"""
Freelancer performance aggregation.

Period membership of a work item is decided by its reconstructed submission
time (first logged change to `submitted`). Status buckets and completed
earnings use the item's current status: earnings land in the period the work
was submitted, while "completed" reflects today's state.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...config import LEADERBOARD_SIZE
from ...utils.clock import as_utc
from ..activity.detector import StatusTransitionDetector
from .periods import ReportingWindow, bucket_label, month_start
from .repository import AnalyticsRepository

logger = logging.getLogger(__name__)

SUBMITTED = "submitted"

# Current status -> byStatus key
STATUS_BUCKETS = {
    "submitted": "submitted",
    "reviewed": "reviewed",
    "published": "published",
    "in_progress": "inProgress",
    "needs_fixes": "needsFixes",
    "assigned": "assigned",
}

COMPLETED_STATUSES = {"reviewed", "published"}


def _empty_row(freelancer) -> dict:
    return {
        "freelancerId": freelancer.id,
        "username": freelancer.username,
        "email": freelancer.email,
        "totalItems": 0,
        "byStatus": {key: 0 for key in STATUS_BUCKETS.values()},
        "totalEarnings": 0.0,
        "completedEarnings": 0.0,
    }


class PerformanceAggregator:
    """Per-freelancer and per-bucket metrics over reconstructed submission times"""

    def __init__(self, db: Session, detector: Optional[StatusTransitionDetector] = None):
        self.db = db
        self.repo = AnalyticsRepository()
        self.detector = detector or StatusTransitionDetector(db)

    @property
    def skipped_events(self) -> int:
        return self.detector.skipped_events

    def freelancer_report(self, window: ReportingWindow, freelancer_id: Optional[int] = None) -> list[dict]:
        """
        One row per freelancer. Items with no logged submission only count in
        unbounded (all) windows.
        """
        freelancers = self.repo.get_freelancers(self.db, freelancer_id)
        rows = {f.id: _empty_row(f) for f in freelancers}

        items = self.repo.get_items_assigned_to(self.db, list(rows))
        submitted_at = self.detector.first_timestamps_reaching_status(
            [item.id for item in items], SUBMITTED
        )

        for item in items:
            if not window.contains(submitted_at.get(item.id)):
                continue
            row = rows[item.assigned_to]
            price = float(item.price or 0)
            row["totalItems"] += 1
            row["totalEarnings"] += price
            bucket = STATUS_BUCKETS.get(item.status)
            if bucket:
                row["byStatus"][bucket] += 1
            if item.status in COMPLETED_STATUSES:
                row["completedEarnings"] += price

        report = list(rows.values())
        for row in report:
            row["totalEarnings"] = round(row["totalEarnings"], 2)
            row["completedEarnings"] = round(row["completedEarnings"], 2)
        report.sort(key=lambda r: (-r["totalItems"], r["username"]))
        return report

    def timeseries(self, window: ReportingWindow, limit: int = LEADERBOARD_SIZE) -> dict:
        """
        Creation and submission counts per calendar bucket, the status
        distribution of items created in the window and the top freelancers.
        """
        granularity = window.granularity
        buckets: dict[str, dict] = {}

        def bucket(label: str) -> dict:
            return buckets.setdefault(
                label, {"date": label, "created": 0, "submitted": 0, "published": 0}
            )

        for item in self.repo.get_items_created_within(self.db, window):
            entry = bucket(bucket_label(item.created_at, granularity))
            entry["created"] += 1
            if item.status == "published":
                entry["published"] += 1

        submitted_at = self.detector.first_timestamps_reaching_status(
            self.repo.get_all_item_ids(self.db), SUBMITTED
        )
        for timestamp in submitted_at.values():
            if window.contains(timestamp):
                bucket(bucket_label(timestamp, granularity))["submitted"] += 1

        distribution = [
            {"status": row.status, "count": row.total}
            for row in self.repo.get_status_distribution(self.db, window)
        ]
        leaderboard = [
            {
                "freelancerId": row.id,
                "username": row.username,
                "templatesCount": row.templates_count,
                "publishedCount": int(row.published_count or 0),
            }
            for row in self.repo.get_top_freelancers(self.db, window, limit)
        ]

        return {
            "granularity": granularity,
            "series": [buckets[label] for label in sorted(buckets)],
            "statusDistribution": distribution,
            "topFreelancers": leaderboard,
        }

    def summary(self, now: datetime) -> dict:
        """Dashboard headline numbers, keyed by raw creation time"""
        overall = self.repo.get_overall_counts(self.db)
        this_month_start = month_start(now, 0)
        last_month_start = month_start(now, 1)
        this_month = self.repo.get_created_counts(self.db, this_month_start)
        last_month = self.repo.get_created_counts(self.db, last_month_start, this_month_start)

        this_created = this_month.created or 0
        last_created = last_month.created or 0
        active_since = as_utc(now) - timedelta(days=30)
        growth = round((this_created - last_created) / last_created * 100, 1) if last_created else 0

        return {
            "overall": {
                "totalItems": overall.total or 0,
                "published": int(overall.published or 0),
                "reviewed": int(overall.reviewed or 0),
                "inProgress": int(overall.in_progress or 0),
                "newItems": int(overall.new or 0),
                "totalValue": round(float(overall.total_value or 0), 2),
            },
            "thisMonth": {"created": this_created, "published": int(this_month.published or 0)},
            "lastMonth": {"created": last_created, "published": int(last_month.published or 0)},
            "activeFreelancers": self.repo.count_active_freelancers(self.db, active_since),
            "totalFreelancers": self.repo.count_freelancers(self.db),
            "monthOverMonthGrowth": growth,
        }

    def departments(self) -> list[dict]:
        """Work item counts per department over all time"""
        return [
            {
                "department": row.department,
                "templateCount": row.template_count,
                "published": int(row.published or 0),
                "inProgress": int(row.in_progress or 0),
            }
            for row in self.repo.get_department_stats(self.db)
        ]
