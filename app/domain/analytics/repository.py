"""Analytics repository - Read-only queries behind the reports"""

from datetime import datetime
from typing import Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Query, Session

from ...models import User, WorkItem
from .periods import ReportingWindow

IN_FLIGHT_STATUSES = ("assigned", "in_progress", "submitted", "needs_fixes")
# Department view also counts reviewed work as not yet shipped
DEPARTMENT_IN_FLIGHT_STATUSES = IN_FLIGHT_STATUSES + ("reviewed",)


def filter_created_within(query: Query, window: ReportingWindow) -> Query:
    """Raw creation-time membership, evaluated inside the query"""
    if window.start is not None:
        query = query.filter(WorkItem.created_at >= window.start)
    if window.end is not None:
        if window.end_inclusive:
            query = query.filter(WorkItem.created_at <= window.end)
        else:
            query = query.filter(WorkItem.created_at < window.end)
    return query


class AnalyticsRepository:
    """Repository for reporting queries"""

    @staticmethod
    def get_freelancers(db: Session, freelancer_id: Optional[int] = None) -> list[User]:
        query = db.query(User).filter(User.role == "freelancer")
        if freelancer_id is not None:
            query = query.filter(User.id == freelancer_id)
        return query.order_by(User.username).all()

    @staticmethod
    def get_items_assigned_to(db: Session, freelancer_ids: list[int]) -> list[WorkItem]:
        if not freelancer_ids:
            return []
        return db.query(WorkItem).filter(WorkItem.assigned_to.in_(freelancer_ids)).all()

    @staticmethod
    def get_all_item_ids(db: Session) -> list[int]:
        return [row.id for row in db.query(WorkItem.id).all()]

    @staticmethod
    def get_items_created_within(db: Session, window: ReportingWindow) -> list[WorkItem]:
        return filter_created_within(db.query(WorkItem), window).all()

    @staticmethod
    def get_status_distribution(db: Session, window: ReportingWindow) -> list:
        query = db.query(WorkItem.status, func.count(WorkItem.id).label("total"))
        return (
            filter_created_within(query, window)
            .group_by(WorkItem.status)
            .order_by(func.count(WorkItem.id).desc(), WorkItem.status)
            .all()
        )

    @staticmethod
    def get_top_freelancers(db: Session, window: ReportingWindow, limit: int) -> list:
        query = db.query(
            User.id,
            User.username,
            func.count(WorkItem.id).label("templates_count"),
            func.sum(case((WorkItem.status == "published", 1), else_=0)).label("published_count"),
        ).join(WorkItem, WorkItem.assigned_to == User.id)
        return (
            filter_created_within(query.filter(User.role == "freelancer"), window)
            .group_by(User.id, User.username)
            .order_by(func.count(WorkItem.id).desc(), User.username)
            .limit(limit)
            .all()
        )

    @staticmethod
    def get_overall_counts(db: Session):
        return db.query(
            func.count(WorkItem.id).label("total"),
            func.sum(case((WorkItem.status == "published", 1), else_=0)).label("published"),
            func.sum(case((WorkItem.status == "reviewed", 1), else_=0)).label("reviewed"),
            func.sum(case((WorkItem.status.in_(IN_FLIGHT_STATUSES), 1), else_=0)).label("in_progress"),
            func.sum(case((WorkItem.status == "new", 1), else_=0)).label("new"),
            func.coalesce(func.sum(WorkItem.price), 0).label("total_value"),
        ).one()

    @staticmethod
    def get_created_counts(db: Session, start: datetime, end: Optional[datetime] = None):
        query = db.query(
            func.count(WorkItem.id).label("created"),
            func.sum(case((WorkItem.status == "published", 1), else_=0)).label("published"),
        ).filter(WorkItem.created_at >= start)
        if end is not None:
            query = query.filter(WorkItem.created_at < end)
        return query.one()

    @staticmethod
    def count_active_freelancers(db: Session, since: datetime) -> int:
        return (
            db.query(func.count(func.distinct(WorkItem.assigned_to)))
            .filter(WorkItem.assigned_to.isnot(None), WorkItem.created_at >= since)
            .scalar()
            or 0
        )

    @staticmethod
    def count_freelancers(db: Session) -> int:
        return db.query(func.count(User.id)).filter(User.role == "freelancer").scalar() or 0

    @staticmethod
    def get_department_stats(db: Session) -> list:
        """Template, published and in-flight counts per department"""
        return (
            db.query(
                WorkItem.department,
                func.count(WorkItem.id).label("template_count"),
                func.sum(case((WorkItem.status == "published", 1), else_=0)).label("published"),
                func.sum(case((WorkItem.status.in_(DEPARTMENT_IN_FLIGHT_STATUSES), 1), else_=0)).label(
                    "in_progress"
                ),
            )
            .filter(WorkItem.department.isnot(None), WorkItem.department != "")
            .group_by(WorkItem.department)
            .order_by(func.count(WorkItem.id).desc(), WorkItem.department)
            .all()
        )
