"""Event log repository - Append-only storage for work item mutations"""

import json
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ...models import ActivityLog
from ...utils.clock import utcnow


class EventLogStore:
    """Append-only access to the activity log. Events are never updated or deleted."""

    @staticmethod
    def insert(
        db: Session,
        work_item_id: int,
        actor_id: Optional[int],
        action: str,
        details=None,
        timestamp: Optional[datetime] = None,
    ) -> ActivityLog:
        """
        Append an event in the caller's transaction (no commit).

        details may be a dict snapshot of the changed fields or a plain string.
        When the snapshot carries a status, it is also written to the typed
        status column so history queries never have to parse the payload.
        """
        status = None
        if isinstance(details, dict):
            status = details.get("status")
            details = json.dumps(details, default=str)

        event = ActivityLog(
            work_item_id=work_item_id,
            user_id=actor_id,
            action=action,
            details=details,
            status=status,
            created_at=timestamp or utcnow(),
        )
        db.add(event)
        return event

    @staticmethod
    def select_by_work_item(db: Session, work_item_id: int) -> list[ActivityLog]:
        """All events of one work item, in no particular order"""
        return db.query(ActivityLog).filter(ActivityLog.work_item_id == work_item_id).all()

    @staticmethod
    def select_by_work_items(
        db: Session, work_item_ids: Iterable[int], action: Optional[str] = None
    ) -> list[ActivityLog]:
        """Events of many work items, optionally restricted to one action"""
        ids = list(work_item_ids)
        if not ids:
            return []
        query = db.query(ActivityLog).filter(ActivityLog.work_item_id.in_(ids))
        if action:
            query = query.filter(ActivityLog.action == action)
        return query.all()

    @staticmethod
    def timeline(db: Session, work_item_id: int) -> list[ActivityLog]:
        """Events of one work item, newest first, for display"""
        return (
            db.query(ActivityLog)
            .filter(ActivityLog.work_item_id == work_item_id)
            .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
            .all()
        )
