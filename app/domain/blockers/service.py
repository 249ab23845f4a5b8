"""Blocker service - Reporting and resolving blockers on work items"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Blocker, User, WorkItem
from ...services.notification_service import NotificationSink
from ...utils.clock import utcnow
from ...utils.sanitization import sanitize_string
from ..activity.repository import EventLogStore
from ..workflow.repository import WorkItemRepository
from .repository import BlockerRepository
from .schemas import BlockerCreate

logger = logging.getLogger(__name__)


class BlockerService:
    """Service layer for blockers"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BlockerRepository()
        self.work_items = WorkItemRepository()
        self.events = EventLogStore()

    def _get_work_item(self, work_item_id: int, user: User) -> WorkItem:
        item = self.work_items.get_work_item_by_id(self.db, work_item_id)
        if not item:
            raise HTTPException(status_code=404, detail="Work item not found")
        if user.role == "freelancer" and item.assigned_to != user.id:
            raise HTTPException(status_code=403, detail="Access denied")
        return item

    def _notify_assignee(self, item: WorkItem, user: User, title: str, message: str) -> None:
        if not item.assigned_to or item.assigned_to == user.id:
            return
        NotificationSink(self.db).enqueue(
            user_id=item.assigned_to,
            notification_type="blocker",
            title=title,
            message=message,
            work_item_id=item.id,
            from_user_id=user.id,
        )

    def get_blockers(self, work_item_id: int, user: User, include_resolved: bool = False) -> list[Blocker]:
        item = self._get_work_item(work_item_id, user)
        return self.repo.get_blockers(self.db, item.id, include_resolved)

    def report_blocker(self, work_item_id: int, data: BlockerCreate, user: User) -> Blocker:
        item = self._get_work_item(work_item_id, user)
        blocker = self.repo.create_blocker(
            self.db,
            work_item_id=item.id,
            reported_by=user.id,
            blocker_type=sanitize_string(data.blockerType),
            title=sanitize_string(data.title),
            description=sanitize_string(data.description),
            priority=data.priority,
            status="open",
        )
        self.events.insert(
            self.db,
            item.id,
            user.id,
            "blocker_added",
            {"blockerId": blocker.id, "title": blocker.title, "priority": blocker.priority},
        )
        self._notify_assignee(
            item, user, "Blocker reported", f'A blocker was reported on "{item.title}": {blocker.title}'
        )

        self.db.commit()
        self.db.refresh(blocker)
        logger.info(f"⚠️ Blocker {blocker.id} reported on work item {item.id} by user {user.id}")
        return blocker

    def resolve_blocker(self, work_item_id: int, blocker_id: int, user: User) -> Blocker:
        item = self._get_work_item(work_item_id, user)
        blocker = self.repo.get_blocker(self.db, item.id, blocker_id)
        if not blocker:
            raise HTTPException(status_code=404, detail="Blocker not found")
        if blocker.status == "resolved":
            raise HTTPException(status_code=400, detail="Blocker is already resolved")

        blocker.status = "resolved"
        blocker.resolved_at = utcnow()
        blocker.resolved_by = user.id
        self.events.insert(
            self.db, item.id, user.id, "blocker_resolved", {"blockerId": blocker.id, "title": blocker.title}
        )
        self.db.flush()
        self._notify_assignee(
            item, user, "Blocker resolved", f'A blocker on "{item.title}" was resolved: {blocker.title}'
        )

        self.db.commit()
        self.db.refresh(blocker)
        logger.info(f"✅ Blocker {blocker.id} on work item {item.id} resolved by user {user.id}")
        return blocker
