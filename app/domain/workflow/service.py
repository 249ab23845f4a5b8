"""Workflow service - Work item mutations and their status-driven side effects"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ... import config
from ...models import User, WorkItem
from ...utils.clock import utcnow
from ...utils.sanitization import sanitize_string
from ..activity.repository import EventLogStore
from .dispatcher import WorkflowDispatcher, WorkflowTransition
from .hooks import workflow_dispatcher
from .repository import WorkItemRepository
from .schemas import WorkItemCreate, WorkItemUpdate
from .statuses import ALL_STATUSES, FREELANCER_SETTABLE, validate_status_transition

logger = logging.getLogger(__name__)

# Request field -> column
EDITABLE_FIELDS = {
    "useCase": "use_case",
    "flowName": "flow_name",
    "shortDescription": "short_description",
    "description": "description",
    "department": "department",
    "tags": "tags",
    "templateUrl": "template_url",
    "reviewerName": "reviewer_name",
    "price": "price",
    "status": "status",
}

TEXT_FIELDS = {"use_case", "flow_name", "short_description", "description", "department", "tags", "reviewer_name"}

FREELANCER_FORBIDDEN_FIELDS = {"price"}


class WorkflowService:
    """
    Service layer for work item mutations.

    Every mutation updates the work item and appends its event in one
    transaction, then hands the transition to the dispatcher before committing.
    """

    def __init__(self, db: Session, dispatcher: Optional[WorkflowDispatcher] = None):
        self.db = db
        self.repo = WorkItemRepository()
        self.events = EventLogStore()
        self.dispatcher = dispatcher or workflow_dispatcher

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_work_items(self, user: User) -> list[WorkItem]:
        if user.role == "freelancer":
            return self.repo.get_visible_to_freelancer(self.db, user.id)
        return self.repo.get_work_items(self.db)

    def get_work_item(self, work_item_id: int, user: Optional[User] = None) -> WorkItem:
        item = self.repo.get_work_item_by_id(self.db, work_item_id)
        if not item:
            raise HTTPException(status_code=404, detail="Work item not found")
        if (
            user is not None
            and user.role == "freelancer"
            and item.assigned_to is not None
            and item.assigned_to != user.id
        ):
            raise HTTPException(status_code=403, detail="Access denied")
        return item

    def get_timeline(self, work_item_id: int):
        return self.events.timeline(self.db, work_item_id)

    def get_freelancers(self) -> list[User]:
        return self.repo.get_freelancers(self.db)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_work_item(self, data: WorkItemCreate, user: User) -> WorkItem:
        """Commission a new work item (admin)"""
        logger.info(f"📥 Creating work item for admin {user.id}")
        item = self.repo.create_work_item(
            self.db,
            use_case=sanitize_string(data.useCase),
            flow_name=sanitize_string(data.flowName) or "",
            short_description=sanitize_string(data.shortDescription) or "",
            description=sanitize_string(data.description) or "",
            department=sanitize_string(data.department) or "",
            tags=sanitize_string(data.tags) or "",
            reviewer_name=sanitize_string(data.reviewerName) or "",
            price=data.price or 0,
            status="new",
            fix_count=0,
            created_by=user.id,
        )
        self.events.insert(self.db, item.id, user.id, "created", "Work item created")
        self.db.commit()
        self.db.refresh(item)
        return item

    def update_work_item(self, work_item_id: int, data: WorkItemUpdate, user: User) -> WorkItem:
        """Edit fields of a work item; a status change fires the workflow side effects"""
        item = self.get_work_item(work_item_id)
        changes = {
            EDITABLE_FIELDS[key]: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if key in EDITABLE_FIELDS
        }

        if user.role == "freelancer":
            if item.assigned_to != user.id:
                raise HTTPException(status_code=403, detail="Access denied")
            for field in FREELANCER_FORBIDDEN_FIELDS & changes.keys():
                logger.warning(f"⚠️ Freelancer {user.id} may not change {field} of work item {item.id}")
                del changes[field]
            if "status" in changes and changes["status"] not in FREELANCER_SETTABLE:
                logger.warning(
                    f"⚠️ Freelancer {user.id} may not set status {changes['status']} on work item {item.id}"
                )
                del changes["status"]

        if not changes:
            raise HTTPException(status_code=400, detail="No valid fields to update")

        return self._mutate(item, user, changes, action="updated")

    def update_status(self, work_item_id: int, new_status: str, user: User) -> WorkItem:
        """Status mutation entry point; side effects run before this returns"""
        if new_status not in ALL_STATUSES:
            raise HTTPException(status_code=400, detail=f"Unknown status: {new_status}")

        item = self.get_work_item(work_item_id)
        if user.role == "freelancer":
            if item.assigned_to != user.id:
                raise HTTPException(status_code=403, detail="Access denied")
            if new_status not in FREELANCER_SETTABLE:
                raise HTTPException(
                    status_code=403, detail=f"Freelancers cannot set status to {new_status}"
                )

        return self._mutate(item, user, {"status": new_status}, action="updated")

    def assign(self, work_item_id: int, freelancer_id: int, user: User) -> WorkItem:
        """Assign a work item to a freelancer (admin)"""
        item = self.get_work_item(work_item_id)
        freelancer = self.repo.get_freelancer(self.db, freelancer_id)
        if not freelancer:
            raise HTTPException(status_code=400, detail="Invalid freelancer")

        logger.info(f"👤 Assigning work item {item.id} to freelancer {freelancer.id}")
        return self._mutate(
            item, user, {"assigned_to": freelancer.id, "status": "assigned"}, action="assigned"
        )

    def self_assign(self, work_item_id: int, user: User) -> WorkItem:
        """A freelancer claims an unassigned work item"""
        item = self.get_work_item(work_item_id)
        if item.assigned_to is not None:
            raise HTTPException(status_code=400, detail="This work item is already assigned to someone")

        logger.info(f"👤 Freelancer {user.id} claimed work item {item.id}")
        return self._mutate(
            item, user, {"assigned_to": user.id, "status": "assigned"}, action="self-assigned"
        )

    def _mutate(self, item: WorkItem, user: User, changes: dict, action: str) -> WorkItem:
        previous_status = item.status
        previous_assignee_id = item.assigned_to

        new_status = changes.pop("status", None)
        if new_status == previous_status:
            new_status = None
        if new_status is not None:
            self._check_transition(item, previous_status, new_status)

        snapshot = {}
        for column, value in changes.items():
            if column in TEXT_FIELDS:
                value = sanitize_string(value)
            setattr(item, column, value)
            snapshot[column] = value

        if new_status is not None:
            item.status = new_status
            snapshot["status"] = new_status
            if new_status == "needs_fixes":
                item.fix_count = (item.fix_count or 0) + 1

        item.updated_at = utcnow()
        self.events.insert(self.db, item.id, user.id, action, snapshot)

        transition = WorkflowTransition(
            work_item=item,
            previous_status=previous_status,
            new_status=item.status,
            acting_user_id=user.id,
            previous_assignee_id=previous_assignee_id,
        )
        result = self.dispatcher.dispatch(self.db, transition)
        if result.failed:
            logger.warning(
                f"⚠️ Work item {item.id} updated but side effects failed: {', '.join(result.failed)}"
            )

        self.db.commit()
        self.db.refresh(item)
        if new_status is not None:
            logger.info(f"✅ Work item {item.id} transitioned: {previous_status} → {new_status}")
        return item

    def _check_transition(self, item: WorkItem, current_status: str, new_status: str) -> None:
        if validate_status_transition(current_status, new_status):
            return
        if config.STRICT_STATUS_TRANSITIONS:
            raise HTTPException(
                status_code=409,
                detail=f"Cannot move work item from {current_status} to {new_status}",
            )
        logger.warning(
            f"⚠️ Unintended transition on work item {item.id}: {current_status} → {new_status}"
        )
