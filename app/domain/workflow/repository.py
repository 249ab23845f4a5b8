"""Work item repository - Database operations for work items"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import User, WorkItem


class WorkItemRepository:
    """Repository for work item database operations"""

    @staticmethod
    def get_work_items(db: Session) -> list[WorkItem]:
        """All work items, newest first"""
        return db.query(WorkItem).order_by(WorkItem.created_at.desc(), WorkItem.id.desc()).all()

    @staticmethod
    def get_visible_to_freelancer(db: Session, freelancer_id: int) -> list[WorkItem]:
        """Work items assigned to the freelancer or still unclaimed"""
        return (
            db.query(WorkItem)
            .filter(or_(WorkItem.assigned_to == freelancer_id, WorkItem.assigned_to.is_(None)))
            .order_by(WorkItem.created_at.desc(), WorkItem.id.desc())
            .all()
        )

    @staticmethod
    def get_work_item_by_id(db: Session, work_item_id: int) -> Optional[WorkItem]:
        return db.query(WorkItem).filter(WorkItem.id == work_item_id).first()

    @staticmethod
    def get_freelancer(db: Session, freelancer_id: int) -> Optional[User]:
        return (
            db.query(User)
            .filter(User.id == freelancer_id, User.role == "freelancer", User.is_active.is_(True))
            .first()
        )

    @staticmethod
    def get_freelancers(db: Session) -> list[User]:
        return db.query(User).filter(User.role == "freelancer").order_by(User.username).all()

    @staticmethod
    def create_work_item(db: Session, **work_item_data) -> WorkItem:
        """Add a work item in the caller's transaction (no commit)"""
        work_item = WorkItem(**work_item_data)
        db.add(work_item)
        db.flush()
        return work_item
