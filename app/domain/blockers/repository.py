"""Blocker repository - Database operations for work item blockers"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Blocker


class BlockerRepository:
    """Repository for blocker database operations"""

    @staticmethod
    def get_blockers(db: Session, work_item_id: int, include_resolved: bool = False) -> list[Blocker]:
        query = db.query(Blocker).filter(Blocker.work_item_id == work_item_id)
        if not include_resolved:
            query = query.filter(Blocker.status == "open")
        return query.order_by(Blocker.created_at.desc(), Blocker.id.desc()).all()

    @staticmethod
    def get_blocker(db: Session, work_item_id: int, blocker_id: int) -> Optional[Blocker]:
        return (
            db.query(Blocker)
            .filter(Blocker.id == blocker_id, Blocker.work_item_id == work_item_id)
            .first()
        )

    @staticmethod
    def create_blocker(db: Session, **kwargs) -> Blocker:
        blocker = Blocker(**kwargs)
        db.add(blocker)
        db.flush()
        return blocker
