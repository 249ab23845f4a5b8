from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .database import Base
from .utils.clock import utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), nullable=True)
    handle = Column(String(100), unique=True, nullable=True)  # @mention handle
    role = Column(String(50), nullable=False, default="freelancer")  # admin, freelancer
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    assigned_items = relationship(
        "WorkItem", back_populates="assignee", foreign_keys="WorkItem.assigned_to"
    )


class WorkItem(Base):
    """A commissioned automation template tracked from idea to publication"""

    __tablename__ = "work_items"

    id = Column(Integer, primary_key=True, index=True)
    use_case = Column(Text, nullable=False)
    flow_name = Column(Text, nullable=True)
    short_description = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    department = Column(String(100), nullable=True)
    tags = Column(Text, nullable=True)
    template_url = Column(Text, nullable=True)
    reviewer_name = Column(String(255), nullable=True)
    price = Column(Float, default=0, nullable=False)  # Owed to the assignee on completion

    # Current state only - history lives in activity_log
    status = Column(String(50), default="new", nullable=False, index=True)
    fix_count = Column(Integer, default=0, nullable=False)  # Times returned to needs_fixes

    assigned_to = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=utcnow, index=True)
    # Touched by every edit, including ones that do not change status
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    assignee = relationship("User", back_populates="assigned_items", foreign_keys=[assigned_to])
    creator = relationship("User", foreign_keys=[created_by])
    activities = relationship("ActivityLog", back_populates="work_item")
    blockers = relationship("Blocker", back_populates="work_item", cascade="all, delete-orphan")

    @property
    def title(self) -> str:
        return self.flow_name or self.use_case


class ActivityLog(Base):
    """Append-only record of every mutation made to a work item"""

    __tablename__ = "activity_log"

    id = Column(Integer, primary_key=True, index=True)
    work_item_id = Column(
        Integer, ForeignKey("work_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    action = Column(String(255), nullable=False)  # created, updated, assigned, blocker_added, ...
    details = Column(Text, nullable=True)  # Serialized snapshot of the changed fields
    status = Column(String(50), nullable=True, index=True)  # New status when the mutation changed it
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    # NO updated_at -- events are immutable

    work_item = relationship("WorkItem", back_populates="activities")
    user = relationship("User")


class Blocker(Base):
    """Something preventing progress on a work item"""

    __tablename__ = "blockers"

    id = Column(Integer, primary_key=True, index=True)
    work_item_id = Column(
        Integer, ForeignKey("work_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reported_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    blocker_type = Column(String(100), nullable=False)  # access, requirements, technical, ...
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    priority = Column(String(50), default="medium")  # low, medium, high, critical
    status = Column(String(50), default="open", nullable=False)  # open, resolved
    created_at = Column(DateTime, default=utcnow)
    resolved_at = Column(DateTime, nullable=True)
    resolved_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    work_item = relationship("WorkItem", back_populates="blockers")
    reporter = relationship("User", foreign_keys=[reported_by])
