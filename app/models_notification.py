"""
In-app notification records
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from .database import Base
from .utils.clock import utcnow


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(50), default="info", nullable=False)  # status_change, assignment, blocker
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    work_item_id = Column(Integer, ForeignKey("work_items.id", ondelete="SET NULL"), nullable=True)
    from_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    read_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    def to_payload(self) -> dict:
        """Real-time payload pushed to the recipient's socket room"""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "work_item_id": self.work_item_id,
            "from_user_id": self.from_user_id,
            "read_at": self.read_at.isoformat() if self.read_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
