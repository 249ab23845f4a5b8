"""
Notification Sink
Persists in-app notifications and pushes the real-time payload to the recipient
once the surrounding transaction commits. Notification failures never
propagate to the caller.
"""

import logging
from typing import Callable, Optional

from sqlalchemy import event, func
from sqlalchemy.orm import Session

from ..models_notification import Notification

logger = logging.getLogger(__name__)

NEW_NOTIFICATION_EVENT = "notification:new"
UNREAD_COUNT_EVENT = "notification:count"

# Session.info key holding (user_id, event_name, payload) waiting for commit
PENDING_KEY = "pending_realtime"

# Signature: emitter(user_id, event_name, payload)
RealtimeEmitter = Callable[[int, str, dict], None]


def _log_emitter(user_id: int, event_name: str, payload: dict) -> None:
    logger.debug(f"📡 {event_name} -> user {user_id}: {payload}")


_emitter: RealtimeEmitter = _log_emitter


def set_realtime_emitter(emitter: Optional[RealtimeEmitter]) -> None:
    """Install the socket transport; None restores the logging emitter"""
    global _emitter
    _emitter = emitter or _log_emitter


def unread_count(db: Session, user_id: int) -> int:
    return (
        db.query(func.count(Notification.id))
        .filter(Notification.user_id == user_id, Notification.read_at.is_(None))
        .scalar()
        or 0
    )


@event.listens_for(Session, "after_commit")
def _flush_realtime(session: Session) -> None:
    if session.in_nested_transaction():
        return
    for user_id, event_name, payload in session.info.pop(PENDING_KEY, []):
        try:
            _emitter(user_id, event_name, payload)
        except Exception as e:
            logger.warning(f"⚠️ Real-time delivery failed for user {user_id}: {e}")


@event.listens_for(Session, "after_transaction_end")
def _drop_realtime(session: Session, transaction) -> None:
    # Whatever is left when the outer transaction ends was never committed
    if transaction.parent is not None:
        return
    dropped = session.info.pop(PENDING_KEY, [])
    if dropped:
        logger.info(f"ℹ️ Dropped {len(dropped)} real-time event(s) without commit")


class NotificationSink:
    """Enqueues notifications in the caller's transaction"""

    def __init__(self, db: Session):
        self.db = db

    def enqueue(
        self,
        user_id: int,
        notification_type: str,
        title: str,
        message: str,
        work_item_id: Optional[int] = None,
        from_user_id: Optional[int] = None,
    ) -> Optional[Notification]:
        """
        Create a notification; its real-time payload is emitted after commit.

        Returns the notification, or None when it could not be stored.
        """
        try:
            with self.db.begin_nested():
                notification = Notification(
                    user_id=user_id,
                    type=notification_type,
                    title=title,
                    message=message,
                    work_item_id=work_item_id,
                    from_user_id=from_user_id,
                )
                self.db.add(notification)
            pending = self.db.info.setdefault(PENDING_KEY, [])
            pending.append((user_id, NEW_NOTIFICATION_EVENT, notification.to_payload()))
            pending.append((user_id, UNREAD_COUNT_EVENT, {"count": unread_count(self.db, user_id)}))
            logger.info(f"🔔 {notification_type} notification queued for user {user_id}")
        except Exception as e:
            logger.error(f"❌ Failed to create {notification_type} notification for user {user_id}: {e}")
            return None

        return notification
