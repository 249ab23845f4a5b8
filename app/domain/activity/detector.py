"""
Status transition detection over the activity log.

The status column on a work item only reflects its current state and its
updated_at is touched by unrelated edits. "When did this item first reach
status X" is therefore answered from the append-only log alone, with no
fallback to updated_at.
"""

import json
import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import ActivityLog
from .repository import EventLogStore

logger = logging.getLogger(__name__)

STATUS_CHANGE_ACTION = "updated"


class MalformedEventDetails(ValueError):
    """Event details that cannot be read as a field snapshot"""


def event_status(event: ActivityLog) -> Optional[str]:
    """
    Status recorded by an event, or None when the event did not change status.

    The typed column is authoritative. Older rows only carry the JSON snapshot,
    written by several serializers over time (with and without a space after
    the colon), so it is parsed rather than pattern-matched.

    Raises:
        MalformedEventDetails: details are not a JSON object or carry a
            non-string status
    """
    if event.status:
        return event.status
    if not event.details:
        return None

    try:
        snapshot = json.loads(event.details)
    except (TypeError, ValueError) as e:
        raise MalformedEventDetails(f"event {event.id}: unparseable details") from e

    if not isinstance(snapshot, dict):
        raise MalformedEventDetails(f"event {event.id}: details are not an object")

    status = snapshot.get("status")
    if status is None:
        return None
    if not isinstance(status, str):
        raise MalformedEventDetails(f"event {event.id}: status is not a string")
    return status


def earliest_transition(
    events: Iterable[ActivityLog], target_status: str
) -> tuple[Optional[datetime], int]:
    """
    Earliest timestamp at which the events record a change to target_status.

    Returns (timestamp or None, number of events skipped as malformed).
    """
    earliest = None
    skipped = 0
    for event in events:
        if event.action != STATUS_CHANGE_ACTION:
            continue
        try:
            status = event_status(event)
        except MalformedEventDetails as e:
            skipped += 1
            logger.debug(f"⚠️ Skipping event during status reconstruction: {e}")
            continue
        if status != target_status:
            continue
        if earliest is None or event.created_at < earliest:
            earliest = event.created_at
    return earliest, skipped


class StatusTransitionDetector:
    """Reconstructs historical status transitions from the event log"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = EventLogStore()
        self.skipped_events = 0

    def first_timestamp_reaching_status(
        self, work_item_id: int, target_status: str
    ) -> Optional[datetime]:
        """First logged instant work_item_id changed to target_status, or None"""
        events = self.repo.select_by_work_item(self.db, work_item_id)
        timestamp, skipped = earliest_transition(events, target_status)
        self.skipped_events += skipped
        return timestamp

    def first_timestamps_reaching_status(
        self, work_item_ids: Iterable[int], target_status: str
    ) -> dict[int, datetime]:
        """
        Bulk variant for reporting: one query for all items.
        Items that never reached target_status are absent from the result.
        """
        by_item: dict[int, list[ActivityLog]] = {}
        for event in self.repo.select_by_work_items(
            self.db, work_item_ids, action=STATUS_CHANGE_ACTION
        ):
            by_item.setdefault(event.work_item_id, []).append(event)

        result = {}
        for work_item_id, events in by_item.items():
            timestamp, skipped = earliest_transition(events, target_status)
            self.skipped_events += skipped
            if timestamp is not None:
                result[work_item_id] = timestamp

        if self.skipped_events:
            logger.info(f"ℹ️ Status reconstruction skipped {self.skipped_events} malformed event(s)")
        return result
