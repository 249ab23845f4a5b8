import json
from datetime import datetime

import pytest

from app.domain.activity.detector import (
    MalformedEventDetails,
    StatusTransitionDetector,
    event_status,
)
from app.domain.activity.repository import EventLogStore
from app.models import ActivityLog
from conftest import make_item


def raw_event(db, item, details, created_at, action="updated", status=None):
    """An event as older serializers wrote it, with no typed status column"""
    event = ActivityLog(
        work_item_id=item.id, action=action, details=details, status=status, created_at=created_at
    )
    db.add(event)
    db.commit()
    return event


def test_typed_status_column_wins(db):
    item = make_item(db)
    event = raw_event(db, item, '{"status": "submitted"}', datetime(2025, 1, 1), status="reviewed")

    assert event_status(event) == "reviewed"


def test_both_json_spellings_are_detected(db):
    compact = make_item(db, "Compact")
    spaced = make_item(db, "Spaced")
    raw_event(db, compact, '{"status":"submitted"}', datetime(2025, 1, 5, 9))
    raw_event(db, spaced, '{"flow_name": "x", "status": "submitted"}', datetime(2025, 1, 6, 9))

    detector = StatusTransitionDetector(db)

    assert detector.first_timestamp_reaching_status(compact.id, "submitted") == datetime(2025, 1, 5, 9)
    assert detector.first_timestamp_reaching_status(spaced.id, "submitted") == datetime(2025, 1, 6, 9)


def test_malformed_events_are_skipped_and_counted(db):
    item = make_item(db)
    raw_event(db, item, "not json {", datetime(2025, 1, 1))
    raw_event(db, item, '["status", "submitted"]', datetime(2025, 1, 2))
    raw_event(db, item, '{"status": 7}', datetime(2025, 1, 3))
    raw_event(db, item, '{"status": "submitted"}', datetime(2025, 1, 4))

    detector = StatusTransitionDetector(db)

    assert detector.first_timestamp_reaching_status(item.id, "submitted") == datetime(2025, 1, 4)
    assert detector.skipped_events == 3


def test_event_status_raises_for_unparseable_details(db):
    item = make_item(db)
    event = raw_event(db, item, "{broken", datetime(2025, 1, 1))

    with pytest.raises(MalformedEventDetails):
        event_status(event)


def test_empty_details_and_snapshots_without_status_carry_no_status(db):
    item = make_item(db)
    empty = raw_event(db, item, None, datetime(2025, 1, 1))
    no_status = raw_event(db, item, '{"price": 10}', datetime(2025, 1, 2))

    assert event_status(empty) is None
    assert event_status(no_status) is None


def test_earliest_transition_is_returned(db):
    item = make_item(db)
    raw_event(db, item, '{"status": "submitted"}', datetime(2025, 1, 10))
    raw_event(db, item, '{"status": "needs_fixes"}', datetime(2025, 1, 11))
    raw_event(db, item, '{"status": "submitted"}', datetime(2025, 1, 12))

    detector = StatusTransitionDetector(db)

    assert detector.first_timestamp_reaching_status(item.id, "submitted") == datetime(2025, 1, 10)


def test_only_status_update_events_count(db):
    item = make_item(db)
    raw_event(db, item, '{"status": "submitted"}', datetime(2025, 1, 1), action="blocker_added")

    assert StatusTransitionDetector(db).first_timestamp_reaching_status(item.id, "submitted") is None


def test_no_fallback_to_current_status_or_updated_at(db):
    item = make_item(db, status="submitted", updated_at=datetime(2025, 1, 15))

    detector = StatusTransitionDetector(db)

    assert detector.first_timestamp_reaching_status(item.id, "submitted") is None
    assert detector.first_timestamps_reaching_status([item.id], "submitted") == {}


def test_detection_is_stable_under_later_unrelated_events(db):
    item = make_item(db)
    EventLogStore.insert(db, item.id, None, "updated", {"status": "submitted"}, datetime(2025, 1, 10))
    db.commit()

    detector = StatusTransitionDetector(db)
    first = detector.first_timestamp_reaching_status(item.id, "submitted")
    assert detector.first_timestamp_reaching_status(item.id, "submitted") == first

    EventLogStore.insert(db, item.id, None, "updated", {"description": "typo"}, datetime(2025, 2, 1))
    EventLogStore.insert(db, item.id, None, "updated", {"status": "submitted"}, datetime(2025, 2, 2))
    db.commit()

    assert detector.first_timestamp_reaching_status(item.id, "submitted") == datetime(2025, 1, 10)


def test_bulk_detection_matches_single_lookups(db):
    first = make_item(db, "First")
    second = make_item(db, "Second")
    never = make_item(db, "Never")
    EventLogStore.insert(db, first.id, None, "updated", {"status": "submitted"}, datetime(2025, 1, 3))
    EventLogStore.insert(db, second.id, None, "updated", {"status": "submitted"}, datetime(2025, 1, 4))
    EventLogStore.insert(db, second.id, None, "updated", {"status": "submitted"}, datetime(2025, 1, 2))
    db.commit()

    detector = StatusTransitionDetector(db)
    bulk = detector.first_timestamps_reaching_status([first.id, second.id, never.id], "submitted")

    assert bulk == {first.id: datetime(2025, 1, 3), second.id: datetime(2025, 1, 2)}
    for item_id, timestamp in bulk.items():
        assert detector.first_timestamp_reaching_status(item_id, "submitted") == timestamp


def test_insert_writes_typed_status_and_json_snapshot(db):
    item = make_item(db)
    event = EventLogStore.insert(db, item.id, None, "updated", {"status": "reviewed", "price": 5})
    db.commit()

    assert event.status == "reviewed"
    assert json.loads(event.details) == {"status": "reviewed", "price": 5}


def test_mixed_spellings_on_one_item_return_the_earlier(db):
    item = make_item(db)
    raw_event(db, item, '{"status": "submitted"}', datetime(2025, 1, 8, 12))
    raw_event(db, item, '{"status":"submitted"}', datetime(2025, 1, 7, 12))

    assert StatusTransitionDetector(db).first_timestamp_reaching_status(item.id, "submitted") == datetime(
        2025, 1, 7, 12
    )
