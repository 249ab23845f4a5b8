from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from app.domain.activity.repository import EventLogStore
from app.domain.analytics.aggregator import PerformanceAggregator
from app.domain.analytics.periods import window_for
from app.models import ActivityLog
from conftest import make_item, make_user

AMMAN = ZoneInfo("Asia/Amman")


def local(*args) -> datetime:
    return datetime(*args, tzinfo=AMMAN).astimezone(timezone.utc).replace(tzinfo=None)


def submit(db, item, at):
    EventLogStore.insert(db, item.id, item.assigned_to, "updated", {"status": "submitted"}, at)
    db.commit()


def row_for(report, username):
    return next(r for r in report if r["username"] == username)


def test_thursday_morning_submission_falls_in_previous_week(db, alice):
    item = make_item(db, assigned_to=alice.id, status="submitted", created_at=local(2025, 1, 13, 9))
    submit(db, item, local(2025, 1, 16, 10))
    now = datetime(2025, 1, 17, 12, 0, tzinfo=AMMAN)

    aggregator = PerformanceAggregator(db)
    past_week = aggregator.freelancer_report(window_for("past_week", now))
    this_week = aggregator.freelancer_report(window_for("weekly", now))

    assert row_for(past_week, "alice")["totalItems"] == 1
    assert row_for(this_week, "alice")["totalItems"] == 0


def test_earnings_follow_submission_period_but_completion_follows_current_status(db, alice):
    now = datetime(2025, 3, 1, 12, 0, tzinfo=AMMAN)
    reviewed = make_item(db, "Reviewed", price=100, status="reviewed", assigned_to=alice.id)
    rework = make_item(db, "Rework", price=50, status="needs_fixes", assigned_to=alice.id)
    old = make_item(db, "Old", price=30, status="published", assigned_to=alice.id)
    submit(db, reviewed, local(2025, 2, 20, 10))
    submit(db, rework, local(2025, 2, 25, 10))
    submit(db, old, local(2024, 11, 1, 10))

    report = PerformanceAggregator(db).freelancer_report(window_for("monthly", now))
    row = row_for(report, "alice")

    assert row["totalItems"] == 2
    assert row["totalEarnings"] == 150.0
    assert row["completedEarnings"] == 100.0
    assert row["byStatus"]["reviewed"] == 1
    assert row["byStatus"]["needsFixes"] == 1
    assert row["byStatus"]["published"] == 0


def test_items_without_submission_only_count_in_all(db, alice):
    now = datetime(2025, 3, 1, tzinfo=AMMAN)
    make_item(db, "Never submitted", price=40, status="in_progress", assigned_to=alice.id)

    aggregator = PerformanceAggregator(db)
    monthly = row_for(aggregator.freelancer_report(window_for("monthly", now)), "alice")
    everything = row_for(aggregator.freelancer_report(window_for("all", now)), "alice")

    assert monthly["totalItems"] == 0
    assert everything["totalItems"] == 1
    assert everything["byStatus"]["inProgress"] == 1
    assert everything["totalEarnings"] == 40.0


def test_report_rows_cover_every_freelancer_sorted_by_volume(db, alice, bob, admin):
    now = datetime(2025, 3, 1, tzinfo=AMMAN)
    for name in ("One", "Two"):
        submit(db, make_item(db, name, assigned_to=bob.id, status="submitted"), local(2025, 2, 20))
    submit(db, make_item(db, "Three", assigned_to=alice.id, status="submitted"), local(2025, 2, 21))
    carol = make_user(db, "carol")

    report = PerformanceAggregator(db).freelancer_report(window_for("monthly", now))

    assert [r["username"] for r in report] == ["bob", "alice", "carol"]
    assert row_for(report, "carol")["totalItems"] == 0
    assert all(r["freelancerId"] != admin.id for r in report)
    assert carol.id in {r["freelancerId"] for r in report}


def test_report_can_be_limited_to_one_freelancer(db, alice, bob):
    now = datetime(2025, 3, 1, tzinfo=AMMAN)
    submit(db, make_item(db, assigned_to=bob.id, status="submitted"), local(2025, 2, 20))

    report = PerformanceAggregator(db).freelancer_report(window_for("monthly", now), bob.id)

    assert [r["username"] for r in report] == ["bob"]
    assert report[0]["totalItems"] == 1


def test_malformed_history_is_reported_not_fatal(db, alice):
    now = datetime(2025, 3, 1, tzinfo=AMMAN)
    good = make_item(db, "Good", assigned_to=alice.id, status="submitted")
    bad = make_item(db, "Bad", assigned_to=alice.id, status="submitted")
    submit(db, good, local(2025, 2, 20))
    db.add(ActivityLog(work_item_id=bad.id, action="updated", details="{oops", created_at=local(2025, 2, 20)))
    db.commit()

    aggregator = PerformanceAggregator(db)
    report = aggregator.freelancer_report(window_for("monthly", now))

    assert row_for(report, "alice")["totalItems"] == 1
    assert aggregator.skipped_events == 1


def test_timeseries_buckets_creation_and_submission_separately(db, alice):
    now = datetime(2025, 2, 1, tzinfo=AMMAN)
    first = make_item(db, "First", assigned_to=alice.id, status="submitted", created_at=local(2025, 1, 10, 9))
    make_item(db, "Second", assigned_to=alice.id, status="published", created_at=local(2025, 1, 12, 9))
    older = make_item(db, "Older", assigned_to=alice.id, status="submitted", created_at=local(2024, 12, 1, 9))
    submit(db, first, local(2025, 1, 11, 9))
    submit(db, older, local(2025, 1, 11, 15))

    window = window_for("custom", now, date(2025, 1, 10), date(2025, 1, 12))
    result = PerformanceAggregator(db).timeseries(window)

    assert result["granularity"] == "day"
    assert result["series"] == [
        {"date": "2025-01-10", "created": 1, "submitted": 0, "published": 0},
        {"date": "2025-01-11", "created": 0, "submitted": 2, "published": 0},
        {"date": "2025-01-12", "created": 1, "submitted": 0, "published": 1},
    ]
    assert sorted(result["statusDistribution"], key=lambda r: r["status"]) == [
        {"status": "published", "count": 1},
        {"status": "submitted", "count": 1},
    ]
    assert result["topFreelancers"] == [
        {"freelancerId": alice.id, "username": "alice", "templatesCount": 2, "publishedCount": 1}
    ]


def test_timeseries_leaderboard_is_limited(db, alice, bob):
    now = datetime(2025, 2, 1, tzinfo=AMMAN)
    make_item(db, "A", assigned_to=alice.id, created_at=local(2025, 1, 20))
    make_item(db, "B1", assigned_to=bob.id, created_at=local(2025, 1, 20))
    make_item(db, "B2", assigned_to=bob.id, created_at=local(2025, 1, 21))

    result = PerformanceAggregator(db).timeseries(window_for("monthly", now), limit=1)

    assert [r["username"] for r in result["topFreelancers"]] == ["bob"]


def test_summary_compares_calendar_months(db, alice, bob):
    now = datetime(2025, 1, 20, 12, 0, tzinfo=AMMAN)
    make_item(db, "This month", price=100, status="published", assigned_to=alice.id, created_at=local(2025, 1, 5))
    make_item(db, "Last month 1", price=50, status="reviewed", created_at=local(2024, 12, 10))
    make_item(db, "Last month 2", price=25, status="new", created_at=local(2024, 12, 31, 23, 30))

    summary = PerformanceAggregator(db).summary(now)

    assert summary["overall"] == {
        "totalItems": 3,
        "published": 1,
        "reviewed": 1,
        "inProgress": 0,
        "newItems": 1,
        "totalValue": 175.0,
    }
    assert summary["thisMonth"] == {"created": 1, "published": 1}
    assert summary["lastMonth"] == {"created": 2, "published": 0}
    assert summary["monthOverMonthGrowth"] == -50.0
    assert summary["activeFreelancers"] == 1
    assert summary["totalFreelancers"] == 2


def test_summary_growth_is_zero_without_last_month(db):
    make_item(db, created_at=local(2025, 1, 5))

    summary = PerformanceAggregator(db).summary(datetime(2025, 1, 20, tzinfo=AMMAN))

    assert summary["monthOverMonthGrowth"] == 0


def test_departments_count_volume_published_and_in_flight(db, alice):
    make_item(db, "F1", status="published", department="Finance")
    make_item(db, "F2", status="reviewed", department="Finance")
    make_item(db, "F3", status="in_progress", assigned_to=alice.id, department="Finance")
    make_item(db, "S1", status="new", department="Sales")
    make_item(db, "S2", status="needs_fixes", assigned_to=alice.id, department="Sales")
    make_item(db, "Unfiled", status="published")
    make_item(db, "Blank", status="published", department="")

    departments = PerformanceAggregator(db).departments()

    assert departments == [
        {"department": "Finance", "templateCount": 3, "published": 1, "inProgress": 2},
        {"department": "Sales", "templateCount": 2, "published": 0, "inProgress": 1},
    ]


def test_departments_tie_on_volume_is_ordered_by_name(db):
    make_item(db, "Ops", department="Operations")
    make_item(db, "HR", department="HR")

    names = [d["department"] for d in PerformanceAggregator(db).departments()]

    assert names == ["HR", "Operations"]
