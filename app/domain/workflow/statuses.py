"""
Work item statuses and the intended workflow graph

new → assigned → in_progress → submitted → reviewed | needs_fixes → published → archived

Rework loop: needs_fixes → in_progress, or straight back to submitted.
assigned (re-assignment) and published (republish) are reachable from any status.
"""

from enum import Enum


class WorkItemStatus(str, Enum):
    NEW = "new"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
    NEEDS_FIXES = "needs_fixes"
    REVIEWED = "reviewed"
    PUBLISHED = "published"
    ARCHIVED = "archived"


ALL_STATUSES = {s.value for s in WorkItemStatus}

INTENDED_TRANSITIONS = {
    "new": {"assigned"},
    "assigned": {"in_progress"},
    "in_progress": {"submitted"},
    "submitted": {"reviewed", "needs_fixes"},
    "needs_fixes": {"in_progress", "submitted"},
    "reviewed": {"published", "needs_fixes"},
    "published": {"archived"},
    "archived": set(),
}

OUT_OF_BAND_TARGETS = {"assigned", "published"}

# Statuses a freelancer may set on their own work items
FREELANCER_SETTABLE = {"in_progress", "submitted"}

# Completions that put money in the assignee's ledger
BILLABLE_STATUSES = {"reviewed", "published"}

# Messages sent to the assignee when an item enters these statuses.
# Statuses not listed here notify nobody.
STATUS_MESSAGES = {
    "reviewed": "Your work has been reviewed",
    "needs_fixes": "Your submission needs fixes",
    "published": "Your template has been published!",
    "assigned": "You have been assigned a new template",
}


def validate_status_transition(current_status: str, new_status: str) -> bool:
    """
    Whether current_status → new_status follows the intended graph.
    Same status is a no-op and always valid.
    """
    if current_status == new_status:
        return True
    if new_status in OUT_OF_BAND_TARGETS:
        return True
    return new_status in INTENDED_TRANSITIONS.get(current_status, set())


def humanize(status: str) -> str:
    return status.replace("_", " ")
