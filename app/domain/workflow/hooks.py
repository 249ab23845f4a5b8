"""Side effects of workflow transitions, registered on the default dispatcher"""

import logging

from sqlalchemy.orm import Session

from ...services.notification_service import NotificationSink
from ..billing.service import BillingLedger
from .dispatcher import WorkflowDispatcher, WorkflowTransition
from .statuses import BILLABLE_STATUSES, STATUS_MESSAGES, humanize

logger = logging.getLogger(__name__)

workflow_dispatcher = WorkflowDispatcher()


@workflow_dispatcher.register
def notify_assignee(db: Session, transition: WorkflowTransition) -> None:
    """One notification per transition to the assignee, unless they made the change"""
    item = transition.work_item
    assignee_id = item.assigned_to
    if not assignee_id or assignee_id == transition.acting_user_id:
        return

    sink = NotificationSink(db)
    if transition.assignee_changed:
        sink.enqueue(
            assignee_id,
            "assignment",
            "New template assigned to you",
            f'You have been assigned to work on "{item.title}"',
            item.id,
            transition.acting_user_id,
        )
        return

    message = STATUS_MESSAGES.get(transition.new_status)
    if transition.status_changed and message:
        sink.enqueue(
            assignee_id,
            "status_change",
            message,
            f'"{item.title}" status changed to {humanize(transition.new_status)}',
            item.id,
            transition.acting_user_id,
        )


@workflow_dispatcher.register
def bill_completion(db: Session, transition: WorkflowTransition) -> None:
    """Owe the assignee the item's price when it is reviewed or published"""
    if not transition.status_changed or transition.new_status not in BILLABLE_STATUSES:
        return

    item = transition.work_item
    if not item.assigned_to or not item.price or item.price <= 0:
        logger.debug(f"ℹ️ Work item {item.id} {transition.new_status} without billable assignee/price")
        return

    BillingLedger(db).add_line_item(item.assigned_to, item.id, item.title, item.price)
