"""
Workflow side-effect dispatcher

Status and assignment changes fire their side effects (notifications, invoice
items) from one registry of hooks, invoked once per transition by the
workflow service inside the mutation's transaction.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ...models import WorkItem

logger = logging.getLogger(__name__)


@dataclass
class WorkflowTransition:
    """One mutation of a work item's status and/or assignee"""

    work_item: WorkItem
    previous_status: str
    new_status: str
    acting_user_id: Optional[int]
    previous_assignee_id: Optional[int] = None

    @classmethod
    def status_change(
        cls, work_item: WorkItem, previous_status: str, new_status: str, acting_user_id: Optional[int]
    ) -> "WorkflowTransition":
        """A status change that leaves the assignee as it is"""
        return cls(
            work_item=work_item,
            previous_status=previous_status,
            new_status=new_status,
            acting_user_id=acting_user_id,
            previous_assignee_id=work_item.assigned_to,
        )

    @property
    def status_changed(self) -> bool:
        return self.new_status != self.previous_status

    @property
    def assignee_changed(self) -> bool:
        return self.work_item.assigned_to != self.previous_assignee_id

    @property
    def is_noop(self) -> bool:
        return not self.status_changed and not self.assignee_changed


WorkflowHook = Callable[[Session, WorkflowTransition], None]


@dataclass
class DispatchResult:
    completed: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class WorkflowDispatcher:
    """Ordered registry of side-effect hooks"""

    def __init__(self):
        self._hooks: list[WorkflowHook] = []

    @property
    def hooks(self) -> list[WorkflowHook]:
        return list(self._hooks)

    def register(self, hook: WorkflowHook) -> WorkflowHook:
        """Register a hook; usable as a decorator"""
        self._hooks.append(hook)
        return hook

    def dispatch(self, db: Session, transition: WorkflowTransition) -> DispatchResult:
        """
        Run every hook for a transition.

        Each hook runs in its own SAVEPOINT: a failing hook is rolled back and
        logged, the remaining hooks still run and the caller's status update is
        left intact.
        """
        result = DispatchResult()
        if transition.is_noop:
            return result

        # Hooks must observe the status update and its event
        db.flush()

        for hook in self._hooks:
            name = getattr(hook, "__name__", repr(hook))
            try:
                with db.begin_nested():
                    hook(db, transition)
                result.completed.append(name)
            except Exception:
                logger.exception(
                    f"❌ Workflow hook {name} failed for work item {transition.work_item.id} "
                    f"({transition.previous_status} → {transition.new_status})"
                )
                result.failed.append(name)

        return result
