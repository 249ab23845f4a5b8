"""Blocker router - FastAPI endpoints for work item blockers"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import Blocker, User
from .schemas import BlockerCreate, BlockerResponse
from .service import BlockerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/work-items/{work_item_id}/blockers", tags=["Blockers"])


def get_blocker_service(db: Session = Depends(get_db)) -> BlockerService:
    """Dependency injection for BlockerService"""
    return BlockerService(db)


def to_response(blocker: Blocker) -> BlockerResponse:
    return BlockerResponse(
        id=blocker.id,
        workItemId=blocker.work_item_id,
        reportedBy=blocker.reported_by,
        reporterName=blocker.reporter.username if blocker.reporter else None,
        blockerType=blocker.blocker_type,
        title=blocker.title,
        description=blocker.description,
        priority=blocker.priority,
        status=blocker.status,
        createdAt=blocker.created_at,
        resolvedAt=blocker.resolved_at,
        resolvedBy=blocker.resolved_by,
    )


@router.get("", response_model=list[BlockerResponse])
async def get_blockers(
    work_item_id: int,
    include_resolved: bool = Query(False, alias="includeResolved"),
    current_user: User = Depends(get_current_user),
    service: BlockerService = Depends(get_blocker_service),
):
    """Open blockers of a work item"""
    return [to_response(b) for b in service.get_blockers(work_item_id, current_user, include_resolved)]


@router.post("", response_model=BlockerResponse, status_code=201)
async def report_blocker(
    work_item_id: int,
    data: BlockerCreate,
    current_user: User = Depends(get_current_user),
    service: BlockerService = Depends(get_blocker_service),
):
    """Report a blocker"""
    return to_response(service.report_blocker(work_item_id, data, current_user))


@router.post("/{blocker_id}/resolve", response_model=BlockerResponse)
async def resolve_blocker(
    work_item_id: int,
    blocker_id: int,
    current_user: User = Depends(get_current_user),
    service: BlockerService = Depends(get_blocker_service),
):
    """Mark a blocker resolved"""
    return to_response(service.resolve_blocker(work_item_id, blocker_id, current_user))
