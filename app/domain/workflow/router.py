"""Workflow router - FastAPI endpoints for work items"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_admin, require_freelancer
from ...database import get_db
from ...models import User, WorkItem
from .schemas import (
    ActivityResponse,
    AssignRequest,
    FreelancerResponse,
    StatusUpdate,
    WorkItemCreate,
    WorkItemResponse,
    WorkItemUpdate,
)
from .service import WorkflowService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/work-items", tags=["Work Items"])


def get_workflow_service(db: Session = Depends(get_db)) -> WorkflowService:
    """Dependency injection for WorkflowService"""
    return WorkflowService(db)


def to_response(item: WorkItem, activities=None) -> WorkItemResponse:
    return WorkItemResponse(
        id=item.id,
        useCase=item.use_case,
        flowName=item.flow_name,
        shortDescription=item.short_description,
        description=item.description,
        department=item.department,
        tags=item.tags,
        templateUrl=item.template_url,
        reviewerName=item.reviewer_name,
        price=item.price or 0,
        status=item.status,
        fixCount=item.fix_count or 0,
        assignedTo=item.assigned_to,
        assignedToName=item.assignee.username if item.assignee else None,
        createdBy=item.created_by,
        createdAt=item.created_at,
        updatedAt=item.updated_at,
        activities=[
            ActivityResponse(
                id=a.id,
                userId=a.user_id,
                username=a.user.username if a.user else None,
                action=a.action,
                details=a.details,
                status=a.status,
                createdAt=a.created_at,
            )
            for a in activities
        ]
        if activities is not None
        else None,
    )


@router.get("", response_model=list[WorkItemResponse])
async def get_work_items(
    current_user: User = Depends(get_current_user),
    service: WorkflowService = Depends(get_workflow_service),
):
    """Admins see every work item; freelancers see their own and unclaimed ones"""
    return [to_response(item) for item in service.get_work_items(current_user)]


@router.get("/freelancers", response_model=list[FreelancerResponse])
async def get_freelancers(
    current_user: User = Depends(require_admin),
    service: WorkflowService = Depends(get_workflow_service),
):
    """Freelancers available for assignment"""
    return [
        FreelancerResponse(id=f.id, username=f.username, email=f.email, handle=f.handle)
        for f in service.get_freelancers()
    ]


@router.get("/{work_item_id}", response_model=WorkItemResponse)
async def get_work_item(
    work_item_id: int,
    current_user: User = Depends(get_current_user),
    service: WorkflowService = Depends(get_workflow_service),
):
    """Get a work item with its activity log"""
    item = service.get_work_item(work_item_id, current_user)
    return to_response(item, service.get_timeline(item.id))


@router.post("", response_model=WorkItemResponse, status_code=201)
async def create_work_item(
    data: WorkItemCreate,
    current_user: User = Depends(require_admin),
    service: WorkflowService = Depends(get_workflow_service),
):
    """Commission a new work item"""
    return to_response(service.create_work_item(data, current_user))


@router.put("/{work_item_id}", response_model=WorkItemResponse)
async def update_work_item(
    work_item_id: int,
    data: WorkItemUpdate,
    current_user: User = Depends(get_current_user),
    service: WorkflowService = Depends(get_workflow_service),
):
    """Edit a work item"""
    return to_response(service.update_work_item(work_item_id, data, current_user))


@router.patch("/{work_item_id}/status", response_model=WorkItemResponse)
async def update_status(
    work_item_id: int,
    data: StatusUpdate,
    current_user: User = Depends(get_current_user),
    service: WorkflowService = Depends(get_workflow_service),
):
    """Move a work item to a new status"""
    return to_response(service.update_status(work_item_id, data.status, current_user))


@router.post("/{work_item_id}/assign", response_model=WorkItemResponse)
async def assign_work_item(
    work_item_id: int,
    data: AssignRequest,
    current_user: User = Depends(require_admin),
    service: WorkflowService = Depends(get_workflow_service),
):
    """Assign a work item to a freelancer"""
    return to_response(service.assign(work_item_id, data.freelancerId, current_user))


@router.post("/{work_item_id}/self-assign", response_model=WorkItemResponse)
async def self_assign_work_item(
    work_item_id: int,
    current_user: User = Depends(require_freelancer),
    service: WorkflowService = Depends(get_workflow_service),
):
    """Claim an unassigned work item"""
    return to_response(service.self_assign(work_item_id, current_user))
