"""Workflow domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from .statuses import ALL_STATUSES


def _validate_status(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in ALL_STATUSES:
        raise ValueError(f"status must be one of: {', '.join(sorted(ALL_STATUSES))}")
    return v


def _validate_price(v: Optional[float]) -> Optional[float]:
    if v is not None and v < 0:
        raise ValueError("price must not be negative")
    return v


class WorkItemCreate(BaseModel):
    """Schema for commissioning a new work item"""

    useCase: str
    flowName: Optional[str] = None
    shortDescription: Optional[str] = None
    description: Optional[str] = None
    department: Optional[str] = None
    tags: Optional[str] = None
    reviewerName: Optional[str] = None
    price: float = 0

    @field_validator("useCase")
    @classmethod
    def validate_use_case(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("useCase is required")
        return v.strip()

    @field_validator("price")
    @classmethod
    def validate_price(cls, v):
        return _validate_price(v)


class WorkItemUpdate(BaseModel):
    """Schema for editing a work item; only provided fields change"""

    useCase: Optional[str] = None
    flowName: Optional[str] = None
    shortDescription: Optional[str] = None
    description: Optional[str] = None
    department: Optional[str] = None
    tags: Optional[str] = None
    templateUrl: Optional[str] = None
    reviewerName: Optional[str] = None
    price: Optional[float] = None
    status: Optional[str] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return _validate_status(v)

    @field_validator("price")
    @classmethod
    def validate_price(cls, v):
        return _validate_price(v)


class StatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return _validate_status(v)


class AssignRequest(BaseModel):
    freelancerId: int


class ActivityResponse(BaseModel):
    id: int
    userId: Optional[int] = None
    username: Optional[str] = None
    action: str
    details: Optional[str] = None
    status: Optional[str] = None
    createdAt: datetime


class WorkItemResponse(BaseModel):
    """Schema for work item response"""

    id: int
    useCase: str
    flowName: Optional[str] = None
    shortDescription: Optional[str] = None
    description: Optional[str] = None
    department: Optional[str] = None
    tags: Optional[str] = None
    templateUrl: Optional[str] = None
    reviewerName: Optional[str] = None
    price: float
    status: str
    fixCount: int
    assignedTo: Optional[int] = None
    assignedToName: Optional[str] = None
    createdBy: Optional[int] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None
    activities: Optional[list[ActivityResponse]] = None

    class Config:
        from_attributes = True


class FreelancerResponse(BaseModel):
    id: int
    username: str
    email: Optional[str] = None
    handle: Optional[str] = None
