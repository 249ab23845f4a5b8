"""Blocker domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

BLOCKER_PRIORITIES = {"low", "medium", "high", "critical"}


class BlockerCreate(BaseModel):
    """Schema for reporting a blocker"""

    blockerType: str
    title: str
    description: str
    priority: str = "medium"

    @field_validator("blockerType", "title", "description")
    @classmethod
    def validate_required(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("field is required")
        return v.strip()

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v: str) -> str:
        if v not in BLOCKER_PRIORITIES:
            raise ValueError(f"priority must be one of: {', '.join(sorted(BLOCKER_PRIORITIES))}")
        return v


class BlockerResponse(BaseModel):
    id: int
    workItemId: int
    reportedBy: Optional[int] = None
    reporterName: Optional[str] = None
    blockerType: str
    title: str
    description: str
    priority: str
    status: str
    createdAt: Optional[datetime] = None
    resolvedAt: Optional[datetime] = None
    resolvedBy: Optional[int] = None
