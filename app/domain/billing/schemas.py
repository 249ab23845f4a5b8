"""Billing domain schemas - Pydantic models for payouts"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class InvoiceItemResponse(BaseModel):
    """Schema for a billed work item"""

    id: int
    freelancerId: int
    workItemId: Optional[int] = None
    invoiceId: Optional[int] = None
    title: str
    amount: float
    status: str
    completedAt: datetime


class PendingTotals(BaseModel):
    itemCount: int
    totalAmount: float
    periodStart: Optional[datetime] = None
    periodEnd: Optional[datetime] = None


class PendingSummaryEntry(PendingTotals):
    freelancerId: int
    username: str
    email: Optional[str] = None
    handle: Optional[str] = None


class PendingItemsResponse(BaseModel):
    items: list[InvoiceItemResponse]
    summary: PendingTotals


class InvoiceResponse(BaseModel):
    """Schema for a settled invoice"""

    id: int
    invoiceNumber: str
    freelancerId: int
    freelancerName: Optional[str] = None
    totalAmount: float
    currency: str
    status: str
    periodStart: Optional[datetime] = None
    periodEnd: Optional[datetime] = None
    paidAt: Optional[datetime] = None
    createdAt: Optional[datetime] = None


class GenerateInvoiceResponse(BaseModel):
    invoice: InvoiceResponse
    itemCount: int
    csv: str
