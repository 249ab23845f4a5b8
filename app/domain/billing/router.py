"""Billing router - FastAPI endpoints for freelancer payouts"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_admin
from ...database import get_db
from ...models import User
from ...models_invoice import Invoice, InvoiceItem
from .schemas import (
    GenerateInvoiceResponse,
    InvoiceItemResponse,
    InvoiceResponse,
    PendingItemsResponse,
    PendingSummaryEntry,
)
from .service import BillingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices", tags=["Invoices"])


def get_billing_service(db: Session = Depends(get_db)) -> BillingService:
    """Dependency injection for BillingService"""
    return BillingService(db)


def item_response(item: InvoiceItem) -> InvoiceItemResponse:
    return InvoiceItemResponse(
        id=item.id,
        freelancerId=item.freelancer_id,
        workItemId=item.work_item_id,
        invoiceId=item.invoice_id,
        title=item.title,
        amount=item.amount,
        status=item.status,
        completedAt=item.completed_at,
    )


def invoice_response(invoice: Invoice) -> InvoiceResponse:
    return InvoiceResponse(
        id=invoice.id,
        invoiceNumber=invoice.invoice_number,
        freelancerId=invoice.freelancer_id,
        freelancerName=invoice.freelancer.username if invoice.freelancer else None,
        totalAmount=invoice.total_amount,
        currency=invoice.currency or "USD",
        status=invoice.status,
        periodStart=invoice.period_start,
        periodEnd=invoice.period_end,
        paidAt=invoice.paid_at,
        createdAt=invoice.created_at,
    )


@router.get("/pending", response_model=list[PendingSummaryEntry])
async def get_pending_summary(
    current_user: User = Depends(require_admin),
    service: BillingService = Depends(get_billing_service),
):
    """Unpaid totals per freelancer"""
    return service.get_pending_summary()


@router.get("/pending/{freelancer_id}", response_model=PendingItemsResponse)
async def get_pending_items(
    freelancer_id: int,
    current_user: User = Depends(get_current_user),
    service: BillingService = Depends(get_billing_service),
):
    """Unpaid items of one freelancer"""
    result = service.get_pending_items(freelancer_id, current_user)
    return PendingItemsResponse(
        items=[item_response(item) for item in result["items"]],
        summary=result["summary"],
    )


@router.post("/generate/{freelancer_id}", response_model=GenerateInvoiceResponse)
async def generate_invoice(
    freelancer_id: int,
    current_user: User = Depends(require_admin),
    service: BillingService = Depends(get_billing_service),
):
    """Settle a freelancer's pending items into a paid invoice"""
    try:
        result = service.generate_invoice(freelancer_id, current_user)
    except (HTTPException, OperationalError):
        raise
    except Exception as e:
        logger.error(f"❌ Invoice generation failed for freelancer {freelancer_id}: {str(e)}")
        logger.exception(e)
        raise HTTPException(status_code=500, detail="Failed to generate invoice")

    return GenerateInvoiceResponse(
        invoice=invoice_response(result["invoice"]),
        itemCount=result["itemCount"],
        csv=result["csv"],
    )


@router.get("/history", response_model=list[InvoiceResponse])
async def get_invoice_history(
    freelancer_id: Optional[int] = Query(None, alias="freelancerId"),
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    service: BillingService = Depends(get_billing_service),
):
    """Paid invoices, newest first; freelancers only see their own"""
    if current_user.role != "admin":
        freelancer_id = current_user.id
    return [invoice_response(inv) for inv in service.get_invoice_history(freelancer_id, limit)]
