"""Billing service - Invoice ledger and freelancer payouts"""

import csv
import logging
import random
from io import StringIO
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ... import config
from ...models import User
from ...models_invoice import Invoice, InvoiceItem
from ...utils.clock import utcnow
from .repository import BillingRepository

logger = logging.getLogger(__name__)


class BillingLedger:
    """Records billable work item completions as pending invoice items"""

    def __init__(self, db: Session, bill_once: Optional[bool] = None):
        self.db = db
        self.repo = BillingRepository()
        self.bill_once = config.BILL_ONCE_PER_WORK_ITEM if bill_once is None else bill_once

    def add_line_item(
        self, freelancer_id: int, work_item_id: int, title: str, amount: float
    ) -> Optional[InvoiceItem]:
        """
        Add one pending line item in the caller's transaction.

        With bill_once, a work item already billed to this freelancer is not
        billed again and None is returned.
        """
        if self.bill_once:
            existing = self.repo.find_item(self.db, work_item_id, freelancer_id)
            if existing:
                logger.info(
                    f"ℹ️ Work item {work_item_id} already billed to freelancer {freelancer_id} "
                    f"(invoice item {existing.id}), skipping"
                )
                return None

        item = InvoiceItem(
            freelancer_id=freelancer_id,
            work_item_id=work_item_id,
            title=title,
            amount=amount,
            status="pending",
            completed_at=utcnow(),
        )
        self.db.add(item)
        self.db.flush()
        logger.info(f"💰 Invoice item {item.id} added: freelancer {freelancer_id}, work item {work_item_id}, {amount}")
        return item


def generate_invoice_number(db: Session) -> str:
    """INV-YYYYMM-NNNN, retried until unused"""
    now = utcnow()
    repo = BillingRepository()
    while True:
        number = f"INV-{now.year}{now.month:02d}-{random.randint(0, 9999):04d}"
        if not repo.invoice_number_exists(db, number):
            return number


def render_invoice_csv(freelancer: User, invoice: Invoice, items: list[InvoiceItem]) -> str:
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(["Invoice Number", invoice.invoice_number])
    writer.writerow(["Freelancer", freelancer.username])
    writer.writerow(["Email", freelancer.email or ""])
    writer.writerow(["Period Start", invoice.period_start.isoformat() if invoice.period_start else ""])
    writer.writerow(["Period End", invoice.period_end.isoformat() if invoice.period_end else ""])
    writer.writerow([])
    writer.writerow(["Work Item ID", "Title", "Completed At", "Amount"])
    for item in items:
        writer.writerow([item.work_item_id or "", item.title, item.completed_at.isoformat(), f"{item.amount:.2f}"])
    writer.writerow([])
    writer.writerow(["Total", "", "", f"{invoice.total_amount:.2f}"])
    return output.getvalue()


class BillingService:
    """Service layer for payouts"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BillingRepository()

    def get_pending_summary(self) -> list[dict]:
        """Pending totals for every freelancer with unpaid items"""
        return [
            {
                "freelancerId": row.id,
                "username": row.username,
                "email": row.email,
                "handle": row.handle,
                "itemCount": row.item_count,
                "totalAmount": float(row.total_amount or 0),
                "periodStart": row.period_start,
                "periodEnd": row.period_end,
            }
            for row in self.repo.get_pending_totals(self.db)
        ]

    def get_pending_items(self, freelancer_id: int, user: User) -> dict:
        """Pending items of one freelancer; freelancers may only read their own"""
        if user.role != "admin" and user.id != freelancer_id:
            raise HTTPException(status_code=403, detail="Access denied")

        items = self.repo.get_pending_items(self.db, freelancer_id)
        return {
            "items": items,
            "summary": {
                "itemCount": len(items),
                "totalAmount": float(sum(item.amount for item in items)),
                "periodStart": items[0].completed_at if items else None,
                "periodEnd": items[-1].completed_at if items else None,
            },
        }

    def generate_invoice(self, freelancer_id: int, user: User) -> dict:
        """Settle every pending item of a freelancer into one paid invoice"""
        freelancer = self.repo.get_freelancer(self.db, freelancer_id)
        if not freelancer:
            raise HTTPException(status_code=404, detail="Freelancer not found")

        items = self.repo.get_pending_items(self.db, freelancer_id)
        if not items:
            raise HTTPException(status_code=400, detail="No pending items for this freelancer")

        now = utcnow()
        invoice = Invoice(
            invoice_number=generate_invoice_number(self.db),
            freelancer_id=freelancer_id,
            total_amount=float(sum(item.amount for item in items)),
            status="paid",
            period_start=items[0].completed_at,
            period_end=items[-1].completed_at,
            paid_at=now,
            paid_by=user.id,
        )
        self.db.add(invoice)
        self.db.flush()

        for item in items:
            item.invoice_id = invoice.id
            item.status = "paid"

        self.db.commit()
        self.db.refresh(invoice)
        logger.info(
            f"✅ Invoice {invoice.invoice_number} paid to freelancer {freelancer_id}: "
            f"{len(items)} item(s), {invoice.total_amount:.2f}"
        )

        return {
            "invoice": invoice,
            "itemCount": len(items),
            "csv": render_invoice_csv(freelancer, invoice, items),
        }

    def get_invoice_history(self, freelancer_id: Optional[int] = None, limit: int = 50) -> list[Invoice]:
        return self.repo.get_invoice_history(self.db, freelancer_id, limit)
