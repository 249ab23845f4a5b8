"""Billing repository - Database operations for invoice items and invoices"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import User
from ...models_invoice import Invoice, InvoiceItem


class BillingRepository:
    """Repository for billing database operations"""

    @staticmethod
    def get_freelancer(db: Session, freelancer_id: int) -> Optional[User]:
        """Get a freelancer by ID"""
        return db.query(User).filter(User.id == freelancer_id, User.role == "freelancer").first()

    @staticmethod
    def find_item(db: Session, work_item_id: int, freelancer_id: int) -> Optional[InvoiceItem]:
        """Any invoice item already billed for this work item to this freelancer"""
        return (
            db.query(InvoiceItem)
            .filter(
                InvoiceItem.work_item_id == work_item_id,
                InvoiceItem.freelancer_id == freelancer_id,
            )
            .first()
        )

    @staticmethod
    def get_items_for_work_item(db: Session, work_item_id: int) -> list[InvoiceItem]:
        return db.query(InvoiceItem).filter(InvoiceItem.work_item_id == work_item_id).all()

    @staticmethod
    def get_pending_items(db: Session, freelancer_id: int) -> list[InvoiceItem]:
        """Pending items of one freelancer, oldest completion first"""
        return (
            db.query(InvoiceItem)
            .filter(InvoiceItem.freelancer_id == freelancer_id, InvoiceItem.status == "pending")
            .order_by(InvoiceItem.completed_at.asc(), InvoiceItem.id.asc())
            .all()
        )

    @staticmethod
    def get_pending_totals(db: Session) -> list:
        """Pending item count, amount and period per freelancer"""
        return (
            db.query(
                User.id,
                User.username,
                User.email,
                User.handle,
                func.count(InvoiceItem.id).label("item_count"),
                func.coalesce(func.sum(InvoiceItem.amount), 0).label("total_amount"),
                func.min(InvoiceItem.completed_at).label("period_start"),
                func.max(InvoiceItem.completed_at).label("period_end"),
            )
            .join(InvoiceItem, InvoiceItem.freelancer_id == User.id)
            .filter(User.role == "freelancer", InvoiceItem.status == "pending")
            .group_by(User.id, User.username, User.email, User.handle)
            .order_by(User.username)
            .all()
        )

    @staticmethod
    def invoice_number_exists(db: Session, invoice_number: str) -> bool:
        return db.query(Invoice.id).filter(Invoice.invoice_number == invoice_number).first() is not None

    @staticmethod
    def get_invoice_history(
        db: Session, freelancer_id: Optional[int] = None, limit: int = 50
    ) -> list[Invoice]:
        query = db.query(Invoice)
        if freelancer_id:
            query = query.filter(Invoice.freelancer_id == freelancer_id)
        return query.order_by(Invoice.created_at.desc(), Invoice.id.desc()).limit(limit).all()
