"""
Invoice Models for Freelancer Payouts
"""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from .database import Base
from .utils.clock import utcnow


class InvoiceItem(Base):
    """One billable completion of a work item, owed to a freelancer"""

    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True, index=True)
    freelancer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    work_item_id = Column(
        Integer, ForeignKey("work_items.id", ondelete="SET NULL"), nullable=True, index=True
    )
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=True)

    title = Column(Text, nullable=False)  # Work item title at completion time
    amount = Column(Float, nullable=False)
    status = Column(String(50), default="pending", nullable=False)  # pending, paid
    completed_at = Column(DateTime, default=utcnow, nullable=False)

    invoice = relationship("Invoice", back_populates="items")
    work_item = relationship("WorkItem")


class Invoice(Base):
    """A settled batch of invoice items for one freelancer"""

    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String(50), unique=True, nullable=False, index=True)
    freelancer_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    total_amount = Column(Float, nullable=False)
    currency = Column(String(10), default="USD")
    status = Column(String(50), default="paid")  # paid

    period_start = Column(DateTime, nullable=True)  # Earliest item completion
    period_end = Column(DateTime, nullable=True)  # Latest item completion
    paid_at = Column(DateTime, nullable=True)
    paid_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime, default=utcnow)

    items = relationship("InvoiceItem", back_populates="invoice")
    freelancer = relationship("User", foreign_keys=[freelancer_id])
