"""
Module: cafe_kernel.models.payment
Responsibility: ORM persistence for payments and invoices -- the settlement
    records of an order.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Payment.amount >= 0, method in (CASH, CARD, MFS) (CHECK).
    - Invoice.order_id UNIQUE: at most one invoice per order.  This is the
      idempotence guard of the PaymentRecorder -- a second payment attempt
      for an invoiced order fails on this constraint and rolls back.
    - Invoice.invoice_number UNIQUE.
    - Payment and Invoice rows are immutable once inserted.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cafe_kernel.db.base import Base, IdType, Money

if TYPE_CHECKING:
    from cafe_kernel.models.order import Order


class PaymentMethod(str, Enum):
    CASH = "CASH"
    CARD = "CARD"
    MFS = "MFS"  # mobile financial service


# Constraint names are matched by the transaction scope to classify
# duplicate-invoice failures.
INVOICE_ORDER_CONSTRAINT = "uq_invoice_order"
INVOICE_NUMBER_CONSTRAINT = "uq_invoice_number"


class Payment(Base):
    """A tender recorded against an order."""

    __tablename__ = "payments"

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_payments_amount"),
        CheckConstraint("method IN ('CASH', 'CARD', 'MFS')", name="ck_payments_method"),
        Index("idx_payments_order", "order_id"),
    )

    order_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    method: Mapped[str] = mapped_column(String(10), nullable=False)
    reference: Mapped[str | None] = mapped_column(String(120), nullable=True)
    paid_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    order: Mapped["Order"] = relationship(back_populates="payments")

    def __repr__(self) -> str:
        return f"<Payment {self.id} order={self.order_id} {self.method} {self.amount}>"


class Invoice(Base):
    """The numbered settlement record, issued exactly once per paid order."""

    __tablename__ = "invoices"

    __table_args__ = (
        UniqueConstraint("order_id", name=INVOICE_ORDER_CONSTRAINT),
        UniqueConstraint("invoice_number", name=INVOICE_NUMBER_CONSTRAINT),
    )

    order_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("orders.id"), nullable=False,
    )
    invoice_number: Mapped[str] = mapped_column(String(50), nullable=False)
    payment_id: Mapped[int | None] = mapped_column(
        IdType, ForeignKey("payments.id"), nullable=True,
    )
    # Snapshot of Order.total at issue time
    total: Mapped[Decimal] = mapped_column(Money, nullable=False)
    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    order: Mapped["Order"] = relationship(back_populates="invoice")
    payment: Mapped[Payment | None] = relationship()

    def __repr__(self) -> str:
        return f"<Invoice {self.invoice_number} order={self.order_id} total={self.total}>"
