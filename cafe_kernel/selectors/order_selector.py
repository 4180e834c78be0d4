"""
Module: cafe_kernel.selectors.order_selector
Responsibility: Read-only access to committed orders with their items,
    payments and invoice, converted to frozen DTOs.
Architecture position: Kernel > Selectors.

Failure modes:
    - Returns None when the order (or its invoice) does not exist; never
      raises on absence of data.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from cafe_kernel.models.order import Order, OrderStatus
from cafe_kernel.models.payment import Invoice
from cafe_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class OrderItemDTO:
    menu_item_id: int
    quantity: int
    unit_price: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class PaymentDTO:
    payment_id: int
    amount: Decimal
    method: str
    reference: str | None
    paid_at: datetime


@dataclass(frozen=True)
class InvoiceDTO:
    invoice_id: int
    invoice_number: str
    order_id: int
    payment_id: int | None
    total: Decimal
    issued_at: datetime


@dataclass(frozen=True)
class OrderSummary:
    """An order as callers see it after commit."""

    order_id: int
    customer_name: str | None
    customer_category: str
    status: OrderStatus
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total: Decimal
    discount_id: int | None
    tax_id: int | None
    created_at: datetime | None
    items: tuple[OrderItemDTO, ...]
    payments: tuple[PaymentDTO, ...]
    invoice: InvoiceDTO | None

    @property
    def items_subtotal(self) -> Decimal:
        """Sum of the stored line totals."""
        return sum((item.line_total for item in self.items), Decimal("0"))

    @property
    def totals_consistent(self) -> bool:
        return self.total == self.subtotal - self.discount_amount + self.tax_amount


def _invoice_dto(invoice: Invoice) -> InvoiceDTO:
    return InvoiceDTO(
        invoice_id=invoice.id,
        invoice_number=invoice.invoice_number,
        order_id=invoice.order_id,
        payment_id=invoice.payment_id,
        total=invoice.total,
        issued_at=invoice.issued_at,
    )


class OrderSelector(BaseSelector[Order]):
    """
    Selector for order queries.

    Guarantees:
        - Items and payments are ordered by id (insertion order).
        - Relationships are eagerly loaded; no lazy load happens after the
          DTO is built.
    """

    def get_summary(self, order_id: int) -> OrderSummary | None:
        order = self.session.scalars(
            select(Order)
            .where(Order.id == order_id)
            .options(
                selectinload(Order.items),
                selectinload(Order.payments),
                selectinload(Order.invoice),
            )
        ).one_or_none()
        if order is None:
            return None

        return OrderSummary(
            order_id=order.id,
            customer_name=order.customer_name,
            customer_category=order.customer_category,
            status=OrderStatus(order.status),
            subtotal=order.subtotal,
            discount_amount=order.discount_amount,
            tax_amount=order.tax_amount,
            total=order.total,
            discount_id=order.discount_id,
            tax_id=order.tax_id,
            created_at=order.created_at,
            items=tuple(
                OrderItemDTO(
                    menu_item_id=item.menu_item_id,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    line_total=item.line_total,
                )
                for item in order.items
            ),
            payments=tuple(
                PaymentDTO(
                    payment_id=payment.id,
                    amount=payment.amount,
                    method=payment.method,
                    reference=payment.reference,
                    paid_at=payment.paid_at,
                )
                for payment in order.payments
            ),
            invoice=_invoice_dto(order.invoice) if order.invoice is not None else None,
        )

    def invoice_for(self, order_id: int) -> InvoiceDTO | None:
        invoice = self.session.scalars(
            select(Invoice).where(Invoice.order_id == order_id)
        ).one_or_none()
        return _invoice_dto(invoice) if invoice is not None else None

    def count_invoices(self, order_id: int) -> int:
        return len(self.session.scalars(
            select(Invoice.id).where(Invoice.order_id == order_id)
        ).all())
