"""
DTOs -- immutable data passed between the builder, the coordinator and
callers.

Architecture position:
    Kernel > Domain -- zero I/O, no ORM imports.  Services build these
    inside their session scope so no ORM instance escapes a transaction.

Data flow:
    OrderLineRequest -> ResolvedLine -> OrderDraft -> (committed order id)
    record_payment(...) -> PaymentReceipt
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from cafe_kernel.domain.values import CustomerCategory


@dataclass(frozen=True)
class OrderLineRequest:
    """One requested cart line: a menu item id and a quantity."""

    menu_item_id: int
    quantity: int


@dataclass(frozen=True)
class ResolvedLine:
    """A cart line with the menu price snapshotted at order time."""

    menu_item_id: int
    name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal

    def __post_init__(self) -> None:
        if self.quantity <= 0:
            raise ValueError("quantity must be positive")
        if self.unit_price < 0:
            raise ValueError("unit_price cannot be negative")


@dataclass(frozen=True)
class OrderDraft:
    """
    A fully priced order, ready to be committed.

    Built by the OrderBuilder; the TransactionCoordinator persists it
    verbatim.  Monetary fields are already quantized to cents.
    """

    customer_name: str
    customer_category: CustomerCategory
    lines: tuple[ResolvedLine, ...]
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total: Decimal
    discount_id: int | None = None
    tax_id: int | None = None

    def __post_init__(self) -> None:
        if not self.lines:
            raise ValueError("OrderDraft must have at least one line")
        if self.total != self.subtotal - self.discount_amount + self.tax_amount:
            raise ValueError(
                f"Inconsistent totals: {self.total} != "
                f"{self.subtotal} - {self.discount_amount} + {self.tax_amount}"
            )
        if self.subtotal != sum((line.line_total for line in self.lines), Decimal("0")):
            raise ValueError("subtotal does not equal the sum of line totals")


@dataclass(frozen=True)
class PaymentReceipt:
    """What a successful payment produced."""

    order_id: int
    payment_id: int
    invoice_id: int
    invoice_number: str
    amount: Decimal
    method: str
    total: Decimal
    issued_at: datetime
