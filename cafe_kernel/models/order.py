"""
Module: cafe_kernel.models.order
Responsibility: ORM persistence for orders and their line items.
Architecture position: Kernel > Models.  May import from db/base.py and
    sibling reference models only.

Invariants enforced:
    - total == subtotal - discount_amount + tax_amount, all >= 0.  The
      amounts are written once, by the pricing write-back of the
      TransactionCoordinator; the CHECK constraints reject negatives.
    - OrderItem.quantity > 0, unit_price >= 0, line_total >= 0 (CHECK).
    - OrderItem rows are immutable once inserted (db/immutability.py) and
      are removed only by cascade when their Order is deleted.

Status lifecycle:
    PENDING (set on insert) -> PAID (set by the PaymentRecorder) -> terminal.
    CANCELLED is a valid stored value but no kernel operation sets it.
"""

from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cafe_kernel.db.base import Base, IdType, Money, TimestampedBase
from cafe_kernel.domain.values import CustomerCategory

if TYPE_CHECKING:
    from cafe_kernel.models.payment import Invoice, Payment


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


class Order(TimestampedBase):
    """A customer purchase record."""

    __tablename__ = "orders"

    __table_args__ = (
        CheckConstraint(
            "status IN ('PENDING', 'PAID', 'CANCELLED')",
            name="ck_orders_status",
        ),
        CheckConstraint(
            "customer_category IN ('GENERAL', 'STUDENT', 'STAFF', 'LOYAL')",
            name="ck_orders_customer_category",
        ),
        CheckConstraint(
            "subtotal >= 0 AND discount_amount >= 0 AND tax_amount >= 0 AND total >= 0",
            name="ck_orders_amounts_non_negative",
        ),
        Index("idx_orders_created_at", "created_at"),
        Index("idx_orders_status", "status"),
    )

    customer_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    customer_category: Mapped[str] = mapped_column(
        String(10), nullable=False, default=CustomerCategory.GENERAL.value,
    )
    status: Mapped[str] = mapped_column(
        String(10), nullable=False, default=OrderStatus.PENDING.value,
    )

    discount_id: Mapped[int | None] = mapped_column(
        IdType, ForeignKey("discounts.id"), nullable=True,
    )
    tax_id: Mapped[int | None] = mapped_column(
        IdType, ForeignKey("taxes.id"), nullable=True,
    )

    subtotal: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    discount_amount: Mapped[Decimal] = mapped_column(
        Money, nullable=False, default=Decimal("0"),
    )
    tax_amount: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    total: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))

    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="OrderItem.id",
    )
    payments: Mapped[list["Payment"]] = relationship(
        back_populates="order",
        order_by="Payment.id",
    )
    invoice: Mapped["Invoice | None"] = relationship(
        back_populates="order",
        uselist=False,
    )

    def __repr__(self) -> str:
        return f"<Order {self.id} {self.status} total={self.total}>"

    @property
    def is_paid(self) -> bool:
        return self.status == OrderStatus.PAID

    @property
    def totals_consistent(self) -> bool:
        """True when total == subtotal - discount + tax."""
        return self.total == self.subtotal - self.discount_amount + self.tax_amount


class OrderItem(Base):
    """One priced line of an order: a (menu item, quantity, unit price) snapshot."""

    __tablename__ = "order_items"

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity"),
        CheckConstraint("unit_price >= 0", name="ck_order_items_unit_price"),
        CheckConstraint("line_total >= 0", name="ck_order_items_line_total"),
        Index("idx_order_items_order", "order_id"),
        Index("idx_order_items_menu_item", "menu_item_id"),
    )

    order_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False,
    )
    menu_item_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("menu_items.id"), nullable=False,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    line_total: Mapped[Decimal] = mapped_column(Money, nullable=False)

    order: Mapped[Order] = relationship(back_populates="items")

    def __repr__(self) -> str:
        return (
            f"<OrderItem order={self.order_id} menu_item={self.menu_item_id} "
            f"{self.quantity} x {self.unit_price}>"
        )
