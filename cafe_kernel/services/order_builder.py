"""
OrderBuilder -- assembles and prices an order, then hands it off.

Responsibility:
    Validates the cart, resolves menu prices and reference data, prices the
    order with the Pricing Engine and passes the resulting OrderDraft to the
    TransactionCoordinator.

Architecture position:
    Kernel > Services -- the entry point for order creation.  Reads through
    selectors in a read-only session; never writes itself.

Invariants enforced:
    - Shape validation (empty cart, quantities) happens before any I/O.
    - Reference resolution (menu items, discount, tax) happens before the
      write transaction opens, so a ValidationError is never partially
      applied.
    - subtotal == sum(line_total); total == subtotal - discount + tax.
"""

from collections.abc import Sequence

from cafe_engines.pricing import compute_subtotal, price_order
from cafe_kernel.db.engine import Database
from cafe_kernel.domain.dtos import OrderDraft, OrderLineRequest
from cafe_kernel.domain.values import CustomerCategory
from cafe_kernel.exceptions import (
    EmptyOrderError,
    InvalidQuantityError,
    ValidationError,
)
from cafe_kernel.logging_config import get_logger
from cafe_kernel.selectors.catalog_selector import MenuCatalog, ReferenceSelector
from cafe_kernel.services.transaction_coordinator import TransactionCoordinator

logger = get_logger("services.order_builder")


def validate_lines(lines: Sequence[OrderLineRequest]) -> None:
    """Reject an empty cart or any non-positive / non-integer quantity."""
    if not lines:
        raise EmptyOrderError()
    for line in lines:
        quantity = line.quantity
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidQuantityError(line.menu_item_id, quantity)


def _category(value: CustomerCategory | str) -> CustomerCategory:
    try:
        return CustomerCategory(value)
    except ValueError:
        raise ValidationError(f"Unknown customer category: {value!r}") from None


class OrderBuilder:
    """
    Builds priced orders.

    Usage:
        builder = OrderBuilder(db, TransactionCoordinator(db, clock))
        order_id = builder.build_order(
            "Ana", CustomerCategory.STUDENT,
            [OrderLineRequest(menu_item_id=1, quantity=2)],
            discount_id=1, tax_id=1,
        )
    """

    def __init__(self, db: Database, coordinator: TransactionCoordinator):
        self._db = db
        self._coordinator = coordinator

    def draft_order(
        self,
        customer_name: str | None,
        customer_category: CustomerCategory | str,
        lines: Sequence[OrderLineRequest],
        discount_id: int | None = None,
        tax_id: int | None = None,
    ) -> OrderDraft:
        """Validate, resolve and price without writing anything."""
        lines = tuple(lines)
        validate_lines(lines)
        category = _category(customer_category)

        with self._db.read_session() as session:
            resolved = MenuCatalog(session).resolve_lines(lines)
            references = ReferenceSelector(session)
            discount = references.discount_terms(discount_id) if discount_id is not None else None
            tax = references.tax_terms(tax_id) if tax_id is not None else None

        pricing = price_order(
            compute_subtotal(line.line_total for line in resolved),
            discount,
            tax,
            category,
        )
        return OrderDraft(
            customer_name=customer_name,
            customer_category=category,
            lines=resolved,
            subtotal=pricing.subtotal,
            discount_amount=pricing.discount_amount,
            tax_amount=pricing.tax_amount,
            total=pricing.total,
            discount_id=discount_id,
            tax_id=tax_id,
        )

    def build_order(
        self,
        customer_name: str | None,
        customer_category: CustomerCategory | str,
        lines: Sequence[OrderLineRequest],
        discount_id: int | None = None,
        tax_id: int | None = None,
    ) -> int:
        """Price the order and commit it; returns the new order id."""
        draft = self.draft_order(customer_name, customer_category, lines, discount_id, tax_id)
        logger.debug(
            "order_drafted",
            extra={"item_count": len(draft.lines), "total": draft.total},
        )
        return self._coordinator.commit_order(draft)
