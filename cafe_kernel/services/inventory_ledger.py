"""
InventoryLedger -- ingredient stock movements.

Responsibility:
    Decrements ingredient stock for committed order items, using each menu
    item's recipe, inside the same transaction as the item insert.  A
    rollback of the order therefore reverts the stock change too.

Architecture position:
    Kernel > Services -- flush-only, called by the TransactionCoordinator
    after the order items are flushed.

Invariants enforced:
    - Stock never goes negative: a decrement past zero raises
      InsufficientStockError and the owning transaction rolls back.
    - Every mutated row is locked (SELECT ... FOR UPDATE) first.
    - ``adjust`` is the only write primitive; ``decrement`` and ``restock``
      are expressed through it.

Failure modes:
    - InsufficientStockError: on-hand quantity is smaller than the request.
    - StockRecordNotFoundError: a recipe ingredient has no inventory row.

Low-stock signal:
    When a decrement leaves the quantity below the ingredient's
    ``min_threshold`` a ``low_stock_detected`` warning is logged.  The
    full report is InventorySelector.low_stock().
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from cafe_kernel.exceptions import InsufficientStockError, StockRecordNotFoundError
from cafe_kernel.logging_config import get_logger
from cafe_kernel.models.reference import Ingredient, InventoryItem
from cafe_kernel.selectors.catalog_selector import MenuCatalog
from cafe_kernel.services.base import BaseService

logger = get_logger("services.inventory")


@dataclass(frozen=True)
class StockMovement:
    """Result of one stock adjustment."""

    ingredient_id: int
    delta: Decimal
    quantity_before: Decimal
    quantity_after: Decimal


class InventoryLedger(BaseService[InventoryItem]):
    """Stock adjustments within the caller's transaction."""

    def __init__(self, session: Session):
        super().__init__(session)
        self._catalog = MenuCatalog(session)

    def _locked_stock(self, ingredient_id: int) -> InventoryItem:
        item = self.session.scalars(
            select(InventoryItem)
            .where(InventoryItem.ingredient_id == ingredient_id)
            .with_for_update()
        ).one_or_none()
        if item is None:
            raise StockRecordNotFoundError(ingredient_id)
        return item

    def adjust(self, ingredient_id: int, delta: Decimal) -> StockMovement:
        """
        Apply ``quantity = quantity + delta`` to one ingredient.

        Raises:
            StockRecordNotFoundError: no inventory row for the ingredient.
            InsufficientStockError: the result would be negative.
        """
        delta = Decimal(delta)
        item = self._locked_stock(ingredient_id)
        before = item.quantity
        after = before + delta
        if after < 0:
            logger.warning(
                "insufficient_stock",
                extra={
                    "ingredient_id": ingredient_id,
                    "on_hand": before,
                    "requested": -delta,
                },
            )
            raise InsufficientStockError(ingredient_id, before, -delta)

        item.quantity = after
        self.session.flush()

        logger.debug(
            "stock_adjusted",
            extra={
                "ingredient_id": ingredient_id,
                "delta": delta,
                "quantity_after": after,
            },
        )
        if delta < 0:
            self._signal_low_stock(ingredient_id, after)
        return StockMovement(ingredient_id, delta, before, after)

    def decrement(self, ingredient_id: int, amount: Decimal) -> StockMovement:
        if amount < 0:
            raise ValueError("Decrement amount cannot be negative")
        return self.adjust(ingredient_id, -Decimal(amount))

    def restock(self, ingredient_id: int, amount: Decimal) -> StockMovement:
        if amount < 0:
            raise ValueError("Restock amount cannot be negative")
        return self.adjust(ingredient_id, Decimal(amount))

    def consume_for_item(self, menu_item_id: int, quantity: int) -> list[StockMovement]:
        """Decrement every ingredient of one order line's recipe."""
        recipe = self._catalog.recipe_for(menu_item_id)
        if not recipe:
            logger.debug("no_recipe_for_menu_item", extra={"menu_item_id": menu_item_id})
            return []
        return [
            self.decrement(component.ingredient_id, component.quantity_per_unit * quantity)
            for component in recipe
        ]

    def _signal_low_stock(self, ingredient_id: int, quantity: Decimal) -> None:
        threshold = self.session.scalars(
            select(Ingredient.min_threshold).where(Ingredient.id == ingredient_id)
        ).one()
        if quantity < threshold:
            logger.warning(
                "low_stock_detected",
                extra={
                    "ingredient_id": ingredient_id,
                    "quantity": quantity,
                    "min_threshold": threshold,
                },
            )
