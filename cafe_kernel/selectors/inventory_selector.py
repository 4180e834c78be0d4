"""
Module: cafe_kernel.selectors.inventory_selector
Responsibility: Read-only stock queries -- on-hand quantity and the
    "find low stock" report.
Architecture position: Kernel > Selectors.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select

from cafe_kernel.models.reference import Ingredient, InventoryItem
from cafe_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class LowStockItem:
    """An ingredient whose on-hand quantity is below its threshold."""

    ingredient_id: int
    name: str
    unit: str
    quantity: Decimal
    min_threshold: Decimal

    @property
    def shortfall(self) -> Decimal:
        return self.min_threshold - self.quantity


class InventorySelector(BaseSelector[InventoryItem]):
    """Selector for inventory levels."""

    def quantity_on_hand(self, ingredient_id: int) -> Decimal | None:
        """Current quantity, or None when the ingredient has no stock record."""
        return self.session.scalars(
            select(InventoryItem.quantity).where(
                InventoryItem.ingredient_id == ingredient_id
            )
        ).one_or_none()

    def low_stock(self) -> tuple[LowStockItem, ...]:
        """All stock records strictly below their ingredient's threshold, by name."""
        rows = self.session.execute(
            select(InventoryItem, Ingredient)
            .join(Ingredient, InventoryItem.ingredient_id == Ingredient.id)
            .where(InventoryItem.quantity < Ingredient.min_threshold)
            .order_by(Ingredient.name)
        ).all()
        return tuple(
            LowStockItem(
                ingredient_id=ingredient.id,
                name=ingredient.name,
                unit=ingredient.unit,
                quantity=item.quantity,
                min_threshold=ingredient.min_threshold,
            )
            for item, ingredient in rows
        )
