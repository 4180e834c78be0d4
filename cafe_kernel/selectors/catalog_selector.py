"""
Module: cafe_kernel.selectors.catalog_selector
Responsibility: Read-only lookups of the reference data the order flow
    consumes: menu prices, recipes, discounts and taxes.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Unit prices are snapshotted at resolution time; later menu price
      changes never reach an already-built order.
    - Inactive menu items resolve exactly like missing ones.

Failure modes:
    - UnknownMenuItemError, UnknownDiscountError, UnknownTaxError for ids that
      do not resolve.  These are ValidationErrors: resolution runs before
      any write transaction is opened.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select

from cafe_engines.pricing import DiscountTerms, TaxTerms, line_total
from cafe_kernel.domain.dtos import OrderLineRequest, ResolvedLine
from cafe_kernel.exceptions import (
    UnknownDiscountError,
    UnknownMenuItemError,
    UnknownTaxError,
)
from cafe_kernel.models.reference import Discount, MenuItem, RecipeLine, Tax
from cafe_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class RecipeComponent:
    """One ingredient and how much of it a single unit consumes."""

    ingredient_id: int
    quantity_per_unit: Decimal


class MenuCatalog(BaseSelector[MenuItem]):
    """
    Menu lookups: id -> unit price, and id -> recipe.

    Contract:
        ``resolve_lines`` preserves the order of the requested lines and
        allows the same menu item to appear on several lines.
    """

    def resolve_lines(self, lines: Iterable[OrderLineRequest]) -> tuple[ResolvedLine, ...]:
        """Resolve requested lines to priced lines.

        Raises:
            UnknownMenuItemError: an id is missing or the item is inactive.
        """
        lines = tuple(lines)
        ids = {line.menu_item_id for line in lines}
        items = {
            item.id: item
            for item in self.session.scalars(
                select(MenuItem).where(MenuItem.id.in_(ids), MenuItem.is_active.is_(True))
            )
        }

        resolved = []
        for line in lines:
            item = items.get(line.menu_item_id)
            if item is None:
                raise UnknownMenuItemError(line.menu_item_id)
            resolved.append(
                ResolvedLine(
                    menu_item_id=item.id,
                    name=item.name,
                    quantity=line.quantity,
                    unit_price=item.price,
                    line_total=line_total(line.quantity, item.price),
                )
            )
        return tuple(resolved)

    def recipe_for(self, menu_item_id: int) -> tuple[RecipeComponent, ...]:
        """Ingredients consumed by one unit of a menu item (possibly none)."""
        rows = self.session.scalars(
            select(RecipeLine)
            .where(RecipeLine.menu_item_id == menu_item_id)
            .order_by(RecipeLine.ingredient_id)
        )
        return tuple(
            RecipeComponent(row.ingredient_id, row.quantity_per_unit) for row in rows
        )


class ReferenceSelector(BaseSelector[Discount]):
    """Discount and tax definitions as pricing value objects."""

    def discount_terms(self, discount_id: int) -> DiscountTerms:
        discount = self.session.get(Discount, discount_id)
        if discount is None:
            raise UnknownDiscountError(discount_id)
        return DiscountTerms(
            discount_type=discount.type,
            value=discount.value,
            applies_to=discount.applies_to,
            discount_id=discount.id,
            name=discount.name,
        )

    def tax_terms(self, tax_id: int) -> TaxTerms:
        tax = self.session.get(Tax, tax_id)
        if tax is None:
            raise UnknownTaxError(tax_id)
        return TaxTerms(rate=tax.rate, tax_id=tax.id, name=tax.name)
