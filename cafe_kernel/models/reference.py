"""
Module: cafe_kernel.models.reference
Responsibility: ORM persistence for catalog and stock reference data --
    menu items, ingredients, recipes, inventory levels, discounts and taxes.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - MenuItem.price >= 0, Discount.value >= 0, Tax.rate >= 0 (CHECK).
    - RecipeLine.quantity_per_unit > 0, unique per (menu item, ingredient).
    - InventoryItem.quantity >= 0 (CHECK), exactly one row per ingredient.

Reference data is maintained by catalog administration outside this kernel.
The order flow reads MenuItem, RecipeLine, Discount and Tax and mutates only
InventoryItem.quantity (through the InventoryLedger).
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cafe_kernel.db.base import Base, IdType, Money, Rate, StockQuantity
from cafe_kernel.domain.values import CustomerCategory, DiscountType  # noqa: F401  re-exported


_CATEGORY_VALUES = "('GENERAL', 'STUDENT', 'STAFF', 'LOYAL')"


class MenuItem(Base):
    """A sellable item with its current list price."""

    __tablename__ = "menu_items"

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_menu_items_price"),
    )

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    recipe_lines: Mapped[list["RecipeLine"]] = relationship(
        back_populates="menu_item",
        cascade="all, delete-orphan",
        order_by="RecipeLine.ingredient_id",
    )

    def __repr__(self) -> str:
        return f"<MenuItem {self.id} {self.name} @ {self.price}>"


class Ingredient(Base):
    """A stocked raw material (coffee beans, milk, butter, ...)."""

    __tablename__ = "ingredients"

    __table_args__ = (
        UniqueConstraint("name", name="uq_ingredient_name"),
        CheckConstraint("min_threshold >= 0", name="ck_ingredients_min_threshold"),
    )

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    unit: Mapped[str] = mapped_column(String(30), nullable=False)
    min_threshold: Mapped[Decimal] = mapped_column(
        StockQuantity, nullable=False, default=Decimal("0"),
    )

    def __repr__(self) -> str:
        return f"<Ingredient {self.id} {self.name} ({self.unit})>"


class RecipeLine(Base):
    """
    How much of one ingredient a single unit of a menu item consumes.

    A menu item may have any number of recipe lines; one with none
    consumes no tracked stock.
    """

    __tablename__ = "recipe_lines"

    __table_args__ = (
        UniqueConstraint("menu_item_id", "ingredient_id", name="uq_recipe_line"),
        CheckConstraint("quantity_per_unit > 0", name="ck_recipe_lines_quantity"),
    )

    menu_item_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("menu_items.id", ondelete="CASCADE"), nullable=False,
    )
    ingredient_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("ingredients.id"), nullable=False,
    )
    quantity_per_unit: Mapped[Decimal] = mapped_column(StockQuantity, nullable=False)

    menu_item: Mapped[MenuItem] = relationship(back_populates="recipe_lines")

    def __repr__(self) -> str:
        return (
            f"<RecipeLine menu_item={self.menu_item_id} "
            f"ingredient={self.ingredient_id} x{self.quantity_per_unit}>"
        )


class InventoryItem(Base):
    """On-hand quantity of one ingredient."""

    __tablename__ = "inventory"

    __table_args__ = (
        UniqueConstraint("ingredient_id", name="uq_inventory_ingredient"),
        CheckConstraint("quantity >= 0", name="ck_inventory_quantity"),
    )

    ingredient_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("ingredients.id"), nullable=False,
    )
    quantity: Mapped[Decimal] = mapped_column(
        StockQuantity, nullable=False, default=Decimal("0"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    ingredient: Mapped[Ingredient] = relationship()

    def __repr__(self) -> str:
        return f"<InventoryItem ingredient={self.ingredient_id} qty={self.quantity}>"


class Discount(Base):
    """A PERCENT or FLAT reduction for a customer category (or GENERAL)."""

    __tablename__ = "discounts"

    __table_args__ = (
        UniqueConstraint("name", name="uq_discount_name"),
        CheckConstraint("value >= 0", name="ck_discounts_value"),
        CheckConstraint("type IN ('PERCENT', 'FLAT')", name="ck_discounts_type"),
        CheckConstraint(
            f"applies_to IN {_CATEGORY_VALUES}", name="ck_discounts_applies_to",
        ),
    )

    name: Mapped[str] = mapped_column(String(80), nullable=False)
    type: Mapped[str] = mapped_column(String(10), nullable=False)
    value: Mapped[Decimal] = mapped_column(Money, nullable=False)
    applies_to: Mapped[str] = mapped_column(
        String(10), nullable=False, default=CustomerCategory.GENERAL.value,
    )

    def __repr__(self) -> str:
        return f"<Discount {self.name} {self.type} {self.value} -> {self.applies_to}>"


class Tax(Base):
    """A percentage tax applied to the post-discount amount."""

    __tablename__ = "taxes"

    __table_args__ = (
        UniqueConstraint("name", name="uq_tax_name"),
        CheckConstraint("rate >= 0", name="ck_taxes_rate"),
    )

    name: Mapped[str] = mapped_column(String(80), nullable=False)
    rate: Mapped[Decimal] = mapped_column(Rate, nullable=False)

    def __repr__(self) -> str:
        return f"<Tax {self.name} {self.rate}%>"
