"""
Pricing Engine - discount, tax and order totals.

Pure functions with no I/O.  Discount and tax definitions are passed in as
value objects; callers (the OrderBuilder) load them from reference data.

Pricing order is fixed and must not be changed:

    1. discount = f(raw subtotal, discount, customer category)
    2. taxable  = subtotal - discount
    3. tax      = taxable * rate / 100
    4. total    = subtotal - discount + tax

Every monetary output is quantized to cents (half-up) as soon as it is
computed, so ``total == subtotal - discount_amount + tax_amount`` holds
exactly on the stored DECIMAL(10,2) values.

Usage:
    from decimal import Decimal
    from cafe_engines.pricing import DiscountTerms, TaxTerms, price_order
    from cafe_kernel.domain.values import CustomerCategory, DiscountType

    result = price_order(
        subtotal=Decimal("100.00"),
        discount=DiscountTerms(DiscountType.FLAT, Decimal("10")),
        tax=TaxTerms(rate=Decimal("15")),
        customer_category=CustomerCategory.GENERAL,
    )
    print(result.total)  # 103.50
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from cafe_kernel.domain.values import CustomerCategory, DiscountType, to_money
from cafe_kernel.logging_config import get_logger

logger = get_logger("engines.pricing")

ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class DiscountTerms:
    """
    Discount definition.

    ``value`` is a percentage for PERCENT discounts and a currency amount
    for FLAT discounts.
    """

    discount_type: DiscountType
    value: Decimal
    applies_to: CustomerCategory = CustomerCategory.GENERAL
    discount_id: int | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Discount value cannot be negative")
        # Normalize plain strings loaded from the store
        object.__setattr__(self, "discount_type", DiscountType(self.discount_type))
        object.__setattr__(self, "applies_to", CustomerCategory(self.applies_to))

    def applies(self, customer_category: CustomerCategory | str) -> bool:
        """True when the discount targets this category or everyone."""
        return self.applies_to in (
            CustomerCategory(customer_category),
            CustomerCategory.GENERAL,
        )


@dataclass(frozen=True)
class TaxTerms:
    """Tax definition; ``rate`` is a percentage (15 means 15%)."""

    rate: Decimal
    tax_id: int | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        if self.rate < 0:
            raise ValueError("Tax rate cannot be negative")


@dataclass(frozen=True)
class PricingResult:
    """Immutable outcome of pricing one order."""

    subtotal: Decimal
    discount_amount: Decimal
    taxable_amount: Decimal
    tax_amount: Decimal
    total: Decimal

    @property
    def is_consistent(self) -> bool:
        return (
            self.total == self.subtotal - self.discount_amount + self.tax_amount
            and min(self.subtotal, self.discount_amount, self.tax_amount, self.total) >= 0
        )


def line_total(quantity: int, unit_price: Decimal) -> Decimal:
    """quantity x unit_price, in cents."""
    return to_money(Decimal(quantity) * unit_price)


def compute_subtotal(line_totals: Iterable[Decimal]) -> Decimal:
    return to_money(sum(line_totals, ZERO))


def compute_discount(
    subtotal: Decimal,
    discount: DiscountTerms | None,
    customer_category: CustomerCategory | str,
) -> Decimal:
    """
    Discount amount for a subtotal.

    Returns 0 when there is no discount or it targets another category
    (and is not GENERAL).  PERCENT gives ``subtotal * value / 100``; FLAT
    gives ``min(value, subtotal)``.  Neither may exceed the subtotal.
    """
    if discount is None or not discount.applies(customer_category):
        return ZERO
    if discount.discount_type == DiscountType.PERCENT:
        amount = subtotal * discount.value / HUNDRED
    else:
        amount = discount.value
    return to_money(min(amount, subtotal))


def compute_tax(taxable_amount: Decimal, tax: TaxTerms | None) -> Decimal:
    """Tax on an amount; 0 when there is no tax."""
    if tax is None:
        return ZERO
    return to_money(taxable_amount * tax.rate / HUNDRED)


def price_order(
    subtotal: Decimal,
    discount: DiscountTerms | None,
    tax: TaxTerms | None,
    customer_category: CustomerCategory | str,
) -> PricingResult:
    """Price an order: discount on the raw subtotal, tax on the remainder."""
    if subtotal < 0:
        raise ValueError("Subtotal cannot be negative")
    subtotal = to_money(subtotal)
    discount_amount = compute_discount(subtotal, discount, customer_category)
    taxable = subtotal - discount_amount
    tax_amount = compute_tax(taxable, tax)
    result = PricingResult(
        subtotal=subtotal,
        discount_amount=discount_amount,
        taxable_amount=taxable,
        tax_amount=tax_amount,
        total=taxable + tax_amount,
    )
    logger.debug(
        "order_priced",
        extra={
            "subtotal": result.subtotal,
            "discount_amount": result.discount_amount,
            "tax_amount": result.tax_amount,
            "total": result.total,
            "customer_category": CustomerCategory(customer_category).value,
        },
    )
    return result
