"""
Value enums shared by the pure pricing layer and the ORM models.

Kernel > Domain -- zero I/O.  Models store the ``.value`` strings; the
str mixin keeps ``model.status == OrderStatus.PAID`` style comparisons
working against loaded rows.
"""

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

CENT = Decimal("0.01")


class CustomerCategory(str, Enum):
    """Customer category; selects which discounts apply.

    A discount whose ``applies_to`` is GENERAL applies to every category.
    """

    GENERAL = "GENERAL"
    STUDENT = "STUDENT"
    STAFF = "STAFF"
    LOYAL = "LOYAL"


class DiscountType(str, Enum):
    PERCENT = "PERCENT"
    FLAT = "FLAT"


def to_money(value: Decimal | int | str) -> Decimal:
    """Quantize to cents, half-up (the rounding of the DECIMAL(10,2) columns)."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
