"""Pure domain layer of the cafe kernel: clock, values and DTOs."""

from cafe_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from cafe_kernel.domain.dtos import (
    OrderDraft,
    OrderLineRequest,
    PaymentReceipt,
    ResolvedLine,
)
from cafe_kernel.domain.values import CustomerCategory, DiscountType, to_money

__all__ = [
    "Clock",
    "CustomerCategory",
    "DeterministicClock",
    "DiscountType",
    "OrderDraft",
    "OrderLineRequest",
    "PaymentReceipt",
    "ResolvedLine",
    "SystemClock",
    "to_money",
]
