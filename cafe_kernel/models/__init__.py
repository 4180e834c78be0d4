"""Domain models for the cafe kernel."""

from cafe_kernel.models.audit_log import AuditAction, AuditLogEntry
from cafe_kernel.models.order import Order, OrderItem, OrderStatus
from cafe_kernel.models.payment import Invoice, Payment, PaymentMethod
from cafe_kernel.models.reference import (
    CustomerCategory,
    Discount,
    DiscountType,
    Ingredient,
    InventoryItem,
    MenuItem,
    RecipeLine,
    Tax,
)

__all__ = [
    "AuditAction",
    "AuditLogEntry",
    "CustomerCategory",
    "Discount",
    "DiscountType",
    "Ingredient",
    "InventoryItem",
    "Invoice",
    "MenuItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Payment",
    "PaymentMethod",
    "RecipeLine",
    "Tax",
]
