"""Selectors for the cafe kernel (read side)."""

from cafe_kernel.selectors.catalog_selector import (
    MenuCatalog,
    RecipeComponent,
    ReferenceSelector,
)
from cafe_kernel.selectors.inventory_selector import InventorySelector, LowStockItem
from cafe_kernel.selectors.order_selector import (
    InvoiceDTO,
    OrderItemDTO,
    OrderSelector,
    OrderSummary,
    PaymentDTO,
)

__all__ = [
    "InventorySelector",
    "InvoiceDTO",
    "LowStockItem",
    "MenuCatalog",
    "OrderItemDTO",
    "OrderSelector",
    "OrderSummary",
    "PaymentDTO",
    "RecipeComponent",
    "ReferenceSelector",
]
