"""Services for the cafe kernel (write side)."""

from cafe_kernel.services.audit_service import AuditLogService, AuditTraceEntry
from cafe_kernel.services.base import ActorSupplier, BaseService
from cafe_kernel.services.inventory_ledger import InventoryLedger, StockMovement
from cafe_kernel.services.order_builder import OrderBuilder, validate_lines
from cafe_kernel.services.payment_recorder import PaymentRecorder
from cafe_kernel.services.transaction_coordinator import TransactionCoordinator

__all__ = [
    "ActorSupplier",
    "AuditLogService",
    "AuditTraceEntry",
    "BaseService",
    "InventoryLedger",
    "OrderBuilder",
    "PaymentRecorder",
    "StockMovement",
    "TransactionCoordinator",
    "validate_lines",
]
