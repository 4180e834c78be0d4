"""
ORM-Level Immutability Enforcement.

===============================================================================
WHY THIS EXISTS
===============================================================================

Order lines, payments, invoices and audit entries are historical facts:
an order line is a price snapshot, a payment is money that changed hands,
an invoice is a numbered document handed to a customer.  Once inserted
they must never change.  SQLAlchemy fires events before UPDATE/DELETE
statements reach the database; the listeners below intercept them:

    session.flush()
         |
         v
    [before_update event] --> _check_*_immutability() --> ImmutabilityViolationError
         |                                                        ^
         v                                                        |
    [before_delete event] --> _check_audit_log_delete() ----------+
         |
         v
    SQL sent to database (only if checks pass)

The raised error aborts the flush; the surrounding transaction scope rolls
back.

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity          | UPDATE  | DELETE
----------------|---------|---------------------------------------------
AuditLogEntry   | blocked | blocked
OrderItem       | blocked | allowed (only via the owning Order's cascade)
Payment         | blocked | allowed (cascade from Order)
Invoice         | blocked | allowed

===============================================================================
USAGE
===============================================================================

Registered by ``Database.__init__`` (idempotent).  To temporarily disable
(TESTS ONLY):

    from cafe_kernel.db.immutability import unregister_immutability_listeners
    unregister_immutability_listeners()
"""

from sqlalchemy import event, inspect

from cafe_kernel.exceptions import ImmutabilityViolationError
from cafe_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _changed_fields(target) -> list[str]:
    return [attr.key for attr in inspect(target).attrs if attr.history.has_changes()]


def _block_update(entity_type: str, target) -> None:
    changed = _changed_fields(target)
    if not changed:
        return
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": str(target.id),
            "operation": "UPDATE",
            "fields": changed,
        },
    )
    raise ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(target.id),
        reason=f"Cannot modify field '{changed[0]}' on {entity_type}",
    )


def _check_order_item_immutability(mapper, connection, target):
    """Order lines are price snapshots; no field may change after insert."""
    _block_update("OrderItem", target)


def _check_payment_immutability(mapper, connection, target):
    _block_update("Payment", target)


def _check_invoice_immutability(mapper, connection, target):
    _block_update("Invoice", target)


def _check_audit_log_immutability(mapper, connection, target):
    """Prevent any updates to AuditLogEntry records."""
    _block_update("AuditLogEntry", target)


def _check_audit_log_delete(mapper, connection, target):
    """Prevent deletion of AuditLogEntry records."""
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "AuditLogEntry",
            "entity_id": str(target.id),
            "operation": "DELETE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="AuditLogEntry",
        entity_id=str(target.id),
        reason="Audit log entries cannot be deleted",
    )


def _listeners():
    from cafe_kernel.models.audit_log import AuditLogEntry
    from cafe_kernel.models.order import OrderItem
    from cafe_kernel.models.payment import Invoice, Payment

    return (
        (OrderItem, "before_update", _check_order_item_immutability),
        (Payment, "before_update", _check_payment_immutability),
        (Invoice, "before_update", _check_invoice_immutability),
        (AuditLogEntry, "before_update", _check_audit_log_immutability),
        (AuditLogEntry, "before_delete", _check_audit_log_delete),
    )


def register_immutability_listeners():
    """Register all immutability enforcement event listeners (idempotent)."""
    for target, event_name, listener_fn in _listeners():
        if not event.contains(target, event_name, listener_fn):
            event.listen(target, event_name, listener_fn)


def unregister_immutability_listeners():
    """
    Remove immutability enforcement event listeners.

    WARNING: Only use this in tests where you need to intentionally
    violate immutability rules to verify detection.
    """
    for target, event_name, listener_fn in _listeners():
        if event.contains(target, event_name, listener_fn):
            event.remove(target, event_name, listener_fn)
