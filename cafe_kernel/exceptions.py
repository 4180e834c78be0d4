"""
Typed Exception Hierarchy for the Cafe Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (POS screens, service layers, batch scripts) must react to failures
by category: a malformed cart is shown back to the cashier, an exhausted
connection pool is retried later, a duplicate invoice is reported as
"already paid".  Matching on message text is fragile, so every error:

  1. Has a TYPED exception class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Carries structured DATA as attributes (order_id, menu_item_id, ...)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    CafeKernelError (base)
    |
    +-- ValidationError                 rejected before any I/O
    |   +-- EmptyOrderError
    |   +-- InvalidQuantityError
    |   +-- InvalidAmountError
    |   +-- InvalidPaymentMethodError
    |   +-- UnknownMenuItemError
    |   +-- UnknownDiscountError
    |   +-- UnknownTaxError
    |
    +-- TransactionFailureError         scope rolled back before re-raise
    |   +-- ConstraintViolationError
    |   |   +-- DuplicateInvoiceError
    |   +-- OrderNotFoundError
    |   +-- OrderNotPayableError
    |   +-- InsufficientStockError
    |   +-- StockRecordNotFoundError
    |
    +-- ConnectionUnavailableError      pool exhausted / acquisition timeout
    |
    +-- ImmutabilityViolationError      UPDATE/DELETE of an append-only row

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Validation      | EMPTY_ORDER                 | Cart has no lines
                | INVALID_QUANTITY            | Line quantity is not a positive int
                | INVALID_AMOUNT              | Payment amount <= 0
                | INVALID_PAYMENT_METHOD      | Method not CASH / CARD / MFS
                | UNKNOWN_MENU_ITEM           | Menu item missing or inactive
                | UNKNOWN_DISCOUNT            | Discount id not found
                | UNKNOWN_TAX                 | Tax id not found
----------------|-----------------------------|-----------------------------------------
Transaction     | TRANSACTION_FAILURE         | Any failure inside a scope
                | CONSTRAINT_VIOLATION        | Unique / FK / CHECK rejected by store
                | DUPLICATE_INVOICE           | Order already has an invoice
                | ORDER_NOT_FOUND             | Payment against unknown order
                | ORDER_NOT_PAYABLE           | Payment against cancelled order
                | INSUFFICIENT_STOCK          | Decrement would go below zero
                | STOCK_RECORD_NOT_FOUND      | Recipe ingredient has no stock row
----------------|-----------------------------|-----------------------------------------
Pool            | CONNECTION_UNAVAILABLE      | Pool exhausted past its timeout
----------------|-----------------------------|-----------------------------------------
Immutability    | IMMUTABILITY_VIOLATION      | Modifying an append-only record

===============================================================================
HANDLING PATTERNS
===============================================================================

    try:
        receipt = recorder.record_payment(order_id, amount, method)
    except DuplicateInvoiceError as e:
        show_already_paid(e.order_id)
    except ConnectionUnavailableError:
        schedule_retry()          # retries are caller policy
    except TransactionFailureError as e:
        log.error("payment failed", extra={"code": e.code})

The kernel never retries and never swallows an error.
"""

from decimal import Decimal


class CafeKernelError(Exception):
    """
    Base exception for all cafe kernel errors.

    All subclasses must have a `code` class attribute for
    machine-readable error identification.
    """

    code: str = "CAFE_KERNEL_ERROR"


# Validation exceptions


class ValidationError(CafeKernelError):
    """Malformed input, rejected before any write is attempted."""

    code: str = "VALIDATION_ERROR"


class EmptyOrderError(ValidationError):
    """An order must contain at least one line."""

    code: str = "EMPTY_ORDER"

    def __init__(self):
        super().__init__("Order must contain at least one item")


class InvalidQuantityError(ValidationError):
    """Line quantity is not a positive integer."""

    code: str = "INVALID_QUANTITY"

    def __init__(self, menu_item_id: int, quantity: object):
        self.menu_item_id = menu_item_id
        self.quantity = quantity
        super().__init__(
            f"Quantity for menu item {menu_item_id} must be a positive integer, "
            f"got {quantity!r}"
        )


class InvalidAmountError(ValidationError):
    """Payment amount is not strictly positive."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, amount: object):
        self.amount = amount
        super().__init__(f"Payment amount must be greater than zero, got {amount!r}")


class InvalidPaymentMethodError(ValidationError):
    """Payment method is not one of the supported tender types."""

    code: str = "INVALID_PAYMENT_METHOD"

    def __init__(self, method: object):
        self.method = method
        super().__init__(f"Unsupported payment method: {method!r}")


class UnknownMenuItemError(ValidationError):
    """Menu item reference could not be resolved to an active item."""

    code: str = "UNKNOWN_MENU_ITEM"

    def __init__(self, menu_item_id: int):
        self.menu_item_id = menu_item_id
        super().__init__(f"Menu item not found or inactive: {menu_item_id}")


class UnknownDiscountError(ValidationError):
    """Discount id does not exist."""

    code: str = "UNKNOWN_DISCOUNT"

    def __init__(self, discount_id: int):
        self.discount_id = discount_id
        super().__init__(f"Discount not found: {discount_id}")


class UnknownTaxError(ValidationError):
    """Tax id does not exist."""

    code: str = "UNKNOWN_TAX"

    def __init__(self, tax_id: int):
        self.tax_id = tax_id
        super().__init__(f"Tax not found: {tax_id}")


# Transaction exceptions


class TransactionFailureError(CafeKernelError):
    """
    A step inside a transactional scope failed.

    By the time this reaches the caller the whole scope has been rolled
    back; no partial effect of the failed unit is observable.
    """

    code: str = "TRANSACTION_FAILURE"

    def __init__(self, message: str, operation: str | None = None):
        self.operation = operation
        super().__init__(message)


class ConstraintViolationError(TransactionFailureError):
    """The store rejected a write (unique, foreign key or check constraint)."""

    code: str = "CONSTRAINT_VIOLATION"

    def __init__(self, message: str, constraint: str | None = None):
        self.constraint = constraint
        super().__init__(message)


class DuplicateInvoiceError(ConstraintViolationError):
    """An invoice already exists for the order."""

    code: str = "DUPLICATE_INVOICE"

    def __init__(self, order_id: int | None = None, constraint: str | None = None):
        self.order_id = order_id
        target = f"order {order_id}" if order_id is not None else "this order"
        super().__init__(f"Invoice already issued for {target}", constraint=constraint)


class OrderNotFoundError(TransactionFailureError):
    """Order id does not exist."""

    code: str = "ORDER_NOT_FOUND"

    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"Order not found: {order_id}")


class OrderNotPayableError(TransactionFailureError):
    """Order is in a status that does not accept payment."""

    code: str = "ORDER_NOT_PAYABLE"

    def __init__(self, order_id: int, status: str):
        self.order_id = order_id
        self.status = status
        super().__init__(f"Order {order_id} cannot be paid in status {status}")


class InsufficientStockError(TransactionFailureError):
    """A stock decrement would drive on-hand quantity below zero."""

    code: str = "INSUFFICIENT_STOCK"

    def __init__(self, ingredient_id: int, on_hand: Decimal, requested: Decimal):
        self.ingredient_id = ingredient_id
        self.on_hand = on_hand
        self.requested = requested
        super().__init__(
            f"Insufficient stock for ingredient {ingredient_id}: "
            f"on hand {on_hand}, requested {requested}"
        )


class StockRecordNotFoundError(TransactionFailureError):
    """A recipe references an ingredient that has no inventory row."""

    code: str = "STOCK_RECORD_NOT_FOUND"

    def __init__(self, ingredient_id: int):
        self.ingredient_id = ingredient_id
        super().__init__(f"No inventory record for ingredient {ingredient_id}")


# Pool exceptions


class ConnectionUnavailableError(CafeKernelError):
    """
    No pooled connection could be acquired within the configured timeout.

    Raised distinctly from TransactionFailureError so callers can back off
    and retry; the kernel itself never retries.
    """

    code: str = "CONNECTION_UNAVAILABLE"

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout
        suffix = f" within {timeout}s" if timeout is not None else ""
        super().__init__(f"No database connection available{suffix}")


# Immutability exceptions


class ImmutabilityViolationError(CafeKernelError):
    """
    Attempted to modify or delete an append-only record.

    AuditLogEntry, OrderItem, Payment and Invoice rows are immutable
    once inserted.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
