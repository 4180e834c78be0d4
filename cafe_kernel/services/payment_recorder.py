"""
PaymentRecorder -- records a payment and issues the invoice, atomically.

Responsibility:
    One transactional unit that inserts the Payment, flips the Order to
    PAID, appends the PAYMENT audit entry and inserts the numbered Invoice.

Architecture position:
    Kernel > Services -- owns its transactional scope.

Statement order inside the scope (fixed):
    1. SELECT the Order FOR UPDATE.
    2. INSERT the Payment; flush for its id.
    3. Set Order.status = PAID and append the PAYMENT audit entry.
    4. INSERT the Invoice (number derived from order id and issue date,
       total snapshotted from the order).  The issue date is the calendar
       date of the injected clock, in the clock's zone.

Invariants enforced:
    - At most one invoice per order (unique constraint).  A second payment
      for an invoiced order fails on step 4 with DuplicateInvoiceError and
      rolls back; it is never a silent no-op.
    - The payment amount is not compared with the order total.

Failure modes:
    - InvalidAmountError / InvalidPaymentMethodError before any I/O.
    - OrderNotFoundError, OrderNotPayableError (CANCELLED orders).
    - DuplicateInvoiceError (a ConstraintViolationError) when an invoice
      already exists; other rejected invoice writes surface as plain
      ConstraintViolationError.
"""

from decimal import Decimal, InvalidOperation

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from cafe_engines.invoicing import format_invoice_number
from cafe_kernel.db.engine import Database, translate_integrity_error
from cafe_kernel.domain.clock import Clock, SystemClock
from cafe_kernel.domain.dtos import PaymentReceipt
from cafe_kernel.domain.values import to_money
from cafe_kernel.exceptions import (
    InvalidAmountError,
    InvalidPaymentMethodError,
    OrderNotFoundError,
    OrderNotPayableError,
)
from cafe_kernel.logging_config import LogContext, get_logger
from cafe_kernel.models.order import Order, OrderStatus
from cafe_kernel.models.payment import Invoice, Payment, PaymentMethod
from cafe_kernel.services.audit_service import AuditLogService
from cafe_kernel.services.base import ActorSupplier, no_actor

logger = get_logger("services.payment_recorder")


def validate_amount(amount: Decimal | int | str) -> Decimal:
    """Coerce to cents; reject anything that is not strictly positive."""
    if isinstance(amount, (bool, float)):
        raise InvalidAmountError(amount)
    try:
        value = to_money(amount)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmountError(amount) from None
    if not value.is_finite() or value <= 0:
        raise InvalidAmountError(amount)
    return value


def validate_method(method: PaymentMethod | str) -> PaymentMethod:
    try:
        return PaymentMethod(method)
    except ValueError:
        raise InvalidPaymentMethodError(method) from None


class PaymentRecorder:
    """
    Records payments against existing orders.

    Contract:
        ``record_payment`` returns a PaymentReceipt after commit, or raises
        with no payment, invoice, status change or audit entry persisted.
    """

    def __init__(
        self,
        db: Database,
        clock: Clock | None = None,
        actor_supplier: ActorSupplier | None = None,
    ):
        self._db = db
        self._clock = clock or SystemClock()
        self._actor_supplier = actor_supplier or no_actor

    def record_payment(
        self,
        order_id: int,
        amount: Decimal | int | str,
        method: PaymentMethod | str,
        reference: str | None = None,
    ) -> PaymentReceipt:
        amount = validate_amount(amount)
        method = validate_method(method)
        actor_id = self._actor_supplier()

        with LogContext.bind(
            correlation_id=LogContext.correlation_id(),
            actor_id=actor_id,
            order_id=order_id,
        ):
            with self._db.transaction("record_payment") as session:
                order = session.scalars(
                    select(Order).where(Order.id == order_id).with_for_update()
                ).one_or_none()
                if order is None:
                    raise OrderNotFoundError(order_id)
                if order.status == OrderStatus.CANCELLED:
                    raise OrderNotPayableError(order_id, order.status)

                now = self._clock.now()
                payment = Payment(
                    order_id=order_id,
                    amount=amount,
                    method=method.value,
                    reference=reference,
                    paid_at=now,
                )
                session.add(payment)
                session.flush()

                order.status = OrderStatus.PAID.value
                AuditLogService(session, self._clock).record_payment(
                    order_id, payment.id, actor_id=actor_id,
                )

                invoice = Invoice(
                    order_id=order_id,
                    invoice_number=format_invoice_number(order_id, now),
                    payment_id=payment.id,
                    total=order.total,
                    issued_at=now,
                )
                session.add(invoice)
                try:
                    session.flush()
                except IntegrityError as exc:
                    raise translate_integrity_error(exc, order_id=order_id) from exc

                receipt = PaymentReceipt(
                    order_id=order_id,
                    payment_id=payment.id,
                    invoice_id=invoice.id,
                    invoice_number=invoice.invoice_number,
                    amount=amount,
                    method=method.value,
                    total=invoice.total,
                    issued_at=now,
                )

            with LogContext.bind(
                payment_id=receipt.payment_id, invoice_number=receipt.invoice_number,
            ):
                logger.info(
                    "payment_recorded",
                    extra={
                        "amount": receipt.amount,
                        "method": receipt.method,
                        "total": receipt.total,
                    },
                )
        return receipt
