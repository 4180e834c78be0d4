"""
TransactionCoordinator -- the single write path that creates orders.

Responsibility:
    Makes "create order + insert items + consume stock + persist pricing"
    all-or-nothing.  No item-less or priced-but-item-less order is ever
    observable.

Architecture position:
    Kernel > Services -- owns its transactional scope
    (``Database.transaction``).  Called by the OrderBuilder with a fully
    priced OrderDraft.

Statement order inside the scope (fixed):
    1. INSERT the Order in PENDING with zero amounts; flush for its id.
    2. INSERT the OrderItems; for each, decrement recipe stock through the
       InventoryLedger (same transaction).
    3. Write subtotal / discount / tax / total back onto the Order.
    4. Append the ORDER_CREATED audit entry.

Failure modes:
    Any failure in steps 1-4 rolls the whole scope back and surfaces as a
    TransactionFailureError (ConstraintViolationError, InsufficientStockError,
    StockRecordNotFoundError, ...), or ConnectionUnavailableError when no
    connection could be acquired.
"""

from cafe_kernel.db.engine import Database
from cafe_kernel.domain.clock import Clock, SystemClock
from cafe_kernel.domain.dtos import OrderDraft
from cafe_kernel.logging_config import LogContext, get_logger
from cafe_kernel.models.order import Order, OrderItem, OrderStatus
from cafe_kernel.services.audit_service import AuditLogService
from cafe_kernel.services.base import ActorSupplier, no_actor
from cafe_kernel.services.inventory_ledger import InventoryLedger

logger = get_logger("services.transaction_coordinator")


class TransactionCoordinator:
    """
    Commits priced order drafts.

    Contract:
        ``commit_order(draft)`` returns the new order id after commit, or
        raises with nothing persisted.
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

    def commit_order(self, draft: OrderDraft) -> int:
        actor_id = self._actor_supplier()
        with LogContext.bind(correlation_id=LogContext.correlation_id(), actor_id=actor_id):
            with self._db.transaction("create_order") as session:
                # Step 1: PENDING order with zero pricing fields
                order = Order(
                    customer_name=draft.customer_name,
                    customer_category=draft.customer_category.value,
                    status=OrderStatus.PENDING.value,
                    discount_id=draft.discount_id,
                    tax_id=draft.tax_id,
                )
                session.add(order)
                session.flush()
                order_id = order.id

                with LogContext.bind(order_id=order_id):
                    # Step 2: items, and the stock they consume
                    session.add_all([
                        OrderItem(
                            order_id=order_id,
                            menu_item_id=line.menu_item_id,
                            quantity=line.quantity,
                            unit_price=line.unit_price,
                            line_total=line.line_total,
                        )
                        for line in draft.lines
                    ])
                    session.flush()

                    ledger = InventoryLedger(session)
                    for line in draft.lines:
                        ledger.consume_for_item(line.menu_item_id, line.quantity)

                    # Step 3: pricing write-back
                    order.subtotal = draft.subtotal
                    order.discount_amount = draft.discount_amount
                    order.tax_amount = draft.tax_amount
                    order.total = draft.total
                    session.flush()

                    AuditLogService(session, self._clock).record_order_created(
                        order_id, len(draft.lines), actor_id=actor_id,
                    )

            logger.info(
                "order_committed",
                extra={
                    "order_id": order_id,
                    "item_count": len(draft.lines),
                    "subtotal": draft.subtotal,
                    "discount_amount": draft.discount_amount,
                    "tax_amount": draft.tax_amount,
                    "total": draft.total,
                },
            )
        return order_id
