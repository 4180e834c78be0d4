"""
AuditLogService -- append-only record of state-changing events.

Responsibility:
    Writes one AuditLogEntry per auditable action, inside the caller's
    transaction, so an entry exists if and only if the action committed.

Architecture position:
    Kernel > Services -- called by the TransactionCoordinator
    (ORDER_CREATED) and the PaymentRecorder (PAYMENT).

Invariants enforced:
    - Append-only: entries are never modified or deleted (ORM listeners in
      db/immutability.py).
    - Timestamps come from the injected Clock, never from the store.
"""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from cafe_kernel.domain.clock import Clock, SystemClock
from cafe_kernel.logging_config import get_logger
from cafe_kernel.models.audit_log import AuditAction, AuditLogEntry
from cafe_kernel.services.base import BaseService

logger = get_logger("services.audit")


@dataclass(frozen=True)
class AuditTraceEntry:
    """A single entry in an audit trace."""

    entry_id: int
    action: AuditAction
    actor_id: int | None
    details: str | None
    created_at: datetime


class AuditLogService(BaseService[AuditLogEntry]):
    """
    Service for appending audit entries.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def record(
        self,
        action: AuditAction,
        entity_type: str,
        entity_id: int,
        details: str | None = None,
        actor_id: int | None = None,
    ) -> AuditLogEntry:
        """Append one entry and flush it."""
        entry = AuditLogEntry(
            actor_id=actor_id,
            action=action.value,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
            created_at=self._clock.now(),
        )
        self.session.add(entry)
        self.session.flush()

        logger.info(
            "audit_entry_created",
            extra={
                "action": action.value,
                "entity_type": entity_type,
                "entity_id": entity_id,
            },
        )
        return entry

    # Domain-specific recording methods

    def record_order_created(
        self, order_id: int, item_count: int, actor_id: int | None = None,
    ) -> AuditLogEntry:
        return self.record(
            AuditAction.ORDER_CREATED,
            entity_type="Order",
            entity_id=order_id,
            details=f"Order {order_id} created with {item_count} item(s)",
            actor_id=actor_id,
        )

    def record_payment(
        self, order_id: int, payment_id: int, actor_id: int | None = None,
    ) -> AuditLogEntry:
        return self.record(
            AuditAction.PAYMENT,
            entity_type="Order",
            entity_id=order_id,
            details=f"Payment {payment_id} recorded",
            actor_id=actor_id,
        )

    def trace_for(self, entity_type: str, entity_id: int) -> tuple[AuditTraceEntry, ...]:
        """All entries for one entity, oldest first."""
        rows = self.session.scalars(
            select(AuditLogEntry)
            .where(
                AuditLogEntry.entity_type == entity_type,
                AuditLogEntry.entity_id == entity_id,
            )
            .order_by(AuditLogEntry.id)
        )
        return tuple(
            AuditTraceEntry(
                entry_id=row.id,
                action=AuditAction(row.action),
                actor_id=row.actor_id,
                details=row.details,
                created_at=row.created_at,
            )
            for row in rows
        )
