"""
Module: cafe_kernel.models.audit_log
Responsibility: ORM persistence for the append-only audit log.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Audit rows are append-only; no UPDATE or DELETE (ORM listeners in
      db/immutability.py).

Minimum coverage (each action produces one entry):
    - ORDER_CREATED   written by the TransactionCoordinator
    - PAYMENT         written by the PaymentRecorder
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cafe_kernel.db.base import Base, IdType


class AuditAction(str, Enum):
    """Types of auditable actions."""

    ORDER_CREATED = "ORDER_CREATED"
    PAYMENT = "PAYMENT"


class AuditLogEntry(Base):
    """One state-changing event, attributed to an actor when one is known."""

    __tablename__ = "audit_logs"

    __table_args__ = (
        Index("idx_audit_entity", "entity_type", "entity_id"),
        Index("idx_audit_action", "action"),
        Index("idx_audit_created", "created_at"),
    )

    # Null when no identity was supplied (e.g. unattended terminals)
    actor_id: Mapped[int | None] = mapped_column(IdType, nullable=True)
    action: Mapped[str] = mapped_column(String(120), nullable=False)
    entity_type: Mapped[str | None] = mapped_column(String(80), nullable=True)
    entity_id: Mapped[int | None] = mapped_column(IdType, nullable=True)
    details: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<AuditLogEntry {self.action} on {self.entity_type}:{self.entity_id}>"
