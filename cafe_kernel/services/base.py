"""
BaseService -- abstract base for session-bound kernel services.

Responsibility:
    Common constructor for services that write inside a transaction they
    do not own (InventoryLedger, AuditLogService).  They persist with
    ``session.flush()`` and never commit or roll back; the owning
    ``Database.transaction()`` scope decides the outcome.

Architecture position:
    Kernel > Services.  Coordinating services (OrderBuilder,
    TransactionCoordinator, PaymentRecorder) own their scope instead and
    take a ``Database``.
"""

from abc import ABC
from collections.abc import Callable
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from cafe_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)

ActorSupplier = Callable[[], int | None]


def no_actor() -> int | None:
    """Default actor supplier: no identity known."""
    return None


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for flush-only services.

    Guarantees:
        - The service never calls ``session.commit()`` or
          ``session.rollback()``.
    """

    def __init__(self, session: Session):
        self.session = session
