"""
Module: cafe_kernel.db.engine
Responsibility: SQLAlchemy engine construction, connection-pool lifecycle and
    the transactional scope used by every write path of the kernel.
Architecture position: Kernel > DB.  May import from db/, config, exceptions
    and logging_config.  MUST NOT import from services/ or selectors/.

Invariants enforced:
    - One explicitly constructed ``Database`` per process (or per test
      session); there is no module-level engine.  Callers inject it.
    - Every logical operation acquires its own pooled connection through
      ``transaction()`` and releases it on every exit path.
    - ``transaction()`` commits on normal exit; on ANY exception it rolls
      back, closes the session (returning the connection to the pool) and
      re-raises a typed kernel error:
        IntegrityError            -> ConstraintViolationError
                                     (DuplicateInvoiceError for invoices)
        pool TimeoutError         -> ConnectionUnavailableError
        CafeKernelError           -> propagated unchanged
        anything else             -> TransactionFailureError
    - PostgreSQL sessions run at READ COMMITTED; mutating services take
      explicit row locks (SELECT ... FOR UPDATE) on the rows they change.

Failure modes:
    - ConnectionUnavailableError when pool_size + max_overflow connections
      are checked out and none is returned within pool_timeout.  The kernel
      never retries; backing off is caller policy.
    - RuntimeError if used after dispose().

Backends:
    PostgreSQL is the production store.  SQLite is accepted for local runs
    and tests: foreign keys are switched on per connection, and row locks
    compile to nothing.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool

from cafe_kernel.config import StoreSettings
from cafe_kernel.exceptions import (
    CafeKernelError,
    ConnectionUnavailableError,
    ConstraintViolationError,
    DuplicateInvoiceError,
    TransactionFailureError,
)
from cafe_kernel.logging_config import get_logger

logger = get_logger("db.engine")

_INVOICE_CONSTRAINT_MARKERS = (
    "uq_invoice_order",
    "uq_invoice_number",
    "invoices.order_id",
    "invoices.invoice_number",
)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def constraint_name(exc: IntegrityError) -> str | None:
    """Best-effort name of the violated constraint (PostgreSQL reports it)."""
    diag = getattr(exc.orig, "diag", None)
    return getattr(diag, "constraint_name", None)


def translate_integrity_error(
    exc: IntegrityError, order_id: int | None = None,
) -> ConstraintViolationError:
    """Map a store IntegrityError onto the kernel's constraint taxonomy.

    Only the invoice uniqueness constraints become DuplicateInvoiceError;
    ``order_id`` is attached to it when the caller knows the order.
    """
    name = constraint_name(exc)
    text = f"{name or ''} {exc.orig}"
    if any(marker in text for marker in _INVOICE_CONSTRAINT_MARKERS):
        return DuplicateInvoiceError(order_id, constraint=name)
    return ConstraintViolationError(str(exc.orig), constraint=name)


class Database:
    """
    Connection pool plus transactional-scope factory for the store.

    Contract:
        Constructed once from ``StoreSettings`` and injected into the
        services that need it.  ``transaction()`` is the only way kernel
        services obtain a Session for writing.

    Guarantees:
        - Connection acquisition blocks at most ``pool_timeout`` seconds.
        - No failed scope leaves any write behind.

    Usage:
        with Database.from_settings(load_store_settings()) as db:
            db.create_tables()
            with db.transaction("seed") as session:
                session.add(entity)
    """

    def __init__(self, engine: Engine, pool_timeout: float | None = None):
        self._engine: Engine | None = engine
        self._pool_timeout = pool_timeout
        self._session_factory: sessionmaker[Session] = sessionmaker(
            bind=engine, expire_on_commit=False,
        )

        from cafe_kernel.db.immutability import register_immutability_listeners

        register_immutability_listeners()

    @classmethod
    def from_settings(cls, settings: StoreSettings) -> "Database":
        """
        Build the engine and pool described by ``settings``.

        Args:
            settings: Resolved store settings (see cafe_kernel.config).

        Returns:
            A ready-to-use Database.  Tables are not created.
        """
        is_sqlite = settings.url.startswith("sqlite")
        kwargs: dict = {
            "echo": settings.echo,
            "poolclass": QueuePool,
            "pool_size": settings.pool_size,
            "max_overflow": settings.max_overflow,
            "pool_pre_ping": settings.pool_pre_ping,
            "pool_timeout": settings.pool_timeout,
            "pool_recycle": settings.pool_recycle,
        }
        if is_sqlite:
            kwargs["connect_args"] = {"check_same_thread": False}
        else:
            kwargs["isolation_level"] = "READ COMMITTED"

        engine = create_engine(settings.url, **kwargs)
        if is_sqlite:
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)

        logger.info(
            "engine_initialized",
            extra={
                "dialect": engine.dialect.name,
                "pool_size": settings.pool_size,
                "max_overflow": settings.max_overflow,
                "pool_timeout": settings.pool_timeout,
                "echo": settings.echo,
            },
        )
        return cls(engine, pool_timeout=settings.pool_timeout)

    @classmethod
    def from_url(cls, url: str, **overrides) -> "Database":
        """Shorthand for ``from_settings(StoreSettings(url=url, ...))``."""
        return cls.from_settings(StoreSettings(url=url, **overrides))

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database has been disposed")
        return self._engine

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    def _open_session(self) -> Session:
        """Create a session and check out its connection up front.

        Checking out eagerly makes pool exhaustion surface here, before
        any statement has run.
        """
        session = self._session_factory()
        try:
            session.connection()
        except PoolTimeoutError as exc:
            session.close()
            logger.warning(
                "connection_unavailable",
                extra={"pool_timeout": self._pool_timeout},
            )
            raise ConnectionUnavailableError(self._pool_timeout) from exc
        return session

    @contextmanager
    def transaction(self, operation: str | None = None) -> Generator[Session, None, None]:
        """
        Provide one all-or-nothing unit of work.

        Postconditions: On normal exit the session is committed and closed.
            On exception the session is rolled back and closed, and a typed
            kernel error is raised (see module docstring).

        Raises:
            ConnectionUnavailableError: pool exhausted past its timeout.
            ConstraintViolationError: the store rejected a write.
            TransactionFailureError: any other failure inside the scope.
        """
        if self._engine is None:
            raise RuntimeError("Database has been disposed")

        session = self._open_session()
        logger.debug("transaction_started", extra={"operation": operation})
        try:
            yield session
            session.commit()
            logger.debug("transaction_committed", extra={"operation": operation})
        except CafeKernelError:
            session.rollback()
            logger.warning(
                "transaction_rolled_back", extra={"operation": operation}, exc_info=True,
            )
            raise
        except IntegrityError as exc:
            session.rollback()
            logger.warning(
                "transaction_rolled_back", extra={"operation": operation}, exc_info=True,
            )
            raise translate_integrity_error(exc) from exc
        except PoolTimeoutError as exc:
            session.rollback()
            logger.warning(
                "transaction_rolled_back", extra={"operation": operation}, exc_info=True,
            )
            raise ConnectionUnavailableError(self._pool_timeout) from exc
        except Exception as exc:
            session.rollback()
            logger.warning(
                "transaction_rolled_back", extra={"operation": operation}, exc_info=True,
            )
            raise TransactionFailureError(
                f"{operation or 'transaction'} failed: {exc}", operation=operation,
            ) from exc
        finally:
            session.close()

    @contextmanager
    def read_session(self) -> Generator[Session, None, None]:
        """Session for read-only lookups; always rolled back and closed."""
        session = self._open_session()
        try:
            yield session
        finally:
            session.rollback()
            session.close()

    def create_tables(self) -> None:
        """Create all kernel tables (idempotent)."""
        from cafe_kernel.db.base import Base
        import cafe_kernel.models  # noqa: F401  registers every table on Base.metadata

        Base.metadata.create_all(self.engine)
        logger.info("tables_created", extra={"tables": len(Base.metadata.tables)})

    def drop_tables(self) -> None:
        """Drop all kernel tables. Use with caution - primarily for testing."""
        from cafe_kernel.db.base import Base
        import cafe_kernel.models  # noqa: F401

        Base.metadata.drop_all(self.engine)

    def pool_status(self) -> str:
        """Human-readable pool statistics for diagnostics."""
        return self.engine.pool.status()

    def dispose(self) -> None:
        """Close every pooled connection.  The Database is unusable afterwards."""
        if self._engine is not None:
            logger.info("engine_disposed", extra={"pool": self._engine.pool.status()})
            self._engine.dispose()
            self._engine = None

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *exc) -> None:
        self.dispose()
