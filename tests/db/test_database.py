"""
Tests for the Database component's transactional scope.

Covers:
- Commit on success, rollback on every failure path
- Translation of store errors into the kernel taxonomy
- Lifecycle (dispose) and read-only sessions
"""

from datetime import UTC, datetime
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from cafe_kernel.db.engine import Database, translate_integrity_error
from cafe_kernel.exceptions import (
    ConstraintViolationError,
    DuplicateInvoiceError,
    EmptyOrderError,
    TransactionFailureError,
)
from cafe_kernel.models import Invoice, Order, Tax


def _tax_count(db) -> int:
    with db.read_session() as session:
        return session.scalar(select(func.count()).select_from(Tax))


class TestTransactionScope:

    def test_commits_on_success(self, db):
        with db.transaction("add_tax") as session:
            session.add(Tax(name="VAT", rate=Decimal("15")))
        assert _tax_count(db) == 1

    def test_arbitrary_error_becomes_transaction_failure(self, db):
        with pytest.raises(TransactionFailureError) as exc_info:
            with db.transaction("add_tax") as session:
                session.add(Tax(name="VAT", rate=Decimal("15")))
                session.flush()
                raise RuntimeError("disk on fire")

        assert exc_info.value.operation == "add_tax"
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert "disk on fire" in str(exc_info.value)
        assert _tax_count(db) == 0

    def test_kernel_error_propagates_unchanged(self, db):
        with pytest.raises(EmptyOrderError):
            with db.transaction() as session:
                session.add(Tax(name="VAT", rate=Decimal("15")))
                session.flush()
                raise EmptyOrderError()
        assert _tax_count(db) == 0

    def test_check_constraint_becomes_constraint_violation(self, db):
        with pytest.raises(ConstraintViolationError) as exc_info:
            with db.transaction() as session:
                session.add(Tax(name="Negative", rate=Decimal("-1")))
        assert not isinstance(exc_info.value, DuplicateInvoiceError)
        assert _tax_count(db) == 0

    def test_unique_constraint_becomes_constraint_violation(self, db):
        with db.transaction() as session:
            session.add(Tax(name="VAT", rate=Decimal("15")))
        with pytest.raises(ConstraintViolationError):
            with db.transaction() as session:
                session.add(Tax(name="VAT", rate=Decimal("5")))
        assert _tax_count(db) == 1

    def test_duplicate_invoice_classified(self, db):
        issued = datetime(2026, 1, 28, tzinfo=UTC)
        with db.transaction() as session:
            order = Order(customer_name="Ana")
            session.add(order)
            session.flush()
            session.add(Invoice(
                order_id=order.id, invoice_number="INV-A", total=Decimal("0"), issued_at=issued,
            ))
            order_id = order.id

        with pytest.raises(DuplicateInvoiceError):
            with db.transaction() as session:
                session.add(Invoice(
                    order_id=order_id, invoice_number="INV-B", total=Decimal("0"), issued_at=issued,
                ))

    def test_foreign_keys_enforced(self, db):
        with pytest.raises(ConstraintViolationError):
            with db.transaction() as session:
                session.add(Order(customer_name="Ana", tax_id=424242))

    def test_rollback_logged(self, db, captured_logs):
        with pytest.raises(TransactionFailureError):
            with db.transaction("doomed"):
                raise ValueError("nope")

        records = [r for r in captured_logs() if r["message"] == "transaction_rolled_back"]
        assert records[0]["operation"] == "doomed"
        assert records[0]["level"] == "WARNING"
        assert records[0]["exc_type"] == "ValueError"


class TestReadSession:

    def test_writes_are_discarded(self, db):
        with db.read_session() as session:
            session.add(Tax(name="VAT", rate=Decimal("15")))
            session.flush()
        assert _tax_count(db) == 0


class TestLifecycle:

    def test_dispose_makes_database_unusable(self, database_url, db_tables):
        local = Database.from_url(database_url, pool_size=1)
        assert local.dialect_name in ("sqlite", "postgresql")
        assert "Pool size: 1" in local.pool_status()
        local.dispose()

        with pytest.raises(RuntimeError):
            with local.transaction():
                pass

    def test_context_manager_disposes(self, database_url, db_tables):
        with Database.from_url(database_url, pool_size=1) as local:
            with local.read_session():
                pass
        with pytest.raises(RuntimeError):
            local.engine


class TestTranslateIntegrityError:
    """Only the invoice uniqueness constraints count as duplicate invoices."""

    @staticmethod
    def _integrity_error(message: str) -> IntegrityError:
        return IntegrityError("INSERT INTO invoices ...", {}, Exception(message))

    def test_invoice_order_unique_is_duplicate(self):
        exc = translate_integrity_error(
            self._integrity_error("UNIQUE constraint failed: invoices.order_id"), order_id=42,
        )
        assert isinstance(exc, DuplicateInvoiceError)
        assert exc.order_id == 42

    def test_invoice_number_unique_is_duplicate(self):
        exc = translate_integrity_error(
            self._integrity_error("UNIQUE constraint failed: invoices.invoice_number"),
        )
        assert isinstance(exc, DuplicateInvoiceError)
        assert exc.order_id is None

    def test_foreign_key_failure_is_not_duplicate(self):
        exc = translate_integrity_error(
            self._integrity_error("FOREIGN KEY constraint failed"), order_id=42,
        )
        assert isinstance(exc, ConstraintViolationError)
        assert not isinstance(exc, DuplicateInvoiceError)
        assert "FOREIGN KEY" in str(exc)

    def test_check_failure_is_not_duplicate(self):
        exc = translate_integrity_error(
            self._integrity_error("CHECK constraint failed: ck_payments_amount"),
        )
        assert type(exc) is ConstraintViolationError
