"""Tests for the AuditLogService."""

from datetime import UTC, datetime

import pytest

from cafe_kernel.exceptions import TransactionFailureError
from cafe_kernel.models import AuditAction
from cafe_kernel.services import AuditLogService


class TestAuditLogService:

    def test_entries_use_clock_time(self, db, deterministic_clock):
        with db.transaction() as session:
            entry = AuditLogService(session, deterministic_clock).record(
                AuditAction.ORDER_CREATED, "Order", 5, details="created",
            )
            entry_id = entry.id

        with db.read_session() as session:
            trace = AuditLogService(session).trace_for("Order", 5)
        assert [e.entry_id for e in trace] == [entry_id]
        created = trace[0].created_at
        if created.tzinfo is None:  # SQLite drops the offset
            created = created.replace(tzinfo=UTC)
        assert created == datetime(2026, 1, 28, 9, 30, tzinfo=UTC)
        assert trace[0].actor_id is None

    def test_trace_in_insertion_order(self, db, deterministic_clock):
        with db.transaction() as session:
            audit = AuditLogService(session, deterministic_clock)
            audit.record_order_created(8, item_count=2, actor_id=3)
            deterministic_clock.advance(60)
            audit.record_payment(8, payment_id=11, actor_id=3)
            audit.record_order_created(9, item_count=1)

        with db.read_session() as session:
            trace = AuditLogService(session).trace_for("Order", 8)
        assert [e.action for e in trace] == [AuditAction.ORDER_CREATED, AuditAction.PAYMENT]
        assert trace[1].details == "Payment 11 recorded"
        assert {e.actor_id for e in trace} == {3}

    def test_uncommitted_entry_is_rolled_back(self, db):
        class Boom(Exception):
            pass

        with pytest.raises(TransactionFailureError):
            with db.transaction() as session:
                AuditLogService(session).record(AuditAction.PAYMENT, "Order", 1)
                raise Boom()

        with db.read_session() as session:
            assert AuditLogService(session).trace_for("Order", 1) == ()
