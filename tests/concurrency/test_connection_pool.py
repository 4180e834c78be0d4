"""
Connection-pool bounds.

A Database with pool_size=1 and no overflow has exactly one connection.
While a scope holds it, a second acquisition waits pool_timeout and then
fails with ConnectionUnavailableError, distinct from TransactionFailureError.
"""

import time

import pytest

from cafe_kernel.db.engine import Database
from cafe_kernel.exceptions import ConnectionUnavailableError, TransactionFailureError


@pytest.fixture
def tiny_db(database_url, db_tables):
    db = Database.from_url(database_url, pool_size=1, max_overflow=0, pool_timeout=0.2)
    yield db
    db.dispose()


class TestPoolExhaustion:

    def test_second_acquisition_times_out(self, tiny_db):
        with tiny_db.transaction("holder"):
            started = time.monotonic()
            with pytest.raises(ConnectionUnavailableError) as exc_info:
                with tiny_db.transaction("waiter"):
                    pass
            waited = time.monotonic() - started

        assert not isinstance(exc_info.value, TransactionFailureError)
        assert exc_info.value.timeout == 0.2
        assert waited >= 0.15

    def test_read_session_also_bounded(self, tiny_db):
        with tiny_db.read_session():
            with pytest.raises(ConnectionUnavailableError):
                with tiny_db.read_session():
                    pass

    def test_connection_released_after_failure(self, tiny_db):
        with pytest.raises(TransactionFailureError):
            with tiny_db.transaction():
                raise RuntimeError("boom")

        # The single connection went back to the pool
        with tiny_db.transaction():
            pass
        with tiny_db.read_session():
            pass

    def test_exhaustion_logged(self, tiny_db, captured_logs):
        with tiny_db.transaction():
            with pytest.raises(ConnectionUnavailableError):
                with tiny_db.transaction():
                    pass

        assert any(r["message"] == "connection_unavailable" for r in captured_logs())
