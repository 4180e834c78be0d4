"""Tests for OrderSelector and InventorySelector."""

from decimal import Decimal

from cafe_kernel.domain.dtos import OrderLineRequest
from cafe_kernel.selectors import InventorySelector, OrderSelector
from cafe_kernel.services import InventoryLedger


class TestOrderSelector:

    def test_missing_order(self, db, catalog):
        with db.read_session() as session:
            selector = OrderSelector(session)
            assert selector.get_summary(12345) is None
            assert selector.invoice_for(12345) is None

    def test_unpaid_order_has_no_invoice(self, db, order_builder, catalog):
        order_id = order_builder.build_order("Ana", "GENERAL", [OrderLineRequest(catalog.water, 2)])
        with db.read_session() as session:
            summary = OrderSelector(session).get_summary(order_id)
        assert summary.invoice is None
        assert summary.payments == ()
        assert summary.items[0].quantity == 2

    def test_invoice_for_paid_order(self, db, order_builder, payment_recorder, catalog):
        order_id = order_builder.build_order("Ana", "GENERAL", [OrderLineRequest(catalog.water, 2)])
        receipt = payment_recorder.record_payment(order_id, Decimal("2.00"), "CASH")

        with db.read_session() as session:
            selector = OrderSelector(session)
            invoice = selector.invoice_for(order_id)
            count = selector.count_invoices(order_id)
        assert invoice.invoice_number == receipt.invoice_number
        assert invoice.total == Decimal("2.00")
        assert count == 1


class TestInventorySelector:

    def test_nothing_low_after_seeding(self, db, catalog):
        with db.read_session() as session:
            assert InventorySelector(session).low_stock() == ()

    def test_low_stock_lists_items_below_threshold(self, db, catalog):
        with db.transaction() as session:
            ledger = InventoryLedger(session)
            ledger.decrement(catalog.milk, Decimal("4500"))
            ledger.decrement(catalog.butter, Decimal("1600"))

        with db.read_session() as session:
            low = InventorySelector(session).low_stock()
        assert [item.name for item in low] == ["Butter", "Milk"]
        assert low[0].shortfall == Decimal("100")
        assert low[1].unit == "ml"

    def test_quantity_on_hand_missing_record(self, db, catalog):
        with db.read_session() as session:
            assert InventorySelector(session).quantity_on_hand(99999) is None
