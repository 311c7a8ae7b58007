"""
Tests for BillCommitService.finalize.

Covers validation order, the single-transaction guarantee and bill numbering
across both storage backends.
"""

from datetime import timedelta
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from hotel_billing.engine import (
    Area,
    BillCommitService,
    CommitError,
    EmptyOrder,
    LineItem,
    MenuCatalog,
    MissingTable,
    Order,
    OrderAggregator,
)
from hotel_billing.engine.commit import build_draft

from conftest import TODAY


def _order_with(storage, *codes, table_no="T5", area="GENERAL"):
    aggregator = OrderAggregator(MenuCatalog(storage.list_menu_items()))
    order = Order(table_no=table_no, party_no="2", waiter_no="W3", area=Area.parse(area))
    for code in codes:
        aggregator.submit_code(order, code)
    return order


class TestValidation:

    def test_empty_order_rejected_without_io(self):
        storage = MagicMock()
        with pytest.raises(EmptyOrder):
            BillCommitService(storage, clock=lambda: TODAY).finalize(Order(table_no="T1"))
        storage.commit_bill.assert_not_called()

    @pytest.mark.parametrize("table_no", ["", "   "])
    def test_missing_table_rejected_without_io(self, table_no):
        storage = MagicMock()
        order = Order(table_no=table_no, lines=[
            LineItem(menu_id=1, code="IDL", description="Idli", unit_price=Decimal("30"), quantity=1),
        ])
        with pytest.raises(MissingTable):
            BillCommitService(storage, clock=lambda: TODAY).finalize(order)
        storage.commit_bill.assert_not_called()

    def test_empty_order_checked_before_table(self):
        with pytest.raises(EmptyOrder):
            BillCommitService(MagicMock()).finalize(Order(table_no=""))


class TestFinalize:

    def test_idli_scenario(self, storage):
        order = _order_with(storage, "IDL", "IDL", table_no="T5")
        record = BillCommitService(storage, clock=lambda: TODAY).finalize(order)

        assert record.bill_no == 1
        assert record.business_date == TODAY
        assert record.table_no == "T5"
        assert record.area == "GENERAL"
        assert record.total_amount == Decimal("63.00")
        assert len(record.items) == 1
        item = record.items[0]
        assert item.bill_id == record.bill_id
        assert item.quantity == 2
        assert item.rate == Decimal("30.00")
        assert item.amount == Decimal("60.00")

    def test_bill_is_readable_after_commit(self, storage):
        order = _order_with(storage, "IDL", "VDA", "CFE")
        record = BillCommitService(storage, clock=lambda: TODAY).finalize(order)

        stored = storage.get_bill(record.bill_id)
        assert stored is not None
        assert [i.menu_id for i in stored.items] == [1, 2, 4]
        # 30 + 25 + 20 = 75, plus 5% tax
        assert stored.total_amount == Decimal("78.75")

    def test_total_rounded_half_up_on_persist(self, storage):
        menu = storage.add_menu_item("ODD", "333", "Odd Price", Decimal("33.33"), Decimal("33.33"))
        order = Order(table_no="T1")
        OrderAggregator(MenuCatalog([menu])).submit_code(order, "ODD")
        record = BillCommitService(storage, clock=lambda: TODAY).finalize(order)
        # 33.33 * 1.05 = 34.9965
        assert record.total_amount == Decimal("35.00")

    def test_order_untouched_by_finalize(self, storage):
        order = _order_with(storage, "IDL")
        BillCommitService(storage, clock=lambda: TODAY).finalize(order)
        assert len(order.lines) == 1
        assert order.table_no == "T5"

    def test_header_fields_are_trimmed(self, storage):
        order = _order_with(storage, "IDL", table_no="  T9 ")
        record = BillCommitService(storage, clock=lambda: TODAY).finalize(order)
        assert record.table_no == "T9"

    def test_consecutive_bills_number_sequentially(self, storage):
        service = BillCommitService(storage, clock=lambda: TODAY)
        numbers = [service.finalize(_order_with(storage, "IDL")).bill_no for _ in range(3)]
        assert numbers == [1, 2, 3]

    def test_new_day_resets_numbering(self, storage):
        yesterday = TODAY - timedelta(days=1)
        BillCommitService(storage, clock=lambda: yesterday).finalize(_order_with(storage, "IDL"))
        BillCommitService(storage, clock=lambda: yesterday).finalize(_order_with(storage, "IDL"))

        record = BillCommitService(storage, clock=lambda: TODAY).finalize(_order_with(storage, "VDA"))
        assert record.bill_no == 1
        assert storage.get_sequence_state().last_reset_date == TODAY


class TestAtomicity:

    def _broken_order(self, storage):
        order = _order_with(storage, "IDL", "VDA")
        # Second line references a menu item that does not exist
        order.lines.append(LineItem(menu_id=999, code="GHOST", description="Ghost", unit_price=Decimal("5")))
        return order

    def test_failed_commit_writes_nothing(self, storage):
        service = BillCommitService(storage, clock=lambda: TODAY)

        with pytest.raises(CommitError) as exc_info:
            service.finalize(self._broken_order(storage))

        assert exc_info.value.status_code == 500
        assert exc_info.value.message.startswith("Could not save the bill to the database.")
        bills, total = storage.list_bills()
        assert bills == []
        assert total == 0
        assert storage.get_sequence_state() is None

    def test_failed_commit_does_not_consume_bill_number(self, storage):
        service = BillCommitService(storage, clock=lambda: TODAY)
        service.finalize(_order_with(storage, "IDL"))

        with pytest.raises(CommitError):
            service.finalize(self._broken_order(storage))

        assert service.finalize(_order_with(storage, "VDA")).bill_no == 2
        assert storage.list_bills()[1] == 2

    def test_failed_commit_leaves_order_for_retry(self, storage):
        order = self._broken_order(storage)
        with pytest.raises(CommitError):
            BillCommitService(storage, clock=lambda: TODAY).finalize(order)
        assert len(order.lines) == 3

    def test_storage_exception_is_wrapped(self):
        storage = MagicMock()
        storage.commit_bill.side_effect = RuntimeError("disk full")
        order = Order(table_no="T1", lines=[
            LineItem(menu_id=1, code="IDL", description="Idli", unit_price=Decimal("30"), quantity=1),
        ])

        with pytest.raises(CommitError) as exc_info:
            BillCommitService(storage, clock=lambda: TODAY).finalize(order)

        assert "disk full" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        storage.commit_bill.assert_called_once()


def test_build_draft_snapshots_order():
    order = Order(table_no=" T2 ", party_no="3", waiter_no="W1", lines=[
        LineItem(menu_id=7, code="IDL", description="Idli", unit_price=Decimal("30.00"), quantity=2),
    ])
    draft = build_draft(order)
    assert draft.table_no == "T2"
    assert draft.area == "GENERAL"
    assert draft.total == Decimal("63.00")
    assert draft.items[0].menu_id == 7
    assert draft.items[0].quantity == 2
    assert draft.items[0].rate == Decimal("30.00")
