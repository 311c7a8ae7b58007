"""
Contract tests run against every Storage backend.

Both backends must behave identically for menu records, bill persistence,
listing and the bill sequence.
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from hotel_billing.engine import BillDraft, BillItemDraft
from hotel_billing.storage import DuplicateMenuCode

from conftest import TODAY


def _draft(table_no="T1", items=((1, 2, "30.00"),), total="63.00"):
    return BillDraft(
        table_no=table_no,
        party_no="1",
        waiter_no="W1",
        area="GENERAL",
        total=Decimal(total),
        items=[BillItemDraft(menu_id=m, quantity=q, rate=Decimal(r)) for m, q, r in items],
    )


class TestMenuStorage:

    def test_list_menu_items_in_id_order(self, storage):
        items = storage.list_menu_items()
        assert [i.id for i in items] == [1, 2, 3, 4]
        assert items[0].alpha_code == "IDL"
        assert items[0].general_rate == Decimal("30.00")
        assert items[0].ac_rate == Decimal("35.00")

    def test_get_menu_item(self, storage):
        assert storage.get_menu_item(3).description == "Plain Dosa"
        assert storage.get_menu_item(99) is None

    def test_duplicate_alpha_code_rejected(self, storage):
        with pytest.raises(DuplicateMenuCode):
            storage.add_menu_item("IDL", "999", "Other", Decimal("1"), Decimal("1"))
        assert len(storage.list_menu_items()) == 4

    def test_duplicate_numeric_code_rejected(self, storage):
        with pytest.raises(DuplicateMenuCode):
            storage.add_menu_item("NEW", "101", "Other", Decimal("1"), Decimal("1"))


class TestBillStorage:

    def test_commit_returns_full_record(self, storage):
        record = storage.commit_bill(_draft(), TODAY)
        assert record.bill_no == 1
        assert record.business_date == TODAY
        assert record.total_amount == Decimal("63.00")
        assert record.created_at is not None
        assert record.items[0].amount == Decimal("60.00")

    def test_get_bill_round_trips_items(self, storage):
        record = storage.commit_bill(_draft(items=((1, 2, "30"), (4, 1, "20"))), TODAY)
        stored = storage.get_bill(record.bill_id)
        assert stored.bill_no == record.bill_no
        assert [(i.menu_id, i.quantity, i.amount) for i in stored.items] == [
            (1, 2, Decimal("60.00")),
            (4, 1, Decimal("20.00")),
        ]

    def test_get_missing_bill(self, storage):
        assert storage.get_bill(12345) is None

    def test_unknown_menu_item_rolls_back(self, storage):
        with pytest.raises(Exception):
            storage.commit_bill(_draft(items=((1, 1, "30"), (999, 1, "5"))), TODAY)
        assert storage.list_bills() == ([], 0)
        assert storage.get_sequence_state() is None

    def test_non_positive_quantity_rolls_back(self, storage):
        with pytest.raises(Exception):
            storage.commit_bill(_draft(items=((1, 0, "30"),)), TODAY)
        assert storage.list_bills()[1] == 0

    def test_sequence_state_tracks_last_committed(self, storage):
        assert storage.get_sequence_state() is None
        storage.commit_bill(_draft(), TODAY)
        storage.commit_bill(_draft(), TODAY)
        state = storage.get_sequence_state()
        assert state.last_reset_date == TODAY
        assert state.last_bill_no == 2

    def test_same_number_allowed_on_different_days(self, storage):
        yesterday = TODAY - timedelta(days=1)
        first = storage.commit_bill(_draft(), yesterday)
        second = storage.commit_bill(_draft(), TODAY)
        assert first.bill_no == second.bill_no == 1


class TestListBills:

    @pytest.fixture
    def populated(self, storage):
        yesterday = TODAY - timedelta(days=1)
        storage.commit_bill(_draft(table_no="T1"), yesterday)
        for table in ("T1", "T2", "T1"):
            storage.commit_bill(_draft(table_no=table), TODAY)
        return storage

    def test_filter_by_date(self, populated):
        bills, total = populated.list_bills(business_date=TODAY)
        assert total == 3
        assert [b.bill_no for b in bills] == [1, 2, 3]

    def test_filter_by_table(self, populated):
        bills, total = populated.list_bills(table_no="T1")
        assert total == 3
        assert [(b.business_date, b.bill_no) for b in bills] == [
            (TODAY - timedelta(days=1), 1), (TODAY, 1), (TODAY, 3),
        ]

    def test_pagination_reports_full_count(self, populated):
        bills, total = populated.list_bills(limit=2, offset=1)
        assert total == 4
        assert len(bills) == 2
        assert bills[0].business_date == TODAY
        assert bills[0].bill_no == 1


def test_clear_resets_everything(storage):
    storage.commit_bill(_draft(), TODAY)
    storage.clear()
    assert storage.list_menu_items() == []
    assert storage.list_bills() == ([], 0)
    assert storage.get_sequence_state() is None
