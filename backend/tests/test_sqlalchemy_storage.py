"""
Tests specific to SQLAlchemyStorage.

Persistence across instances, schema-level constraints and the columns the
relational backend keeps for compatibility.
"""

from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from hotel_billing.db.models import Bill, BillItem, BillSequence, MenuItem
from hotel_billing.engine import BillDraft, BillItemDraft
from hotel_billing.storage import SQLAlchemyStorage

from conftest import TODAY, seed_standard_menu


def _draft(menu_id=1, quantity=1, rate="30.00"):
    return BillDraft(
        table_no="T1", party_no="1", waiter_no="W1", area="AC",
        total=Decimal(rate) * quantity * Decimal("1.05"),
        items=[BillItemDraft(menu_id=menu_id, quantity=quantity, rate=Decimal(rate))],
    )


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'persist.db'}"


class TestPersistence:

    def test_data_survives_new_instance(self, db_url):
        first = SQLAlchemyStorage(db_url, use_alembic=False)
        seed_standard_menu(first)
        record = first.commit_bill(_draft(), TODAY)
        first.close()

        second = SQLAlchemyStorage(db_url, use_alembic=False)
        try:
            assert len(second.list_menu_items()) == 4
            assert second.get_bill(record.bill_id).area == "AC"
            assert second.get_sequence_state().last_bill_no == 1
            assert second.commit_bill(_draft(), TODAY).bill_no == 2
        finally:
            second.close()

    def test_fixed_price_mirrors_general_rate(self, sql_storage):
        db_session = sql_storage._get_session()
        try:
            row = db_session.execute(select(MenuItem).where(MenuItem.alpha_code == "DSA")).scalar_one()
            assert Decimal(row.fixed_price) == Decimal("45.00")
        finally:
            db_session.close()

    def test_amounts_stored_rounded(self, sql_storage):
        record = sql_storage.commit_bill(_draft(rate="33.335", quantity=1), TODAY)
        stored = sql_storage.get_bill(record.bill_id)
        assert stored.items[0].rate == Decimal("33.34")
        assert stored.total_amount == Decimal("35.00")


class TestSchemaConstraints:

    def test_foreign_keys_enforced(self, sql_storage):
        with pytest.raises(IntegrityError):
            sql_storage.commit_bill(_draft(menu_id=999), TODAY)

        db_session = sql_storage._get_session()
        try:
            assert db_session.execute(select(Bill)).scalars().all() == []
            assert db_session.execute(select(BillItem)).scalars().all() == []
            assert db_session.get(BillSequence, 1) is None
        finally:
            db_session.close()

    def test_duplicate_bill_number_on_same_day_rejected(self, sql_storage):
        record = sql_storage.commit_bill(_draft(), TODAY)

        db_session = sql_storage._get_session()
        try:
            with pytest.raises(IntegrityError):
                with db_session.begin():
                    db_session.add(Bill(
                        bill_no=record.bill_no, business_date=TODAY, table_no="T9",
                        party_no="1", waiter_no="", area="GENERAL", total_amount=Decimal("1"),
                    ))
        finally:
            db_session.close()

    def test_deleting_bill_cascades_to_items(self, sql_storage):
        record = sql_storage.commit_bill(_draft(), TODAY)

        db_session = sql_storage._get_session()
        try:
            with db_session.begin():
                db_session.delete(db_session.get(Bill, record.bill_id))
            assert db_session.execute(select(BillItem)).scalars().all() == []
        finally:
            db_session.close()
