"""
SQLAlchemy storage implementation for the relational billing schema.

Uses the canonical models from hotel_billing.db.models. Every public method
opens its own session and releases it in ``finally``; bill commits run in a
single ``session.begin()`` block so the header, its items and the sequence
update succeed or fail together.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import create_engine, delete, event, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload, sessionmaker

from hotel_billing.config import USE_ALEMBIC
from hotel_billing.db import init_db
from hotel_billing.db.models import Base, Bill, BillItem, BillSequence, MenuItem
from hotel_billing.engine.records import BillDraft, BillItemRecord, BillRecord, MenuRecord
from hotel_billing.engine.sequencer import SequenceState, advance, next_bill_number
from hotel_billing.engine.totals import round_money
from hotel_billing.utils.time_utils import now_local_naive
from .base import DuplicateMenuCode, Storage

logger = logging.getLogger(__name__)

SEQUENCE_ROW_ID = 1


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


class SQLAlchemyStorage(Storage):
    """SQLAlchemy-backed storage for menu items, bills and the bill sequence."""

    def __init__(self, database_url: str = "sqlite:///hotel_billing.db", use_alembic: bool = USE_ALEMBIC):
        """
        Initialize SQLAlchemy storage with canonical models.

        Args:
            database_url: SQLAlchemy database URL
            use_alembic: Apply Alembic migrations instead of create_all
        """
        self.database_url = database_url
        is_sqlite = database_url.startswith("sqlite")

        self.engine = create_engine(
            self.database_url,
            connect_args={"check_same_thread": False} if is_sqlite else {},
            echo=False,
            future=True,
            pool_pre_ping=True,
        )
        if is_sqlite:
            # bill_items.item_id -> menu_items.id must be enforced
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self.SessionLocal = sessionmaker(bind=self.engine)

        try:
            init_db(self.engine, use_alembic=use_alembic, base=Base)
            logger.info(f"[SQLAlchemyStorage] Database initialized at {self.database_url}")
        except RuntimeError as e:
            logger.warning(f"[SQLAlchemyStorage] Migration failed ({e}); creating missing tables")
            Base.metadata.create_all(self.engine)

    def _get_session(self) -> Session:
        """Get a new database session (caller must close)."""
        return self.SessionLocal()

    # ---------- Menu ----------

    def list_menu_items(self) -> List[MenuRecord]:
        db_session = self._get_session()
        try:
            rows = db_session.execute(select(MenuItem).order_by(MenuItem.id)).scalars().all()
            return [self._menu_item_to_record(row) for row in rows]
        finally:
            db_session.close()

    def get_menu_item(self, menu_id: int) -> Optional[MenuRecord]:
        db_session = self._get_session()
        try:
            row = db_session.get(MenuItem, menu_id)
            return self._menu_item_to_record(row) if row else None
        finally:
            db_session.close()

    def add_menu_item(self, alpha_code, numeric_code, description, general_rate, ac_rate) -> MenuRecord:
        db_session = self._get_session()
        try:
            with db_session.begin():
                row = MenuItem(
                    alpha_code=alpha_code,
                    numeric_code=numeric_code,
                    description=description,
                    general_rate=Decimal(general_rate),
                    ac_rate=Decimal(ac_rate),
                    fixed_price=Decimal(general_rate),
                )
                db_session.add(row)
                db_session.flush()
                record = self._menu_item_to_record(row)
            return record
        except IntegrityError as e:
            raise DuplicateMenuCode(f"Code already in use ({alpha_code}/{numeric_code})") from e
        finally:
            db_session.close()

    # ---------- Bills ----------

    def get_sequence_state(self) -> Optional[SequenceState]:
        db_session = self._get_session()
        try:
            row = db_session.get(BillSequence, SEQUENCE_ROW_ID)
            if row is None:
                return None
            return SequenceState(last_reset_date=row.last_reset_date, last_bill_no=row.last_bill_no)
        finally:
            db_session.close()

    def commit_bill(self, draft: BillDraft, business_date: date) -> BillRecord:
        db_session = self._get_session()
        try:
            with db_session.begin():
                # Lock the counter row for the rest of the transaction
                seq = db_session.execute(
                    select(BillSequence)
                    .where(BillSequence.id == SEQUENCE_ROW_ID)
                    .with_for_update()
                ).scalar_one_or_none()
                state = (
                    SequenceState(last_reset_date=seq.last_reset_date, last_bill_no=seq.last_bill_no)
                    if seq else None
                )
                bill_no = next_bill_number(state, business_date)

                bill = Bill(
                    bill_no=bill_no,
                    business_date=business_date,
                    table_no=draft.table_no,
                    party_no=draft.party_no,
                    waiter_no=draft.waiter_no,
                    area=draft.area,
                    total_amount=round_money(draft.total),
                    created_at=now_local_naive(),
                )
                db_session.add(bill)
                db_session.flush()  # Header first: items reference its generated id

                items = []
                for item in draft.items:
                    bill_item = BillItem(
                        bill_id=bill.id,
                        item_id=item.menu_id,
                        quantity=item.quantity,
                        rate=round_money(item.rate),
                        amount=round_money(item.rate * item.quantity),
                    )
                    db_session.add(bill_item)
                    items.append(bill_item)
                db_session.flush()

                new_state = advance(state, business_date, bill_no)
                if seq is None:
                    db_session.add(BillSequence(
                        id=SEQUENCE_ROW_ID,
                        last_reset_date=new_state.last_reset_date,
                        last_bill_no=new_state.last_bill_no,
                    ))
                else:
                    seq.last_reset_date = new_state.last_reset_date
                    seq.last_bill_no = new_state.last_bill_no
                db_session.flush()

                record = BillRecord(
                    bill_id=bill.id,
                    bill_no=bill.bill_no,
                    business_date=bill.business_date,
                    table_no=bill.table_no,
                    party_no=bill.party_no,
                    waiter_no=bill.waiter_no,
                    area=bill.area,
                    total_amount=round_money(bill.total_amount),
                    created_at=bill.created_at,
                    items=[self._bill_item_to_record(i) for i in items],
                )
            return record
        finally:
            db_session.close()

    def get_bill(self, bill_id: int) -> Optional[BillRecord]:
        db_session = self._get_session()
        try:
            stmt = select(Bill).options(selectinload(Bill.items)).where(Bill.id == bill_id)
            bill = db_session.execute(stmt).scalar_one_or_none()
            return self._bill_to_record(bill) if bill else None
        finally:
            db_session.close()

    def list_bills(self, business_date=None, table_no=None, limit=50, offset=0) -> Tuple[List[BillRecord], int]:
        db_session = self._get_session()
        try:
            stmt = select(Bill)
            if business_date is not None:
                stmt = stmt.where(Bill.business_date == business_date)
            if table_no is not None:
                stmt = stmt.where(Bill.table_no == table_no)

            total = db_session.execute(
                select(func.count()).select_from(stmt.subquery())
            ).scalar_one()

            stmt = (
                stmt.options(selectinload(Bill.items))
                .order_by(Bill.business_date, Bill.bill_no)
                .offset(offset)
                .limit(limit)
            )
            bills = db_session.execute(stmt).scalars().all()
            return [self._bill_to_record(b) for b in bills], total
        finally:
            db_session.close()

    def clear(self) -> None:
        db_session = self._get_session()
        try:
            with db_session.begin():
                db_session.execute(delete(BillItem))
                db_session.execute(delete(Bill))
                db_session.execute(delete(BillSequence))
                db_session.execute(delete(MenuItem))
        finally:
            db_session.close()

    def close(self) -> None:
        """Close database connections."""
        self.engine.dispose()

    # ---------- Row conversion ----------

    def _menu_item_to_record(self, row: MenuItem) -> MenuRecord:
        return MenuRecord(
            id=row.id,
            alpha_code=row.alpha_code,
            numeric_code=row.numeric_code,
            description=row.description,
            general_rate=Decimal(row.general_rate) if row.general_rate is not None else None,
            ac_rate=Decimal(row.ac_rate) if row.ac_rate is not None else None,
        )

    def _bill_item_to_record(self, item: BillItem) -> BillItemRecord:
        return BillItemRecord(
            bill_id=item.bill_id,
            menu_id=item.item_id,
            quantity=item.quantity,
            rate=round_money(item.rate),
            amount=round_money(item.amount),
        )

    def _bill_to_record(self, bill: Bill) -> BillRecord:
        return BillRecord(
            bill_id=bill.id,
            bill_no=bill.bill_no,
            business_date=bill.business_date,
            table_no=bill.table_no,
            party_no=bill.party_no,
            waiter_no=bill.waiter_no,
            area=bill.area,
            total_amount=round_money(bill.total_amount),
            created_at=bill.created_at,
            items=[self._bill_item_to_record(i) for i in bill.items],
        )
