"""
In-memory storage implementation.

Keeps the same all-or-nothing guarantees as the database backend: a bill is
fully validated and staged before any of its rows become visible.
"""

import threading
from datetime import date
from decimal import Decimal
from itertools import count
from typing import Dict, List, Optional, Tuple

from hotel_billing.engine.records import BillDraft, BillItemRecord, BillRecord, MenuRecord
from hotel_billing.engine.sequencer import SequenceState, advance, next_bill_number
from hotel_billing.engine.totals import round_money
from hotel_billing.utils.time_utils import now_local_naive
from .base import DuplicateMenuCode, Storage


class InMemoryStorage(Storage):
    """In-memory storage using dictionaries."""

    def __init__(self):
        """Initialize with empty storage."""
        self._lock = threading.Lock()
        self._menu: Dict[int, MenuRecord] = {}
        self._bills: Dict[int, BillRecord] = {}
        self._sequence: Optional[SequenceState] = None
        self._menu_ids = count(1)
        self._bill_ids = count(1)

    def list_menu_items(self) -> List[MenuRecord]:
        return [self._menu[k] for k in sorted(self._menu)]

    def get_menu_item(self, menu_id: int) -> Optional[MenuRecord]:
        return self._menu.get(menu_id)

    def add_menu_item(self, alpha_code, numeric_code, description, general_rate, ac_rate) -> MenuRecord:
        with self._lock:
            for existing in self._menu.values():
                if existing.alpha_code == alpha_code or existing.numeric_code == numeric_code:
                    raise DuplicateMenuCode(
                        f"Code already in use by menu item {existing.id} "
                        f"({existing.alpha_code}/{existing.numeric_code})"
                    )
            record = MenuRecord(
                id=next(self._menu_ids),
                alpha_code=alpha_code,
                numeric_code=numeric_code,
                description=description,
                general_rate=Decimal(general_rate),
                ac_rate=Decimal(ac_rate),
            )
            self._menu[record.id] = record
            return record

    def get_sequence_state(self) -> Optional[SequenceState]:
        return self._sequence

    def commit_bill(self, draft: BillDraft, business_date: date) -> BillRecord:
        with self._lock:
            # Same constraints the relational schema enforces
            for item in draft.items:
                if item.menu_id not in self._menu:
                    raise LookupError(f"bill item references unknown menu item {item.menu_id}")
                if item.quantity <= 0:
                    raise ValueError(f"bill item quantity must be positive, got {item.quantity}")

            bill_no = next_bill_number(self._sequence, business_date)
            new_state = advance(self._sequence, business_date, bill_no)
            bill_id = next(self._bill_ids)
            record = BillRecord(
                bill_id=bill_id,
                bill_no=bill_no,
                business_date=business_date,
                table_no=draft.table_no,
                party_no=draft.party_no,
                waiter_no=draft.waiter_no,
                area=draft.area,
                total_amount=round_money(draft.total),
                created_at=now_local_naive(),
                items=[
                    BillItemRecord(
                        bill_id=bill_id,
                        menu_id=item.menu_id,
                        quantity=item.quantity,
                        rate=round_money(item.rate),
                        amount=round_money(item.rate * item.quantity),
                    )
                    for item in draft.items
                ],
            )

            # Publish header, items and sequence together
            self._bills[bill_id] = record
            self._sequence = new_state
            return record

    def get_bill(self, bill_id: int) -> Optional[BillRecord]:
        return self._bills.get(bill_id)

    def list_bills(self, business_date=None, table_no=None, limit=50, offset=0) -> Tuple[List[BillRecord], int]:
        bills = [
            b for b in self._bills.values()
            if (business_date is None or b.business_date == business_date)
            and (table_no is None or b.table_no == table_no)
        ]
        bills.sort(key=lambda b: (b.business_date, b.bill_no))
        return bills[offset:offset + limit], len(bills)

    def clear(self) -> None:
        """Clear all state."""
        with self._lock:
            self._menu.clear()
            self._bills.clear()
            self._sequence = None
            self._menu_ids = count(1)
            self._bill_ids = count(1)
