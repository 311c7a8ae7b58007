"""Atomic finalization of an in-progress order."""

import logging
from datetime import date
from typing import Callable

from hotel_billing.engine.errors import CommitError, EmptyOrder, MissingTable
from hotel_billing.engine.order import Order
from hotel_billing.engine.records import BillDraft, BillItemDraft, BillRecord
from hotel_billing.engine.totals import compute_totals, round_money
from hotel_billing.utils.time_utils import business_date

logger = logging.getLogger(__name__)


def build_draft(order: Order) -> BillDraft:
    """Snapshot an order into the rows that will be written."""
    totals = compute_totals(order)
    return BillDraft(
        table_no=order.table_no.strip(),
        party_no=(order.party_no or "").strip(),
        waiter_no=(order.waiter_no or "").strip(),
        area=order.area.value,
        total=round_money(totals.total),
        items=[
            BillItemDraft(menu_id=line.menu_id, quantity=line.quantity, rate=line.unit_price)
            for line in order.lines
        ],
    )


class BillCommitService:
    """
    Persist a finalized order as one transaction (header + all items).

    Called at most once per finalize action and never retries; on failure
    the order is left exactly as it was so the operator can try again.
    """

    def __init__(self, storage, clock: Callable[[], date] = business_date):
        self.storage = storage
        self.clock = clock

    def finalize(self, order: Order) -> BillRecord:
        if order.is_empty():
            raise EmptyOrder()
        if not (order.table_no or "").strip():
            raise MissingTable()

        draft = build_draft(order)
        current_date = self.clock()
        try:
            record = self.storage.commit_bill(draft, current_date)
        except Exception as e:
            logger.error(
                f"Bill commit failed for table {draft.table_no} ({len(draft.items)} items): {e}",
                exc_info=True,
            )
            raise CommitError(e) from e

        logger.info(
            f"Committed bill #{record.bill_no} (id={record.bill_id}) for table {record.table_no}: "
            f"{len(record.items)} items, total {record.total_amount}"
        )
        return record
