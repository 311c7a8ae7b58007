"""Billing session: the boundary where operator actions meet the engine."""

import logging
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Optional
from uuid import uuid4

from hotel_billing.config import MAX_OPEN_SESSIONS, SESSION_IDLE_MINUTES
from hotel_billing.engine.commit import BillCommitService
from hotel_billing.engine.order import LineItem, Order, OrderAggregator
from hotel_billing.engine.pricing import Area
from hotel_billing.engine.records import BillRecord
from hotel_billing.engine.sequencer import BillSequencer
from hotel_billing.engine.totals import money

logger = logging.getLogger(__name__)


class BillingSession:
    """Owns one in-progress Order and routes operator actions to the engine."""

    def __init__(
        self,
        aggregator: OrderAggregator,
        commit_service: BillCommitService,
        sequencer: BillSequencer,
        session_id: Optional[str] = None,
    ):
        self.id = session_id or str(uuid4())
        self.aggregator = aggregator
        self.commit_service = commit_service
        self.sequencer = sequencer
        self.order = Order()
        self.last_bill: Optional[BillRecord] = None
        self._assign_bill_no()

    def _assign_bill_no(self) -> None:
        self.order.bill_no = self.sequencer.next_bill_number()

    def update_details(
        self,
        table_no: Optional[str] = None,
        party_no: Optional[str] = None,
        waiter_no: Optional[str] = None,
        area=None,
    ) -> Order:
        """Update header fields. Changing area never re-prices existing lines."""
        if table_no is not None:
            self.order.table_no = str(table_no).upper()
        if party_no is not None:
            self.order.party_no = str(party_no).upper()
        if waiter_no is not None:
            self.order.waiter_no = str(waiter_no).upper()
        if area is not None:
            self.order.area = Area.parse(area)
        return self.order

    def submit_code(self, raw_code) -> LineItem:
        self.aggregator.submit_code(self.order, raw_code)
        record = self.aggregator.catalog.find_by_code(raw_code)
        return self.order.find_line(record.id)

    def set_quantity(self, menu_id: int, quantity: int) -> Order:
        return self.aggregator.set_quantity(self.order, menu_id, quantity)

    def finalize(self) -> BillRecord:
        """Commit the order; on success start a fresh one in the same area."""
        record = self.commit_service.finalize(self.order)
        self.last_bill = record
        self.order = Order(area=self.order.area)
        self._assign_bill_no()
        return record

    def abandon(self) -> None:
        """Discard the in-progress order; nothing durable is touched."""
        logger.info(f"Session {self.id} abandoned order with {len(self.order.lines)} lines")
        self.order = Order(area=self.order.area)
        self._assign_bill_no()

    def snapshot(self) -> Dict[str, Any]:
        order = self.order
        totals = order.totals
        return {
            "sessionId": self.id,
            "billDetails": {
                "tableNo": order.table_no,
                "partyNo": order.party_no,
                "waiterNo": order.waiter_no,
                "area": order.area.value,
                "billNo": order.bill_no,
            },
            "items": [
                {
                    "menuId": line.menu_id,
                    "code": line.code,
                    "description": line.description,
                    "quantity": line.quantity,
                    "unitPrice": money(line.unit_price),
                    "amount": money(line.amount),
                }
                for line in order.lines
            ],
            "subtotal": money(totals.subtotal),
            "tax": money(totals.tax),
            "total": money(totals.total),
        }


class SessionRegistry:
    """
    Open billing sessions keyed by id (process-local).

    Sessions untouched for ``idle_timeout`` seconds are dropped on the next
    add or get, and at most ``max_sessions`` are kept: adding beyond that
    evicts the least recently used one. An evicted session's order was never
    persisted, so dropping it is the same as abandoning it.
    """

    def __init__(
        self,
        idle_timeout: Optional[float] = SESSION_IDLE_MINUTES * 60,
        max_sessions: Optional[int] = MAX_OPEN_SESSIONS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.idle_timeout = idle_timeout
        self.max_sessions = max_sessions
        self.clock = clock
        self._sessions: "OrderedDict[str, BillingSession]" = OrderedDict()
        self._last_seen: Dict[str, float] = {}

    def add(self, session: BillingSession) -> BillingSession:
        self.evict_idle()
        if self.max_sessions is not None:
            while len(self._sessions) >= self.max_sessions:
                oldest_id = next(iter(self._sessions))
                logger.warning(f"Session limit {self.max_sessions} reached; dropping session {oldest_id}")
                self.remove(oldest_id)
        self._sessions[session.id] = session
        self._touch(session.id)
        return session

    def get(self, session_id: str) -> Optional[BillingSession]:
        self.evict_idle()
        session = self._sessions.get(session_id)
        if session is not None:
            self._touch(session_id)
        return session

    def remove(self, session_id: str) -> Optional[BillingSession]:
        self._last_seen.pop(session_id, None)
        return self._sessions.pop(session_id, None)

    def evict_idle(self) -> int:
        """Drop sessions idle longer than idle_timeout; returns how many."""
        if self.idle_timeout is None:
            return 0
        cutoff = self.clock() - self.idle_timeout
        expired = [sid for sid, seen in self._last_seen.items() if seen < cutoff]
        for sid in expired:
            logger.info(f"Session {sid} expired after {self.idle_timeout:.0f}s idle")
            self.remove(sid)
        return len(expired)

    def _touch(self, session_id: str) -> None:
        self._last_seen[session_id] = self.clock()
        self._sessions.move_to_end(session_id)

    def clear(self) -> None:
        self._sessions.clear()
        self._last_seen.clear()

    def __len__(self) -> int:
        return len(self._sessions)
