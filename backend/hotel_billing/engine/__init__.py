"""Order aggregation and bill finalization engine."""

from .errors import (
    BillingError,
    ItemNotFound,
    InvalidMenuData,
    EmptyOrder,
    MissingTable,
    CommitError,
)
from .records import MenuRecord, BillDraft, BillItemDraft, BillRecord, BillItemRecord
from .pricing import Area, resolve_price
from .catalog import MenuCatalog
from .totals import Totals, compute_totals, round_money
from .order import LineItem, Order, OrderAggregator
from .sequencer import SequenceState, BillSequencer, next_bill_number, advance
from .commit import BillCommitService
from .session import BillingSession, SessionRegistry

__all__ = [
    "BillingError", "ItemNotFound", "InvalidMenuData", "EmptyOrder", "MissingTable", "CommitError",
    "MenuRecord", "BillDraft", "BillItemDraft", "BillRecord", "BillItemRecord",
    "Area", "resolve_price",
    "MenuCatalog",
    "Totals", "compute_totals", "round_money",
    "LineItem", "Order", "OrderAggregator",
    "SequenceState", "BillSequencer", "next_bill_number", "advance",
    "BillCommitService",
    "BillingSession", "SessionRegistry",
]
