"""
Per-day bill numbering.

The persisted state is a single (last_reset_date, last_bill_no) pair where
last_bill_no is the number of the last bill committed on last_reset_date.
Storage backends read and advance it inside the same transaction that inserts
the bill header, so a failed commit never consumes a number and two sessions
can never be issued the same one.
"""

from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from hotel_billing.utils.time_utils import business_date


@dataclass(frozen=True)
class SequenceState:
    last_reset_date: date
    last_bill_no: int


def next_bill_number(state: Optional[SequenceState], current_date: date) -> int:
    """Number the next bill committed on ``current_date`` will receive."""
    if state is None or state.last_reset_date != current_date:
        return 1
    return state.last_bill_no + 1


def advance(state: Optional[SequenceState], current_date: date, issued: int) -> SequenceState:
    """State after bill number ``issued`` was committed on ``current_date``."""
    expected = next_bill_number(state, current_date)
    if issued != expected:
        raise ValueError(f"Bill number {issued} issued out of sequence (expected {expected})")
    return SequenceState(last_reset_date=current_date, last_bill_no=issued)


class BillSequencer:
    """Read side of the bill sequence: the number shown for the open order."""

    def __init__(self, storage, clock: Callable[[], date] = business_date):
        self.storage = storage
        self.clock = clock

    def next_bill_number(self, current_date: Optional[date] = None) -> int:
        """
        Displayed (optimistic) bill number for ``current_date``.

        Does not reserve anything; the number is only consumed when a bill
        commits, at which point it is drawn again inside the transaction.
        """
        return next_bill_number(self.storage.get_sequence_state(), current_date or self.clock())
