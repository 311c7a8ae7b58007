"""
Abstract Storage interface for the billing backend.

Defines the contract for menu catalog and bill persistence.
Implementations can be in-memory, database-backed, or other backends.
"""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from hotel_billing.engine.records import BillDraft, BillRecord, MenuRecord
from hotel_billing.engine.sequencer import SequenceState


class DuplicateMenuCode(Exception):
    """Alpha or numeric code already belongs to another menu item."""


class Storage(ABC):
    """Abstract base class for storage implementations."""

    @abstractmethod
    def list_menu_items(self) -> List[MenuRecord]:
        """Return all menu records ordered by ascending id."""
        ...

    @abstractmethod
    def get_menu_item(self, menu_id: int) -> Optional[MenuRecord]:
        """Get one menu record, or None if it does not exist."""
        ...

    @abstractmethod
    def add_menu_item(
        self,
        alpha_code: str,
        numeric_code: str,
        description: str,
        general_rate: Decimal,
        ac_rate: Decimal,
    ) -> MenuRecord:
        """
        Create a menu record and return it as stored.

        Raises DuplicateMenuCode if either code is already taken.
        """
        ...

    @abstractmethod
    def get_sequence_state(self) -> Optional[SequenceState]:
        """Return the persisted bill sequence, or None before the first bill."""
        ...

    @abstractmethod
    def commit_bill(self, draft: BillDraft, business_date: date) -> BillRecord:
        """
        Persist a bill header and all of its items as one atomic unit.

        The bill number is drawn from the sequence and the sequence advanced
        within the same transaction. If anything fails, nothing is written
        (no header, no items, sequence unchanged) and the error propagates.
        """
        ...

    @abstractmethod
    def get_bill(self, bill_id: int) -> Optional[BillRecord]:
        """Get a committed bill with its items, or None."""
        ...

    @abstractmethod
    def list_bills(
        self,
        business_date: Optional[date] = None,
        table_no: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[BillRecord], int]:
        """
        List committed bills ordered by (business_date, bill_no).

        Returns the requested page and the total count before pagination.
        """
        ...

    @abstractmethod
    def clear(self) -> None:
        """Clear all state (menu, bills and sequence)."""
        ...

    def close(self) -> None:
        """Release resources held by the backend."""
