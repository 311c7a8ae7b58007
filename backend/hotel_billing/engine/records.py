"""Value objects exchanged between the engine and storage backends."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class MenuRecord:
    """A menu entry as seen by the engine (read-only)."""

    id: int
    alpha_code: str
    numeric_code: str
    description: str
    general_rate: Optional[Decimal]
    ac_rate: Optional[Decimal]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "alphaCode": self.alpha_code,
            "numericCode": self.numeric_code,
            "description": self.description,
            "generalRate": float(self.general_rate) if self.general_rate is not None else None,
            "acRate": float(self.ac_rate) if self.ac_rate is not None else None,
        }


@dataclass(frozen=True)
class BillItemDraft:
    menu_id: int
    quantity: int
    rate: Decimal


@dataclass(frozen=True)
class BillDraft:
    """Everything storage needs to write one bill header and its items."""

    table_no: str
    party_no: str
    waiter_no: str
    area: str
    total: Decimal
    items: List[BillItemDraft]


@dataclass(frozen=True)
class BillItemRecord:
    bill_id: int
    menu_id: int
    quantity: int
    rate: Decimal
    amount: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "billId": self.bill_id,
            "menuId": self.menu_id,
            "quantity": self.quantity,
            "rate": float(self.rate),
            "amount": float(self.amount),
        }


@dataclass(frozen=True)
class BillRecord:
    """A committed bill header together with all of its items."""

    bill_id: int
    bill_no: int
    business_date: date
    table_no: str
    party_no: str
    waiter_no: str
    area: str
    total_amount: Decimal
    created_at: datetime
    items: List[BillItemRecord] = field(default_factory=list)

    def to_dict(self, include_items: bool = True) -> Dict[str, Any]:
        data = {
            "billId": self.bill_id,
            "billNo": self.bill_no,
            "businessDate": self.business_date.isoformat(),
            "tableNo": self.table_no,
            "partyNo": self.party_no,
            "waiterNo": self.waiter_no,
            "area": self.area,
            "totalAmount": float(self.total_amount),
            "createdAt": self.created_at.isoformat(),
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data
