"""Seating areas and unit price resolution."""

from decimal import Decimal, InvalidOperation
from enum import Enum

from hotel_billing.engine.errors import InvalidMenuData
from hotel_billing.engine.records import MenuRecord
from hotel_billing.engine.totals import MAX_MONEY


class Area(str, Enum):
    GENERAL = "GENERAL"
    AC = "AC"

    @classmethod
    def parse(cls, value) -> "Area":
        """Accept enum members, 'GENERAL'/'AC' and the legacy 'G' shorthand."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().upper()
        if text in ("G", "GEN", "GENERAL"):
            return cls.GENERAL
        if text == "AC":
            return cls.AC
        raise ValueError(f"Unknown area: {value!r} (expected GENERAL or AC)")


def resolve_price(record: MenuRecord, area: Area) -> Decimal:
    """Return the unit price that applies to ``record`` in ``area``."""
    field = "ac_rate" if area == Area.AC else "general_rate"
    raw = getattr(record, field, None)
    if raw is None or isinstance(raw, bool):
        raise InvalidMenuData(record.id, field, raw)
    try:
        price = raw if isinstance(raw, Decimal) else Decimal(str(raw))
    except (InvalidOperation, ValueError):
        raise InvalidMenuData(record.id, field, raw)
    if not price.is_finite() or price < 0 or price > MAX_MONEY:
        raise InvalidMenuData(record.id, field, raw)
    return price
