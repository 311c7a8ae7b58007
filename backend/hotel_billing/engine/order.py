"""In-progress order aggregate and the aggregator that mutates it."""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from hotel_billing.engine.catalog import MenuCatalog
from hotel_billing.engine.errors import ItemNotFound
from hotel_billing.engine.pricing import Area, resolve_price
from hotel_billing.engine.records import MenuRecord
from hotel_billing.engine.totals import Totals, compute_totals

logger = logging.getLogger(__name__)


@dataclass
class LineItem:
    """One aggregated menu entry; unit_price is frozen when first added."""

    menu_id: int
    code: str
    description: str
    unit_price: Decimal
    quantity: int = 1

    @property
    def amount(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass
class Order:
    """In-memory order for one billing session. Nothing is persisted until finalize."""

    table_no: str = ""
    party_no: str = "1"
    waiter_no: str = ""
    area: Area = Area.GENERAL
    bill_no: Optional[int] = None
    lines: List[LineItem] = field(default_factory=list)

    def find_line(self, menu_id: int) -> Optional[LineItem]:
        for line in self.lines:
            if line.menu_id == menu_id:
                return line
        return None

    @property
    def totals(self) -> Totals:
        return compute_totals(self.lines)

    @property
    def subtotal(self) -> Decimal:
        return self.totals.subtotal

    @property
    def tax(self) -> Decimal:
        return self.totals.tax

    @property
    def total(self) -> Decimal:
        return self.totals.total

    def is_empty(self) -> bool:
        return not self.lines

    def clear(self) -> None:
        self.lines = []


class OrderAggregator:
    """Resolves item codes against the catalog and merges them into an Order."""

    def __init__(self, catalog: MenuCatalog):
        self.catalog = catalog

    def submit_code(self, order: Order, raw_code) -> Order:
        """
        Add one unit of the item matching ``raw_code``.

        Repeated codes increment the existing line; its price is not
        re-resolved even if the order's area changed since the first add.
        Raises ItemNotFound (order untouched) when nothing matches.
        """
        record = self.catalog.find_by_code(raw_code)
        if record is None:
            logger.debug(f"No menu item for code {raw_code!r}")
            raise ItemNotFound(str(raw_code or "").strip())

        existing = order.find_line(record.id)
        if existing is not None:
            existing.quantity += 1
            return order

        # Resolve before mutating so InvalidMenuData leaves the order intact
        unit_price = resolve_price(record, order.area)
        order.lines.append(_line_for(record, unit_price, 1))
        return order

    def set_quantity(self, order: Order, menu_id: int, new_quantity: int) -> Order:
        """Overwrite a line's quantity; zero or below removes the line."""
        line = order.find_line(menu_id)
        if line is None:
            raise ItemNotFound(menu_id)
        quantity = int(new_quantity)
        if quantity > 0:
            line.quantity = quantity
        else:
            order.lines = [l for l in order.lines if l.menu_id != menu_id]
        return order

    def add_priced(self, order: Order, record: MenuRecord, unit_price: Decimal, quantity: int) -> Order:
        """
        Merge an already-priced entry (e.g. from a client-held order).

        The first price seen for a menu id stands; non-positive quantities
        are ignored so no zero-quantity line can be stored.
        """
        quantity = int(quantity)
        if quantity <= 0:
            return order
        existing = order.find_line(record.id)
        if existing is not None:
            existing.quantity += quantity
        else:
            order.lines.append(_line_for(record, Decimal(unit_price), quantity))
        return order


def _line_for(record: MenuRecord, unit_price: Decimal, quantity: int) -> LineItem:
    return LineItem(
        menu_id=record.id,
        code=record.alpha_code,
        description=record.description,
        unit_price=unit_price,
        quantity=quantity,
    )
