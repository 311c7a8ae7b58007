"""Subtotal, tax and total derivation."""

from decimal import Decimal, ROUND_HALF_UP
from typing import NamedTuple

TAX_RATE = Decimal("0.05")
CENT = Decimal("0.01")

# Largest amount a Numeric(10, 2) money column holds
MAX_MONEY = Decimal("99999999.99")
MAX_QUANTITY = 9999


class Totals(NamedTuple):
    subtotal: Decimal
    tax: Decimal
    total: Decimal


def compute_totals(order_or_lines) -> Totals:
    """
    Derive totals from an Order or an iterable of line items.

    Values are exact; rounding happens only when presenting or persisting
    money (see round_money) so errors never compound.
    """
    lines = getattr(order_or_lines, "lines", order_or_lines)
    subtotal = sum((line.unit_price * line.quantity for line in lines), Decimal("0"))
    tax = subtotal * TAX_RATE
    return Totals(subtotal=subtotal, tax=tax, total=subtotal + tax)


def round_money(value: Decimal) -> Decimal:
    """Round to two decimal places, half up."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def money(value: Decimal) -> float:
    """JSON-friendly rounded amount."""
    return float(round_money(value))
