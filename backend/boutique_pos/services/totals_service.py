# Overview: Sale total calculation (subtotal, discounts, GST, grand total) in integer cents.

"""
Totals are computed once, when a sale is recorded, and persisted; receipts
and reports read the stored figures and never recompute them.

    subtotal            = sum(unit_price * quantity)
    item_discount       = sum(line.discount)
    percentage_discount = (subtotal - item_discount) * discount_percent / 100
    discount            = item_discount + percentage_discount
    tax                 = (subtotal - discount) * tax_rate / 100   if enabled else 0
    total               = subtotal - discount + tax

All amounts are integer cents. The two percentage products are the only
places fractional cents appear; each is rounded half-up to a whole cent, so
total == subtotal - discount + tax holds exactly.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable, Protocol

from ..money import percent_of_cents
from ..validation import ValidationError

MAX_PERCENT = Decimal(100)


class PricedLine(Protocol):
    unit_price_cents: int
    quantity: int
    discount_cents: int


@dataclass(frozen=True)
class SaleTotals:
    subtotal_cents: int
    item_discount_cents: int
    percentage_discount_cents: int
    discount_cents: int
    tax_cents: int
    total_cents: int

    def to_dict(self) -> dict:
        return {
            "subtotal_cents": self.subtotal_cents,
            "item_discount_cents": self.item_discount_cents,
            "percentage_discount_cents": self.percentage_discount_cents,
            "discount_cents": self.discount_cents,
            "tax_cents": self.tax_cents,
            "total_cents": self.total_cents,
        }


def parse_percent(value, field: str) -> Decimal:
    """
    Parse a user-supplied percentage (number or numeric string) to a
    Decimal with two decimal places. Values outside [0, 100] are rejected.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    try:
        pct = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"{field} must be a number")
    if not pct.is_finite():
        raise ValidationError(f"{field} must be a number")
    if pct < 0 or pct > MAX_PERCENT:
        raise ValidationError(f"{field} must be between 0 and 100")
    return pct.quantize(Decimal("0.01"))


def line_total_cents(unit_price_cents: int, quantity: int, discount_cents: int = 0) -> int:
    return unit_price_cents * quantity - discount_cents


def calculate_totals(
    lines: Iterable[PricedLine],
    discount_percent: Decimal | int = 0,
    tax_rate: Decimal | int = 0,
    tax_enabled: bool = True,
) -> SaleTotals:
    lines = list(lines)

    subtotal = sum(line.unit_price_cents * line.quantity for line in lines)
    item_discount = sum(line.discount_cents or 0 for line in lines)

    percentage_discount = percent_of_cents(subtotal - item_discount, Decimal(discount_percent))
    discount = item_discount + percentage_discount

    tax = percent_of_cents(subtotal - discount, Decimal(tax_rate)) if tax_enabled else 0

    return SaleTotals(
        subtotal_cents=subtotal,
        item_discount_cents=item_discount,
        percentage_discount_cents=percentage_discount,
        discount_cents=discount,
        tax_cents=tax,
        total_cents=subtotal - discount + tax,
    )
