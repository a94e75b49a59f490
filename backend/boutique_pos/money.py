# Overview: Cents arithmetic helpers shared by pricing, receipts, and reports.

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP


def _dec(x) -> Decimal:
    return Decimal(str(x or 0))


def round_half_up_cents(value) -> int:
    """Round a (possibly fractional) cents amount to whole cents, half-up."""
    return int(_dec(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def percent_of_cents(amount_cents: int, percent: Decimal) -> int:
    """amount * percent / 100, rounded to whole cents."""
    return round_half_up_cents(_dec(amount_cents) * _dec(percent) / Decimal(100))


def percent_to_bps(percent: Decimal) -> int:
    return int((_dec(percent) * 100).to_integral_value(rounding=ROUND_HALF_UP))


def bps_to_percent(bps: int) -> Decimal:
    return (_dec(bps) / Decimal(100)).quantize(Decimal("0.01"))


def format_cents(cents: int | None) -> str:
    """20040 -> '200.40'. Display only; never parse this back."""
    cents = int(cents or 0)
    sign = "-" if cents < 0 else ""
    whole, frac = divmod(abs(cents), 100)
    return f"{sign}{whole}.{frac:02d}"
