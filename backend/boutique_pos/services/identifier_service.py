# Overview: Service-layer operations for barcodes and SKUs.

"""
Identifier Service - barcode and SKU generation, barcode normalization

BARCODES: EAN-13 compatible. 3-digit prefix (config BARCODE_PREFIX, "200" is
in the GS1 in-store range) + 9 random digits + check digit.

UNIQUENESS: the generator alone is only probabilistically unique (9 random
digits). generate_unique_barcode() adds the existence check against stored
items; items_service runs the same check before accepting a client barcode.

SKUs: "{CAT}-{NAM}-{NNNN}", purely cosmetic, no uniqueness guarantee.
"""

from __future__ import annotations

import random

from flask import current_app

from ..extensions import db
from ..models import Item

_system_random = random.SystemRandom()

EAN13_PAYLOAD_LENGTH = 12


class IdentifierError(Exception):
    """Raised when an identifier cannot be generated or is malformed."""
    pass


def normalize_barcode(value: str) -> str:
    """Scanners and keyboards add stray whitespace; barcodes never contain it."""
    return "".join((value or "").split())


def ean13_check_digit(payload: str) -> int:
    """
    Standard EAN-13 check digit for a 12-digit payload.

    Digits at even (0-indexed) positions weigh 1, odd positions weigh 3;
    check = (10 - sum % 10) % 10.
    """
    if len(payload) != EAN13_PAYLOAD_LENGTH or not payload.isdigit():
        raise IdentifierError("EAN-13 payload must be exactly 12 digits")
    total = sum(int(d) * (1 if i % 2 == 0 else 3) for i, d in enumerate(payload))
    return (10 - (total % 10)) % 10


def is_valid_ean13(code: str) -> bool:
    code = normalize_barcode(code)
    if len(code) != 13 or not code.isdigit():
        return False
    return ean13_check_digit(code[:12]) == int(code[12])


def generate_barcode(prefix: str | None = None, rng: random.Random | None = None) -> str:
    if prefix is None:
        prefix = current_app.config.get("BARCODE_PREFIX", "200")
    if len(prefix) != 3 or not prefix.isdigit():
        raise IdentifierError("barcode prefix must be 3 digits")
    rng = rng or _system_random
    payload = prefix + f"{rng.randrange(10 ** 9):09d}"
    return payload + str(ean13_check_digit(payload))


def barcode_exists(barcode: str, *, exclude_item_id: int | None = None) -> bool:
    q = db.session.query(Item.id).filter(Item.barcode == barcode)
    if exclude_item_id is not None:
        q = q.filter(Item.id != exclude_item_id)
    return db.session.query(q.exists()).scalar()


def generate_unique_barcode(
    *,
    prefix: str | None = None,
    rng: random.Random | None = None,
    max_attempts: int = 10,
) -> str:
    """Generate barcodes until one is not already assigned to an item."""
    for _ in range(max_attempts):
        candidate = generate_barcode(prefix, rng)
        if not barcode_exists(candidate):
            return candidate
    raise IdentifierError(f"Could not generate an unused barcode in {max_attempts} attempts")


def generate_sku(category: str, name: str, rng: random.Random | None = None) -> str:
    category = (category or "").strip()
    name = (name or "").strip()
    if not category or not name:
        raise IdentifierError("category and name are required to generate a SKU")
    rng = rng or _system_random
    return f"{category[:3].upper()}-{name[:3].upper()}-{rng.randrange(10 ** 4):04d}"
