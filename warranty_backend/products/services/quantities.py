# products/services/quantities.py

"""
QUANTITY NORMALIZATION

HARD RULE:
- Material quantities are Decimals with 3 decimal places (m2, litres, kg).
- Every computed quantity (recipe x area, sums, differences) is quantized
  ROUND_HALF_UP before it is compared against stock or persisted.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

QUANTITY_PLACES = Decimal("0.001")
ZERO = Decimal("0.000")


def to_quantity(value) -> Decimal:
    """
    Normalize int / str / Decimal / float into a 3dp Decimal.

    - None or "" -> 0
    - bool is rejected (bool is an int subclass in Python)
    - NaN / Infinity are rejected
    """
    if value is None or value == "":
        return ZERO

    if isinstance(value, bool):
        raise ValueError("quantity must be numeric")

    if isinstance(value, float):
        value = str(value)

    try:
        d = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid quantity: {value!r}") from exc

    if not d.is_finite():
        raise ValueError(f"Invalid quantity: {value!r}")

    return d.quantize(QUANTITY_PLACES, rounding=ROUND_HALF_UP)


def to_positive_quantity(value, *, field: str = "quantity") -> Decimal:
    qty = to_quantity(value)
    if qty <= 0:
        raise ValueError(f"{field} must be greater than zero")
    return qty
