"""
Values -- money and variety-map primitives shared by every layer.

Responsibility:
    Defines the two value shapes the ledger is built from: dollar amounts
    (always ``Decimal``, never float) and variety maps (cookie type code to
    signed package count).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Dollar amounts are ``Decimal`` quantized to cents with ROUND_HALF_UP.
    - Construction from float goes through ``str`` so no binary artifacts
      leak into amounts.

Failure modes:
    - ``ValueError`` from ``to_money`` for values that are not numeric.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import TypeAlias

Varieties: TypeAlias = dict[str, int]
"""Cookie type code -> package count.  Absent key means zero."""

CENTS = Decimal("0.01")
ZERO = Decimal("0")


def to_money(value: Decimal | int | float | str) -> Decimal:
    """Convert a numeric value to a cent-quantized ``Decimal``."""
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except InvalidOperation as exc:
            raise ValueError(f"Not a monetary amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Not a monetary amount: {value!r}")
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def freeze_varieties(varieties: Mapping[str, int]) -> tuple[tuple[str, int], ...]:
    """Sorted, hashable rendering of a variety map (zero counts dropped)."""
    return tuple(sorted((k, v) for k, v in varieties.items() if v))
