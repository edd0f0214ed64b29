"""
Display rounding for amounts and percentages.

The engine keeps full ``Decimal`` precision; values are only rounded when
they leave the service (API responses), always ROUND_HALF_UP.  The quantum
comes from the caller's settings (e.g. ``settings.amount_quantum``).
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional


def quantize(value: Decimal, quantum: str) -> Decimal:
    return value.quantize(Decimal(quantum), rounding=ROUND_HALF_UP)


def quantize_optional(value: Optional[Decimal], quantum: str) -> Optional[Decimal]:
    return quantize(value, quantum) if value is not None else None
