"""Deterministic numeric normalization — pure Python, never raises.

Normalizes the loosely typed numbers stored on opportunities:
  - Money: "32500", "32,500.00", Decimal("32500.00") → 32500.0
  - Durations: 45, "45", "45.0" → 45
  - Rounding: half-up to a fixed number of decimals (2.5 → 3, not 2)

Design: anything unparseable becomes 0. A broken revenue cell must never
take the dashboard down.
"""

import math
from decimal import Decimal, InvalidOperation
from typing import Any


def safe_float(raw: Any) -> float:
    """Parse a money-like value to float. Returns 0.0 if unparseable."""
    if raw is None or isinstance(raw, bool):
        return 0.0
    if isinstance(raw, (int, float, Decimal)):
        value = float(raw)
        return value if math.isfinite(value) else 0.0

    s = str(raw).strip().replace(",", "")
    if not s:
        return 0.0
    try:
        value = float(Decimal(s))
    except (InvalidOperation, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0


def parse_minutes(raw: Any) -> int | None:
    """Parse a call duration to whole minutes; None if missing, unparseable or negative.

    A logged 0 stays 0.
    """
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(Decimal(str(raw).strip().replace(",", "")))
    except (InvalidOperation, ValueError):
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return int(round_half_up(value))


def safe_minutes(raw: Any) -> int:
    """Parse a call duration to whole minutes. Returns 0 if unparseable or negative."""
    return parse_minutes(raw) or 0


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round half away from zero for positives: 0.5 → 1, 2.25 → 2.3.

    Python's round() is banker's rounding (2.5 → 2), which shifts dashboard
    percentages by one point on exact halves.
    """
    factor = 10**ndigits
    return math.floor(value * factor + 0.5) / factor


def percent(part: float, whole: float) -> float:
    """part / whole * 100, or 0.0 when whole is zero."""
    if not whole:
        return 0.0
    return part / whole * 100


def mean(values: list[float]) -> float:
    """Arithmetic mean, or 0.0 for an empty list."""
    if not values:
        return 0.0
    return sum(values) / len(values)
