"""Numeric helpers shared by the calculators."""

import math


def round_sek(value: float | None) -> int:
    """Round to whole SEK, halves away from zero for positive amounts (0 for None/NaN)."""
    if value is None or not math.isfinite(value):
        return 0
    return int(math.floor(value + 0.5))


def round2(value: float) -> float:
    return round(value + 1e-9, 2) if value >= 0 else round(value, 2)


def round_to_step(value: float, step: float) -> float:
    """Round a non-negative quantity to the nearest multiple of step (0 for non-positive)."""
    if not value or value <= 0:
        return 0.0
    return math.floor(value / step + 0.5) * step


def clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)
