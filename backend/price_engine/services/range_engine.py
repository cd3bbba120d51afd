"""
Uncertainty / range engine.

Turns a flat grand total into a low/mid/high band whose width depends on
the mix of trades and on how complete the inputs are.

  1. base pct      from the line items (pluggable strategy)
  2. clamp         [min_range_pct, max_range_pct]
  3. adjustments   measurement_confirmed, room_measurements_complete/partial,
                   site_conditions_complete/partial, needs_confirmation;
                   each re-clamped and recorded as a reason code
  4. band          mid = round(total), delta = max(round(mid*pct), floor),
                   low = max(mid - delta, 0), high = mid + delta
"""

import math
from collections.abc import Sequence
from typing import Protocol

import structlog

from price_engine.config import RangePolicy
from price_engine.models.contract import EstimatorContract
from price_engine.models.estimate import EstimateRange, MinMaxSek, RangeSignals, TaskLine
from price_engine.services.measurement_inputs import MEASUREMENT_KEYS
from price_engine.services.rounding import clamp, is_number, round_sek
from price_engine.services.site_conditions import answered_ratio

logger = structlog.get_logger(__name__)

DEFAULT_RANGE_POLICY = RangePolicy()


# ---------------------------------------------------------------------------
# Aggregation strategies
# ---------------------------------------------------------------------------


class RangeStrategy(Protocol):
    """Aggregates per-line uncertainty into one base percentage."""

    name: str

    def base_pct(self, line_items: Sequence[TaskLine], policy: RangePolicy) -> float: ...


def _subtotal(item: TaskLine) -> float:
    return item.subtotal_sek if is_number(item.subtotal_sek) else 0.0


class WeightedTradeGroupStrategy:
    """Subtotal-weighted average of the trade-group percentages."""

    name = "weighted_trade_group"

    def base_pct(self, line_items: Sequence[TaskLine], policy: RangePolicy) -> float:
        total = sum(_subtotal(item) for item in line_items)
        if total <= 0:
            return policy.default_trade_group_pct
        weighted = sum(_subtotal(item) * policy.pct_for(item.trade_group) for item in line_items)
        return weighted / total


class RootSumSquareStrategy:
    """
    Independent per-line deviations combined as sqrt(sum(d²)).

    Each line deviates by subtotal * pct(trade); the combined deviation is
    expressed as a share of the subtotal sum. Mixes of many small lines
    come out narrower than the weighted average.
    """

    name = "root_sum_square"

    def base_pct(self, line_items: Sequence[TaskLine], policy: RangePolicy) -> float:
        total = sum(_subtotal(item) for item in line_items)
        if total <= 0:
            return policy.default_trade_group_pct
        variance = sum((_subtotal(item) * policy.pct_for(item.trade_group)) ** 2 for item in line_items)
        return math.sqrt(variance) / total


# ---------------------------------------------------------------------------
# Band computation
# ---------------------------------------------------------------------------


def _adjust(pct: float, points: float, policy: RangePolicy) -> float:
    return clamp(pct + points / 100, policy.min_range_pct, policy.max_range_pct)


def apply_adjustments(pct: float, signals: RangeSignals, policy: RangePolicy) -> tuple[float, list[str]]:
    """Apply the completeness adjustments; returns (pct, reason codes)."""
    reasons: list[str] = []
    if signals.measurement_confirmed:
        pct = _adjust(pct, policy.measurement_confirmed_pts, policy)
        reasons.append("measurement_confirmed")

    if signals.room_measurement_ratio >= policy.complete_ratio:
        pct = _adjust(pct, policy.room_measurements_complete_pts, policy)
        reasons.append("room_measurements_complete")
    elif signals.room_measurement_ratio >= policy.partial_ratio:
        pct = _adjust(pct, policy.room_measurements_partial_pts, policy)
        reasons.append("room_measurements_partial")

    if signals.site_conditions_ratio >= policy.complete_ratio:
        pct = _adjust(pct, policy.site_conditions_complete_pts, policy)
        reasons.append("site_conditions_complete")
    elif signals.site_conditions_ratio >= policy.partial_ratio:
        pct = _adjust(pct, policy.site_conditions_partial_pts, policy)
        reasons.append("site_conditions_partial")

    if signals.needs_confirmation_ids:
        pct = _adjust(pct, policy.needs_confirmation_pts, policy)
        reasons.append("needs_confirmation")
    return pct, reasons


def compute_estimate_range(
    line_items: Sequence[TaskLine],
    signals: RangeSignals,
    mid_total: float,
    policy: RangePolicy | None = None,
    strategy: RangeStrategy | None = None,
) -> EstimateRange:
    """
    Compute the low/mid/high band around ``mid_total``.

    Args:
        line_items: Priced lines (trade group + subtotal).
        signals: Completeness signals.
        mid_total: Flat grand total in SEK.
        policy: Range constants; defaults to RangePolicy().
        strategy: Base-pct aggregation; defaults to WeightedTradeGroupStrategy.

    Returns:
        EstimateRange with low <= mid <= high and high - low >= min_range_sek.
    """
    policy = policy or DEFAULT_RANGE_POLICY
    strategy = strategy or WeightedTradeGroupStrategy()

    base = strategy.base_pct(line_items, policy)
    pct = clamp(base, policy.min_range_pct, policy.max_range_pct)
    pct, reasons = apply_adjustments(pct, signals, policy)

    mid = max(round_sek(mid_total), 0)
    min_delta = max(policy.min_range_sek, round_sek(mid * policy.min_range_pct))
    delta = max(round_sek(mid * pct), min_delta)
    low = max(mid - delta, 0)
    high = mid + delta

    logger.debug(
        "estimate_range_computed",
        strategy=strategy.name,
        base_pct=round(base, 4),
        applied_pct=round(pct, 4),
        low=low,
        mid=mid,
        high=high,
        reason_codes=reasons,
    )
    return EstimateRange(low=low, mid=mid, high=high, applied_pct=pct, reason_codes=tuple(reasons))


def labor_material_ranges(line_items: Sequence[TaskLine], pct: float) -> tuple[MinMaxSek, MinMaxSek]:
    """Apply ± pct to the aggregated labour and material totals, floored at zero."""
    labor = sum(item.labor_sek for item in line_items if is_number(item.labor_sek))
    material = sum(item.material_sek for item in line_items if is_number(item.material_sek))

    def _band(amount: float) -> MinMaxSek:
        return MinMaxSek(
            min_sek=round_sek(max(amount * (1 - pct), 0)),
            max_sek=max(round_sek(amount * (1 + pct)), 0),
        )

    return _band(labor), _band(material)


def enforce_monotonic(
    low: float | None,
    mid: float | None,
    high: float | None,
) -> tuple[float | None, float | None, float | None]:
    """
    Reorder a band so that low <= mid <= high.

    low/high become the min/max of the finite values; mid is clamped between
    them (their midpoint when mid is missing). All-missing input is returned as-is.
    """
    values = [v for v in (low, mid, high) if is_number(v)]
    if not values:
        return low, mid, high
    lowest = min(values)
    highest = max(values)
    candidate = mid if is_number(mid) else (lowest + highest) / 2
    return lowest, clamp(candidate, lowest, highest), highest


def derive_range_signals(
    contract: EstimatorContract,
    needs_confirmation_ids: Sequence[str] = (),
) -> RangeSignals:
    override = contract.measurement_override
    rooms = contract.room_measurements
    populated = 0
    if rooms is not None:
        populated = sum(1 for key in MEASUREMENT_KEYS if is_number(getattr(rooms, key)))
    return RangeSignals(
        measurement_confirmed=bool(override and override.has_any_value()),
        room_measurement_ratio=populated / len(MEASUREMENT_KEYS),
        site_conditions_ratio=answered_ratio(contract.site_conditions),
        needs_confirmation_ids=tuple(needs_confirmation_ids),
    )
