"""
Unit tests for the uncertainty range engine.

Invariant tests: low <= mid <= high, minimum spread, percentage bounds.
Golden tests: weighted percentages and completeness adjustments.
"""

import pytest

from price_engine.config import RangePolicy
from price_engine.models.estimate import RangeSignals, TaskLine
from price_engine.services.range_engine import (
    RootSumSquareStrategy,
    WeightedTradeGroupStrategy,
    apply_adjustments,
    compute_estimate_range,
    derive_range_signals,
    enforce_monotonic,
    labor_material_ranges,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

NO_SIGNALS = RangeSignals()
POLICY = RangePolicy()


def _task(group: str, subtotal: float, labor: float | None = None) -> TaskLine:
    labor = subtotal / 2 if labor is None else labor
    return TaskLine(
        task_key=f"{group}_task",
        trade_group=group,
        qty=1,
        unit="st",
        labor_sek=labor,
        material_sek=subtotal - labor,
        subtotal_sek=subtotal,
        rot_eligible=True,
    )


class TestStrategies:
    def test_weighted_average(self):
        items = [_task("demolition", 10000), _task("painting", 30000)]
        pct = WeightedTradeGroupStrategy().base_pct(items, POLICY)
        assert pct == pytest.approx((10000 * 0.09 + 30000 * 0.05) / 40000)

    def test_unlisted_group_uses_default(self):
        assert WeightedTradeGroupStrategy().base_pct([_task("roofing", 5000)], POLICY) == 0.08

    def test_no_items_uses_default(self):
        assert WeightedTradeGroupStrategy().base_pct([], POLICY) == 0.08
        assert RootSumSquareStrategy().base_pct([], POLICY) == 0.08

    def test_root_sum_square_is_narrower_for_many_lines(self):
        items = [_task("plumbing", 10000) for _ in range(4)]
        weighted = WeightedTradeGroupStrategy().base_pct(items, POLICY)
        rss = RootSumSquareStrategy().base_pct(items, POLICY)
        assert weighted == pytest.approx(0.08)
        assert rss == pytest.approx(0.04)


class TestApplyAdjustments:
    def test_no_signals(self):
        assert apply_adjustments(0.08, NO_SIGNALS, POLICY) == (0.08, [])

    def test_all_reductions(self):
        signals = RangeSignals(measurement_confirmed=True, room_measurement_ratio=1.0, site_conditions_ratio=1.0)
        pct, reasons = apply_adjustments(0.08, signals, POLICY)
        assert pct == pytest.approx(0.08 - 0.015 - 0.015 - 0.01)
        assert reasons == ["measurement_confirmed", "room_measurements_complete", "site_conditions_complete"]

    def test_partial_completeness(self):
        signals = RangeSignals(room_measurement_ratio=0.5, site_conditions_ratio=0.6)
        pct, reasons = apply_adjustments(0.08, signals, POLICY)
        assert pct == pytest.approx(0.08 - 0.0075 - 0.005)
        assert reasons == ["room_measurements_partial", "site_conditions_partial"]

    def test_needs_confirmation_widens(self):
        pct, reasons = apply_adjustments(0.08, RangeSignals(needs_confirmation_ids=("NC-002",)), POLICY)
        assert pct == pytest.approx(0.10)
        assert reasons == ["needs_confirmation"]

    def test_reclamped_after_each_step(self):
        signals = RangeSignals(measurement_confirmed=True, room_measurement_ratio=1.0, site_conditions_ratio=1.0)
        pct, _ = apply_adjustments(0.04, signals, POLICY)
        assert pct == POLICY.min_range_pct

    def test_ceiling(self):
        pct, _ = apply_adjustments(0.25, RangeSignals(needs_confirmation_ids=("NC-003",)), POLICY)
        assert pct == POLICY.max_range_pct


class TestComputeEstimateRange:
    def test_symmetric_band(self):
        result = compute_estimate_range([_task("plumbing", 100000)], NO_SIGNALS, 100000)
        assert (result.low, result.mid, result.high) == (92000, 100000, 108000)
        assert result.applied_pct == pytest.approx(0.08)

    def test_minimum_spread_in_sek(self):
        result = compute_estimate_range([_task("painting", 10000)], NO_SIGNALS, 10000)
        assert result.high - result.mid == 2000
        assert result.mid - result.low == 2000

    def test_low_floored_at_zero(self):
        result = compute_estimate_range([_task("painting", 1000)], NO_SIGNALS, 1000)
        assert result.low == 0
        assert result.high == 3000

    def test_negative_total_clamped(self):
        result = compute_estimate_range([], NO_SIGNALS, -500)
        assert result.mid == 0
        assert result.low == 0
        assert result.high == 2000

    def test_reason_codes_recorded(self):
        signals = RangeSignals(measurement_confirmed=True, needs_confirmation_ids=("NC-001",))
        result = compute_estimate_range([_task("plumbing", 50000)], signals, 50000)
        assert result.reason_codes == ("measurement_confirmed", "needs_confirmation")

    def test_custom_policy_and_strategy(self):
        policy = RangePolicy(min_range_sek=0, min_range_pct=0.01)
        items = [_task("plumbing", 50000), _task("plumbing", 50000)]
        result = compute_estimate_range(items, NO_SIGNALS, 100000, policy=policy, strategy=RootSumSquareStrategy())
        # sqrt(2) * 4000 / 100000
        assert result.applied_pct == pytest.approx(0.0566, abs=1e-4)

    @pytest.mark.parametrize("total", [0, 1, 999.5, 25000, 180000.49, 2_500_000])
    def test_monotonic_with_minimum_spread(self, total):
        result = compute_estimate_range([_task("tiling_or_vinyl", 1000)], NO_SIGNALS, total)
        assert result.low <= result.mid <= result.high
        assert result.high - result.mid >= min(2000, result.high)
        assert POLICY.min_range_pct <= result.applied_pct <= POLICY.max_range_pct


class TestLaborMaterialRanges:
    def test_same_percentage(self):
        labor, material = labor_material_ranges([_task("plumbing", 100000, labor=60000)], 0.1)
        assert (labor.min_sek, labor.max_sek) == (54000, 66000)
        assert (material.min_sek, material.max_sek) == (36000, 44000)

    def test_floored_at_zero(self):
        labor, _ = labor_material_ranges([_task("plumbing", 1000)], 1.5)
        assert labor.min_sek == 0


class TestEnforceMonotonic:
    def test_already_ordered(self):
        assert enforce_monotonic(1, 2, 3) == (1, 2, 3)

    def test_reorders_pathological_band(self):
        assert enforce_monotonic(50, 20, 10) == (10, 20, 50)
        assert enforce_monotonic(10, 50, 30) == (10, 50, 50)

    def test_missing_mid_uses_midpoint(self):
        assert enforce_monotonic(10, None, 30) == (10, 20, 30)

    def test_all_missing_returned_as_is(self):
        assert enforce_monotonic(None, None, None) == (None, None, None)


class TestDeriveRangeSignals:
    def test_bare_contract(self, small_bathroom):
        signals = derive_range_signals(small_bathroom)
        assert signals == RangeSignals()

    def test_measured_contract(self, measured_bathroom):
        signals = derive_range_signals(measured_bathroom, ("NC-003",))
        assert signals.measurement_confirmed
        assert signals.site_conditions_ratio == 1.0
        assert signals.room_measurement_ratio == 0.0
        assert signals.needs_confirmation_ids == ("NC-003",)

    def test_room_measurement_ratio(self, make_contract):
        contract = make_contract(roomMeasurements={"floor_area_m2": 4.0, "wall_area_m2": 18.0, "ceiling_area_m2": 4.0})
        assert derive_range_signals(contract).room_measurement_ratio == 0.75
