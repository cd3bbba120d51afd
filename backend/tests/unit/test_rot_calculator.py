"""Unit tests for the ROT deduction calculator."""

import pytest

from price_engine.config import RotPolicy
from price_engine.models.estimate import TaskLine
from price_engine.services.rot_calculator import compute_rot_summary


def _task(labor: float, eligible: bool = True, group: str = "plumbing") -> TaskLine:
    return TaskLine(
        task_key="t",
        trade_group=group,
        qty=1,
        unit="st",
        labor_sek=labor,
        material_sek=1000,
        subtotal_sek=labor + 1000,
        rot_eligible=eligible,
    )


ITEMS = [_task(40000), _task(20000.4), _task(9000, eligible=False)]


class TestComputeRotSummary:
    def test_default_rate_without_cap(self):
        summary = compute_rot_summary(ITEMS, 80000)
        assert summary.rot_rate == 0.30
        assert summary.rot_eligible_labor_sek == 60000
        assert summary.rot_deduction_sek == 18000
        assert summary.total_after_rot_sek == 62000
        assert not summary.rot_cap_applied
        assert summary.rot_cap_reason == "unknown_user_tax_limit"
        assert summary.rot_cap_sek is None

    def test_cap_applied(self):
        summary = compute_rot_summary(ITEMS, 80000, RotPolicy(max_sek=10000))
        assert summary.rot_deduction_sek == 10000
        assert summary.rot_cap_applied
        assert summary.rot_cap_reason == "rot_max_limit"
        assert summary.rot_cap_sek == 10000
        assert summary.total_after_rot_sek == 70000

    def test_cap_not_reached(self):
        summary = compute_rot_summary(ITEMS, 80000, RotPolicy(max_sek=50000))
        assert summary.rot_deduction_sek == 18000
        assert not summary.rot_cap_applied
        assert summary.rot_cap_reason == "unknown_user_tax_limit"
        assert summary.rot_cap_sek == 50000

    def test_cap_scales_with_owners(self):
        summary = compute_rot_summary(ITEMS, 80000, RotPolicy(max_sek=10000), owners_count=2)
        assert summary.rot_deduction_sek == 18000
        assert summary.rot_cap_sek == 20000
        assert not summary.rot_cap_applied

    @pytest.mark.parametrize(("rate", "expected"), [(1.5, 1.0), (-0.2, 0.0), (None, 0.30)])
    def test_rate_is_clamped(self, rate, expected):
        assert RotPolicy(rate=rate).rate == expected

    def test_total_after_rot_never_negative(self):
        summary = compute_rot_summary(ITEMS, 1000, RotPolicy(rate=1.0))
        assert summary.total_after_rot_sek == 0

    def test_zero_rate(self):
        summary = compute_rot_summary(ITEMS, 80000, RotPolicy(rate=0))
        assert summary.rot_deduction_sek == 0
        assert summary.total_after_rot_sek == 80000

    def test_no_eligible_lines(self):
        summary = compute_rot_summary([_task(5000, eligible=False)], 6000)
        assert summary.rot_eligible_labor_sek == 0
        assert summary.rot_deduction_sek == 0

    def test_deduction_bounds(self):
        summary = compute_rot_summary(ITEMS, 80000, RotPolicy(rate=0.5, max_sek=25000))
        assert 0 <= summary.rot_deduction_sek <= summary.rot_eligible_labor_sek
        assert summary.rot_deduction_sek <= 25000
