"""
ROT deduction calculator.

Pure function: compute_rot_summary(line_items, grand_total, policy, owners_count)
-> RotSummary.

The deduction is rate * eligible labour, capped when the policy carries a
cap (scaled by the number of owners). The user's own remaining ROT
allowance is unknown, which is reported as the cap reason otherwise.
"""

from collections.abc import Sequence

import structlog

from price_engine.config import RotPolicy
from price_engine.constants import ROT_REASON_CAP, ROT_REASON_UNKNOWN_LIMIT
from price_engine.models.estimate import RotSummary, TaskLine
from price_engine.services.rounding import round_sek

logger = structlog.get_logger(__name__)


def compute_rot_summary(
    line_items: Sequence[TaskLine],
    grand_total: float | None,
    policy: RotPolicy | None = None,
    owners_count: int = 1,
) -> RotSummary:
    policy = policy or RotPolicy()
    eligible_labor = sum(round_sek(item.labor_sek) for item in line_items if item.rot_eligible)
    raw_deduction = round_sek(eligible_labor * policy.rate)

    cap = None
    if policy.max_sek is not None:
        cap = policy.max_sek * max(owners_count, 1)

    cap_applied = cap is not None and raw_deduction > cap
    deduction = cap if cap_applied else raw_deduction
    total_after = max(round_sek(grand_total) - deduction, 0)

    if cap_applied:
        logger.info("rot_cap_applied", raw_deduction_sek=raw_deduction, rot_cap_sek=cap)

    return RotSummary(
        rot_rate=policy.rate,
        rot_eligible_labor_sek=eligible_labor,
        rot_deduction_sek=deduction,
        total_after_rot_sek=total_after,
        rot_cap_applied=cap_applied,
        rot_cap_reason=ROT_REASON_CAP if cap_applied else ROT_REASON_UNKNOWN_LIMIT,
        rot_cap_sek=cap,
    )
