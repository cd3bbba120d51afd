"""
Site conditions allowance calculator.

Pure function: compute_site_conditions_allowance(site_conditions) ->
SiteConditionsAllowance | None.

Each survey answer may add access, waste-logistics or admin hours (see
SITE_CONDITION_ALLOWANCES). Buckets are rounded to the nearest 0.5 h; the
result is None when nothing adds hours.
"""

from price_engine.constants import (
    ACCESS_NOTES_REASON,
    SITE_CONDITION_ALLOWANCES,
    SITE_CONDITION_HOURS_STEP,
    SITE_CONDITION_QUESTIONS,
)
from price_engine.models.contract import SiteConditions
from price_engine.models.estimate import SiteConditionsAllowance
from price_engine.services.rounding import round_to_step


def compute_site_conditions_allowance(
    site_conditions: SiteConditions | None,
) -> SiteConditionsAllowance | None:
    if site_conditions is None:
        return None

    hours = {"access": 0.0, "waste": 0.0, "admin": 0.0}
    reasons: list[str] = []

    def _reason(code: str) -> None:
        if code not in reasons:
            reasons.append(code)

    for question, answers in SITE_CONDITION_ALLOWANCES.items():
        rule = answers.get(getattr(site_conditions, question))
        if rule is not None:
            bucket, amount, code = rule
            hours[bucket] += amount
            _reason(code)
        # Notes add no hours; reported in survey order after the time rule
        if question == "work_time_restrictions" and _has_notes(site_conditions):
            _reason(ACCESS_NOTES_REASON)

    access = round_to_step(hours["access"], SITE_CONDITION_HOURS_STEP)
    waste = round_to_step(hours["waste"], SITE_CONDITION_HOURS_STEP)
    admin = round_to_step(hours["admin"], SITE_CONDITION_HOURS_STEP)
    if access == 0 and waste == 0 and admin == 0:
        return None

    return SiteConditionsAllowance(
        access_hours=access,
        waste_hours=waste,
        admin_hours=admin,
        reason_codes=tuple(reasons),
    )


def _has_notes(site_conditions: SiteConditions) -> bool:
    notes = site_conditions.access_constraints_notes
    return bool(notes and notes.strip())


def answered_ratio(site_conditions: SiteConditions | None) -> float:
    """Share of the 16 survey questions that have an answer."""
    if site_conditions is None:
        return 0.0
    answered = sum(1 for q in SITE_CONDITION_QUESTIONS if getattr(site_conditions, q) is not None)
    return answered / len(SITE_CONDITION_QUESTIONS)
