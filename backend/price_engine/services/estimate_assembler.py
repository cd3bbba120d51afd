"""
Estimate assembler.

evaluate(contract, options) runs the whole pipeline for one bathroom:

  outcome mapper -> room geometry -> needs confirmation -> measurement inputs
  -> estimate quality -> scope flags -> site allowance -> task pricing
  -> range -> outlier flags -> confidence tier + ROT -> client estimate

Everything is computed fresh per call. Only ``normalized.timestamp``
differs between two evaluations of the same contract.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import structlog
from structlog.contextvars import bound_contextvars

from price_engine.config import RangePolicy, RotPolicy, get_settings
from price_engine.constants import SITE_CONDITION_TASK_KEYS
from price_engine.models.catalog import ScopeRule
from price_engine.models.contract import EstimatorContract
from price_engine.models.enums import RenovationProfile
from price_engine.models.estimate import (
    ClientEstimate,
    ClientEstimateRange,
    ClientLineItem,
    ClientTotals,
    ClientTradeGroupTotal,
    EstimateRange,
    EstimateResult,
    EvaluationResult,
    NormalizedEstimate,
    OutlierFlags,
    PricingRequest,
    RangedTotals,
    SiteConditionsEffect,
)
from price_engine.services.confidence_tier import derive_confidence_tier
from price_engine.services.measurement_inputs import (
    compute_measurement_inputs,
    measurement_sources,
    room_values,
)
from price_engine.services.needs_confirmation import (
    compute_derived_areas,
    compute_estimate_quality,
    compute_needs_confirmation,
)
from price_engine.services.outcome_mapper import map_outcome
from price_engine.services.outlier_classifier import compute_outlier_flags, determine_profile
from price_engine.services.range_engine import (
    RangeStrategy,
    compute_estimate_range,
    derive_range_signals,
    enforce_monotonic,
    labor_material_ranges,
)
from price_engine.services.room_geometry import resolve_room
from price_engine.services.rot_calculator import compute_rot_summary
from price_engine.services.rounding import round_sek
from price_engine.services.scope_compiler import compile_derived_flags
from price_engine.services.site_conditions import compute_site_conditions_allowance
from price_engine.services.task_pricing import CatalogPricingEngine, TaskPricingEngine

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class EvaluateOptions:
    """Per-call overrides for ``evaluate``. Every field is optional."""

    profile: RenovationProfile | None = None
    image_id: str | None = None
    pricing_engine: TaskPricingEngine | None = None
    range_strategy: RangeStrategy | None = None
    range_policy: RangePolicy | None = None
    rot_policy: RotPolicy | None = None
    rules: tuple[ScopeRule, ...] | None = None


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


def build_normalized(
    contract: EstimatorContract,
    image_id: str | None = None,
) -> tuple[NormalizedEstimate, dict[str, Any]]:
    """Resolve the contract into geometry, intents, selections and quality."""
    intents, selections, mapping_log = map_outcome(contract.outcome)
    room = resolve_room(contract)
    needs = compute_needs_confirmation(room, intents, selections)
    inputs = compute_measurement_inputs(
        room_values(room),
        contract.analysis.analysis_confidence,
        measurement_sources(contract),
    )
    normalized = NormalizedEstimate(
        image_id=image_id,
        analysis=contract.analysis,
        overrides=contract.overrides,
        room=room,
        intents=intents,
        selections=selections,
        needs_confirmation_ids=needs,
        derived_areas=compute_derived_areas(room, selections),
        inputs=inputs,
        estimate_quality=compute_estimate_quality(inputs, needs),
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
    return normalized, mapping_log


def summarize_site_conditions_effect(
    line_items: Sequence[ClientLineItem],
    reason_codes: Iterable[str],
) -> SiteConditionsEffect | None:
    """Money added by site-condition hours; None when no such line exists."""
    keys = set(SITE_CONDITION_TASK_KEYS.values())
    allowances = [item for item in line_items if item.key in keys]
    if not allowances:
        return None
    return SiteConditionsEffect(
        added_labor_sek=round_sek(sum(item.labor_sek for item in allowances)),
        added_material_sek=round_sek(sum(item.material_sek for item in allowances)),
        added_total_sek=round_sek(sum(item.subtotal_sek for item in allowances)),
        reason_codes=tuple(dict.fromkeys(code for code in reason_codes if code)),
    )


def build_client_estimate(
    estimate_result: EstimateResult,
    normalized: NormalizedEstimate,
    flags: OutlierFlags,
    rot_policy: RotPolicy | None = None,
    owners_count: int = 1,
) -> ClientEstimate:
    """Shape the estimate for consumers; every SEK amount becomes an int."""
    line_items = tuple(
        ClientLineItem(
            key=task.task_key,
            trade_group=task.trade_group,
            qty=task.qty,
            unit=task.unit,
            labor_sek=round_sek(task.labor_sek),
            material_sek=round_sek(task.material_sek),
            subtotal_sek=round_sek(task.subtotal_sek),
            rot_eligible=task.rot_eligible,
            note=task.note,
        )
        for task in estimate_result.tasks
    )
    totals = estimate_result.totals
    rng = estimate_result.estimate_range

    confidence = derive_confidence_tier(
        estimate_result.estimate_quality,
        analysis_confidence=normalized.analysis.analysis_confidence,
        image_quality=normalized.analysis.image_quality,
        needs_confirmation_ids=estimate_result.needs_confirmation_ids,
        warnings=estimate_result.warnings,
        outlier_flags=flags.outlier_flags,
        info_flags=flags.info_flags,
    )
    rot_summary = compute_rot_summary(
        estimate_result.tasks,
        totals.grand_total_sek,
        rot_policy,
        owners_count=owners_count,
    )
    allowance = estimate_result.site_conditions_allowance

    return ClientEstimate(
        line_items=line_items,
        totals=ClientTotals(
            base_subtotal_sek=round_sek(totals.base_subtotal_sek),
            project_management_sek=round_sek(totals.project_management_sek),
            contingency_sek=round_sek(totals.contingency_sek),
            grand_total_sek=round_sek(totals.grand_total_sek),
            min_total_sek=totals.min_total_sek,
            max_total_sek=totals.max_total_sek,
            labor_min_sek=totals.labor_min_sek,
            labor_max_sek=totals.labor_max_sek,
            material_min_sek=totals.material_min_sek,
            material_max_sek=totals.material_max_sek,
        ),
        trade_group_totals=tuple(
            ClientTradeGroupTotal(trade_group=t.trade_group, subtotal_sek=round_sek(t.subtotal_sek))
            for t in estimate_result.trade_group_totals
        ),
        estimate_range=ClientEstimateRange(low_sek=rng.low, mid_sek=rng.mid, high_sek=rng.high),
        labor_range=estimate_result.labor_range,
        material_range=estimate_result.material_range,
        estimate_quality=estimate_result.estimate_quality,
        confidence_tier=confidence.confidence_tier,
        confidence_reasons=confidence.confidence_reasons,
        needs_confirmation_ids=estimate_result.needs_confirmation_ids,
        warnings=estimate_result.warnings,
        flags=estimate_result.flags,
        info_flags=flags.info_flags,
        plausibility_band=estimate_result.plausibility_band,
        sek_per_m2=estimate_result.sek_per_m2,
        derived_areas=estimate_result.derived_areas,
        rot_summary=rot_summary,
        site_conditions_effect=summarize_site_conditions_effect(
            line_items, allowance.reason_codes if allowance else ()
        ),
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def evaluate(
    contract: EstimatorContract | Mapping[str, Any],
    options: EvaluateOptions | None = None,
) -> EvaluationResult:
    """
    Evaluate one estimator contract end to end.

    Args:
        contract: Validated contract, or a mapping validated here (raises
            pydantic.ValidationError when invalid).
        options: Per-call overrides (profile, pricing engine, policies, rules).

    Returns:
        EvaluationResult with normalized inputs, the ranged estimate, the
        client estimate, outlier flags, profile and the outcome mapping log.

    Raises:
        Whatever the pricing engine raises, unchanged.
    """
    if not isinstance(contract, EstimatorContract):
        contract = EstimatorContract.model_validate(contract)
    options = options or EvaluateOptions()
    settings = get_settings()
    range_policy = options.range_policy or settings.range_policy
    rot_policy = options.rot_policy or RotPolicy.from_settings(settings)

    normalized, mapping_log = build_normalized(contract, options.image_id)
    profile = options.profile or determine_profile(contract.outcome)
    engine = options.pricing_engine or CatalogPricingEngine()

    with bound_contextvars(image_id=options.image_id, profile=profile.value):
        flags = compile_derived_flags(options.rules, normalized.intents)
        allowance = compute_site_conditions_allowance(contract.site_conditions)
        request = PricingRequest(
            room=normalized.room,
            intents=normalized.intents,
            selections=normalized.selections,
            flags=flags,
            needs_confirmation_ids=normalized.needs_confirmation_ids,
            profile=profile,
            site_conditions_allowance=allowance,
        )
        try:
            pricing = engine.price(request)
        except Exception:
            logger.exception("pricing_engine_failed", engine=type(engine).__name__)
            raise

        signals = derive_range_signals(contract, pricing.needs_confirmation_ids)
        raw_range = compute_estimate_range(
            pricing.tasks,
            signals,
            pricing.totals.grand_total_sek,
            policy=range_policy,
            strategy=options.range_strategy,
        )
        low, mid, high = enforce_monotonic(raw_range.low, raw_range.mid, raw_range.high)
        estimate_range = EstimateRange(
            low=round_sek(low),
            mid=round_sek(mid),
            high=round_sek(high),
            applied_pct=raw_range.applied_pct,
            reason_codes=raw_range.reason_codes,
        )
        labor_range, material_range = labor_material_ranges(pricing.tasks, raw_range.applied_pct)

        estimate_result = EstimateResult(
            tasks=pricing.tasks,
            flags=pricing.flags,
            totals=RangedTotals(
                **pricing.totals.model_dump(),
                min_total_sek=estimate_range.low,
                max_total_sek=estimate_range.high,
                labor_min_sek=labor_range.min_sek,
                labor_max_sek=labor_range.max_sek,
                material_min_sek=material_range.min_sek,
                material_max_sek=material_range.max_sek,
            ),
            trade_group_totals=pricing.trade_group_totals,
            plausibility_band=pricing.plausibility_band,
            sek_per_m2=pricing.sek_per_m2,
            warnings=pricing.warnings,
            needs_confirmation_ids=pricing.needs_confirmation_ids,
            derived_areas=pricing.derived_areas,
            estimate_range=estimate_range,
            labor_range=labor_range,
            material_range=material_range,
            estimate_quality=normalized.estimate_quality,
            site_conditions_allowance=allowance,
        )

        outliers = compute_outlier_flags(
            profile,
            normalized.estimate_quality,
            estimate_range.mid,
            pricing.sek_per_m2,
            pricing.plausibility_band,
        )
        owners = contract.rot_context.owners_count if contract.rot_context else 1
        client_estimate = build_client_estimate(
            estimate_result, normalized, outliers, rot_policy, owners_count=owners
        )

        logger.info(
            "evaluation_complete",
            estimate_quality=normalized.estimate_quality.value,
            confidence_tier=client_estimate.confidence_tier.value,
            mid_sek=estimate_range.mid,
            line_items=len(pricing.tasks),
            outlier_flags=list(outliers.outlier_flags),
        )

    return EvaluationResult(
        normalized=normalized,
        estimate_result=estimate_result,
        client_estimate=client_estimate,
        flags=outliers,
        profile=profile,
        mapping_log=mapping_log,
    )
