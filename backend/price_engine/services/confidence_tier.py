"""
Confidence tier classifier.

Base tier from estimate quality (confirmed -> high, semi_confirmed -> medium,
rough -> low), then at most one demotion for weak analysis (low confidence
or an insufficient image) and one more for blocking confirmation needs.
Warnings and flags are noted as a reason but never demote.
"""

from collections.abc import Sequence

from price_engine.constants import (
    BLOCKING_NEEDS,
    CONFIDENCE_TIERS,
    LOW_ANALYSIS_CONFIDENCE_THRESHOLD,
    QUALITY_TIER_MAP,
)
from price_engine.models.contract import ImageQuality
from price_engine.models.enums import ConfidenceTier, EstimateQuality
from price_engine.models.estimate import ConfidenceResult


def _parse_quality(value: EstimateQuality | str | None) -> EstimateQuality | None:
    if not value:
        return EstimateQuality.ROUGH
    try:
        return EstimateQuality(value)
    except ValueError:
        return None


def derive_confidence_tier(
    estimate_quality: EstimateQuality | str | None,
    analysis_confidence: float | None = None,
    image_quality: ImageQuality | None = None,
    needs_confirmation_ids: Sequence[str] = (),
    warnings: Sequence[str] = (),
    outlier_flags: Sequence[str] = (),
    info_flags: Sequence[str] = (),
) -> ConfidenceResult:
    base = QUALITY_TIER_MAP.get(_parse_quality(estimate_quality), ConfidenceTier.LOW)
    index = CONFIDENCE_TIERS.index(base)
    reasons: list[str] = []

    analysis_low = analysis_confidence is not None and analysis_confidence < LOW_ANALYSIS_CONFIDENCE_THRESHOLD
    image_insufficient = image_quality is not None and not image_quality.sufficient_for_estimate
    if analysis_low:
        reasons.append("low_analysis_confidence")
    if image_insufficient:
        reasons.append("insufficient_image_quality")
    if analysis_low or image_insufficient:
        index = max(index - 1, 0)

    if any(code in BLOCKING_NEEDS for code in needs_confirmation_ids):
        index = max(index - 1, 0)
        reasons.append("needs_confirmation_blocking")

    if warnings or outlier_flags or info_flags:
        reasons.append("has_warnings_outliers")

    return ConfidenceResult(confidence_tier=CONFIDENCE_TIERS[index], confidence_reasons=tuple(reasons))
