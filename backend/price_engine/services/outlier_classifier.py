"""
Outlier / plausibility classifier.

determine_profile(outcome) picks the renovation profile;
compute_outlier_flags(...) checks the mid total and SEK/m² against the
profile's bands. Rough estimates get wider bands and only informational
per-m² flags.
"""

from price_engine.constants import (
    OUT_OF_BAND_CODES,
    OUTLIER_BANDS,
    OUTLIER_BANDS_ROUGH,
    PER_M2_CODES,
    PER_M2_THRESHOLDS,
    PLAUSIBILITY_BAND_INFO_FLAGS,
)
from price_engine.models.contract import UserOutcomeContract
from price_engine.models.enums import (
    BathtubOption,
    EstimateQuality,
    LayoutChangeOption,
    RenovationProfile,
    ShowerType,
)
from price_engine.models.estimate import OutlierFlags


def determine_profile(outcome: UserOutcomeContract) -> RenovationProfile:
    """layout change -> major; new shower or bathtub -> full_rebuild; else refresh."""
    if outcome.layout_change == LayoutChangeOption.YES:
        return RenovationProfile.MAJOR
    shower_change = outcome.shower_type not in (ShowerType.NO_SHOWER, ShowerType.KEEP)
    if shower_change or outcome.bathtub == BathtubOption.YES:
        return RenovationProfile.FULL_REBUILD
    return RenovationProfile.REFRESH


def compute_outlier_flags(
    profile: RenovationProfile,
    quality: EstimateQuality | None,
    mid_total: float | None,
    sek_per_m2: float | None,
    plausibility_band: str | None = None,
) -> OutlierFlags:
    """
    Classify the estimate against its profile.

    Args:
        profile: Renovation profile.
        quality: Estimate quality; None counts as rough.
        mid_total: Mid estimate in SEK.
        sek_per_m2: Grand total per floor m².
        plausibility_band: Band code from the pricing engine.

    Returns:
        OutlierFlags with de-duplicated outlier and info codes.
    """
    rough = quality is None or quality == EstimateQuality.ROUGH
    outliers: list[str] = []
    info: list[str] = []

    def _add(target: list[str], code: str) -> None:
        if code not in target:
            target.append(code)

    if mid_total is not None:
        low, high = (OUTLIER_BANDS_ROUGH if rough else OUTLIER_BANDS)[profile]
        if not low <= mid_total <= high:
            _add(outliers, OUT_OF_BAND_CODES[profile])

        thresholds = PER_M2_THRESHOLDS.get(profile)
        if thresholds and sek_per_m2 and sek_per_m2 > thresholds[0 if rough else 1]:
            _add(info if rough else outliers, PER_M2_CODES[profile])

    band_flag = PLAUSIBILITY_BAND_INFO_FLAGS.get(plausibility_band or "")
    if band_flag:
        _add(info, band_flag)

    return OutlierFlags(outlier_flags=tuple(outliers), info_flags=tuple(info))
