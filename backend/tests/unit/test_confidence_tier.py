"""Unit tests for the confidence tier classifier."""

import pytest

from price_engine.models.contract import ImageQuality
from price_engine.models.enums import ConfidenceTier, EstimateQuality
from price_engine.services.confidence_tier import derive_confidence_tier


class TestBaseTier:
    @pytest.mark.parametrize(
        ("quality", "tier"),
        [
            (EstimateQuality.CONFIRMED, ConfidenceTier.HIGH),
            (EstimateQuality.SEMI_CONFIRMED, ConfidenceTier.MEDIUM),
            (EstimateQuality.ROUGH, ConfidenceTier.LOW),
            ("semi_confirmed", ConfidenceTier.MEDIUM),
            (None, ConfidenceTier.LOW),
            ("", ConfidenceTier.LOW),
            ("bogus", ConfidenceTier.LOW),
        ],
    )
    def test_quality_maps_to_tier(self, quality, tier):
        result = derive_confidence_tier(quality)
        assert result.confidence_tier == tier
        assert result.confidence_reasons == ()


class TestDemotions:
    def test_low_analysis_confidence_demotes_once(self):
        result = derive_confidence_tier(EstimateQuality.CONFIRMED, analysis_confidence=0.4)
        assert result.confidence_tier == ConfidenceTier.MEDIUM
        assert result.confidence_reasons == ("low_analysis_confidence",)

    def test_threshold_is_exclusive(self):
        result = derive_confidence_tier(EstimateQuality.CONFIRMED, analysis_confidence=0.6)
        assert result.confidence_tier == ConfidenceTier.HIGH

    def test_weak_analysis_demotes_once_for_both_reasons(self):
        result = derive_confidence_tier(
            EstimateQuality.CONFIRMED,
            analysis_confidence=0.3,
            image_quality=ImageQuality(sufficient_for_estimate=False),
        )
        assert result.confidence_tier == ConfidenceTier.MEDIUM
        assert result.confidence_reasons == ("low_analysis_confidence", "insufficient_image_quality")

    def test_blocking_needs_demote(self):
        result = derive_confidence_tier(EstimateQuality.SEMI_CONFIRMED, needs_confirmation_ids=("NC-002",))
        assert result.confidence_tier == ConfidenceTier.LOW
        assert result.confidence_reasons == ("needs_confirmation_blocking",)

    def test_non_blocking_need_does_not_demote(self):
        result = derive_confidence_tier(EstimateQuality.CONFIRMED, needs_confirmation_ids=("NC-005",))
        assert result.confidence_tier == ConfidenceTier.HIGH

    def test_two_demotions_floor_at_low(self):
        result = derive_confidence_tier(
            EstimateQuality.SEMI_CONFIRMED,
            analysis_confidence=0.1,
            needs_confirmation_ids=("NC-001",),
        )
        assert result.confidence_tier == ConfidenceTier.LOW

    def test_high_can_drop_two_tiers(self):
        result = derive_confidence_tier(
            EstimateQuality.CONFIRMED,
            analysis_confidence=0.1,
            needs_confirmation_ids=("NC-004",),
        )
        assert result.confidence_tier == ConfidenceTier.LOW


class TestInformationalReasons:
    @pytest.mark.parametrize(
        "kwargs",
        [{"warnings": ("w",)}, {"outlier_flags": ("REFRESH_OUT_OF_BAND",)}, {"info_flags": ("i",)}],
    )
    def test_warnings_and_flags_never_demote(self, kwargs):
        result = derive_confidence_tier(EstimateQuality.CONFIRMED, **kwargs)
        assert result.confidence_tier == ConfidenceTier.HIGH
        assert result.confidence_reasons == ("has_warnings_outliers",)
