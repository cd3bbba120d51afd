"""Unit tests for renovation profile detection and outlier flags."""

import pytest

from price_engine.models.contract import UserOutcomeContract
from price_engine.models.enums import EstimateQuality, RenovationProfile
from price_engine.services.outlier_classifier import compute_outlier_flags, determine_profile


def _outcome(**changes) -> UserOutcomeContract:
    base = {
        "shower_type": "keep",
        "bathtub": "keep",
        "toilet_type": "floor_standing",
        "vanity_type": "simple_sink",
        "wall_finish": "keep",
        "floor_finish": "standard_ceramic_tiles",
        "ceiling_type": "painted_ceiling",
        "layout_change": "no",
    }
    return UserOutcomeContract(**{**base, **changes})


class TestDetermineProfile:
    def test_layout_change_is_major(self):
        assert determine_profile(_outcome(layout_change="yes")) == RenovationProfile.MAJOR

    def test_layout_change_beats_new_shower(self):
        outcome = _outcome(layout_change="yes", shower_type="walk_in_shower_glass")
        assert determine_profile(outcome) == RenovationProfile.MAJOR

    @pytest.mark.parametrize("changes", [{"shower_type": "shower_cabin"}, {"bathtub": "yes"}])
    def test_new_shower_or_bathtub_is_full_rebuild(self, changes):
        assert determine_profile(_outcome(**changes)) == RenovationProfile.FULL_REBUILD

    @pytest.mark.parametrize("shower", ["keep", "no_shower"])
    def test_otherwise_refresh(self, shower):
        assert determine_profile(_outcome(shower_type=shower)) == RenovationProfile.REFRESH


class TestComputeOutlierFlags:
    def test_refresh_within_band(self):
        flags = compute_outlier_flags(RenovationProfile.REFRESH, EstimateQuality.SEMI_CONFIRMED, 40000, 9000)
        assert flags.outlier_flags == ()
        assert flags.info_flags == ()

    def test_refresh_out_of_band(self):
        flags = compute_outlier_flags(RenovationProfile.REFRESH, EstimateQuality.CONFIRMED, 70000, 9000)
        assert flags.outlier_flags == ("REFRESH_OUT_OF_BAND",)

    def test_rough_estimates_get_wider_bands(self):
        flags = compute_outlier_flags(RenovationProfile.REFRESH, EstimateQuality.ROUGH, 70000, 9000)
        assert flags.outlier_flags == ()

    def test_missing_quality_counts_as_rough(self):
        flags = compute_outlier_flags(RenovationProfile.FULL_REBUILD, None, 190000, 32000)
        assert flags.outlier_flags == ()
        assert flags.info_flags == ()

    def test_per_m2_is_outlier_when_not_rough(self):
        flags = compute_outlier_flags(RenovationProfile.FULL_REBUILD, EstimateQuality.CONFIRMED, 150000, 31000)
        assert flags.outlier_flags == ("FULL_PER_M2_TOO_HIGH",)

    def test_per_m2_is_info_when_rough(self):
        flags = compute_outlier_flags(RenovationProfile.MAJOR, EstimateQuality.ROUGH, 200000, 51000)
        assert flags.outlier_flags == ()
        assert flags.info_flags == ("MAJOR_PER_M2_TOO_HIGH",)

    def test_refresh_has_no_per_m2_threshold(self):
        flags = compute_outlier_flags(RenovationProfile.REFRESH, EstimateQuality.CONFIRMED, 40000, 99000)
        assert flags.outlier_flags == ()

    def test_plausibility_band_info_flag(self):
        flags = compute_outlier_flags(
            RenovationProfile.MAJOR, EstimateQuality.CONFIRMED, 200000, 20000, plausibility_band="PB-003"
        )
        assert flags.info_flags == ("PLAUSIBILITY_BAND_PB_003",)

    def test_no_mid_total_only_band_flags(self):
        flags = compute_outlier_flags(RenovationProfile.MAJOR, EstimateQuality.CONFIRMED, None, None, "PB-002")
        assert flags.outlier_flags == ()
        assert flags.info_flags == ("PLAUSIBILITY_BAND_PB_002",)
