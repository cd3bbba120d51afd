"""Unit tests for needs-confirmation detection and estimate quality."""

import pytest

from price_engine.models.enums import EstimateQuality, FloorFinish, MeasurementSource, WallFinish
from price_engine.models.estimate import MeasurementField, MeasurementInputs, Room, Selection
from price_engine.services.needs_confirmation import (
    blocking_ids,
    compute_derived_areas,
    compute_estimate_quality,
    compute_needs_confirmation,
    compute_non_tiled_wall_area,
    is_tiled_or_vinyl,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

TILED = Selection(floor_finish=FloorFinish.CERAMIC_TILE_STANDARD, wall_finish=WallFinish.CERAMIC_TILE_STANDARD)
PAINTED = Selection(floor_finish=FloorFinish.CERAMIC_TILE_STANDARD, wall_finish=WallFinish.PAINTED_WALLS)


def _room(floor=4.0, wall=19.2, wet=19.2, year=None) -> Room:
    return Room(floor_area_m2=floor, wall_area_m2=wall, wet_zone_wall_area_m2=wet, building_year=year)


def _field(value, source=MeasurementSource.AI) -> MeasurementField:
    return MeasurementField(value=value, source=source, confidence=0.8)


def _inputs(floor=4.0, floor_source=MeasurementSource.USER, wet=10.0) -> MeasurementInputs:
    return MeasurementInputs(
        floor_area_m2=_field(floor, floor_source),
        wall_area_m2=_field(19.2),
        ceiling_area_m2=_field(floor),
        wet_zone_wall_area_m2=_field(wet),
    )


class TestComputeNeedsConfirmation:
    def test_clean_room_needs_nothing(self):
        assert compute_needs_confirmation(_room(), {}, TILED) == ()

    @pytest.mark.parametrize("floor", [None, 0.0, -1.0])
    def test_missing_floor_area(self, floor):
        assert "NC-001" in compute_needs_confirmation(_room(floor=floor), {}, TILED)

    def test_unknown_wet_zone(self):
        assert "NC-002" in compute_needs_confirmation(_room(wet=None), {}, PAINTED)

    def test_tiled_walls_with_short_wet_zone(self):
        assert "NC-002" in compute_needs_confirmation(_room(wet=10.0), {}, TILED)

    def test_short_wet_zone_within_tolerance(self):
        assert compute_needs_confirmation(_room(wet=18.8), {}, TILED) == ()

    def test_short_wet_zone_with_painted_walls_is_fine(self):
        assert compute_needs_confirmation(_room(wet=5.0), {}, PAINTED) == ()

    def test_layout_change(self):
        assert compute_needs_confirmation(_room(), {"change_layout": True}, TILED) == ("NC-003",)

    def test_legacy_building(self):
        assert compute_needs_confirmation(_room(year=1979), {}, TILED) == ("NC-004",)
        assert compute_needs_confirmation(_room(year=1980), {}, TILED) == ()

    def test_heating_without_new_floor(self):
        needs = compute_needs_confirmation(_room(), {"add_underfloor_heating": True}, TILED)
        assert needs == ("NC-005",)
        needs = compute_needs_confirmation(
            _room(), {"add_underfloor_heating": True, "change_floor_finish": True}, TILED
        )
        assert needs == ()

    def test_sorted_and_deduplicated(self):
        needs = compute_needs_confirmation(
            _room(floor=None, year=1950),
            {"change_layout": True},
            TILED,
            extra=("NC-004", "NC-001"),
        )
        assert needs == ("NC-001", "NC-003", "NC-004")


class TestBlockingIds:
    def test_heating_code_is_not_blocking(self):
        assert blocking_ids(["NC-005"]) == ()
        assert blocking_ids(["NC-002", "NC-005"]) == ("NC-002",)


class TestDerivedAreas:
    def test_tiled_or_vinyl(self):
        assert is_tiled_or_vinyl(WallFinish.WETROOM_VINYL)
        assert not is_tiled_or_vinyl(WallFinish.PAINTED_WALLS)
        assert not is_tiled_or_vinyl(None)

    def test_non_tiled_wall_area(self):
        assert compute_non_tiled_wall_area(_room(wet=12.0), TILED) == pytest.approx(7.2)

    def test_non_tiled_wall_area_none_for_painted_walls(self):
        assert compute_derived_areas(_room(wet=12.0), PAINTED).non_tiled_wall_area_m2 is None

    def test_non_tiled_wall_area_none_without_wet_zone(self):
        assert compute_non_tiled_wall_area(_room(wet=None), TILED) is None


class TestEstimateQuality:
    def test_confirmed(self):
        assert compute_estimate_quality(_inputs(), ()) == EstimateQuality.CONFIRMED

    def test_heating_code_does_not_block_confirmed(self):
        assert compute_estimate_quality(_inputs(), ("NC-005",)) == EstimateQuality.CONFIRMED

    def test_blocking_code_downgrades(self):
        assert compute_estimate_quality(_inputs(), ("NC-003",)) == EstimateQuality.SEMI_CONFIRMED

    def test_ai_floor_is_semi_confirmed(self):
        quality = compute_estimate_quality(_inputs(floor_source=MeasurementSource.AI), ())
        assert quality == EstimateQuality.SEMI_CONFIRMED

    def test_missing_wet_zone_is_semi_confirmed(self):
        assert compute_estimate_quality(_inputs(wet=None), ()) == EstimateQuality.SEMI_CONFIRMED

    def test_missing_floor_is_rough(self):
        quality = compute_estimate_quality(_inputs(floor=None, floor_source=MeasurementSource.DEFAULT), ("NC-001",))
        assert quality == EstimateQuality.ROUGH
