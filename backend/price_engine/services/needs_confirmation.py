"""
Needs-confirmation detector and estimate-quality classification.

Codes:
  NC-001  floor area missing or not positive
  NC-002  wet zone unknown, or tiled/vinyl walls with a wet zone well short of the wall area
  NC-003  layout change requested
  NC-004  building predates 1980
  NC-005  underfloor heating without a new floor finish

NC-001..NC-004 are blocking: they keep the estimate below "confirmed".
"""

from collections.abc import Iterable, Mapping

from price_engine.constants import (
    BLOCKING_NEEDS,
    LEGACY_BUILDING_YEAR,
    NC_FLOOR_AREA_MISSING,
    NC_HEATING_WITHOUT_FLOOR,
    NC_LAYOUT_CHANGE,
    NC_LEGACY_BUILDING,
    NC_WET_ZONE_UNCONFIRMED,
    TILED_OR_VINYL_WALL_FINISHES,
    WET_ZONE_SHORTFALL_TOLERANCE_M2,
)
from price_engine.models.enums import EstimateQuality, MeasurementSource, WallFinish
from price_engine.models.estimate import DerivedAreas, MeasurementInputs, Room, Selection


def is_tiled_or_vinyl(finish: WallFinish | None) -> bool:
    return finish in TILED_OR_VINYL_WALL_FINISHES


def compute_needs_confirmation(
    room: Room,
    intents: Mapping[str, bool],
    selections: Selection,
    extra: Iterable[str] = (),
) -> tuple[str, ...]:
    """
    Detect inputs that need a user decision.

    Args:
        room: Resolved geometry.
        intents: Intent id -> active.
        selections: Catalog selections.
        extra: Codes raised elsewhere, merged in.

    Returns:
        Sorted, de-duplicated NC codes.
    """
    needs = set(extra)

    floor = room.floor_area_m2
    if floor is None or floor <= 0:
        needs.add(NC_FLOOR_AREA_MISSING)

    wet = room.wet_zone_wall_area_m2
    wall = room.wall_area_m2
    if wet is None:
        needs.add(NC_WET_ZONE_UNCONFIRMED)
    elif (
        is_tiled_or_vinyl(selections.wall_finish)
        and wall is not None
        and wet < wall - WET_ZONE_SHORTFALL_TOLERANCE_M2
    ):
        needs.add(NC_WET_ZONE_UNCONFIRMED)

    if intents.get("change_layout"):
        needs.add(NC_LAYOUT_CHANGE)
    if room.building_year is not None and room.building_year < LEGACY_BUILDING_YEAR:
        needs.add(NC_LEGACY_BUILDING)
    if intents.get("add_underfloor_heating") and not intents.get("change_floor_finish"):
        needs.add(NC_HEATING_WITHOUT_FLOOR)

    return tuple(sorted(needs))


def blocking_ids(needs: Iterable[str]) -> tuple[str, ...]:
    return tuple(code for code in needs if code in BLOCKING_NEEDS)


def compute_non_tiled_wall_area(room: Room, selections: Selection) -> float | None:
    """Wall area left outside the wet zone when walls are tiled/vinyl; None otherwise."""
    if not is_tiled_or_vinyl(selections.wall_finish):
        return None
    if room.wall_area_m2 is None or room.wet_zone_wall_area_m2 is None:
        return None
    return max(0.0, room.wall_area_m2 - room.wet_zone_wall_area_m2)


def compute_derived_areas(room: Room, selections: Selection) -> DerivedAreas:
    return DerivedAreas(non_tiled_wall_area_m2=compute_non_tiled_wall_area(room, selections))


def compute_estimate_quality(inputs: MeasurementInputs, needs: Iterable[str]) -> EstimateQuality:
    """
    confirmed:      user-measured floor, floor and wet zone known, nothing blocking
    semi_confirmed: a floor value exists
    rough:          otherwise
    """
    has_floor = inputs.floor_area_m2.value is not None
    has_wet = inputs.wet_zone_wall_area_m2.value is not None
    user_measured = inputs.floor_area_m2.source == MeasurementSource.USER
    if user_measured and has_floor and has_wet and not blocking_ids(needs):
        return EstimateQuality.CONFIRMED
    if has_floor:
        return EstimateQuality.SEMI_CONFIRMED
    return EstimateQuality.ROUGH
