"""
Room geometry resolver.

Pure function: resolve_room(contract) -> Room.

Combines the confirmed size bucket, optional AI room measurements and an
optional user measurement override into one consistent geometry:

  floor   override area > override length x width > AI floor > bucket area
  walls   2 * (length + width) * ceiling height
  ceiling same as floor
  wet     whole wall (fully tiled) > user wet-zone fraction > AI wet zone

AI areas that are NaN, infinite or negative count as missing. Degenerate
inputs never raise; the room falls back to a square.
"""

import math
from typing import NamedTuple

import structlog

from price_engine.constants import (
    AI_WET_ZONE_WALL_FRACTION,
    BUCKET_AREA_M2,
    DEFAULT_CEILING_HEIGHT_M,
    FULLY_TILED_WALL_FINISHES,
    MIN_FALLBACK_FLOOR_AREA_M2,
    WALL_TO_FLOOR_AREA_RATIO,
    WET_ZONE_FRACTIONS,
)
from price_engine.models.contract import DetectedFixtures, EstimatorContract
from price_engine.models.enums import SizeBucket
from price_engine.models.estimate import Room, VisibleFixtures
from price_engine.services.rounding import clamp, is_number

logger = structlog.get_logger(__name__)


class Dimensions(NamedTuple):
    length: float
    width: float
    fallback: bool = False


def bucket_to_area(bucket: SizeBucket) -> float:
    return BUCKET_AREA_M2[bucket]


def _square(area: float) -> Dimensions:
    side = math.sqrt(area)
    return Dimensions(side, side, fallback=True)


def derive_dimensions(floor_area: float, wall_area: float, ceiling_height: float) -> Dimensions:
    """
    Solve length/width from floor area and wall area.

    With perimeter P = W / h and half-perimeter S = P / 2 the sides are the
    roots of x² - Sx + A = 0. Every failure mode falls back to a square.

    Args:
        floor_area: A, m².
        wall_area: W, m².
        ceiling_height: h, m.

    Returns:
        Dimensions with ``fallback`` set when the square was used.
    """
    if not all(is_number(v) for v in (floor_area, wall_area, ceiling_height)):
        area = floor_area if is_number(floor_area) else 0.0
        return _square(max(area, MIN_FALLBACK_FLOOR_AREA_M2))
    if floor_area <= 0 or wall_area <= 0 or ceiling_height <= 0:
        return _square(max(floor_area, MIN_FALLBACK_FLOOR_AREA_M2))

    half_perimeter = wall_area / ceiling_height / 2
    if half_perimeter <= 0:
        return _square(floor_area)

    discriminant = half_perimeter * half_perimeter - 4 * floor_area
    if math.isnan(discriminant) or discriminant < 0:
        return _square(floor_area)

    root = math.sqrt(discriminant)
    length = (half_perimeter + root) / 2
    width = (half_perimeter - root) / 2
    if length <= 0 or width <= 0:
        return _square(floor_area)
    return Dimensions(length, width)


def usable_area(value: float | None) -> float | None:
    """An AI-reported area, or None when it is missing, non-finite or negative."""
    return value if is_number(value) and value >= 0 else None


def visible_fixtures_from(detected: DetectedFixtures) -> VisibleFixtures:
    return VisibleFixtures(
        toilet=1 if detected.toilet_present else 0,
        sink=1 if detected.sink_present else 0,
        shower=1 if detected.shower_present else 0,
        bathtub=1 if detected.bathtub_present else 0,
    )


def resolve_room(contract: EstimatorContract) -> Room:
    """Resolve the bathroom geometry for one contract."""
    override = contract.measurement_override
    ai_room = contract.room_measurements

    ai_floor = usable_area(ai_room.floor_area_m2) if ai_room else None
    ai_wall = usable_area(ai_room.wall_area_m2) if ai_room else None
    ai_wet = usable_area(ai_room.wet_zone_wall_area_m2) if ai_room else None

    base_floor = ai_floor if ai_floor is not None else bucket_to_area(contract.overrides.bathroom_size_final)
    base_wall = ai_wall if ai_wall is not None else base_floor * WALL_TO_FLOOR_AREA_RATIO
    default_wet = ai_wet if ai_wet is not None else min(base_wall, base_wall * AI_WET_ZONE_WALL_FRACTION)

    height = DEFAULT_CEILING_HEIGHT_M
    if override and override.ceiling_height is not None:
        height = override.ceiling_height

    floor_area = base_floor
    if override and override.area is not None:
        floor_area = override.area
    elif override and override.has_length_and_width():
        floor_area = override.length * override.width
    if not is_number(floor_area) or floor_area <= 0:
        floor_area = base_floor
    # A zero AI floor survives here; NC-001 flags it
    floor_area = max(floor_area, 0.0)

    dims = derive_dimensions(floor_area, base_wall, height)
    if dims.fallback:
        logger.debug(
            "room_geometry_fallback_square",
            floor_area_m2=floor_area,
            wall_area_m2=base_wall,
            ceiling_height_m=height,
        )

    length = override.length if override and override.length is not None else dims.length
    width = override.width if override and override.width is not None else dims.width
    wall_area = max(2 * (length + width) * height, 0.0)
    ceiling_area = max(floor_area, 0.0)

    if contract.outcome.wall_finish in FULLY_TILED_WALL_FINISHES:
        wet_area = wall_area
    elif override and override.wet_zone is not None:
        wet_area = wall_area * WET_ZONE_FRACTIONS[override.wet_zone]
    else:
        wet_area = default_wet
    wet_area = clamp(wet_area, 0.0, wall_area)

    analysis = contract.analysis
    return Room(
        room_type=analysis.room_type,
        confidence_room_type=analysis.analysis_confidence,
        floor_area_m2=floor_area,
        wall_area_m2=wall_area,
        ceiling_area_m2=ceiling_area,
        wet_zone_wall_area_m2=wet_area,
        length_m=length,
        width_m=width,
        ceiling_height_m=height,
        dimensions_fallback=dims.fallback,
        visible_fixtures=visible_fixtures_from(analysis.detected_fixtures),
        building_year=analysis.building_year,
    )
