"""
Measurement input normalizer.

Turns resolved areas into one {value, source, confidence} field per
geometry dimension, and derives the source hints from the contract.
"""

import math
from collections.abc import Mapping

from price_engine.constants import DEFAULT_MEASUREMENT_CONFIDENCE
from price_engine.models.contract import EstimatorContract
from price_engine.models.enums import MeasurementSource
from price_engine.models.estimate import MeasurementField, MeasurementInputs, Room
from price_engine.services.room_geometry import usable_area

MEASUREMENT_KEYS: tuple[str, ...] = (
    "floor_area_m2",
    "wall_area_m2",
    "ceiling_area_m2",
    "wet_zone_wall_area_m2",
)

SourceHints = Mapping[str, MeasurementSource]


def clamp01(value: float | None, fallback: float) -> float:
    if value is None or not isinstance(value, (int, float)) or math.isnan(value):
        return fallback
    return min(max(float(value), 0.0), 1.0)


def compute_measurement_inputs(
    values: Mapping[str, float | None],
    confidence: float | None,
    sources: SourceHints | None = None,
) -> MeasurementInputs:
    """
    Build the per-dimension measurement fields.

    Args:
        values: Dimension key -> resolved value (missing/None allowed).
        confidence: Analysis confidence, clamped to [0, 1]; 0.5 when missing/NaN.
        sources: Optional source hint per dimension.

    Returns:
        MeasurementInputs. A dimension without a hint is "ai" when it has a
        value and "default" otherwise.
    """
    hints = sources or {}
    conf = clamp01(confidence, DEFAULT_MEASUREMENT_CONFIDENCE)

    def _field(key: str) -> MeasurementField:
        value = values.get(key)
        if value is not None and isinstance(value, float) and math.isnan(value):
            value = None
        if key in hints:
            source = hints[key]
        else:
            source = MeasurementSource.AI if value is not None else MeasurementSource.DEFAULT
        return MeasurementField(value=value, source=source, confidence=conf)

    return MeasurementInputs(**{key: _field(key) for key in MEASUREMENT_KEYS})


def measurement_sources(contract: EstimatorContract) -> dict[str, MeasurementSource]:
    """Source hints: which dimensions the user measured and which the AI supplied."""
    override = contract.measurement_override
    ai_room = contract.room_measurements
    has_lw = bool(override and override.has_length_and_width())
    sources: dict[str, MeasurementSource] = {}

    def _ai_has(key: str) -> bool:
        return ai_room is not None and usable_area(getattr(ai_room, key)) is not None

    if (override and override.area is not None) or has_lw:
        sources["floor_area_m2"] = MeasurementSource.USER
    elif _ai_has("floor_area_m2"):
        sources["floor_area_m2"] = MeasurementSource.AI

    for key in ("wall_area_m2", "ceiling_area_m2"):
        if has_lw:
            sources[key] = MeasurementSource.USER
        elif _ai_has(key):
            sources[key] = MeasurementSource.AI
    if override and override.ceiling_height is not None:
        sources["ceiling_area_m2"] = MeasurementSource.USER

    if override and override.wet_zone is not None:
        sources["wet_zone_wall_area_m2"] = MeasurementSource.USER
    elif _ai_has("wet_zone_wall_area_m2"):
        sources["wet_zone_wall_area_m2"] = MeasurementSource.AI

    return sources


def room_values(room: Room) -> dict[str, float | None]:
    return {key: getattr(room, key) for key in MEASUREMENT_KEYS}
