"""
Canonical estimator contract.

The contract is the immutable, already-validated input to ``evaluate``.
Field names follow the wire format; the camelCase keys sent by the
frontend (``measurementOverride``, ``roomMeasurements``, ``ceilingHeight``,
``wetZone``) are accepted as aliases. Unknown keys are rejected.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from price_engine.models.enums import (
    BathtubOption,
    CeilingTypeOption,
    ConditionSignal,
    FloorFinishOption,
    FloorHeatingOption,
    ImageQualityIssue,
    LayoutChangeOption,
    RoomType,
    ShowerNichesOption,
    ShowerType,
    SizeBucket,
    SizeSource,
    ToiletType,
    VanityType,
    WallFinishOption,
    WetZoneType,
)

_CONTRACT_CONFIG = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------


class DetectedFixtures(BaseModel):
    model_config = _CONTRACT_CONFIG

    shower_present: bool = False
    bathtub_present: bool = False
    toilet_present: bool = False
    sink_present: bool = False


class LayoutFeatures(BaseModel):
    model_config = _CONTRACT_CONFIG

    shower_zone_visible: bool = False
    wet_room_layout: bool = False
    tight_space: bool = False
    irregular_geometry: bool = False


class CeilingFeatures(BaseModel):
    model_config = _CONTRACT_CONFIG

    ceiling_visible: bool = False
    sloped_ceiling_detected: bool = False


class ConditionSignals(BaseModel):
    model_config = _CONTRACT_CONFIG

    overall_condition: ConditionSignal = ConditionSignal.UNKNOWN


class ImageQuality(BaseModel):
    model_config = _CONTRACT_CONFIG

    sufficient_for_estimate: bool = True
    issues: tuple[ImageQualityIssue, ...] = ()


class AnalysisContract(BaseModel):
    """Vision analysis signals for a single bathroom photo."""

    model_config = _CONTRACT_CONFIG

    room_type: RoomType = RoomType.BATHROOM
    bathroom_size_estimate: SizeBucket
    bathroom_size_confidence: float = Field(ge=0.0, le=1.0)
    detected_fixtures: DetectedFixtures = Field(default_factory=DetectedFixtures)
    layout_features: LayoutFeatures = Field(default_factory=LayoutFeatures)
    ceiling_features: CeilingFeatures = Field(default_factory=CeilingFeatures)
    condition_signals: ConditionSignals = Field(default_factory=ConditionSignals)
    image_quality: ImageQuality = Field(default_factory=ImageQuality)
    analysis_confidence: float = Field(ge=0.0, le=1.0)
    building_year: int | None = Field(
        default=None, description="Construction year when known (drives legacy-systems check)"
    )


class UserOverrideContract(BaseModel):
    """Final size bucket after the user confirmed or changed the AI guess."""

    model_config = _CONTRACT_CONFIG

    bathroom_size_final: SizeBucket
    bathroom_size_source: SizeSource = SizeSource.AI_ESTIMATED


# ---------------------------------------------------------------------------
# Outcome
# ---------------------------------------------------------------------------


class UserOutcomeContract(BaseModel):
    """The user's chosen fixtures and finishes."""

    model_config = _CONTRACT_CONFIG

    shower_type: ShowerType
    bathtub: BathtubOption
    toilet_type: ToiletType
    vanity_type: VanityType
    wall_finish: WallFinishOption
    floor_finish: FloorFinishOption
    ceiling_type: CeilingTypeOption
    layout_change: LayoutChangeOption
    shower_niches: ShowerNichesOption = ShowerNichesOption.NONE
    floor_heating: FloorHeatingOption | None = None


# ---------------------------------------------------------------------------
# Optional measurement inputs
# ---------------------------------------------------------------------------


class MeasurementOverride(BaseModel):
    """Explicit measurements typed in by the user (metres / m²)."""

    model_config = _CONTRACT_CONFIG

    length: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    width: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    area: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    ceiling_height: float | None = Field(default=None, ge=0, allow_inf_nan=False, alias="ceilingHeight")
    wet_zone: WetZoneType | None = Field(default=None, alias="wetZone")

    def has_any_value(self) -> bool:
        return any(
            v is not None
            for v in (self.length, self.width, self.area, self.ceiling_height, self.wet_zone)
        )

    def has_length_and_width(self) -> bool:
        return self.length is not None and self.width is not None


class RoomMeasurements(BaseModel):
    """AI-estimated surface areas (m²); any of them may be missing."""

    model_config = _CONTRACT_CONFIG

    floor_area_m2: float | None = None
    wall_area_m2: float | None = None
    ceiling_area_m2: float | None = None
    wet_zone_wall_area_m2: float | None = None


# ---------------------------------------------------------------------------
# Site conditions survey
# ---------------------------------------------------------------------------


class SiteConditions(BaseModel):
    """Access / occupancy / permit survey. Every answer is optional."""

    model_config = _CONTRACT_CONFIG

    floor_elevator: Literal[
        "house_or_ground", "apt_elevator", "apt_no_elevator_1_2", "apt_no_elevator_3_plus", "unknown"
    ] | None = None
    carry_distance: Literal["under_20m", "20_50m", "50_100m", "over_100m", "unknown"] | None = None
    parking_loading: Literal["easy_nearby", "limited", "none", "unknown"] | None = None
    work_time_restrictions: Literal["none", "standard_daytime", "strict", "unknown"] | None = None
    permits_brf: Literal["none", "brf_required", "permit_required", "unknown"] | None = None
    wetroom_certificate_required: Literal["required", "preferred", "not_needed", "unknown"] | None = None
    build_year_bucket: Literal["pre_1960", "1960_1979", "1980_1999", "2000_plus", "unknown"] | None = None
    last_renovated: Literal["under_5y", "5_15y", "over_15y", "unknown"] | None = None
    hazardous_material_risk: Literal["none_known", "suspected", "confirmed", "unknown"] | None = None
    occupancy: Literal["not_living_in", "living_in_full", "living_in_partly", "unknown"] | None = None
    must_keep_facility_running: Literal["yes", "no", "unknown"] | None = None
    container_possible: Literal["yes", "no", "unknown"] | None = None
    protection_level: Literal["normal", "extra", "unknown"] | None = None
    water_shutoff_accessible: Literal["yes", "no", "unknown"] | None = None
    electrical_panel_accessible: Literal["yes", "no", "unknown"] | None = None
    recent_stambyte: Literal["yes", "no", "unknown"] | None = None
    # Free text, not one of the survey questions
    access_constraints_notes: str | None = None


class RotContext(BaseModel):
    model_config = _CONTRACT_CONFIG

    owners_count: int = Field(default=1, ge=1)


# ---------------------------------------------------------------------------
# Contract
# ---------------------------------------------------------------------------


class EstimatorContract(BaseModel):
    """Everything ``evaluate`` needs for one bathroom."""

    model_config = _CONTRACT_CONFIG

    analysis: AnalysisContract
    overrides: UserOverrideContract
    outcome: UserOutcomeContract
    measurement_override: MeasurementOverride | None = Field(
        default=None, alias="measurementOverride"
    )
    room_measurements: RoomMeasurements | None = Field(default=None, alias="roomMeasurements")
    site_conditions: SiteConditions | None = None
    rot_context: RotContext | None = None
