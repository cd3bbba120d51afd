"""
Derived models produced by the estimator pipeline.

Nothing here is persisted: every object is built fresh for one
``evaluate`` call and frozen once created.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from price_engine.models.contract import AnalysisContract, UserOverrideContract
from price_engine.models.enums import (
    CeilingTypeOption,
    ConfidenceTier,
    EstimateQuality,
    FixturesTier,
    FloorFinish,
    MeasurementSource,
    RenovationProfile,
    RoomType,
    ShowerNichesOption,
    ToiletType,
    WallFinish,
)

_FROZEN = ConfigDict(frozen=True)

IntentMap = dict[str, bool]

# ---------------------------------------------------------------------------
# Selections
# ---------------------------------------------------------------------------


class Selection(BaseModel):
    """Catalog-facing finish and fixture choices."""

    model_config = _FROZEN

    floor_finish: FloorFinish
    wall_finish: WallFinish
    fixtures_tier: FixturesTier = FixturesTier.STANDARD
    shower_niches: ShowerNichesOption = ShowerNichesOption.NONE
    pipe_reroute: bool = False
    needs_brf_docs: bool = False
    toilet_type: ToiletType | None = None
    ceiling_type: CeilingTypeOption | None = None


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


class VisibleFixtures(BaseModel):
    model_config = _FROZEN

    toilet: int = 0
    sink: int = 0
    shower: int = 0
    bathtub: int = 0

    @property
    def total(self) -> int:
        return self.toilet + self.sink + self.shower + self.bathtub


class Room(BaseModel):
    """Resolved bathroom geometry. Invariant: 0 <= wet zone <= wall area."""

    model_config = _FROZEN

    room_type: RoomType = RoomType.BATHROOM
    confidence_room_type: float = Field(default=0.0, ge=0.0, le=1.0)
    floor_area_m2: float | None = None
    wall_area_m2: float | None = None
    ceiling_area_m2: float | None = None
    wet_zone_wall_area_m2: float | None = None
    length_m: float | None = None
    width_m: float | None = None
    ceiling_height_m: float | None = None
    dimensions_fallback: bool = False
    visible_fixtures: VisibleFixtures = Field(default_factory=VisibleFixtures)
    building_year: int | None = None


class MeasurementField(BaseModel):
    model_config = _FROZEN

    value: float | None
    source: MeasurementSource
    confidence: float = Field(ge=0.0, le=1.0)


class MeasurementInputs(BaseModel):
    """One MeasurementField per geometry dimension."""

    model_config = _FROZEN

    floor_area_m2: MeasurementField
    wall_area_m2: MeasurementField
    ceiling_area_m2: MeasurementField
    wet_zone_wall_area_m2: MeasurementField


class DerivedAreas(BaseModel):
    model_config = _FROZEN

    non_tiled_wall_area_m2: float | None = None


# ---------------------------------------------------------------------------
# Site conditions
# ---------------------------------------------------------------------------


class SiteConditionsAllowance(BaseModel):
    """Extra hours caused by site conditions, rounded to 0.5 h."""

    model_config = _FROZEN

    access_hours: float = 0.0
    waste_hours: float = 0.0
    admin_hours: float = 0.0
    reason_codes: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Pricing engine boundary
# ---------------------------------------------------------------------------


class TaskLine(BaseModel):
    """A priced line item."""

    model_config = _FROZEN

    task_key: str
    trade_group: str
    qty: float
    unit: str
    labor_sek: float
    material_sek: float
    subtotal_sek: float
    rot_eligible: bool = False
    note: str | None = None


class EstimateTotals(BaseModel):
    model_config = _FROZEN

    base_subtotal_sek: float = 0.0
    project_management_sek: float = 0.0
    contingency_sek: float = 0.0
    grand_total_sek: float = 0.0


class TradeGroupTotal(BaseModel):
    model_config = _FROZEN

    trade_group: str
    subtotal_sek: float


class PricingRequest(BaseModel):
    """Everything a task pricing engine receives."""

    model_config = _FROZEN

    room: Room
    intents: IntentMap
    selections: Selection
    flags: frozenset[str] = frozenset()
    needs_confirmation_ids: tuple[str, ...] = ()
    profile: RenovationProfile | None = None
    site_conditions_allowance: SiteConditionsAllowance | None = None


class PricingResult(BaseModel):
    """What a task pricing engine returns."""

    model_config = _FROZEN

    tasks: tuple[TaskLine, ...] = ()
    flags: tuple[str, ...] = ()
    totals: EstimateTotals = Field(default_factory=EstimateTotals)
    trade_group_totals: tuple[TradeGroupTotal, ...] = ()
    plausibility_band: str = ""
    sek_per_m2: float | None = None
    warnings: tuple[str, ...] = ()
    needs_confirmation_ids: tuple[str, ...] = ()
    derived_areas: DerivedAreas = Field(default_factory=DerivedAreas)


# ---------------------------------------------------------------------------
# Range / classification results
# ---------------------------------------------------------------------------


class RangeSignals(BaseModel):
    """Completeness signals that narrow or widen the estimate band."""

    model_config = _FROZEN

    measurement_confirmed: bool = False
    room_measurement_ratio: float = Field(default=0.0, ge=0.0, le=1.0)
    site_conditions_ratio: float = Field(default=0.0, ge=0.0, le=1.0)
    needs_confirmation_ids: tuple[str, ...] = ()


class EstimateRange(BaseModel):
    model_config = _FROZEN

    low: int
    mid: int
    high: int
    applied_pct: float
    reason_codes: tuple[str, ...] = ()


class MinMaxSek(BaseModel):
    model_config = _FROZEN

    min_sek: int
    max_sek: int


class OutlierFlags(BaseModel):
    model_config = _FROZEN

    outlier_flags: tuple[str, ...] = ()
    info_flags: tuple[str, ...] = ()


class ConfidenceResult(BaseModel):
    model_config = _FROZEN

    confidence_tier: ConfidenceTier
    confidence_reasons: tuple[str, ...] = ()


class RotSummary(BaseModel):
    model_config = _FROZEN

    rot_rate: float
    rot_eligible_labor_sek: int
    rot_deduction_sek: int
    total_after_rot_sek: int
    rot_cap_applied: bool
    rot_cap_reason: str
    rot_cap_sek: int | None = None


class SiteConditionsEffect(BaseModel):
    model_config = _FROZEN

    added_labor_sek: int
    added_material_sek: int
    added_total_sek: int
    reason_codes: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Pipeline stages
# ---------------------------------------------------------------------------


class NormalizedEstimate(BaseModel):
    """Contract resolved into geometry, intents, selections and quality."""

    model_config = _FROZEN

    image_id: str | None = None
    analysis: AnalysisContract
    overrides: UserOverrideContract
    room: Room
    intents: IntentMap
    selections: Selection
    needs_confirmation_ids: tuple[str, ...] = ()
    derived_areas: DerivedAreas = Field(default_factory=DerivedAreas)
    inputs: MeasurementInputs
    estimate_quality: EstimateQuality
    timestamp: str


class RangedTotals(EstimateTotals):
    min_total_sek: int = 0
    max_total_sek: int = 0
    labor_min_sek: int = 0
    labor_max_sek: int = 0
    material_min_sek: int = 0
    material_max_sek: int = 0


class EstimateResult(BaseModel):
    """Priced estimate with its uncertainty band."""

    model_config = _FROZEN

    tasks: tuple[TaskLine, ...] = ()
    flags: tuple[str, ...] = ()
    totals: RangedTotals
    trade_group_totals: tuple[TradeGroupTotal, ...] = ()
    plausibility_band: str = ""
    sek_per_m2: float | None = None
    warnings: tuple[str, ...] = ()
    needs_confirmation_ids: tuple[str, ...] = ()
    derived_areas: DerivedAreas = Field(default_factory=DerivedAreas)
    estimate_range: EstimateRange
    labor_range: MinMaxSek
    material_range: MinMaxSek
    estimate_quality: EstimateQuality
    site_conditions_allowance: SiteConditionsAllowance | None = None


# ---------------------------------------------------------------------------
# Client-facing estimate (all money as whole SEK)
# ---------------------------------------------------------------------------


class ClientLineItem(BaseModel):
    model_config = _FROZEN

    key: str
    trade_group: str
    qty: float
    unit: str
    labor_sek: int
    material_sek: int
    subtotal_sek: int
    rot_eligible: bool
    note: str | None = None


class ClientTotals(BaseModel):
    model_config = _FROZEN

    base_subtotal_sek: int
    project_management_sek: int
    contingency_sek: int
    grand_total_sek: int
    min_total_sek: int
    max_total_sek: int
    labor_min_sek: int
    labor_max_sek: int
    material_min_sek: int
    material_max_sek: int


class ClientEstimateRange(BaseModel):
    model_config = _FROZEN

    low_sek: int
    mid_sek: int
    high_sek: int


class ClientTradeGroupTotal(BaseModel):
    model_config = _FROZEN

    trade_group: str
    subtotal_sek: int


class ClientEstimate(BaseModel):
    """The estimate shape consumed outside the core."""

    model_config = _FROZEN

    line_items: tuple[ClientLineItem, ...] = ()
    totals: ClientTotals
    trade_group_totals: tuple[ClientTradeGroupTotal, ...] = ()
    estimate_range: ClientEstimateRange
    labor_range: MinMaxSek
    material_range: MinMaxSek
    estimate_quality: EstimateQuality
    confidence_tier: ConfidenceTier
    confidence_reasons: tuple[str, ...] = ()
    needs_confirmation_ids: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    flags: tuple[str, ...] = ()
    info_flags: tuple[str, ...] = ()
    plausibility_band: str = ""
    sek_per_m2: float | None = None
    derived_areas: DerivedAreas = Field(default_factory=DerivedAreas)
    rot_summary: RotSummary
    site_conditions_effect: SiteConditionsEffect | None = None


class EvaluationResult(BaseModel):
    """Return value of ``evaluate``."""

    model_config = _FROZEN

    normalized: NormalizedEstimate
    estimate_result: EstimateResult
    client_estimate: ClientEstimate
    flags: OutlierFlags
    profile: RenovationProfile
    mapping_log: dict[str, Any] = Field(default_factory=dict)
