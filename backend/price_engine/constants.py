"""
Business logic constants for the bathroom price engine.

These values are stable across environments and do not need env-var
overrides. For the ROT rate/cap and range-policy overrides, see config.py.

The catalog (scope rules, tasks) and the rate card below are placeholder
values for Swedish bathroom renovations, in SEK excl. ROT.
"""

from price_engine.models.catalog import CatalogTask, Overhead, RateCard, ScopeRule, TaskRate
from price_engine.models.enums import (
    ConfidenceTier,
    EstimateQuality,
    FixturesTier,
    FloorFinish,
    RenovationProfile,
    SizeBucket,
    WallFinish,
    WallFinishOption,
    WetZoneType,
)

# --- Room geometry ---
# Representative floor area (m²) per size bucket
BUCKET_AREA_M2: dict[SizeBucket, float] = {
    SizeBucket.UNDER_4_SQM: 3.5,
    SizeBucket.BETWEEN_4_AND_7_SQM: 5.5,
    SizeBucket.OVER_7_SQM: 8.5,
}

WET_ZONE_FRACTIONS: dict[WetZoneType, float] = {
    WetZoneType.SHOWER_ONLY: 0.25,
    WetZoneType.CORNER_2_WALLS: 0.5,
    WetZoneType.THREE_WALLS: 0.75,
    WetZoneType.FULL_WET_ROOM: 1.0,
}

DEFAULT_CEILING_HEIGHT_M = 2.4
WALL_TO_FLOOR_AREA_RATIO = 4.0
AI_WET_ZONE_WALL_FRACTION = 0.85
MIN_FALLBACK_FLOOR_AREA_M2 = 0.1  # square fallback for non-positive inputs

# Wall finishes that tile every wall: wet zone == whole wall
FULLY_TILED_WALL_FINISHES: frozenset[WallFinishOption] = frozenset(
    {WallFinishOption.TILES_ALL_WALLS, WallFinishOption.LARGE_FORMAT_TILES_ALL_WALLS}
)

TILED_OR_VINYL_WALL_FINISHES: frozenset[WallFinish] = frozenset(
    {WallFinish.WETROOM_VINYL, WallFinish.CERAMIC_TILE_STANDARD, WallFinish.CERAMIC_TILE_PREMIUM}
)

# --- Needs confirmation ---
NC_FLOOR_AREA_MISSING = "NC-001"
NC_WET_ZONE_UNCONFIRMED = "NC-002"
NC_LAYOUT_CHANGE = "NC-003"
NC_LEGACY_BUILDING = "NC-004"
NC_HEATING_WITHOUT_FLOOR = "NC-005"

BLOCKING_NEEDS: frozenset[str] = frozenset(
    {NC_FLOOR_AREA_MISSING, NC_WET_ZONE_UNCONFIRMED, NC_LAYOUT_CHANGE, NC_LEGACY_BUILDING}
)

WET_ZONE_SHORTFALL_TOLERANCE_M2 = 0.5
LEGACY_BUILDING_YEAR = 1980

# --- Measurement inputs ---
DEFAULT_MEASUREMENT_CONFIDENCE = 0.5

# --- Site conditions ---
# The 16 survey questions counted for completeness (free-text notes excluded)
SITE_CONDITION_QUESTIONS: tuple[str, ...] = (
    "floor_elevator",
    "carry_distance",
    "parking_loading",
    "work_time_restrictions",
    "permits_brf",
    "wetroom_certificate_required",
    "build_year_bucket",
    "last_renovated",
    "hazardous_material_risk",
    "occupancy",
    "must_keep_facility_running",
    "container_possible",
    "protection_level",
    "water_shutoff_accessible",
    "electrical_panel_accessible",
    "recent_stambyte",
)

# question -> answer -> (bucket, hours, reason code), in evaluation order
SITE_CONDITION_ALLOWANCES: dict[str, dict[str, tuple[str, float, str]]] = {
    "floor_elevator": {
        "apt_elevator": ("access", 0.5, "FLOOR_ELEVATOR"),
        "apt_no_elevator_1_2": ("access", 1.5, "FLOOR_NO_ELEVATOR_1_2"),
        "apt_no_elevator_3_plus": ("access", 3.0, "FLOOR_NO_ELEVATOR_3_PLUS"),
    },
    "carry_distance": {
        "20_50m": ("waste", 1.0, "CARRY_20_50M"),
        "50_100m": ("waste", 2.0, "CARRY_50_100M"),
        "over_100m": ("waste", 3.5, "CARRY_OVER_100M"),
    },
    "parking_loading": {
        "limited": ("access", 0.5, "PARKING_LIMITED"),
        "none": ("access", 1.5, "PARKING_NONE"),
    },
    "work_time_restrictions": {
        "strict": ("access", 1.5, "WORKTIME_STRICT"),
    },
    "permits_brf": {
        "brf_required": ("admin", 2.0, "BRF_REQUIRED"),
        "permit_required": ("admin", 4.0, "PERMIT_REQUIRED"),
    },
    "hazardous_material_risk": {
        "suspected": ("admin", 3.0, "HAZARD_SUSPECTED"),
        "confirmed": ("admin", 8.0, "HAZARD_CONFIRMED"),
    },
    "build_year_bucket": {
        "pre_1960": ("admin", 2.0, "BUILD_PRE_1960"),
        "1960_1979": ("admin", 1.0, "BUILD_1960_1979"),
    },
    "occupancy": {
        "living_in_partly": ("waste", 1.0, "OCCUPANCY_PARTLY"),
        "living_in_full": ("waste", 2.5, "OCCUPANCY_FULL"),
    },
    "container_possible": {
        "no": ("waste", 2.0, "NO_CONTAINER"),
    },
    "must_keep_facility_running": {
        "yes": ("waste", 3.0, "KEEP_RUNNING_YES"),
    },
    "protection_level": {
        "extra": ("waste", 1.5, "PROTECTION_EXTRA"),
    },
    "water_shutoff_accessible": {
        "no": ("access", 0.5, "WATER_SHUTOFF_NO"),
    },
    "electrical_panel_accessible": {
        "no": ("access", 0.5, "ELECTRICAL_PANEL_NO"),
    },
}

ACCESS_NOTES_REASON = "ACCESS_NOTES"
SITE_CONDITION_HOURS_STEP = 0.5

# Allowance bucket -> priced task key
SITE_CONDITION_TASK_KEYS: dict[str, str] = {
    "access": "site_conditions_access_labor_hours",
    "waste": "site_conditions_waste_logistics_hours",
    "admin": "site_conditions_admin_hours",
}
SITE_CONDITIONS_TRADE_GROUP = "site_conditions"

# --- Intents ---
INTENT_KEYS: tuple[str, ...] = (
    "change_floor_finish",
    "change_wall_finish",
    "add_underfloor_heating",
    "replace_toilet",
    "replace_sink_vanity",
    "replace_shower",
    "add_bathtub",
    "update_lighting",
    "improve_ventilation",
    "change_layout",
    "paint_ceiling",
)

FIXTURE_INTENTS: tuple[str, ...] = (
    "replace_toilet",
    "replace_sink_vanity",
    "replace_shower",
    "add_bathtub",
)

# --- Scope rules ---
SCOPE_RULES: tuple[ScopeRule, ...] = (
    ScopeRule(
        id="SR-001-surfaces",
        if_any_intents=("change_floor_finish", "change_wall_finish"),
        set_flags=("requires_demolition", "requires_substrate_prep", "requires_tiler"),
    ),
    ScopeRule(
        id="SR-002-fixtures",
        if_any_intents=FIXTURE_INTENTS,
        set_flags=("requires_plumber",),
    ),
    ScopeRule(
        id="SR-003-electrical",
        if_any_intents=("add_underfloor_heating", "update_lighting"),
        set_flags=("requires_electrician",),
    ),
    ScopeRule(
        id="SR-004-ventilation",
        if_any_intents=("improve_ventilation",),
        set_flags=("requires_ventilation",),
    ),
    ScopeRule(
        id="SR-005-ceiling",
        if_any_intents=("paint_ceiling",),
        set_flags=("requires_painter",),
    ),
    ScopeRule(
        id="SR-006-layout",
        if_any_intents=("change_layout",),
        set_flags=(
            "requires_demolition",
            "requires_plumber",
            "requires_substrate_prep",
            "requires_permit_docs",
        ),
    ),
    ScopeRule(
        id="SR-007-waterproofing",
        if_all_flags=("requires_demolition", "requires_substrate_prep"),
        set_flags=("requires_waterproofing",),
    ),
    ScopeRule(
        id="SR-008-wetroom-certificate",
        if_any_flags=("requires_waterproofing",),
        set_flags=("requires_wetroom_certificate",),
    ),
    ScopeRule(
        id="SR-009-project-management",
        if_all_flags=("requires_waterproofing", "requires_plumber"),
        set_flags=("requires_project_management",),
    ),
    ScopeRule(
        id="SR-010-permit-management",
        if_any_flags=("requires_permit_docs",),
        set_flags=("requires_project_management",),
    ),
    ScopeRule(
        id="SR-011-paint-after-tiling",
        if_any_flags=("requires_tiler",),
        set_flags=("requires_painter",),
    ),
    ScopeRule(
        id="SR-012-cleanup",
        if_any_flags=(
            "requires_demolition",
            "requires_plumber",
            "requires_tiler",
            "requires_electrician",
        ),
        set_flags=("requires_cleanup",),
    ),
)

# --- Catalog tasks (output order of priced lines) ---
CATALOG_TASKS: tuple[CatalogTask, ...] = tuple(
    CatalogTask(task_key=key, trade_group=group)
    for key, group in (
        ("demolish_remove_old_fixtures", "demolition"),
        ("demolish_remove_floor_tiles", "demolition"),
        ("demolish_remove_wall_tiles", "demolition"),
        ("demolish_chase_for_pipes", "demolition"),
        ("demolition_layout_change_allowance", "demolition"),
        ("level_floor_screed", "carpentry_substrate"),
        ("install_wall_backer_boards", "carpentry_substrate"),
        ("construct_support_structures", "carpentry_substrate"),
        ("substrate_layout_change_allowance", "carpentry_substrate"),
        ("layout_change_area_allowance", "carpentry_substrate"),
        ("apply_waterproof_membrane_floor", "waterproofing"),
        ("apply_waterproof_membrane_walls", "waterproofing"),
        ("install_floor_tiles_or_vinyl", "tiling_or_vinyl"),
        ("install_floor_microcement", "tiling_or_vinyl"),
        ("install_wall_tiles", "tiling_or_vinyl"),
        ("grout_and_seal", "tiling_or_vinyl"),
        ("layout_change_wet_zone_allowance", "tiling_or_vinyl"),
        ("rough_in_new_piping", "plumbing"),
        ("replace_floor_drain", "plumbing"),
        ("install_toilet", "plumbing"),
        ("install_sink_and_faucet", "plumbing"),
        ("install_shower_fixture", "plumbing"),
        ("install_shower_screen", "plumbing"),
        ("plumbing_layout_change_reroute_allowance", "plumbing"),
        ("layout_change_fixture_allowance", "plumbing"),
        ("install_floor_heating_cable", "electrical"),
        ("install_light_fixtures", "electrical"),
        ("install_electrical_outlets", "electrical"),
        ("upgrade_electrical_safety", "electrical"),
        ("final_electrical_inspection", "electrical"),
        ("install_exhaust_fan", "ventilation"),
        ("duct_adjustment_sealing", "ventilation"),
        ("repair_patch_walls", "painting"),
        ("prep_and_paint_ceiling", "painting"),
        ("finish_wall_paint", "painting"),
        ("paint_trim_and_door", "painting"),
        ("protect_other_areas", "cleanup_waste"),
        ("remove_construction_debris", "cleanup_waste"),
        ("construction_waste_disposal", "cleanup_waste"),
        ("final_cleanup", "cleanup_waste"),
        ("project_coordination_fee", "project_management_docs"),
        ("permit_or_board_application", "project_management_docs"),
        ("issue_wetroom_certificate", "project_management_docs"),
        ("handover_inspection", "project_management_docs"),
        ("documentation_layout_change_allowance", "project_management_docs"),
    )
)


def _rate(unit: str, labor: float, material: float, min_charge: float = 0.0) -> TaskRate:
    return TaskRate(
        unit=unit,
        labor_sek_per_unit=labor,
        material_sek_per_unit=material,
        min_charge_sek=min_charge,
    )


RATE_CARD = RateCard(
    task_rates={
        # Demolition
        "demolish_remove_old_fixtures": _rate("st", 900, 0),
        "demolish_remove_floor_tiles": _rate("m2", 450, 0, 2500),
        "demolish_remove_wall_tiles": _rate("m2", 400, 0, 2500),
        "demolish_chase_for_pipes": _rate("st", 3500, 300),
        "demolition_layout_change_allowance": _rate("st", 6000, 0),
        # Substrate
        "level_floor_screed": _rate("m2", 350, 250, 2500),
        "install_wall_backer_boards": _rate("m2", 300, 220),
        "construct_support_structures": _rate("st", 2200, 900),
        "substrate_layout_change_allowance": _rate("st", 5000, 2500),
        "layout_change_area_allowance": _rate("m2", 900, 400),
        # Waterproofing
        "apply_waterproof_membrane_floor": _rate("m2", 380, 260, 3000),
        "apply_waterproof_membrane_walls": _rate("m2", 340, 240, 3500),
        # Tiling / vinyl
        "install_floor_tiles_or_vinyl": _rate("m2", 900, 450, 4000),
        "install_floor_microcement": _rate("m2", 1400, 900, 8000),
        "install_wall_tiles": _rate("m2", 850, 420, 6000),
        "grout_and_seal": _rate("m2", 120, 40),
        "layout_change_wet_zone_allowance": _rate("m2", 600, 300),
        # Plumbing
        "rough_in_new_piping": _rate("st", 1800, 700),
        "replace_floor_drain": _rate("st", 3200, 1800),
        "install_toilet": _rate("st", 2200, 3000),
        "install_sink_and_faucet": _rate("st", 2000, 2500),
        "install_shower_fixture": _rate("st", 2600, 2500),
        "install_shower_screen": _rate("st", 1500, 3000),
        "plumbing_layout_change_reroute_allowance": _rate("st", 9000, 3000),
        "layout_change_fixture_allowance": _rate("st", 2500, 800),
        # Electrical
        "install_floor_heating_cable": _rate("m2", 450, 550, 4000),
        "install_light_fixtures": _rate("st", 700, 900),
        "install_electrical_outlets": _rate("st", 650, 250),
        "upgrade_electrical_safety": _rate("st", 2500, 1200),
        "final_electrical_inspection": _rate("st", 1500, 0),
        # Ventilation
        "install_exhaust_fan": _rate("st", 1800, 2400),
        "duct_adjustment_sealing": _rate("st", 1600, 400),
        # Painting
        "repair_patch_walls": _rate("m2", 120, 40),
        "prep_and_paint_ceiling": _rate("m2", 220, 60, 1800),
        "finish_wall_paint": _rate("m2", 180, 50),
        "paint_trim_and_door": _rate("st", 1800, 400),
        # Cleanup / waste
        "protect_other_areas": _rate("st", 1500, 600),
        "remove_construction_debris": _rate("st", 2500, 0),
        "construction_waste_disposal": _rate("st", 1000, 2800),
        "final_cleanup": _rate("st", 1800, 200),
        # Project management / documentation
        "project_coordination_fee": _rate("st", 6000, 0),
        "permit_or_board_application": _rate("st", 4500, 0),
        "issue_wetroom_certificate": _rate("st", 2500, 0),
        "handover_inspection": _rate("st", 2000, 0),
        "documentation_layout_change_allowance": _rate("st", 3500, 0),
        # Allowances
        "toilet_wall_hung_allowance": _rate("st", 3500, 4500),
        "ceiling_panels_allowance": _rate("st", 3000, 3500),
        "ceiling_sloped_allowance": _rate("st", 2500, 500),
        "shower_niche_allowance": _rate("st", 2200, 900),
        # Site conditions (hours)
        "site_conditions_access_labor_hours": _rate("h", 650, 0),
        "site_conditions_waste_logistics_hours": _rate("h", 600, 150),
        "site_conditions_admin_hours": _rate("h", 750, 0),
    },
    overhead=Overhead(project_management_pct=0.08, contingency_pct=0.10),
)

# --- Task pricing rules ---
FLOOR_WASTE = (1.1, 4.0)  # (multiplier, minimum m²)
WALL_WASTE = (1.1, 2.0)
GROUT_WASTE = (1.05, 2.0)
MIN_WALL_AREA_M2 = 5.0
MIN_CEILING_AREA_M2 = 5.0
MIN_PIPING_POINTS = 4
MIN_PAINTABLE_WALL_AREA_M2 = 0.5
LIGHT_FIXTURE_COUNT = 4
OUTLET_COUNT = 2

FLOOR_KEEP_TASKS: frozenset[str] = frozenset(
    {
        "demolish_remove_floor_tiles",
        "apply_waterproof_membrane_floor",
        "install_floor_tiles_or_vinyl",
        "install_floor_microcement",
    }
)
WALL_KEEP_TASKS: frozenset[str] = frozenset(
    {"demolish_remove_wall_tiles", "apply_waterproof_membrane_walls", "install_wall_tiles"}
)

FLOOR_FINISH_MATERIAL_DELTA: dict[FloorFinish, float] = {
    FloorFinish.WETROOM_VINYL: -150,
    FloorFinish.CERAMIC_TILE_STANDARD: 0,
    FloorFinish.CERAMIC_TILE_PREMIUM: 350,
    FloorFinish.MICROCEMENT: 0,
    FloorFinish.KEEP: 0,
}

WALL_FINISH_MATERIAL_DELTA: dict[WallFinish, float] = {
    WallFinish.WETROOM_VINYL: -140,
    WallFinish.CERAMIC_TILE_STANDARD: 0,
    WallFinish.CERAMIC_TILE_PREMIUM: 320,
    WallFinish.PAINTED_WALLS: 0,
    WallFinish.KEEP: 0,
}

FIXTURE_TIER_MATERIAL_ADDON: dict[str, dict[FixturesTier, float]] = {
    "install_toilet": {FixturesTier.BASIC: 0, FixturesTier.STANDARD: 1900, FixturesTier.PREMIUM: 5200},
    "install_sink_and_faucet": {FixturesTier.BASIC: 0, FixturesTier.STANDARD: 2000, FixturesTier.PREMIUM: 5400},
    "install_shower_fixture": {FixturesTier.BASIC: 0, FixturesTier.STANDARD: 2300, FixturesTier.PREMIUM: 5800},
    "install_shower_screen": {FixturesTier.BASIC: 0, FixturesTier.STANDARD: 1500, FixturesTier.PREMIUM: 3600},
}

SHOWER_NICHE_COUNTS: dict[str, int] = {"none": 0, "one": 1, "two_or_more": 2}

ROT_INELIGIBLE_TRADE_GROUPS: frozenset[str] = frozenset({"project_management_docs"})

# --- Plausibility ---
PB_REFRESH = "PB-REFRESH"
PB_FIXTURES_ONLY = "PB-001"
PB_SURFACES = "PB-002"
PB_MAJOR = "PB-003"

# SEK/m² guideline (low, high)
SEK_PER_M2_GUIDELINE_REFRESH = (2000, 12000)
SEK_PER_M2_GUIDELINE = (8000, 30000)

# Mid-total bands per profile (low, high); rough estimates get wider bands
OUTLIER_BANDS_ROUGH: dict[RenovationProfile, tuple[int, int]] = {
    RenovationProfile.REFRESH: (15000, 80000),
    RenovationProfile.FULL_REBUILD: (70000, 200000),
    RenovationProfile.MAJOR: (130000, 320000),
}
OUTLIER_BANDS: dict[RenovationProfile, tuple[int, int]] = {
    RenovationProfile.REFRESH: (20000, 60000),
    RenovationProfile.FULL_REBUILD: (80000, 180000),
    RenovationProfile.MAJOR: (150000, 300000),
}

OUT_OF_BAND_CODES: dict[RenovationProfile, str] = {
    RenovationProfile.REFRESH: "REFRESH_OUT_OF_BAND",
    RenovationProfile.FULL_REBUILD: "FULL_OUT_OF_BAND",
    RenovationProfile.MAJOR: "MAJOR_OUT_OF_BAND",
}

# SEK/m² ceilings (rough, otherwise); refresh has none
PER_M2_THRESHOLDS: dict[RenovationProfile, tuple[int, int]] = {
    RenovationProfile.FULL_REBUILD: (35000, 30000),
    RenovationProfile.MAJOR: (50000, 45000),
}
PER_M2_CODES: dict[RenovationProfile, str] = {
    RenovationProfile.FULL_REBUILD: "FULL_PER_M2_TOO_HIGH",
    RenovationProfile.MAJOR: "MAJOR_PER_M2_TOO_HIGH",
}

PLAUSIBILITY_BAND_INFO_FLAGS: dict[str, str] = {
    PB_SURFACES: "PLAUSIBILITY_BAND_PB_002",
    PB_MAJOR: "PLAUSIBILITY_BAND_PB_003",
}

# --- Confidence tier ---
CONFIDENCE_TIERS: tuple[ConfidenceTier, ...] = (
    ConfidenceTier.LOW,
    ConfidenceTier.MEDIUM,
    ConfidenceTier.HIGH,
)
QUALITY_TIER_MAP: dict[EstimateQuality, ConfidenceTier] = {
    EstimateQuality.CONFIRMED: ConfidenceTier.HIGH,
    EstimateQuality.SEMI_CONFIRMED: ConfidenceTier.MEDIUM,
    EstimateQuality.ROUGH: ConfidenceTier.LOW,
}
LOW_ANALYSIS_CONFIDENCE_THRESHOLD = 0.6

# --- ROT ---
ROT_REASON_CAP = "rot_max_limit"
ROT_REASON_UNKNOWN_LIMIT = "unknown_user_tax_limit"
