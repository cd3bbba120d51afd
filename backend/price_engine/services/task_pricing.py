"""
Task pricing engine.

Any object with ``price(request: PricingRequest) -> PricingResult`` can
price an estimate; CatalogPricingEngine is the default, driven by the
catalog tasks and rate card in price_engine.constants.

CatalogPricingEngine decision logic:
  trade groups   enabled by derived flags (layout change forces demolition,
                 plumbing, substrate and PM/docs)
  task skip      keep finishes, vinyl/paint vs membranes and tiles,
                 microcement vs tiles, reroute/permit/certificate gating
  quantity       per task from floor/wet-zone areas (with waste minimums),
                 fixture counts, fixed one-offs and layout allowances
  price          qty * (labour + material + finish/tier delta), min charge
  allowances     wall-hung toilet, ceiling panels, sloped ceiling, niches,
                 site-condition hours
  overhead       PM pct when requires_project_management, contingency on top
"""

from dataclasses import dataclass
from typing import Protocol

import structlog

from price_engine.constants import (
    CATALOG_TASKS,
    FIXTURE_INTENTS,
    FIXTURE_TIER_MATERIAL_ADDON,
    FLOOR_FINISH_MATERIAL_DELTA,
    FLOOR_KEEP_TASKS,
    FLOOR_WASTE,
    GROUT_WASTE,
    LIGHT_FIXTURE_COUNT,
    MIN_CEILING_AREA_M2,
    MIN_PAINTABLE_WALL_AREA_M2,
    MIN_PIPING_POINTS,
    MIN_WALL_AREA_M2,
    OUTLET_COUNT,
    PB_FIXTURES_ONLY,
    PB_MAJOR,
    PB_REFRESH,
    PB_SURFACES,
    RATE_CARD,
    ROT_INELIGIBLE_TRADE_GROUPS,
    SEK_PER_M2_GUIDELINE,
    SEK_PER_M2_GUIDELINE_REFRESH,
    SHOWER_NICHE_COUNTS,
    SITE_CONDITION_TASK_KEYS,
    SITE_CONDITIONS_TRADE_GROUP,
    WALL_FINISH_MATERIAL_DELTA,
    WALL_KEEP_TASKS,
    WALL_WASTE,
)
from price_engine.models.catalog import CatalogTask, RateCard
from price_engine.models.enums import (
    CeilingTypeOption,
    FixturesTier,
    FloorFinish,
    RenovationProfile,
    ToiletType,
    WallFinish,
)
from price_engine.models.estimate import (
    EstimateTotals,
    PricingRequest,
    PricingResult,
    Room,
    Selection,
    SiteConditionsAllowance,
    TaskLine,
    TradeGroupTotal,
    VisibleFixtures,
)
from price_engine.services.needs_confirmation import compute_derived_areas
from price_engine.services.rounding import round2

logger = structlog.get_logger(__name__)


class TaskPricingEngine(Protocol):
    """Turns flags, geometry and selections into priced line items."""

    def price(self, request: PricingRequest) -> PricingResult: ...


# ---------------------------------------------------------------------------
# Quantity helpers
# ---------------------------------------------------------------------------


def apply_min_waste(value: float | None, multiplier: float, minimum: float) -> float:
    """Area with waste factor, never below ``minimum``; 0 for a missing area."""
    if not value or value <= 0:
        return 0.0
    return max(value * multiplier, minimum)


def apply_min(value: float | None, minimum: float) -> float:
    if not value or value <= 0:
        return 0.0
    return max(value, minimum)


def fixture_removal_qty(intents: dict[str, bool], fixtures: VisibleFixtures, surfaces_changed: bool) -> int:
    """Old fixtures to rip out: everything visible when surfaces change, else the replaced ones."""
    replacements = sum(1 for key in FIXTURE_INTENTS if intents.get(key))
    if surfaces_changed:
        return max(fixtures.total, replacements)
    return replacements


@dataclass(frozen=True)
class _QuantityContext:
    room: Room
    fixtures: VisibleFixtures
    intents: dict[str, bool]
    selections: Selection
    floor_with_waste: float
    wet_with_waste: float
    non_tiled_wall_area: float | None
    surfaces_changed: bool


_FLOOR_AREA_TASKS = frozenset(
    {
        "demolish_remove_floor_tiles",
        "install_floor_tiles_or_vinyl",
        "install_floor_microcement",
        "apply_waterproof_membrane_floor",
    }
)
_WET_ZONE_TASKS = frozenset(
    {"demolish_remove_wall_tiles", "apply_waterproof_membrane_walls", "install_wall_tiles"}
)
_ONE_OFF_TASKS = frozenset(
    {
        "replace_floor_drain",
        "paint_trim_and_door",
        "protect_other_areas",
        "remove_construction_debris",
        "construction_waste_disposal",
        "final_cleanup",
        "project_coordination_fee",
        "permit_or_board_application",
        "issue_wetroom_certificate",
        "handover_inspection",
        "demolish_chase_for_pipes",
        "construct_support_structures",
    }
)
_LAYOUT_ONE_OFF_TASKS = frozenset(
    {
        "demolition_layout_change_allowance",
        "plumbing_layout_change_reroute_allowance",
        "substrate_layout_change_allowance",
        "documentation_layout_change_allowance",
    }
)


def _fixture_qty(active: bool, count: int) -> int:
    # A requested fixture is installed even when none was visible in the photo
    return max(count, 1) if active else 0


def compute_quantity(task_key: str, ctx: _QuantityContext) -> float:
    room = ctx.room
    intents = ctx.intents
    fixtures = ctx.fixtures
    layout = bool(intents.get("change_layout"))

    if task_key in _FLOOR_AREA_TASKS:
        return ctx.floor_with_waste
    if task_key in _WET_ZONE_TASKS:
        return ctx.wet_with_waste
    if task_key in _ONE_OFF_TASKS:
        return 1
    if task_key in _LAYOUT_ONE_OFF_TASKS:
        return 1 if layout else 0

    if task_key == "grout_and_seal":
        floor_finish = ctx.selections.floor_finish
        floor = 0.0 if floor_finish in (FloorFinish.MICROCEMENT, FloorFinish.KEEP) else room.floor_area_m2 or 0.0
        wall = 0.0 if ctx.selections.wall_finish == WallFinish.KEEP else room.wet_zone_wall_area_m2 or 0.0
        multiplier, minimum = GROUT_WASTE
        return apply_min_waste(floor + wall, multiplier, minimum)
    if task_key == "demolish_remove_old_fixtures":
        return fixture_removal_qty(intents, fixtures, ctx.surfaces_changed)
    if task_key == "install_toilet":
        return _fixture_qty(bool(intents.get("replace_toilet")), fixtures.toilet)
    if task_key == "install_sink_and_faucet":
        return _fixture_qty(bool(intents.get("replace_sink_vanity")), fixtures.sink)
    if task_key in ("install_shower_fixture", "install_shower_screen"):
        return _fixture_qty(bool(intents.get("replace_shower")), fixtures.shower)
    if task_key == "rough_in_new_piping":
        return max(MIN_PIPING_POINTS, fixtures.total)
    if task_key == "install_floor_heating_cable":
        return (ctx.floor_with_waste or 1) if intents.get("add_underfloor_heating") else 0
    if task_key == "install_light_fixtures":
        return LIGHT_FIXTURE_COUNT if intents.get("update_lighting") else 0
    if task_key == "install_electrical_outlets":
        return OUTLET_COUNT if intents.get("update_lighting") else 0
    if task_key in ("upgrade_electrical_safety", "final_electrical_inspection"):
        return 1 if intents.get("update_lighting") or intents.get("add_underfloor_heating") else 0
    if task_key in ("install_exhaust_fan", "duct_adjustment_sealing"):
        return 1 if intents.get("improve_ventilation") else 0
    if task_key == "prep_and_paint_ceiling":
        return apply_min(room.ceiling_area_m2, MIN_CEILING_AREA_M2) if intents.get("paint_ceiling") else 0
    if task_key == "finish_wall_paint":
        if ctx.selections.wall_finish == WallFinish.PAINTED_WALLS:
            wall = room.wall_area_m2 or 0.0
            return wall if wall > MIN_PAINTABLE_WALL_AREA_M2 else 0
        non_tiled = ctx.non_tiled_wall_area or 0.0
        return non_tiled if non_tiled > MIN_PAINTABLE_WALL_AREA_M2 else 0
    if task_key == "layout_change_area_allowance":
        return max(1, round(room.floor_area_m2 or 0)) if layout else 0
    if task_key == "layout_change_wet_zone_allowance":
        return max(1, round((room.wet_zone_wall_area_m2 or 0) * 0.5)) if layout else 0
    if task_key == "layout_change_fixture_allowance":
        changes = sum(1 for key in FIXTURE_INTENTS if intents.get(key))
        return max(1, changes) if layout else 0
    if task_key in ("install_wall_backer_boards", "repair_patch_walls"):
        return apply_min(room.wall_area_m2, MIN_WALL_AREA_M2)
    if task_key == "level_floor_screed":
        return apply_min_waste(room.floor_area_m2, 1.0, FLOOR_WASTE[1])
    return 0


def material_adjustment(task_key: str, selections: Selection) -> float:
    delta = 0.0
    if task_key == "install_floor_tiles_or_vinyl":
        delta += FLOOR_FINISH_MATERIAL_DELTA[selections.floor_finish]
    if task_key == "install_wall_tiles":
        delta += WALL_FINISH_MATERIAL_DELTA[selections.wall_finish]
    tier_addon = FIXTURE_TIER_MATERIAL_ADDON.get(task_key)
    if tier_addon:
        delta += tier_addon[selections.fixtures_tier]
    return delta


def task_note(task_key: str, selections: Selection) -> str | None:
    if task_key == "install_floor_tiles_or_vinyl":
        if selections.floor_finish == FloorFinish.WETROOM_VINYL:
            return "Vinyl variant"
        return selections.floor_finish.value
    if task_key == "install_wall_tiles":
        return selections.wall_finish.value
    return None


# ---------------------------------------------------------------------------
# Plausibility / warnings
# ---------------------------------------------------------------------------


def derive_plausibility_band(
    intents: dict[str, bool],
    selections: Selection,
    profile: RenovationProfile | None,
) -> str:
    if profile == RenovationProfile.REFRESH:
        return PB_REFRESH
    surface_change = bool(intents.get("change_floor_finish") or intents.get("change_wall_finish"))
    fixtures_only = any(intents.get(key) for key in FIXTURE_INTENTS)
    if not surface_change and fixtures_only:
        return PB_FIXTURES_ONLY
    if intents.get("change_layout") or selections.fixtures_tier == FixturesTier.PREMIUM:
        return PB_MAJOR
    if surface_change:
        return PB_SURFACES
    return PB_FIXTURES_ONLY


def build_warnings(
    sek_per_m2: float | None,
    band: str,
    grand_total: float,
    profile: RenovationProfile | None,
) -> list[str]:
    warnings: list[str] = []
    low, high = SEK_PER_M2_GUIDELINE_REFRESH if profile == RenovationProfile.REFRESH else SEK_PER_M2_GUIDELINE
    if sek_per_m2 and (sek_per_m2 < low or sek_per_m2 > high):
        warnings.append(
            f"Total per m² is {sek_per_m2:.0f} SEK/m² which is outside {low:,}-{high:,} guideline."
        )
    warnings.append(f"Plausibility band: {band}")
    warnings.append(f"Total with contingency: {round(grand_total)} SEK")
    return warnings


def summarize_trade_groups(tasks: list[TaskLine]) -> tuple[TradeGroupTotal, ...]:
    totals: dict[str, float] = {}
    for task in tasks:
        totals[task.trade_group] = totals.get(task.trade_group, 0.0) + task.subtotal_sek
    return tuple(
        TradeGroupTotal(trade_group=group, subtotal_sek=round2(subtotal))
        for group, subtotal in totals.items()
    )


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class CatalogPricingEngine:
    """Default pricing engine backed by a task catalog and a rate card."""

    def __init__(
        self,
        tasks: tuple[CatalogTask, ...] = CATALOG_TASKS,
        rate_card: RateCard = RATE_CARD,
    ) -> None:
        self.tasks = tasks
        self.rate_card = rate_card

    # --- line construction ---

    def _line(
        self,
        task_key: str,
        trade_group: str,
        qty: float,
        material_delta: float = 0.0,
        note: str | None = None,
    ) -> TaskLine:
        rate = self.rate_card.rate_for(task_key)
        material_per_unit = max(rate.material_sek_per_unit + material_delta, 0.0)
        labor = qty * rate.labor_sek_per_unit
        material = qty * material_per_unit
        subtotal = max(labor + material, rate.min_charge_sek)
        return TaskLine(
            task_key=task_key,
            trade_group=trade_group,
            qty=round2(qty),
            unit=rate.unit,
            labor_sek=round2(labor),
            material_sek=round2(material),
            subtotal_sek=round2(subtotal),
            rot_eligible=labor > 0 and trade_group not in ROT_INELIGIBLE_TRADE_GROUPS,
            note=note,
        )

    def _enabled_trades(self, flags: frozenset[str], intents: dict[str, bool], selections: Selection) -> dict[str, bool]:
        enabled = {
            "demolition": "requires_demolition" in flags,
            "carpentry_substrate": "requires_substrate_prep" in flags,
            "waterproofing": "requires_waterproofing" in flags,
            "tiling_or_vinyl": (
                "requires_tiler" in flags
                or "requires_flooring_installer" in flags
                or selections.floor_finish == FloorFinish.WETROOM_VINYL
            ),
            "plumbing": "requires_plumber" in flags,
            "electrical": (
                "requires_electrician" in flags
                or bool(intents.get("add_underfloor_heating"))
                or bool(intents.get("update_lighting"))
            ),
            "ventilation": "requires_ventilation" in flags or bool(intents.get("improve_ventilation")),
            "painting": "requires_painter" in flags,
            "cleanup_waste": "requires_cleanup" in flags,
            "project_management_docs": (
                "requires_project_management" in flags or "requires_permit_docs" in flags
            ),
        }
        if intents.get("change_layout"):
            for group in ("demolition", "plumbing", "carpentry_substrate", "project_management_docs"):
                enabled[group] = True
        return enabled

    def _skip(self, task_key: str, selections: Selection, intents: dict[str, bool], flags: frozenset[str]) -> bool:
        floor = selections.floor_finish
        wall = selections.wall_finish
        if floor == FloorFinish.KEEP and task_key in FLOOR_KEEP_TASKS:
            return True
        if wall == WallFinish.KEEP and task_key in WALL_KEEP_TASKS:
            return True
        if floor == FloorFinish.WETROOM_VINYL and task_key == "apply_waterproof_membrane_floor":
            return True
        if wall in (WallFinish.WETROOM_VINYL, WallFinish.PAINTED_WALLS) and task_key in (
            "apply_waterproof_membrane_walls",
            "install_wall_tiles",
        ):
            return True
        if task_key == "install_floor_tiles_or_vinyl" and floor == FloorFinish.MICROCEMENT:
            return True
        if task_key == "install_floor_microcement" and floor != FloorFinish.MICROCEMENT:
            return True
        if task_key == "demolish_chase_for_pipes" and not (intents.get("change_layout") or selections.pipe_reroute):
            return True
        if task_key == "permit_or_board_application" and not (
            intents.get("change_layout") or selections.needs_brf_docs
        ):
            return True
        if task_key == "issue_wetroom_certificate" and "requires_waterproofing" not in flags:
            return True
        if task_key == "project_coordination_fee" and self.rate_card.overhead.project_management_pct > 0:
            return True
        return False

    def _allowance_lines(self, intents: dict[str, bool], selections: Selection) -> list[TaskLine]:
        lines: list[TaskLine] = []
        ceiling = selections.ceiling_type or CeilingTypeOption.PAINTED_CEILING
        if intents.get("paint_ceiling") and ceiling in (
            CeilingTypeOption.MOISTURE_RESISTANT_PANELS,
            CeilingTypeOption.SLOPED_WITH_PANELS,
        ):
            lines.append(self._line("ceiling_panels_allowance", "carpentry_substrate", 1))
        if intents.get("paint_ceiling") and ceiling in (
            CeilingTypeOption.SLOPED_PAINTED,
            CeilingTypeOption.SLOPED_WITH_PANELS,
        ):
            lines.append(self._line("ceiling_sloped_allowance", "painting", 1))
        niches = SHOWER_NICHE_COUNTS[selections.shower_niches.value]
        if intents.get("replace_shower") and niches > 0:
            lines.append(self._line("shower_niche_allowance", "carpentry_substrate", niches))
        return lines

    def _site_condition_lines(self, allowance: SiteConditionsAllowance | None) -> list[TaskLine]:
        if allowance is None:
            return []
        hours = {
            "access": allowance.access_hours,
            "waste": allowance.waste_hours,
            "admin": allowance.admin_hours,
        }
        return [
            self._line(SITE_CONDITION_TASK_KEYS[bucket], SITE_CONDITIONS_TRADE_GROUP, qty)
            for bucket, qty in hours.items()
            if qty > 0
        ]

    def build_tasks(self, request: PricingRequest) -> list[TaskLine]:
        room = request.room
        intents = request.intents
        selections = request.selections
        flags = request.flags

        enabled = self._enabled_trades(flags, intents, selections)
        derived = compute_derived_areas(room, selections)
        ctx = _QuantityContext(
            room=room,
            fixtures=room.visible_fixtures,
            intents=intents,
            selections=selections,
            floor_with_waste=apply_min_waste(room.floor_area_m2, *FLOOR_WASTE),
            wet_with_waste=apply_min_waste(room.wet_zone_wall_area_m2, *WALL_WASTE),
            non_tiled_wall_area=derived.non_tiled_wall_area_m2,
            surfaces_changed=bool(intents.get("change_floor_finish") or intents.get("change_wall_finish")),
        )
        wall_hung = bool(intents.get("replace_toilet")) and selections.toilet_type == ToiletType.WALL_HUNG

        lines: list[TaskLine] = []
        for task in self.tasks:
            if not enabled.get(task.trade_group, False):
                continue
            if self._skip(task.task_key, selections, intents, flags):
                continue
            qty = compute_quantity(task.task_key, ctx)
            if qty <= 0:
                continue
            lines.append(
                self._line(
                    task.task_key,
                    task.trade_group,
                    qty,
                    material_delta=material_adjustment(task.task_key, selections),
                    note=task_note(task.task_key, selections),
                )
            )
            if task.task_key == "install_toilet" and wall_hung:
                lines.append(self._line("toilet_wall_hung_allowance", "plumbing", 1))
                wall_hung = False

        if wall_hung:
            lines.append(self._line("toilet_wall_hung_allowance", "plumbing", 1))
        lines.extend(self._allowance_lines(intents, selections))
        lines.extend(self._site_condition_lines(request.site_conditions_allowance))
        return lines

    def price(self, request: PricingRequest) -> PricingResult:
        tasks = self.build_tasks(request)
        overhead = self.rate_card.overhead

        base = sum(task.subtotal_sek for task in tasks)
        pm_pct = overhead.project_management_pct if "requires_project_management" in request.flags else 0.0
        project_management = base * pm_pct
        contingency = (base + project_management) * overhead.contingency_pct
        grand_total = base + project_management + contingency

        floor = request.room.floor_area_m2
        sek_per_m2 = round2(grand_total / floor) if floor else None
        band = derive_plausibility_band(request.intents, request.selections, request.profile)

        logger.debug(
            "catalog_pricing_complete",
            task_count=len(tasks),
            grand_total_sek=round(grand_total),
            plausibility_band=band,
        )
        return PricingResult(
            tasks=tuple(tasks),
            flags=tuple(sorted(request.flags)),
            totals=EstimateTotals(
                base_subtotal_sek=round2(base),
                project_management_sek=round2(project_management),
                contingency_sek=round2(contingency),
                grand_total_sek=round2(grand_total),
            ),
            trade_group_totals=summarize_trade_groups(tasks),
            plausibility_band=band,
            sek_per_m2=sek_per_m2,
            warnings=tuple(build_warnings(sek_per_m2, band, grand_total, request.profile)),
            needs_confirmation_ids=request.needs_confirmation_ids,
            derived_areas=compute_derived_areas(request.room, request.selections),
        )
