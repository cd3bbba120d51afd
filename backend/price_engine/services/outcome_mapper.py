"""
Outcome mapper: the user's chosen outcome -> intent map + catalog selections.

Pure function: map_outcome(outcome) -> OutcomeMapping.
"""

from typing import Any, NamedTuple

from price_engine.constants import INTENT_KEYS
from price_engine.models.contract import UserOutcomeContract
from price_engine.models.enums import (
    BathtubOption,
    CeilingTypeOption,
    FixturesTier,
    FloorFinish,
    FloorFinishOption,
    FloorHeatingOption,
    LayoutChangeOption,
    ShowerType,
    ToiletType,
    VanityType,
    WallFinish,
    WallFinishOption,
)
from price_engine.models.estimate import IntentMap, Selection

FLOOR_FINISH_MAP: dict[FloorFinishOption, FloorFinish] = {
    FloorFinishOption.STANDARD_CERAMIC_TILES: FloorFinish.CERAMIC_TILE_STANDARD,
    FloorFinishOption.LARGE_FORMAT_TILES: FloorFinish.CERAMIC_TILE_PREMIUM,
    FloorFinishOption.MICROCEMENT_SEAMLESS: FloorFinish.MICROCEMENT,
    FloorFinishOption.VINYL_WET_ROOM_MAT: FloorFinish.WETROOM_VINYL,
    FloorFinishOption.KEEP: FloorFinish.KEEP,
}

WALL_FINISH_MAP: dict[WallFinishOption, WallFinish] = {
    WallFinishOption.TILES_ALL_WALLS: WallFinish.CERAMIC_TILE_STANDARD,
    WallFinishOption.TILES_WET_ZONE_ONLY: WallFinish.CERAMIC_TILE_STANDARD,
    WallFinishOption.LARGE_FORMAT_TILES_ALL_WALLS: WallFinish.CERAMIC_TILE_PREMIUM,
    WallFinishOption.PAINTED_WALLS_ONLY: WallFinish.PAINTED_WALLS,
    WallFinishOption.KEEP: WallFinish.KEEP,
}


class OutcomeMapping(NamedTuple):
    intents: IntentMap
    selections: Selection
    mapping_log: dict[str, Any]


def _fixtures_tier(outcome: UserOutcomeContract) -> FixturesTier:
    premium_signals = (
        outcome.floor_finish == FloorFinishOption.LARGE_FORMAT_TILES,
        outcome.floor_finish == FloorFinishOption.MICROCEMENT_SEAMLESS,
        outcome.wall_finish == WallFinishOption.LARGE_FORMAT_TILES_ALL_WALLS,
        outcome.shower_type == ShowerType.WALK_IN_SHOWER_GLASS,
        outcome.bathtub == BathtubOption.YES,
        outcome.vanity_type == VanityType.VANITY_WITH_CABINET,
    )
    return FixturesTier.PREMIUM if any(premium_signals) else FixturesTier.STANDARD


def build_intents(outcome: UserOutcomeContract) -> IntentMap:
    """Every known intent key, set from the outcome choices."""
    intents: IntentMap = dict.fromkeys(INTENT_KEYS, False)
    intents["change_floor_finish"] = outcome.floor_finish != FloorFinishOption.KEEP
    intents["change_wall_finish"] = outcome.wall_finish != WallFinishOption.KEEP
    intents["replace_shower"] = outcome.shower_type not in (ShowerType.KEEP, ShowerType.NO_SHOWER)
    intents["add_bathtub"] = outcome.bathtub == BathtubOption.YES
    intents["replace_toilet"] = outcome.toilet_type != ToiletType.KEEP
    intents["replace_sink_vanity"] = outcome.vanity_type not in (VanityType.KEEP, VanityType.NO_SINK)
    intents["change_layout"] = outcome.layout_change == LayoutChangeOption.YES
    intents["paint_ceiling"] = outcome.ceiling_type != CeilingTypeOption.KEEP
    intents["add_underfloor_heating"] = outcome.floor_heating == FloorHeatingOption.FLOOR_HEATING_ON
    return intents


def build_selections(outcome: UserOutcomeContract) -> Selection:
    layout_change = outcome.layout_change == LayoutChangeOption.YES
    return Selection(
        floor_finish=FLOOR_FINISH_MAP[outcome.floor_finish],
        wall_finish=WALL_FINISH_MAP[outcome.wall_finish],
        fixtures_tier=_fixtures_tier(outcome),
        pipe_reroute=layout_change,
        needs_brf_docs=layout_change,
        shower_niches=outcome.shower_niches,
        toilet_type=outcome.toilet_type,
        ceiling_type=outcome.ceiling_type,
    )


def map_outcome(outcome: UserOutcomeContract) -> OutcomeMapping:
    intents = build_intents(outcome)
    selections = build_selections(outcome)
    mapping_log: dict[str, Any] = {
        "change_layout": intents["change_layout"],
        "change_floor_finish": intents["change_floor_finish"],
        "change_wall_finish": intents["change_wall_finish"],
        "replace_shower": intents["replace_shower"],
        "add_bathtub": intents["add_bathtub"],
        "replace_toilet": intents["replace_toilet"],
        "replace_sink_vanity": intents["replace_sink_vanity"],
        "paint_ceiling": intents["paint_ceiling"],
        "pipe_reroute": selections.pipe_reroute,
        "needs_brf_docs": selections.needs_brf_docs,
        "shower_niches": selections.shower_niches.value,
        "ceiling_type": selections.ceiling_type.value if selections.ceiling_type else None,
        "floor_heating": outcome.floor_heating.value if outcome.floor_heating else None,
    }
    return OutcomeMapping(intents=intents, selections=selections, mapping_log=mapping_log)
