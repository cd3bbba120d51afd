"""
Enums for the bathroom estimator contract and derived results.

Values are the lowercase wire identifiers used by the contract; Swedish
labels are a frontend concern and do not live here.
"""

from enum import Enum

# ---------------------------------------------------------------------------
# Analysis (vision model output, already validated)
# ---------------------------------------------------------------------------


class SizeBucket(str, Enum):
    """Coarse bathroom floor-area bucket."""

    UNDER_4_SQM = "under_4_sqm"
    BETWEEN_4_AND_7_SQM = "between_4_and_7_sqm"
    OVER_7_SQM = "over_7_sqm"


class RoomType(str, Enum):
    """Room type detected in the photo."""

    BATHROOM = "bathroom"
    OTHER = "other"


class ConditionSignal(str, Enum):
    """Overall visible condition of the room."""

    GOOD = "good"
    AVERAGE = "average"
    POOR = "poor"
    UNKNOWN = "unknown"


class ImageQualityIssue(str, Enum):
    """Problems the vision model reported about the photo."""

    LOW_LIGHT = "low_light"
    BLURRY = "blurry"
    INCOMPLETE_ROOM_COVERAGE = "incomplete_room_coverage"
    OBSTRUCTED_VIEWS = "obstructed_views"


class SizeSource(str, Enum):
    """Who chose the final size bucket."""

    AI_ESTIMATED = "ai_estimated"
    USER_OVERRIDDEN = "user_overridden"


class WetZoneType(str, Enum):
    """User-declared extent of the wet zone."""

    SHOWER_ONLY = "shower_only"
    CORNER_2_WALLS = "corner_2_walls"
    THREE_WALLS = "three_walls"
    FULL_WET_ROOM = "full_wet_room"


# ---------------------------------------------------------------------------
# Outcome (what the user wants the room to become)
# ---------------------------------------------------------------------------


class ShowerType(str, Enum):
    WALK_IN_SHOWER_GLASS = "walk_in_shower_glass"
    SHOWER_CABIN = "shower_cabin"
    NO_SHOWER = "no_shower"
    KEEP = "keep"


class BathtubOption(str, Enum):
    YES = "yes"
    NO = "no"
    KEEP = "keep"


class ToiletType(str, Enum):
    WALL_HUNG = "wall_hung"
    FLOOR_STANDING = "floor_standing"
    KEEP = "keep"


class VanityType(str, Enum):
    VANITY_WITH_CABINET = "vanity_with_cabinet"
    SIMPLE_SINK = "simple_sink"
    NO_SINK = "no_sink"
    KEEP = "keep"


class WallFinishOption(str, Enum):
    TILES_ALL_WALLS = "tiles_all_walls"
    LARGE_FORMAT_TILES_ALL_WALLS = "large_format_tiles_all_walls"
    TILES_WET_ZONE_ONLY = "tiles_wet_zone_only"
    PAINTED_WALLS_ONLY = "painted_walls_only"
    KEEP = "keep"


class FloorFinishOption(str, Enum):
    STANDARD_CERAMIC_TILES = "standard_ceramic_tiles"
    LARGE_FORMAT_TILES = "large_format_tiles"
    VINYL_WET_ROOM_MAT = "vinyl_wet_room_mat"
    MICROCEMENT_SEAMLESS = "microcement_seamless"
    KEEP = "keep"


class CeilingTypeOption(str, Enum):
    PAINTED_CEILING = "painted_ceiling"
    MOISTURE_RESISTANT_PANELS = "moisture_resistant_panels"
    SLOPED_PAINTED = "sloped_painted"
    SLOPED_WITH_PANELS = "sloped_with_panels"
    KEEP = "keep"


class FloorHeatingOption(str, Enum):
    FLOOR_HEATING_ON = "floor_heating_on"
    FLOOR_HEATING_OFF = "floor_heating_off"
    KEEP = "keep"


class LayoutChangeOption(str, Enum):
    YES = "yes"
    NO = "no"


class ShowerNichesOption(str, Enum):
    NONE = "none"
    ONE = "one"
    TWO_OR_MORE = "two_or_more"


# ---------------------------------------------------------------------------
# Selections (catalog-facing vocabulary produced by the outcome mapper)
# ---------------------------------------------------------------------------


class FloorFinish(str, Enum):
    """Floor finish as the pricing catalog knows it."""

    WETROOM_VINYL = "wetroom_vinyl"
    CERAMIC_TILE_STANDARD = "ceramic_tile_standard"
    CERAMIC_TILE_PREMIUM = "ceramic_tile_premium"
    MICROCEMENT = "microcement"
    KEEP = "keep"


class WallFinish(str, Enum):
    """Wall finish as the pricing catalog knows it."""

    WETROOM_VINYL = "wetroom_vinyl"
    CERAMIC_TILE_STANDARD = "ceramic_tile_standard"
    CERAMIC_TILE_PREMIUM = "ceramic_tile_premium"
    PAINTED_WALLS = "painted_walls"
    KEEP = "keep"


class FixturesTier(str, Enum):
    BASIC = "basic"
    STANDARD = "standard"
    PREMIUM = "premium"


# ---------------------------------------------------------------------------
# Derived classifications
# ---------------------------------------------------------------------------


class MeasurementSource(str, Enum):
    """Where a resolved geometry value came from."""

    AI = "ai"
    USER = "user"
    DEFAULT = "default"


class EstimateQuality(str, Enum):
    CONFIRMED = "confirmed"
    SEMI_CONFIRMED = "semi_confirmed"
    ROUGH = "rough"


class ConfidenceTier(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RenovationProfile(str, Enum):
    """Scale of the renovation, used for plausibility bands."""

    REFRESH = "refresh"
    FULL_REBUILD = "full_rebuild"
    MAJOR = "major"
