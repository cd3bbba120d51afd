"""
Shared test fixtures for the price engine test suite.
"""

from collections.abc import Callable
from typing import Any

import pytest
import structlog

from price_engine.config import get_settings
from price_engine.models.contract import EstimatorContract

_SETTINGS_ENV_VARS = (
    "ROT_RATE",
    "ROT_MAX_SEK",
    "DEBUG",
    "RANGE_POLICY__MIN_RANGE_SEK",
    "RANGE_POLICY__MIN_RANGE_PCT",
    "RANGE_POLICY__MAX_RANGE_PCT",
)


@pytest.fixture(autouse=True)
def _set_test_env(monkeypatch: pytest.MonkeyPatch):
    """Start every test from default settings, whatever the shell exports."""
    for name in _SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _configure_structlog_for_tests():
    """Configure structlog for tests using a simple, deterministic setup."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(0),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
    structlog.contextvars.clear_contextvars()


# ---------------------------------------------------------------------------
# Contract payloads
# ---------------------------------------------------------------------------

BASE_ANALYSIS: dict[str, Any] = {
    "room_type": "bathroom",
    "bathroom_size_estimate": "under_4_sqm",
    "bathroom_size_confidence": 0.7,
    "detected_fixtures": {
        "shower_present": True,
        "bathtub_present": False,
        "toilet_present": True,
        "sink_present": True,
    },
    "layout_features": {
        "shower_zone_visible": True,
        "wet_room_layout": False,
        "tight_space": True,
        "irregular_geometry": False,
    },
    "ceiling_features": {"ceiling_visible": True, "sloped_ceiling_detected": False},
    "condition_signals": {"overall_condition": "average"},
    "image_quality": {"sufficient_for_estimate": True, "issues": []},
    "analysis_confidence": 0.8,
}

BASE_OUTCOME: dict[str, Any] = {
    "shower_type": "walk_in_shower_glass",
    "bathtub": "no",
    "toilet_type": "floor_standing",
    "vanity_type": "simple_sink",
    "wall_finish": "tiles_all_walls",
    "floor_finish": "standard_ceramic_tiles",
    "ceiling_type": "painted_ceiling",
    "layout_change": "no",
    "shower_niches": "none",
}

REFRESH_OUTCOME: dict[str, Any] = {
    "shower_type": "keep",
    "bathtub": "keep",
    "toilet_type": "keep",
    "vanity_type": "keep",
    "wall_finish": "keep",
    "floor_finish": "keep",
    "ceiling_type": "painted_ceiling",
    "layout_change": "no",
}

FULL_SITE_CONDITIONS: dict[str, Any] = {
    "floor_elevator": "apt_no_elevator_1_2",
    "carry_distance": "under_20m",
    "parking_loading": "easy_nearby",
    "work_time_restrictions": "standard_daytime",
    "permits_brf": "permit_required",
    "wetroom_certificate_required": "required",
    "build_year_bucket": "1980_1999",
    "last_renovated": "over_15y",
    "hazardous_material_risk": "none_known",
    "occupancy": "not_living_in",
    "must_keep_facility_running": "no",
    "container_possible": "yes",
    "protection_level": "normal",
    "water_shutoff_accessible": "yes",
    "electrical_panel_accessible": "yes",
    "recent_stambyte": "no",
}


def contract_payload(
    size: str = "under_4_sqm",
    outcome: dict[str, Any] | None = None,
    analysis: dict[str, Any] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Wire-format contract; ``outcome``/``analysis`` entries patch the defaults."""
    payload: dict[str, Any] = {
        "analysis": {**BASE_ANALYSIS, "bathroom_size_estimate": size, **(analysis or {})},
        "overrides": {"bathroom_size_final": size, "bathroom_size_source": "ai_estimated"},
        "outcome": {**BASE_OUTCOME, **(outcome or {})},
    }
    payload.update({key: value for key, value in extra.items() if value is not None})
    return payload


@pytest.fixture
def make_payload() -> Callable[..., dict[str, Any]]:
    return contract_payload


@pytest.fixture
def refresh_outcome() -> dict[str, Any]:
    return dict(REFRESH_OUTCOME)


@pytest.fixture
def full_site_conditions() -> dict[str, Any]:
    return dict(FULL_SITE_CONDITIONS)


@pytest.fixture
def make_contract() -> Callable[..., EstimatorContract]:
    """Factory building validated contracts from partial payloads."""

    def _make(**kwargs: Any) -> EstimatorContract:
        return EstimatorContract.model_validate(contract_payload(**kwargs))

    return _make


@pytest.fixture
def small_bathroom(make_contract) -> EstimatorContract:
    """Under 4 m² bucket, fully tiled, no measurements or survey."""
    return make_contract()


@pytest.fixture
def measured_bathroom(make_contract) -> EstimatorContract:
    """4-7 m² bathroom with a user measurement and a complete site survey."""
    return make_contract(
        size="between_4_and_7_sqm",
        measurementOverride={"length": 2.2, "width": 3.1, "area": 6.82, "ceilingHeight": 2.4},
        site_conditions=FULL_SITE_CONDITIONS,
    )
