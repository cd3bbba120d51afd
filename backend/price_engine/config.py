"""
Estimator configuration using pydantic-settings.
Loads environment variables from .env file.

The only process-level settings the estimator consumes are the ROT rate and
cap. Range-engine constants are grouped in RangePolicy and are
env-overridable via the double-underscore delimiter, e.g.:
    ROT_RATE=0.5
    ROT_MAX_SEK=50000
    RANGE_POLICY__MIN_RANGE_SEK=3000

Calculators never read Settings themselves: they take a RotPolicy /
RangePolicy argument. ``evaluate`` builds both from get_settings() when the
caller passes none.
"""

from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ROT_RATE = 0.30


def _clamp_rate(value: float | None) -> float:
    if value is None:
        return DEFAULT_ROT_RATE
    return min(max(float(value), 0.0), 1.0)


class RangePolicy(BaseModel):
    """Constants for the uncertainty band. Percentages are fractions, adjustments are points."""

    model_config = ConfigDict(frozen=True)

    min_range_pct: float = 0.03
    max_range_pct: float = 0.25
    min_range_sek: int = 2000
    default_trade_group_pct: float = 0.08
    trade_group_pct: dict[str, float] = Field(
        default_factory=lambda: {
            "demolition": 0.09,
            "carpentry_substrate": 0.08,
            "waterproofing": 0.07,
            "tiling_or_vinyl": 0.06,
            "plumbing": 0.08,
            "electrical": 0.07,
            "ventilation": 0.06,
            "painting": 0.05,
            "cleanup_waste": 0.05,
            "project_management_docs": 0.04,
            "site_conditions": 0.03,
        }
    )

    # Completeness adjustments (percentage points)
    measurement_confirmed_pts: float = -1.5
    room_measurements_complete_pts: float = -1.5
    room_measurements_partial_pts: float = -0.75
    site_conditions_complete_pts: float = -1.0
    site_conditions_partial_pts: float = -0.5
    needs_confirmation_pts: float = 2.0

    complete_ratio: float = 0.75
    partial_ratio: float = 0.5

    def pct_for(self, trade_group: str) -> float:
        return self.trade_group_pct.get(trade_group, self.default_trade_group_pct)


class RotPolicy(BaseModel):
    """ROT deduction rate and optional cap (per owner)."""

    model_config = ConfigDict(frozen=True)

    rate: float = DEFAULT_ROT_RATE
    max_sek: int | None = Field(default=None, ge=0)

    @field_validator("rate", mode="before")
    @classmethod
    def _clamp(cls, v: float | None) -> float:
        return _clamp_rate(v)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "RotPolicy":
        return cls(rate=settings.rot_rate, max_sek=settings.rot_max_sek)


class Settings(BaseSettings):
    """Estimator settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    # ROT (Swedish labour tax deduction)
    rot_rate: float = DEFAULT_ROT_RATE
    rot_max_sek: int | None = None  # unset = no cap

    # App Settings
    debug: bool = False

    # Nested config groups (env-overridable via SECTION__KEY format)
    range_policy: RangePolicy = Field(default_factory=RangePolicy)

    @field_validator("rot_rate", mode="before")
    @classmethod
    def _parse_rot_rate(cls, v: object) -> float:
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_ROT_RATE
        try:
            return _clamp_rate(float(v))
        except (TypeError, ValueError):
            return DEFAULT_ROT_RATE

    @field_validator("rot_max_sek", mode="before")
    @classmethod
    def _parse_rot_max(cls, v: object) -> int | None:
        # Blank or unparseable means "no cap"
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        try:
            parsed = float(v)
        except (TypeError, ValueError):
            return None
        if parsed != parsed or parsed < 0:
            return None
        return int(parsed)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
