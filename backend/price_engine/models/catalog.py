"""
Catalog models: scope rules, catalog tasks and the rate card.

The default catalog ships as module constants (see price_engine.constants);
callers may build their own instances of these models and pass them in.
"""

from pydantic import BaseModel, ConfigDict, Field

_FROZEN = ConfigDict(frozen=True)


class ScopeRule(BaseModel):
    """One catalog rule: conditions on intents/flags that switch on more flags.

    A missing or empty condition list never fires, except ``if_all_flags=()``:
    an explicit empty all-of list is vacuously true and always fires.
    """

    model_config = _FROZEN

    id: str
    if_any_intents: tuple[str, ...] = ()
    if_any_flags: tuple[str, ...] = ()
    if_all_flags: tuple[str, ...] | None = None
    set_flags: tuple[str, ...] = ()


class CatalogTask(BaseModel):
    model_config = _FROZEN

    task_key: str
    trade_group: str


class TaskRate(BaseModel):
    """Unit price for one catalog task (SEK, excl. ROT)."""

    model_config = _FROZEN

    unit: str = "st"
    labor_sek_per_unit: float = Field(default=0.0, ge=0)
    material_sek_per_unit: float = Field(default=0.0, ge=0)
    min_charge_sek: float = Field(default=0.0, ge=0)


class Overhead(BaseModel):
    model_config = _FROZEN

    project_management_pct: float = Field(default=0.0, ge=0)
    contingency_pct: float = Field(default=0.0, ge=0)


class RateCard(BaseModel):
    model_config = _FROZEN

    task_rates: dict[str, TaskRate]
    overhead: Overhead = Field(default_factory=Overhead)

    def rate_for(self, task_key: str) -> TaskRate:
        # Unknown tasks price at zero rather than failing the estimate
        return self.task_rates.get(task_key, TaskRate(unit="unit"))
