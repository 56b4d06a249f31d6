"""
ScenarioState — the complete set of operator-adjustable parameters for one session.

The presentation layer holds exactly one ScenarioState per session and replaces
it (never mutates it) on every slider move or toggle. The persistence
collaborator stores the flat camelCase record produced by to_record()/to_json()
and hands it back through from_record()/from_json() on the next load.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

from pydantic import BaseModel, Field, field_validator

from .config import HazardParams, InterventionPolicy
from .exceptions import InvalidParameter


class ScenarioState(BaseModel):
    model_config = {"frozen": True, "populate_by_name": True, "extra": "ignore"}

    moved_months: int = Field(0, alias="movedMonths", ge=0)
    alpha: float = Field(60.0, alias="alpha")
    beta: float = Field(3.5, alias="beta")
    calibration_scale: float = Field(1.0, alias="calibrationScale", gt=0)
    cm_effectiveness: float = Field(0.70, alias="cmEffectiveness", ge=0.0, le=1.0)
    cm_start_index: int = Field(-6, alias="cmStartIndex")
    eol_enabled: bool = Field(False, alias="eolEnabled")
    eol_horizon_months: int = Field(18, alias="eolHorizonMonths")
    spike_exclusion_offsets: Tuple[int, ...] = Field((), alias="spikeExclusionOffsets")
    display_toggle: bool = Field(False, alias="displayToggle")

    @field_validator("spike_exclusion_offsets", mode="before")
    @classmethod
    def _normalize_exclusions(cls, v):
        # sets arrive from the UI, lists from JSON; store sorted and unique
        if v is None:
            return ()
        return tuple(sorted({int(x) for x in v}))

    # --- typed views for the engine ---

    @property
    def hazard_params(self) -> HazardParams:
        return HazardParams(alpha=self.alpha, beta=self.beta)

    @property
    def policy(self) -> InterventionPolicy:
        return InterventionPolicy(
            cm_start_index=self.cm_start_index,
            cm_factor=self.cm_effectiveness,
            eol_enabled=self.eol_enabled,
            eol_horizon=self.eol_horizon_months,
        )

    @property
    def exclusions(self) -> frozenset:
        return frozenset(self.spike_exclusion_offsets)

    # --- "mutation" ---

    def with_changes(self, **changes: Any) -> "ScenarioState":
        """Return a new state with the given fields replaced (snake_case or camelCase)."""
        fields = ScenarioState.model_fields
        aliases = {f.alias for f in fields.values() if f.alias}
        merged = self.to_record()
        for key, value in changes.items():
            if key in fields:
                key = fields[key].alias or key
            elif key not in aliases:
                raise InvalidParameter(f"Unknown scenario field: {key!r}")
            merged[key] = value
        return ScenarioState.model_validate(merged)

    def toggle_exclusion(self, offset: int) -> "ScenarioState":
        current = set(self.spike_exclusion_offsets)
        current.symmetric_difference_update({int(offset)})
        return self.with_changes(spike_exclusion_offsets=current)

    # --- persistence shape ---

    def to_record(self) -> Dict[str, Any]:
        record = self.model_dump(by_alias=True)
        record["spikeExclusionOffsets"] = list(self.spike_exclusion_offsets)
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ScenarioState":
        return cls.model_validate(record)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, text: str) -> "ScenarioState":
        return cls.model_validate_json(text)
