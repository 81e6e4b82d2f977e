"""Finding, context and action models for the FRA severity engine."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.shared import (
    OPEN_ACTION_STATUSES,
    ActionStatus,
    FindingCategory,
    OccupancyRisk,
    Priority,
    SeverityTier,
)


# Boolean hazard flags understood by the rule engine. Legacy action rows use
# the same names, so migration can rebuild a Finding from them directly.
HAZARD_FLAGS: tuple[str, ...] = (
    "final_exit_locked",
    "final_exit_obstructed",
    "no_fire_detection",
    "detection_inadequate_coverage",
    "no_emergency_lighting",
    "serious_compartmentation_failure",
    "single_stair_compromised",
    "high_risk_room_to_escape_route",
    "no_fra_evidence_or_review",
)

# Anything else, including unrecognised strings, reads as False.
_TRUE_FLAG_VALUES = frozenset({True, "true", "yes", "y", "1"})


class Finding(BaseModel):
    """Structured facts about a recorded deficiency.

    Flags default to False when absent or unreadable. The category must be
    one of the nine known categories; anything else fails validation.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    category: FindingCategory
    final_exit_locked: bool = False
    final_exit_obstructed: bool = False
    no_fire_detection: bool = False
    detection_inadequate_coverage: bool = False
    no_emergency_lighting: bool = False
    serious_compartmentation_failure: bool = False
    single_stair_compromised: bool = False
    high_risk_room_to_escape_route: bool = False
    no_fra_evidence_or_review: bool = False

    @field_validator(*HAZARD_FLAGS, mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> bool:
        if isinstance(value, str):
            value = value.strip().lower()
        if isinstance(value, (bool, int, float, str)):
            return value in _TRUE_FLAG_VALUES
        return False


class BuildingContext(BaseModel):
    """Per-survey occupancy and structural facts. Both fields may be unset."""
    model_config = ConfigDict(frozen=True)

    occupancy_risk: Optional[OccupancyRisk] = None
    storeys: Optional[int] = None

    @field_validator("occupancy_risk", mode="before")
    @classmethod
    def _unknown_occupancy_is_unset(cls, value: Any) -> Any:
        if value is None or isinstance(value, OccupancyRisk):
            return value
        try:
            return OccupancyRisk(value)
        except ValueError:
            return None

    @field_validator("storeys", mode="before")
    @classmethod
    def _non_integer_storeys_is_unset(cls, value: Any) -> Optional[int]:
        if value is None or isinstance(value, bool):
            return None
        try:
            return int(value)
        except (TypeError, ValueError, OverflowError):
            return None

    @property
    def sleeping_or_vulnerable(self) -> bool:
        return self.occupancy_risk in (OccupancyRisk.SLEEPING, OccupancyRisk.VULNERABLE)


class SeverityResult(BaseModel):
    """Outcome of a severity derivation."""
    model_config = ConfigDict(frozen=True)

    tier: SeverityTier
    priority: Priority
    trigger_id: str
    trigger_text: str


class MaterialDeficiencyResult(BaseModel):
    """Whether a document carries a material life-safety deficiency."""
    is_material_deficiency: bool
    triggers: list[str] = Field(default_factory=list)


class Action(BaseModel):
    """A recorded action/recommendation tied to a survey module.

    Severity fields are populated at creation or by the one-time legacy
    migration. Closure history survives a reopen.
    """
    model_config = ConfigDict(extra="allow")

    id: str
    module_key: Optional[str] = None
    recommended_action: str = ""
    status: ActionStatus = ActionStatus.OPEN
    finding_category: Optional[FindingCategory] = None
    created_at: Optional[datetime] = None

    # Severity
    severity_tier: Optional[SeverityTier] = None
    priority_band: Optional[Priority] = None
    trigger_id: Optional[str] = None
    trigger_text: Optional[str] = None
    risk_score: Optional[float] = None  # legacy likelihood x impact

    # Issuance
    reference_number: Optional[str] = None
    origin_action_id: Optional[str] = None
    first_raised_in_version: Optional[int] = None

    # Closure / reopen history
    closed_at: Optional[datetime] = None
    closed_by: Optional[str] = None
    closure_note: Optional[str] = None
    reopened_at: Optional[datetime] = None
    reopened_by: Optional[str] = None
    reopen_note: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_ACTION_STATUSES
