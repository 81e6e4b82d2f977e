"""Pydantic models for issue-readiness validation output."""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.shared import BlockerType, SurveyType


class IssueContext(BaseModel):
    """Survey-level switches that make modules or rules conditional."""
    model_config = ConfigDict(extra="allow")

    scope_type: Optional[str] = None  # full, limited, desktop
    engineered_solutions_used: bool = False
    has_suppression: bool = False
    requires_suppression: bool = False
    has_smoke_control: bool = False


class Blocker(BaseModel):
    """A structured reason preventing document issuance."""
    type: BlockerType
    message: str
    module_key: Optional[str] = None
    field_key: Optional[str] = None
    survey_type: Optional[SurveyType] = Field(default=None, exclude=True)

    def to_json(self) -> dict[str, Any]:
        """Stable UI/API shape: {type, message, moduleKey?, fieldKey?}."""
        payload: dict[str, Any] = {"type": self.type.value, "message": self.message}
        if self.module_key is not None:
            payload["moduleKey"] = self.module_key
        if self.field_key is not None:
            payload["fieldKey"] = self.field_key
        return payload


class ValidationResult(BaseModel):
    eligible: bool
    blockers: list[Blocker] = Field(default_factory=list)


class ReadinessProgress(BaseModel):
    """Required-module completion over the deduplicated module set."""
    completed: int
    total: int

    @property
    def label(self) -> str:
        return f"{self.completed} / {self.total} complete"
