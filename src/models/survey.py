"""Survey/document aggregate root."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from models.findings import Action, BuildingContext
from models.readiness import IssueContext
from models.scoring import RiskEngineeringData
from models.shared import DocumentStatus, SurveyType

ModuleState = Literal["not_started", "in_progress", "complete"]


class Survey(BaseModel):
    """A survey/document with everything the core engines read.

    ``enabled_survey_types`` lists extra types combined into the same
    document; the primary ``document_type`` is always included.
    """
    id: str
    document_type: SurveyType
    enabled_survey_types: list[SurveyType] = Field(default_factory=list)
    status: DocumentStatus = DocumentStatus.DRAFT
    version_number: int = 1
    base_document_id: Optional[str] = None
    organisation_id: Optional[str] = None
    branding_logo_path: Optional[str] = None

    answers: dict[str, Any] = Field(default_factory=dict)
    module_progress: dict[str, ModuleState] = Field(default_factory=dict)
    actions: list[Action] = Field(default_factory=list)
    building_context: BuildingContext = Field(default_factory=BuildingContext)
    issue_context: IssueContext = Field(default_factory=IssueContext)
    risk_engineering: Optional[RiskEngineeringData] = None

    issued_at: Optional[datetime] = None
    issued_by: Optional[str] = None
    pdf_sha256: Optional[str] = None
    superseded_by_document_id: Optional[str] = None

    @property
    def survey_types(self) -> list[SurveyType]:
        types = [self.document_type]
        for survey_type in self.enabled_survey_types:
            if survey_type not in types:
                types.append(survey_type)
        return types
