"""Document issuance orchestrator.

Runs the final gate and locks a survey as an issued document:

    fetch -> status check -> migrate actions -> readiness gate
          -> reference numbers -> score breakdown -> logo -> render -> stamp & save

PDF layout, storage and auth sit behind the ``SurveyStore``, ``Renderer``
and ``LogoFetcher`` collaborators. The document only changes state in the
final step, so any earlier failure leaves it as it was.
"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

import structlog
from pydantic import BaseModel, Field

from config.tables import WeightTable
from issuance.lifecycle import can_issue
from issuance.logo import LogoFetcher, LogoResult, resolve_logo
from issuance.reference_numbers import assign_reference_numbers
from models.readiness import Blocker
from models.scoring import ScoreBreakdown
from models.shared import BlockerType, DocumentStatus
from models.survey import Survey
from readiness.validator import safe_validate_eligibility
from scoring.aggregator import build_score_breakdown
from severity.migration import migrate_actions
from utils.error_handler import ERROR_CODE_MESSAGES, IssuanceError, LifecycleError

logger = structlog.get_logger(__name__)


class SurveyStore(Protocol):
    def get(self, survey_id: str) -> Survey: ...

    def save(self, survey: Survey) -> None: ...

    def reference_numbers(self, base_document_id: str) -> list[str]: ...


@dataclass(frozen=True)
class RenderRequest:
    """Everything the PDF renderer needs for one issued document."""
    survey: Survey
    logo: LogoResult
    score_breakdown: Optional[ScoreBreakdown] = None


Renderer = Callable[[RenderRequest], bytes]


class IssueResult(BaseModel):
    survey_id: str
    issued: bool
    status: Optional[DocumentStatus] = None
    blockers: list[Blocker] = Field(default_factory=list)
    pdf_sha256: Optional[str] = None
    score_breakdown: Optional[ScoreBreakdown] = None
    pdf: Optional[bytes] = Field(default=None, exclude=True)


class InMemorySurveyStore:
    """Dict-backed store for tests and the CLI."""

    def __init__(self, surveys: Optional[list[Survey]] = None):
        self._surveys: dict[str, Survey] = {s.id: s for s in surveys or []}

    def get(self, survey_id: str) -> Survey:
        if survey_id not in self._surveys:
            raise KeyError(survey_id)
        return self._surveys[survey_id]

    def save(self, survey: Survey) -> None:
        self._surveys[survey.id] = survey

    def reference_numbers(self, base_document_id: str) -> list[str]:
        refs: list[str] = []
        for survey in self._surveys.values():
            if (survey.base_document_id or survey.id) != base_document_id:
                continue
            refs.extend(a.reference_number for a in survey.actions if a.reference_number)
        return refs


class IssuanceOrchestrator:
    """Issue surveys through the readiness gate into immutable documents."""

    def __init__(
        self,
        store: SurveyStore,
        renderer: Renderer,
        logo_fetcher: Optional[LogoFetcher] = None,
        weight_table: Optional[WeightTable] = None,
    ):
        self.store = store
        self.renderer = renderer
        self.logo_fetcher = logo_fetcher
        self.weight_table = weight_table

    def issue(self, survey_id: str, issued_by: str, now: Optional[datetime] = None) -> IssueResult:
        """Issue one survey.

        Returns an ineligible IssueResult (with blockers) when the survey
        cannot be loaded or fails readiness. Raises LifecycleError when the
        status cannot be issued and IssuanceError when any collaborator step
        fails after readiness; in both cases the stored survey is unchanged.
        """
        log = logger.bind(survey_id=survey_id)

        try:
            survey = self.store.get(survey_id)
        except Exception as e:
            log.error("issue_fetch_failed", error=str(e), error_type=type(e).__name__)
            return IssueResult(
                survey_id=survey_id,
                issued=False,
                blockers=[Blocker(type=BlockerType.MODULE_INCOMPLETE, message=ERROR_CODE_MESSAGES["FETCH_FAILED"])],
            )

        if not can_issue(survey.status):
            raise LifecycleError("NOT_DRAFT", details=f"status={survey.status.value}")

        actions = migrate_actions(survey.actions, survey.building_context)

        validation = safe_validate_eligibility(
            survey.survey_types,
            survey.issue_context,
            survey.answers,
            survey.module_progress,
            actions,
        )
        if not validation.eligible:
            log.info("issue_blocked", blockers=len(validation.blockers))
            return IssueResult(
                survey_id=survey_id,
                issued=False,
                status=survey.status,
                blockers=validation.blockers,
            )

        base_id = survey.base_document_id or survey.id
        try:
            existing = self.store.reference_numbers(base_id)
        except Exception as e:
            log.error("issue_reference_lookup_failed", error=str(e))
            raise IssuanceError("STORE_FAILED", details=str(e)) from e
        actions = assign_reference_numbers(actions, existing)

        breakdown = None
        if survey.risk_engineering is not None:
            try:
                breakdown = build_score_breakdown(survey.risk_engineering, self.weight_table)
            except Exception as e:
                log.error("issue_scoring_failed", error=str(e))
                raise IssuanceError("SCORE_FAILED", details=str(e)) from e

        logo = resolve_logo(survey.branding_logo_path, self.logo_fetcher)
        prepared = survey.model_copy(update={"actions": actions})

        try:
            pdf = self.renderer(RenderRequest(survey=prepared, logo=logo, score_breakdown=breakdown))
        except Exception as e:
            log.error("issue_render_failed", error=str(e))
            raise IssuanceError("RENDER_FAILED", details=str(e)) from e

        digest = hashlib.sha256(pdf).hexdigest()
        issued = prepared.model_copy(update={
            "status": DocumentStatus.ISSUED,
            "issued_at": now or datetime.now(timezone.utc),
            "issued_by": issued_by,
            "pdf_sha256": digest,
        })

        try:
            self.store.save(issued)
        except Exception as e:
            log.error("issue_save_failed", error=str(e))
            raise IssuanceError("STORE_FAILED", details=str(e)) from e

        log.info(
            "document_issued",
            version=issued.version_number,
            actions=len(actions),
            pdf_sha256=digest,
            default_logo=logo.is_default,
        )
        return IssueResult(
            survey_id=survey_id,
            issued=True,
            status=issued.status,
            pdf_sha256=digest,
            score_breakdown=breakdown,
            pdf=pdf,
        )
