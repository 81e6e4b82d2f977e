"""Document and action lifecycle guards.

Issued and superseded documents are immutable. The only ways back to an
editable document are an admin ``return_to_draft`` or ``create_new_version``,
which supersedes the issued document and carries forward its outstanding
actions into a fresh draft.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional, Union

import structlog

from models.findings import Action
from models.shared import IMMUTABLE_STATUSES, ActionStatus, DocumentStatus
from models.survey import Survey
from utils.error_handler import DocumentImmutableError, LifecycleError

logger = structlog.get_logger(__name__)

ADMIN_ROLES = ("org_admin", "platform_admin")
ISSUABLE_STATUSES = (DocumentStatus.DRAFT, DocumentStatus.APPROVED)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def is_immutable(survey: Survey) -> bool:
    return survey.status in IMMUTABLE_STATUSES


def ensure_mutable(survey: Survey) -> None:
    """Raise DocumentImmutableError when the document is locked."""
    if is_immutable(survey):
        raise DocumentImmutableError(survey.status.value)


def can_issue(status: Union[DocumentStatus, str]) -> bool:
    return DocumentStatus(status) in ISSUABLE_STATUSES


def get_status_lock_message(status: Union[DocumentStatus, str]) -> str:
    status = DocumentStatus(status)
    if status == DocumentStatus.ISSUED:
        return "This document has been issued and is locked. To make changes, create a new version."
    if status == DocumentStatus.SUPERSEDED:
        return "This document has been superseded by a newer version and cannot be edited."
    return ""


def _require_admin(role: Optional[str]) -> None:
    if role not in ADMIN_ROLES:
        raise LifecycleError("NOT_PERMITTED", details=f"role={role}")


def return_to_draft(survey: Survey, by: str, role: Optional[str]) -> Survey:
    """Admin-only: put an issued document back into draft."""
    _require_admin(role)
    if survey.status != DocumentStatus.ISSUED:
        raise LifecycleError("NOT_ISSUED", details=f"status={survey.status.value}")

    logger.info("document_returned_to_draft", survey_id=survey.id, by=by)
    return survey.model_copy(update={
        "status": DocumentStatus.DRAFT,
        "issued_at": None,
        "issued_by": None,
        "pdf_sha256": None,
    })


def create_new_version(
    survey: Survey,
    by: str,
    new_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> tuple[Survey, Survey]:
    """Supersede an issued document and open the next draft version.

    Returns:
        (superseded, new_draft). Non-closed actions are carried into the
        draft with fresh ids; reference numbers and ``origin_action_id`` link
        them back to the action first raised.
    """
    if survey.status != DocumentStatus.ISSUED:
        raise LifecycleError("NOT_ISSUED", details=f"status={survey.status.value}")

    now = now or _now()
    new_id = new_id or uuid.uuid4().hex
    version = survey.version_number + 1

    carried: list[Action] = []
    for action in survey.actions:
        if action.status in (ActionStatus.CLOSED, ActionStatus.SUPERSEDED):
            continue
        carried.append(action.model_copy(update={
            "id": uuid.uuid4().hex,
            "origin_action_id": action.origin_action_id or action.id,
            "first_raised_in_version": action.first_raised_in_version or survey.version_number,
            "created_at": now,
        }))

    superseded = survey.model_copy(update={
        "status": DocumentStatus.SUPERSEDED,
        "superseded_by_document_id": new_id,
    })
    draft = survey.model_copy(update={
        "id": new_id,
        "status": DocumentStatus.DRAFT,
        "version_number": version,
        "base_document_id": survey.base_document_id or survey.id,
        "actions": carried,
        "issued_at": None,
        "issued_by": None,
        "pdf_sha256": None,
        "superseded_by_document_id": None,
    })

    logger.info(
        "document_version_created",
        base_document_id=draft.base_document_id,
        superseded_id=survey.id,
        new_id=new_id,
        version=version,
        carried_actions=len(carried),
        by=by,
    )
    return superseded, draft


def start_action(action: Action) -> Action:
    if action.status != ActionStatus.OPEN:
        raise LifecycleError("NOT_OPEN", details=f"status={action.status.value}")
    return action.model_copy(update={"status": ActionStatus.IN_PROGRESS})


def close_action(action: Action, by: str, note: Optional[str] = None, now: Optional[datetime] = None) -> Action:
    if action.status == ActionStatus.CLOSED:
        raise LifecycleError("ALREADY_CLOSED", details=f"action_id={action.id}")
    return action.model_copy(update={
        "status": ActionStatus.CLOSED,
        "closed_at": now or _now(),
        "closed_by": by,
        "closure_note": note,
    })


def reopen_action(
    action: Action,
    by: str,
    note: Optional[str],
    role: Optional[str],
    now: Optional[datetime] = None,
) -> Action:
    """Reopen a closed action; closure history is kept alongside the reopen stamp."""
    if action.status != ActionStatus.CLOSED:
        raise LifecycleError("NOT_CLOSED", details=f"status={action.status.value}")
    if role not in ADMIN_ROLES:
        raise LifecycleError("REOPEN_NOT_PERMITTED", details=f"role={role}")

    logger.info("action_reopened", action_id=action.id, by=by)
    return action.model_copy(update={
        "status": ActionStatus.OPEN,
        "reopened_at": now or _now(),
        "reopened_by": by,
        "reopen_note": note,
    })
