"""Engine errors with user-friendly messages.

The rule engines themselves never raise for well-formed input; these errors
belong to the model boundary, document lifecycle and issuance steps.
"""
from __future__ import annotations

import sys
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)


class EngineError(Exception):
    """Base class for engine errors with user-friendly messaging."""

    def __init__(self, error_type: str, message: str, details: str = ""):
        self.error_type = error_type
        self.message = message
        self.details = details
        super().__init__(self.message)

    def get_user_message(self) -> str:
        """Return a user-friendly error message."""
        msg = f"\n{self.message}"
        if self.details:
            msg += f"\n   Details: {self.details}"
        return msg


class UnknownCategoryError(EngineError):
    """Finding category outside the nine known categories."""

    def __init__(self, category: object):
        super().__init__(
            error_type="UNKNOWN_CATEGORY",
            message=f"Unknown finding category: {category!r}",
            details="Expected one of MeansOfEscape, DetectionAlarm, EmergencyLighting, "
                    "Compartmentation, FireDoors, FireFighting, Management, Housekeeping, Other",
        )


class DocumentImmutableError(EngineError):
    """Document is issued or superseded and cannot be modified."""

    def __init__(self, status: str):
        super().__init__(
            error_type="DOCUMENT_IMMUTABLE",
            message=f"Document is {status} and cannot be modified",
            details="Create a new version to make changes.",
        )


# User-facing text for lifecycle and issuance error codes
ERROR_CODE_MESSAGES: dict[str, str] = {
    "DOC_NOT_FOUND": "Document not found. Please refresh and try again.",
    "NOT_DRAFT": "Only draft documents can be issued. This document has already been issued.",
    "NOT_ISSUED": "Only issued documents can be versioned or returned to draft.",
    "NOT_OPEN": "Only open actions can be started.",
    "NOT_CLOSED": "Only closed actions can be reopened.",
    "ALREADY_CLOSED": "This action is already closed.",
    "REOPEN_NOT_PERMITTED": "Closed actions cannot be reopened. Contact an administrator if this action needs to be reopened.",
    "FETCH_FAILED": "The document could not be loaded for issue.",
    "RENDER_FAILED": "The PDF could not be generated. The document has not been issued.",
    "SCORE_FAILED": "The risk engineering score could not be calculated. The document has not been issued.",
    "STORE_FAILED": "The issued document could not be saved.",
    "NOT_PERMITTED": "Only organisation or platform administrators can perform this action.",
}


class LifecycleError(EngineError):
    """Disallowed document or action status transition."""

    def __init__(self, error_code: str, details: str = ""):
        self.error_code = error_code
        super().__init__(
            error_type="LIFECYCLE",
            message=ERROR_CODE_MESSAGES.get(error_code, error_code),
            details=details,
        )


class IssuanceError(EngineError):
    """External collaborator failure during the issue pipeline."""

    def __init__(self, error_code: str, details: str = ""):
        self.error_code = error_code
        super().__init__(
            error_type="ISSUANCE",
            message=ERROR_CODE_MESSAGES.get(error_code, "Document issuance failed"),
            details=details[:200],  # Truncate long error messages
        )


def exit_with_error(error: EngineError, context: str = "", exc: Optional[BaseException] = None) -> int:
    """Log error and exit gracefully with user-friendly message."""
    logger.error(
        "command_failed",
        error_type=error.error_type,
        message=error.message,
        details=error.details,
        context=context,
        cause=str(exc) if exc else None,
    )

    print(error.get_user_message(), file=sys.stderr)
    print("", file=sys.stderr)
    return 1
