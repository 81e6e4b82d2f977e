"""Document issuance: lifecycle guards, reference numbers, logo and the issue pipeline."""
from issuance.lifecycle import (
    can_issue,
    close_action,
    create_new_version,
    ensure_mutable,
    get_status_lock_message,
    is_immutable,
    reopen_action,
    return_to_draft,
    start_action,
)
from issuance.logo import LogoResult, resolve_logo
from issuance.orchestrator import (
    InMemorySurveyStore,
    IssuanceOrchestrator,
    IssueResult,
    RenderRequest,
)
from issuance.reference_numbers import assign_reference_numbers

__all__ = [
    "can_issue",
    "close_action",
    "create_new_version",
    "ensure_mutable",
    "get_status_lock_message",
    "is_immutable",
    "reopen_action",
    "return_to_draft",
    "start_action",
    "LogoResult",
    "resolve_logo",
    "InMemorySurveyStore",
    "IssuanceOrchestrator",
    "IssueResult",
    "RenderRequest",
    "assign_reference_numbers",
]
