"""Issue-readiness validation.

Single entry point for deciding whether a survey can be issued. Module
completeness is checked once over the deduplicated union of required
modules; the type-specific rules then run per survey type in input order.
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Union

import structlog

from models.readiness import Blocker, IssueContext, ReadinessProgress, ValidationResult
from models.shared import BlockerType, SurveyType
from readiness.checks import check_dsear, check_fra, check_fsd, check_module_completeness
from readiness.requirements import get_combined_required_modules

logger = structlog.get_logger(__name__)

VALIDATION_ERROR_MESSAGE = "Validation error occurred"
GENERAL_GROUP = "general"


def _unique_types(survey_types: Iterable[Union[SurveyType, str]]) -> list[SurveyType]:
    unique: list[SurveyType] = []
    for survey_type in survey_types:
        survey_type = SurveyType(survey_type)
        if survey_type not in unique:
            unique.append(survey_type)
    return unique


def _coerce_context(ctx: Union[IssueContext, Mapping[str, Any], None]) -> IssueContext:
    if ctx is None:
        return IssueContext()
    if isinstance(ctx, IssueContext):
        return ctx
    return IssueContext.model_validate(dict(ctx))


def _conditional_blockers(
    survey_type: SurveyType,
    ctx: IssueContext,
    answers: Mapping[str, Any],
    actions: list[Any],
) -> list[Blocker]:
    if survey_type == SurveyType.FRA:
        return check_fra(ctx, answers, actions)
    if survey_type == SurveyType.FSD:
        return check_fsd(ctx, answers)
    if survey_type == SurveyType.DSEAR:
        return check_dsear(ctx, answers, actions)
    return []


def validate_eligibility(
    survey_types: Iterable[Union[SurveyType, str]],
    ctx: Union[IssueContext, Mapping[str, Any], None],
    answers: Optional[Mapping[str, Any]],
    module_progress: Optional[Mapping[str, str]],
    actions: Optional[Iterable[Any]],
) -> ValidationResult:
    """Validate a survey for issuance across one or more survey types.

    Args:
        survey_types: Types combined into the document; duplicates collapse
        ctx: Issue context (scope, engineered solutions, suppression...)
        answers: Flat answer map across modules
        module_progress: Module key -> completion state
        actions: Current actions (models or plain dicts)

    Returns:
        ValidationResult with ``eligible`` true only when no blockers remain.

    Raises:
        ValueError: If a survey type is unknown or none is given
    """
    types = _unique_types(survey_types)
    if not types:
        raise ValueError("At least one survey type is required")
    ctx = _coerce_context(ctx)
    answers = answers or {}
    module_progress = module_progress or {}
    actions = list(actions or [])

    modules = get_combined_required_modules(types, ctx)
    blockers = check_module_completeness(modules, module_progress)

    prefixed = len(types) > 1
    for survey_type in types:
        for blocker in _conditional_blockers(survey_type, ctx, answers, actions):
            update: dict[str, Any] = {"survey_type": survey_type}
            if prefixed:
                update["message"] = f"[{survey_type.value}] {blocker.message}"
            blockers.append(blocker.model_copy(update=update))

    result = ValidationResult(eligible=not blockers, blockers=blockers)
    logger.debug(
        "eligibility_validated",
        survey_types=[t.value for t in types],
        required_modules=len(modules),
        blockers=len(blockers),
        eligible=result.eligible,
    )
    return result


def safe_validate_eligibility(*args: Any, **kwargs: Any) -> ValidationResult:
    """``validate_eligibility`` that fails closed on any internal error."""
    try:
        return validate_eligibility(*args, **kwargs)
    except Exception as e:
        logger.error("eligibility_validation_failed", error=str(e), error_type=type(e).__name__)
        return ValidationResult(
            eligible=False,
            blockers=[Blocker(type=BlockerType.MODULE_INCOMPLETE, message=VALIDATION_ERROR_MESSAGE)],
        )


def group_blockers_by_module(blockers: Iterable[Blocker]) -> dict[str, list[Blocker]]:
    """Group blockers by module key (``general`` when none), first-seen order."""
    grouped: dict[str, list[Blocker]] = {}
    for blocker in blockers:
        grouped.setdefault(blocker.module_key or GENERAL_GROUP, []).append(blocker)
    return grouped


def get_validation_summary(result: ValidationResult) -> str:
    if result.eligible:
        return "All requirements met - ready to issue"
    count = len(result.blockers)
    return f"{count} issue{'s' if count != 1 else ''} must be resolved before issuing"


def compute_readiness_progress(
    survey_types: Iterable[Union[SurveyType, str]],
    ctx: Union[IssueContext, Mapping[str, Any], None],
    module_progress: Optional[Mapping[str, str]],
) -> ReadinessProgress:
    """Completed/total over the deduplicated required-module set."""
    modules = get_combined_required_modules(_unique_types(survey_types), _coerce_context(ctx))
    module_progress = module_progress or {}
    completed = sum(1 for m in modules if module_progress.get(m.key) == "complete")
    return ReadinessProgress(completed=completed, total=len(modules))
