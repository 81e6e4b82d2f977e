"""FSD conditional readiness rules."""
from __future__ import annotations

from typing import Any, Mapping

from models.readiness import Blocker, IssueContext
from models.shared import BlockerType
from readiness.checks.modules import is_blank


def check_fsd(ctx: IssueContext, answers: Mapping[str, Any]) -> list[Blocker]:
    """Engineered solutions need documented limitations and management assumptions."""
    if not ctx.engineered_solutions_used:
        return []

    blockers: list[Blocker] = []
    if is_blank(answers.get("limitations_text")):
        blockers.append(Blocker(
            type=BlockerType.CONDITIONAL_MISSING,
            message="Limitations must be documented when using engineered solutions",
            module_key="limitations_reliance",
            field_key="limitations_text",
        ))
    if is_blank(answers.get("management_assumptions_text")):
        blockers.append(Blocker(
            type=BlockerType.CONDITIONAL_MISSING,
            message="Management assumptions must be documented when using engineered solutions",
            module_key="management_assumptions",
            field_key="management_assumptions_text",
        ))
    return blockers
