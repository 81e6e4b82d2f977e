"""FRA conditional readiness rules."""
from __future__ import annotations

from typing import Any, Iterable, Mapping

from models.readiness import Blocker, IssueContext
from models.shared import BlockerType
from readiness.checks.modules import has_open_actions, is_blank

LIMITED_SCOPES = ("limited", "desktop")


def check_fra(ctx: IssueContext, answers: Mapping[str, Any], actions: Iterable[Any]) -> list[Blocker]:
    blockers: list[Blocker] = []

    if ctx.scope_type in LIMITED_SCOPES and is_blank(answers.get("scope_limitations")):
        blockers.append(Blocker(
            type=BlockerType.CONDITIONAL_MISSING,
            message="Scope & Limitations text required for limited/desktop assessments",
            module_key="survey_info",
            field_key="scope_limitations",
        ))

    if not has_open_actions(actions) and answers.get("no_significant_findings") is not True:
        blockers.append(Blocker(
            type=BlockerType.NO_RECOMMENDATIONS,
            message="Must have at least one recommendation OR confirm no significant findings",
            module_key="recommendations",
        ))

    return blockers
