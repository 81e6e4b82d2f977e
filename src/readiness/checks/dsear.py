"""DSEAR conditional readiness rules.

Each rule is satisfied either by recorded content or by an explicit
confirmation answer:
- substances, or ``no_dangerous_substances``
- zones, or ``no_zoned_areas``
- open actions, or ``controls_adequate_confirmed``
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping

from models.readiness import Blocker, IssueContext
from models.shared import BlockerType
from readiness.checks.modules import has_open_actions, is_empty


def check_dsear(ctx: IssueContext, answers: Mapping[str, Any], actions: Iterable[Any]) -> list[Blocker]:
    blockers: list[Blocker] = []

    if is_empty(answers.get("substances")) and answers.get("no_dangerous_substances") is not True:
        blockers.append(Blocker(
            type=BlockerType.MISSING_FIELD,
            message="At least one dangerous substance must be identified OR confirm no dangerous substances",
            module_key="substances",
            field_key="substances",
        ))

    if is_empty(answers.get("zones")) and answers.get("no_zoned_areas") is not True:
        blockers.append(Blocker(
            type=BlockerType.MISSING_FIELD,
            message="Zone classification must be documented OR confirm no zoned areas",
            module_key="hazardous_area_classification",
            field_key="zones",
        ))

    if not has_open_actions(actions) and answers.get("controls_adequate_confirmed") is not True:
        blockers.append(Blocker(
            type=BlockerType.NO_RECOMMENDATIONS,
            message="Must have at least one action OR confirm controls are adequate",
            module_key="actions",
        ))

    return blockers
