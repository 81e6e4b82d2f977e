"""Document-level roll-ups over severity-classified actions."""
from __future__ import annotations

from typing import Any, Iterable, Mapping, Union

from models.findings import Action, BuildingContext, MaterialDeficiencyResult
from models.shared import ExecutiveOutcome, OccupancyRisk, Priority, SeverityTier
from severity.engine import normalize_context

ActionLike = Union[Action, Mapping[str, Any]]


def _severity_fields(action: ActionLike) -> tuple[Any, Any]:
    if isinstance(action, Mapping):
        priority = action.get("priority_band", action.get("priority"))
        tier = action.get("severity_tier", action.get("severityTier"))
        return priority, tier
    return action.priority_band, action.severity_tier


def _is_p1(action: ActionLike) -> bool:
    priority, tier = _severity_fields(action)
    return priority == Priority.P1 or tier == SeverityTier.T4


def _is_p2(action: ActionLike) -> bool:
    priority, tier = _severity_fields(action)
    return priority == Priority.P2 or tier == SeverityTier.T3


def check_material_deficiency(
    actions: Iterable[ActionLike],
    context: Union[BuildingContext, Mapping[str, Any], None] = None,
) -> MaterialDeficiencyResult:
    """Flag a material life-safety deficiency (any P1/T4 action).

    Drives executive-summary escalation language and banners.
    """
    triggers: list[str] = []
    any_p1 = any(_is_p1(a) for a in actions)

    if any_p1:
        triggers.append("One or more actions classified as P1 (Material Life Safety Risk).")
        if normalize_context(context).occupancy_risk == OccupancyRisk.VULNERABLE:
            triggers.append("Vulnerable occupants increase the criticality of life safety deficiencies.")

    return MaterialDeficiencyResult(is_material_deficiency=bool(triggers), triggers=triggers)


def derive_executive_outcome(actions: Iterable[ActionLike]) -> ExecutiveOutcome:
    """Qualitative outcome; thresholds are inclusive and checked in order."""
    actions = list(actions)
    p1 = sum(1 for a in actions if _is_p1(a))
    p2 = sum(1 for a in actions if _is_p2(a))

    if p1 >= 1:
        return ExecutiveOutcome.MATERIAL_LIFE_SAFETY_RISK_PRESENT
    if p2 >= 3:
        return ExecutiveOutcome.SIGNIFICANT_DEFICIENCIES
    if p2 >= 1:
        return ExecutiveOutcome.IMPROVEMENTS_REQUIRED
    return ExecutiveOutcome.SATISFACTORY_WITH_IMPROVEMENTS
