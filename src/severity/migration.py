"""One-time migration of legacy likelihood x impact actions.

Already-migrated records (tier, priority and trigger all present) are returned
untouched. Otherwise a legacy ``risk_score`` is banded into a tier, or, with
no score, the legacy hazard flags are re-run through the severity engine.
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Sequence, TypeVar, Union

import structlog
from pydantic import ValidationError

from config.loader import get_legacy_default_tier, get_legacy_score_bands
from models.findings import HAZARD_FLAGS, Action, BuildingContext, SeverityResult
from models.shared import FindingCategory, SeverityTier
from severity.engine import coerce_finding, derive_severity, map_tier_to_priority
from utils.error_handler import EngineError

logger = structlog.get_logger(__name__)

LEGACY_TRIGGER_ID = "LEGACY-SCORE"
LEGACY_TRIGGER_TEXT = "Priority derived from legacy scoring (migrated)."

_OUTPUT_FIELDS = ("severity_tier", "priority_band", "trigger_id")

ActionT = TypeVar("ActionT", Action, dict)


def _field(action: Union[Action, Mapping[str, Any]], name: str) -> Any:
    if isinstance(action, Mapping):
        return action.get(name)
    return getattr(action, name, None)


def needs_migration(action: Union[Action, Mapping[str, Any]]) -> bool:
    """True if any of severity_tier, priority_band, trigger_id is missing."""
    return any(not _field(action, name) for name in _OUTPUT_FIELDS)


def legacy_score_to_tier(
    score: float,
    bands: Optional[Sequence[tuple[float, SeverityTier]]] = None,
    default_tier: Optional[SeverityTier] = None,
) -> SeverityTier:
    """Band a legacy score: >=20 T4, >=12 T3, >=6 T2, else T1 by default."""
    if bands is None:
        bands = get_legacy_score_bands()
    for min_score, tier in bands:
        if score >= min_score:
            return tier
    return default_tier or get_legacy_default_tier()


def _finding_from_legacy(action: Union[Action, Mapping[str, Any]]) -> dict[str, Any]:
    category = _field(action, "finding_category") or FindingCategory.OTHER
    finding: dict[str, Any] = {"category": category}
    for flag in HAZARD_FLAGS:
        finding[flag] = bool(_field(action, flag))
    return finding


def migrate_action(action: ActionT, context: Union[BuildingContext, Mapping[str, Any], None] = None) -> ActionT:
    """Populate tier, priority and trigger on a legacy action.

    Accepts a plain legacy row (dict) or an Action and returns the same kind.
    """
    if not needs_migration(action):
        return action

    score = _field(action, "risk_score")
    if score is not None:
        tier = legacy_score_to_tier(float(score))
        result = SeverityResult(
            tier=tier,
            priority=map_tier_to_priority(tier),
            trigger_id=LEGACY_TRIGGER_ID,
            trigger_text=LEGACY_TRIGGER_TEXT,
        )
    else:
        result = derive_severity(coerce_finding(_finding_from_legacy(action)), context)

    update = {
        "severity_tier": result.tier,
        "priority_band": result.priority,
        "trigger_id": result.trigger_id,
        "trigger_text": result.trigger_text,
    }

    if isinstance(action, Action):
        return action.model_copy(update=update)
    migrated = dict(action)
    migrated.update({k: getattr(v, "value", v) for k, v in update.items()})
    return migrated


def migrate_actions(
    actions: Iterable[ActionT],
    context: Union[BuildingContext, Mapping[str, Any], None] = None,
) -> list[ActionT]:
    """Migrate each action independently.

    A record that cannot be migrated is logged and passed through unchanged,
    so it still reports ``needs_migration``.
    """
    migrated: list[ActionT] = []
    failures = 0
    for action in actions:
        try:
            migrated.append(migrate_action(action, context))
        except (EngineError, ValidationError, TypeError, ValueError) as e:
            failures += 1
            logger.warning(
                "action_migration_failed",
                action_id=_field(action, "id"),
                error=str(e),
            )
            migrated.append(action)

    logger.info("actions_migrated", total=len(migrated), failed=failures)
    return migrated
