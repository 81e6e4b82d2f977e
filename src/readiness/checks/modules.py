"""Required-module completion check."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Mapping

from models.readiness import Blocker
from models.shared import ActionStatus, BlockerType

if TYPE_CHECKING:
    from readiness.requirements import ModuleRule

CLOSED_STATUSES = (ActionStatus.CLOSED.value, ActionStatus.SUPERSEDED.value)


def check_module_completeness(
    modules: Iterable["ModuleRule"],
    module_progress: Mapping[str, str],
) -> list[Blocker]:
    """One ``module_incomplete`` blocker per required module not marked complete."""
    blockers: list[Blocker] = []
    for module in modules:
        if module_progress.get(module.key) == "complete":
            continue
        blockers.append(Blocker(
            type=BlockerType.MODULE_INCOMPLETE,
            message=f"{module.label} must be completed",
            module_key=module.key,
        ))
    return blockers


def _action_status(action: Any) -> str:
    status = action.get("status") if isinstance(action, Mapping) else getattr(action, "status", None)
    if isinstance(status, ActionStatus):
        return status.value
    return str(status or ActionStatus.OPEN.value)


def has_open_actions(actions: Iterable[Any]) -> bool:
    """True when any action is neither closed nor superseded."""
    return any(_action_status(a) not in CLOSED_STATUSES for a in actions or ())


def is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def is_empty(value: Any) -> bool:
    return not value
