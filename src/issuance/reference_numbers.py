"""Stable action reference numbers (R-01, R-02, ...).

Numbers are assigned once, at issue time, and never change afterwards;
numbering continues after the highest number already used anywhere in the
document's version family.
"""
from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Iterable, Optional

from models.findings import Action

REFERENCE_PATTERN = re.compile(r"R-(\d+)")


def format_reference_number(number: int) -> str:
    return f"R-{number:02d}"


def max_reference_number(refs: Iterable[Optional[str]]) -> int:
    highest = 0
    for ref in refs:
        match = REFERENCE_PATTERN.search(ref or "")
        if match:
            highest = max(highest, int(match.group(1)))
    return highest


def assign_reference_numbers(
    actions: list[Action],
    existing_refs: Iterable[Optional[str]] = (),
) -> list[Action]:
    """Return the actions with every missing reference number filled in.

    Unnumbered actions are numbered in creation order (list order breaks
    ties and stands in for a missing ``created_at``); the returned list keeps
    the input order. Already-numbered actions are returned unchanged, so a
    second call is a no-op.
    """
    used = [a.reference_number for a in actions] + list(existing_refs)
    next_number = max_reference_number(used) + 1

    epoch = datetime.min.replace(tzinfo=timezone.utc)
    pending = sorted(
        (i for i, a in enumerate(actions) if not a.reference_number),
        key=lambda i: (_aware(actions[i].created_at) or epoch, i),
    )

    numbered = list(actions)
    for index in pending:
        numbered[index] = actions[index].model_copy(
            update={"reference_number": format_reference_number(next_number)}
        )
        next_number += 1
    return numbered


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
