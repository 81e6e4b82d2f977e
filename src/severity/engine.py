"""Deterministic severity rule engine for FRA findings.

Maps a structured finding plus building context to a severity tier, a
priority band and the named trigger that produced the decision.

Rules are held in a single ordered table and evaluated top to bottom; the
first matching rule wins. Flags are never summed or scored:
- T4 / P1: material life-safety triggers (some qualified by occupancy/storeys)
- T3 / P2: significant deficiencies (the same flags without the qualifier)
- T2 / P3: improvement required for management-type categories
- T1 / P4: good practice recommendation (default)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Union

import structlog

from models.findings import BuildingContext, Finding, SeverityResult
from models.shared import (
    TIER_TO_PRIORITY,
    FindingCategory,
    OccupancyRisk,
    Priority,
    SeverityTier,
)
from utils.error_handler import UnknownCategoryError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class NormalizedContext:
    """Building context with every optional value resolved."""
    occupancy_risk: OccupancyRisk
    storeys: int

    @property
    def sleeping_or_vulnerable(self) -> bool:
        return self.occupancy_risk in (OccupancyRisk.SLEEPING, OccupancyRisk.VULNERABLE)


RulePredicate = Callable[[Finding, NormalizedContext], bool]


@dataclass(frozen=True)
class SeverityRule:
    trigger_id: str
    tier: SeverityTier
    text: str
    predicate: RulePredicate

    @property
    def priority(self) -> Priority:
        return map_tier_to_priority(self.tier)


_MANAGEMENT_CATEGORIES = {
    FindingCategory.MANAGEMENT,
    FindingCategory.HOUSEKEEPING,
    FindingCategory.FIRE_FIGHTING,
}

# Order is significant: first match wins.
SEVERITY_RULES: tuple[SeverityRule, ...] = (
    # --- T4 (Material Life Safety Risk) -> P1 ---
    SeverityRule(
        "MOE-P1-01", SeverityTier.T4,
        "Final exit locked or secured such that it cannot be opened immediately without a key.",
        lambda f, c: f.final_exit_locked,
    ),
    SeverityRule(
        "MOE-P1-02", SeverityTier.T4,
        "Final exit obstructed, preventing safe evacuation.",
        lambda f, c: f.final_exit_obstructed,
    ),
    SeverityRule(
        "DA-P1-01", SeverityTier.T4,
        "No fire detection and warning system in premises where people sleep or vulnerable people are present.",
        lambda f, c: f.no_fire_detection and c.sleeping_or_vulnerable,
    ),
    SeverityRule(
        "EL-P1-01", SeverityTier.T4,
        "No emergency escape lighting in a building of two or more storeys.",
        lambda f, c: f.no_emergency_lighting and c.storeys >= 2,
    ),
    SeverityRule(
        "MOE-P1-03", SeverityTier.T4,
        "Single escape stair compromised in a building of four or more storeys.",
        lambda f, c: f.single_stair_compromised and c.storeys >= 4,
    ),
    SeverityRule(
        "COMP-P1-01", SeverityTier.T4,
        "Serious compartmentation failure where sleeping or vulnerable occupants rely on it for escape.",
        lambda f, c: f.serious_compartmentation_failure and c.sleeping_or_vulnerable,
    ),
    SeverityRule(
        "COMP-P1-03", SeverityTier.T4,
        "High-risk room opens directly onto an escape route without adequate protection.",
        lambda f, c: f.high_risk_room_to_escape_route,
    ),
    # --- T3 (Significant Deficiency) -> P2 ---
    SeverityRule(
        "DA-P2-01", SeverityTier.T3,
        "No fire detection and warning system.",
        lambda f, c: f.no_fire_detection,
    ),
    SeverityRule(
        "DA-P2-02", SeverityTier.T3,
        "Fire detection coverage is inadequate for the premises.",
        lambda f, c: f.detection_inadequate_coverage,
    ),
    SeverityRule(
        "COMP-P2-01", SeverityTier.T3,
        "Serious compartmentation failure.",
        lambda f, c: f.serious_compartmentation_failure,
    ),
    SeverityRule(
        "MOE-P2-01", SeverityTier.T3,
        "Single escape stair compromised.",
        lambda f, c: f.single_stair_compromised,
    ),
    SeverityRule(
        "MGMT-P2-01", SeverityTier.T3,
        "No evidence of a suitable and sufficient fire risk assessment or its periodic review.",
        lambda f, c: f.no_fra_evidence_or_review,
    ),
    # --- T2 (Improvement Required) -> P3 ---
    SeverityRule(
        "GEN-P3-01", SeverityTier.T2,
        "Improvement required to fire safety management, housekeeping or firefighting provisions.",
        lambda f, c: f.category in _MANAGEMENT_CATEGORIES,
    ),
    # --- T1 (Minor) -> P4 ---
    SeverityRule(
        "GEN-P4-01", SeverityTier.T1,
        "Good practice recommendation.",
        lambda f, c: True,
    ),
)


def map_tier_to_priority(tier: Union[SeverityTier, str]) -> Priority:
    """Map a severity tier to its priority band (T4->P1 ... T1->P4)."""
    return TIER_TO_PRIORITY[SeverityTier(tier)]


def normalize_context(context: Union[BuildingContext, Mapping[str, Any], None]) -> NormalizedContext:
    """Resolve unset occupancy to NonSleeping and unset storeys to 0."""
    if context is None:
        context = BuildingContext()
    elif not isinstance(context, BuildingContext):
        context = BuildingContext.model_validate(dict(context))

    storeys = context.storeys or 0
    return NormalizedContext(
        occupancy_risk=context.occupancy_risk or OccupancyRisk.NON_SLEEPING,
        storeys=max(0, storeys),
    )


def coerce_finding(finding: Union[Finding, Mapping[str, Any]]) -> Finding:
    """Build a Finding from a mapping, rejecting unknown categories."""
    if isinstance(finding, Finding):
        return finding
    data = dict(finding)
    category = data.get("category")
    try:
        data["category"] = FindingCategory(category)
    except ValueError as exc:
        raise UnknownCategoryError(category) from exc
    return Finding.model_validate(data)


def match_rule(finding: Finding, context: NormalizedContext) -> SeverityRule:
    """Return the first rule whose predicate holds."""
    for rule in SEVERITY_RULES:
        if rule.predicate(finding, context):
            return rule
    # The last rule always matches; unreachable.
    return SEVERITY_RULES[-1]


def derive_severity(
    finding: Union[Finding, Mapping[str, Any]],
    context: Union[BuildingContext, Mapping[str, Any], None] = None,
) -> SeverityResult:
    """Derive tier, priority and trigger for a finding."""
    finding = coerce_finding(finding)
    ctx = normalize_context(context)
    rule = match_rule(finding, ctx)

    logger.debug(
        "severity_derived",
        category=finding.category.value,
        trigger_id=rule.trigger_id,
        tier=rule.tier.value,
    )

    return SeverityResult(
        tier=rule.tier,
        priority=rule.priority,
        trigger_id=rule.trigger_id,
        trigger_text=rule.text,
    )


def derive_severity_tier(
    finding: Union[Finding, Mapping[str, Any]],
    context: Optional[BuildingContext] = None,
) -> SeverityTier:
    """Tier only; see derive_severity."""
    return derive_severity(finding, context).tier


def list_rules() -> list[dict[str, str]]:
    """Ordered rule table for display (trigger debugger, reports)."""
    return [
        {
            "trigger_id": rule.trigger_id,
            "tier": rule.tier.value,
            "priority": rule.priority.value,
            "text": rule.text,
        }
        for rule in SEVERITY_RULES
    ]
