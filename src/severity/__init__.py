"""Severity derivation for FRA findings.

This package contains:
- engine.py: ordered trigger rules and tier -> priority mapping
- outcome.py: material deficiency and executive outcome roll-ups
- migration.py: legacy likelihood x impact migration
"""
from severity.engine import (
    SEVERITY_RULES,
    SeverityRule,
    derive_severity,
    derive_severity_tier,
    list_rules,
    map_tier_to_priority,
    normalize_context,
)
from severity.outcome import (
    check_material_deficiency,
    derive_executive_outcome,
)
from severity.migration import (
    LEGACY_TRIGGER_ID,
    migrate_action,
    migrate_actions,
    needs_migration,
)

__all__ = [
    # Engine
    "SEVERITY_RULES",
    "SeverityRule",
    "derive_severity",
    "derive_severity_tier",
    "list_rules",
    "map_tier_to_priority",
    "normalize_context",
    # Roll-ups
    "check_material_deficiency",
    "derive_executive_outcome",
    # Migration
    "LEGACY_TRIGGER_ID",
    "migrate_action",
    "migrate_actions",
    "needs_migration",
]
