"""Shared enum definitions for the EziRisk engine.

This module contains canonical definitions for the closed vocabularies used
across the severity engine, the score aggregator and the issue-readiness
validator.

Usage:
    from models.shared import SeverityTier, Priority, FindingCategory
"""
from __future__ import annotations

from enum import Enum


class SeverityTier(str, Enum):
    """Internal severity classification. T4 is the most severe."""
    T1 = "T1"
    T2 = "T2"
    T3 = "T3"
    T4 = "T4"


class Priority(str, Enum):
    """External-facing urgency band. P1 is the most urgent."""
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"
    P4 = "P4"


# Fixed tier -> priority mapping
TIER_TO_PRIORITY: dict[SeverityTier, Priority] = {
    SeverityTier.T4: Priority.P1,
    SeverityTier.T3: Priority.P2,
    SeverityTier.T2: Priority.P3,
    SeverityTier.T1: Priority.P4,
}


class FindingCategory(str, Enum):
    """Category of a recorded FRA finding."""
    MEANS_OF_ESCAPE = "MeansOfEscape"
    DETECTION_ALARM = "DetectionAlarm"
    EMERGENCY_LIGHTING = "EmergencyLighting"
    COMPARTMENTATION = "Compartmentation"
    FIRE_DOORS = "FireDoors"
    FIRE_FIGHTING = "FireFighting"
    MANAGEMENT = "Management"
    HOUSEKEEPING = "Housekeeping"
    OTHER = "Other"


class OccupancyRisk(str, Enum):
    """Occupancy risk class of the assessed building."""
    NON_SLEEPING = "NonSleeping"
    SLEEPING = "Sleeping"
    VULNERABLE = "Vulnerable"


class SurveyType(str, Enum):
    """Document types that can be combined in one issued report."""
    FRA = "FRA"
    FSD = "FSD"
    DSEAR = "DSEAR"


class DocumentStatus(str, Enum):
    """Lifecycle status of a survey/document.

    - DRAFT: editable
    - IN_REVIEW: awaiting approval
    - APPROVED: approved, may be issued
    - ISSUED: locked, PDF generated
    - SUPERSEDED: replaced by a newer version
    """
    DRAFT = "draft"
    IN_REVIEW = "in_review"
    APPROVED = "approved"
    ISSUED = "issued"
    SUPERSEDED = "superseded"


# Statuses in which the document must not be mutated
IMMUTABLE_STATUSES = {DocumentStatus.ISSUED, DocumentStatus.SUPERSEDED}


class ActionStatus(str, Enum):
    """Lifecycle status of an action/recommendation."""
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    CLOSED = "closed"
    SUPERSEDED = "superseded"


# Statuses that count as an outstanding action for readiness rules
OPEN_ACTION_STATUSES = {ActionStatus.OPEN, ActionStatus.IN_PROGRESS}


class BlockerType(str, Enum):
    """Reason category for an issue blocker."""
    MODULE_INCOMPLETE = "module_incomplete"
    MISSING_FIELD = "missing_field"
    CONDITIONAL_MISSING = "conditional_missing"
    CONFIRM_MISSING = "confirm_missing"
    NO_RECOMMENDATIONS = "no_recommendations"


class ExecutiveOutcome(str, Enum):
    """Qualitative roll-up of an FRA's action list."""
    SATISFACTORY_WITH_IMPROVEMENTS = "SatisfactoryWithImprovements"
    IMPROVEMENTS_REQUIRED = "ImprovementsRequired"
    SIGNIFICANT_DEFICIENCIES = "SignificantDeficiencies"
    MATERIAL_LIFE_SAFETY_RISK_PRESENT = "MaterialLifeSafetyRiskPresent"
