"""Issue requirements matrix.

Defines the required modules and conditional modules for FRA, FSD and DSEAR
surveys. This is the single source of truth for issue gating.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from models.readiness import IssueContext
from models.shared import SurveyType

ModuleCondition = Callable[[IssueContext], bool]


@dataclass(frozen=True)
class ModuleRule:
    key: str
    label: str
    required: bool = True
    condition: Optional[ModuleCondition] = None
    required_fields: tuple[str, ...] = field(default_factory=tuple)


def _engineered(ctx: IssueContext) -> bool:
    return ctx.engineered_solutions_used is True


def _suppression(ctx: IssueContext) -> bool:
    return ctx.has_suppression is True or ctx.requires_suppression is True


def _smoke_control(ctx: IssueContext) -> bool:
    return ctx.has_smoke_control is True


# Document control is common to every survey type
SURVEY_INFO = ModuleRule(
    "survey_info", "Survey Information",
    required_fields=("inspection_date", "surveyor_name", "company_name", "site_name", "scope_type"),
)

FRA_MODULES: tuple[ModuleRule, ...] = (
    SURVEY_INFO,
    ModuleRule("property_details", "Property Details"),
    ModuleRule("construction", "Construction"),
    ModuleRule("occupancy", "Occupancy"),
    ModuleRule("hazards", "Fire Hazards"),
    ModuleRule("fire_protection", "Fire Protection"),
    ModuleRule("management", "Management"),
    ModuleRule("risk_evaluation", "Risk Evaluation", required_fields=("overall_risk_rating",)),
    ModuleRule("recommendations", "Recommendations"),
)

FSD_MODULES: tuple[ModuleRule, ...] = (
    SURVEY_INFO,
    ModuleRule("strategy_scope_basis", "Strategy Scope & Basis",
               required_fields=("design_stage", "standards_basis")),
    ModuleRule("building_description", "Building Description"),
    ModuleRule("occupancy_fire_load", "Occupancy & Fire Load"),
    ModuleRule("means_of_escape", "Means of Escape"),
    ModuleRule("compartmentation", "Compartmentation"),
    ModuleRule("detection_alarm", "Detection & Alarm"),
    ModuleRule("management_assumptions", "Management Assumptions", required=False, condition=_engineered),
    ModuleRule("limitations_reliance", "Limitations & Reliance", required=False, condition=_engineered,
               required_fields=("limitations_text",)),
    ModuleRule("suppression", "Suppression Systems", required=False, condition=_suppression),
    ModuleRule("smoke_control", "Smoke Control", required=False, condition=_smoke_control),
)

DSEAR_MODULES: tuple[ModuleRule, ...] = (
    SURVEY_INFO,
    ModuleRule("assessment_scope", "Assessment Scope"),
    ModuleRule("substances", "Dangerous Substances", required_fields=("substances",)),
    ModuleRule("processes", "Processes"),
    ModuleRule("hazardous_area_classification", "Hazardous Area Classification",
               required_fields=("zones",)),
    ModuleRule("ignition_sources", "Ignition Sources"),
    ModuleRule("control_measures", "Control Measures"),
    ModuleRule("equipment_compliance", "Equipment Compliance"),
    ModuleRule("management_controls", "Management Controls"),
    ModuleRule("risk_evaluation", "Risk Evaluation"),
    ModuleRule("actions", "Actions"),
)

MODULE_MATRIX: dict[SurveyType, tuple[ModuleRule, ...]] = {
    SurveyType.FRA: FRA_MODULES,
    SurveyType.FSD: FSD_MODULES,
    SurveyType.DSEAR: DSEAR_MODULES,
}


def is_module_required(module: ModuleRule, ctx: IssueContext) -> bool:
    """Required outright, or conditionally required for this context."""
    if module.required:
        return True
    if module.condition is not None:
        return module.condition(ctx)
    return False


def get_required_modules(
    survey_type: SurveyType,
    ctx: Optional[IssueContext] = None,
    matrix: Optional[dict[SurveyType, tuple[ModuleRule, ...]]] = None,
) -> list[ModuleRule]:
    """Modules that apply to a survey type under the given context."""
    ctx = ctx or IssueContext()
    modules = (matrix or MODULE_MATRIX).get(SurveyType(survey_type), ())
    return [m for m in modules if is_module_required(m, ctx)]


def get_combined_required_modules(
    survey_types: Iterable[SurveyType],
    ctx: Optional[IssueContext] = None,
    matrix: Optional[dict[SurveyType, tuple[ModuleRule, ...]]] = None,
) -> list[ModuleRule]:
    """Union of required modules across types, deduplicated by module key.

    The first type to declare a key owns it; order is first-seen.
    """
    seen: set[str] = set()
    combined: list[ModuleRule] = []
    for survey_type in survey_types:
        for module in get_required_modules(survey_type, ctx, matrix):
            if module.key in seen:
                continue
            seen.add(module.key)
            combined.append(module)
    return combined


def is_field_required(
    survey_type: SurveyType,
    module_key: str,
    field_key: str,
    ctx: Optional[IssueContext] = None,
) -> bool:
    for module in get_required_modules(survey_type, ctx):
        if module.key == module_key:
            return field_key in module.required_fields
    return False


def get_requirement_description(survey_type: SurveyType, ctx: Optional[IssueContext] = None) -> str:
    """Human-readable requirement summary, e.g. for the readiness panel."""
    ctx = ctx or IssueContext()
    modules = MODULE_MATRIX.get(SurveyType(survey_type), ())
    required_count = sum(1 for m in modules if m.required)
    conditional_count = sum(1 for m in modules if not m.required and m.condition and m.condition(ctx))

    description = f"{required_count} required modules must be completed"
    if conditional_count > 0:
        description += f", {conditional_count} conditional modules based on your selections"
    return description
