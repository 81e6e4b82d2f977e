"""Issue-readiness validation for FRA, FSD and DSEAR surveys."""
from readiness.requirements import (
    MODULE_MATRIX,
    ModuleRule,
    get_combined_required_modules,
    get_required_modules,
    get_requirement_description,
    is_field_required,
    is_module_required,
)
from readiness.validator import (
    compute_readiness_progress,
    get_validation_summary,
    group_blockers_by_module,
    safe_validate_eligibility,
    validate_eligibility,
)

__all__ = [
    "MODULE_MATRIX",
    "ModuleRule",
    "get_combined_required_modules",
    "get_required_modules",
    "get_requirement_description",
    "is_field_required",
    "is_module_required",
    "compute_readiness_progress",
    "get_validation_summary",
    "group_blockers_by_module",
    "safe_validate_eligibility",
    "validate_eligibility",
]
