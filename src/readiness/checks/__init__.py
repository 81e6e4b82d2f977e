"""Issue-readiness checks.

- modules.py: required-module completion
- fra.py: FRA scope and recommendation rules
- fsd.py: FSD engineered-solution rules
- dsear.py: DSEAR substance, zone and action rules
"""
from readiness.checks.dsear import check_dsear
from readiness.checks.fra import check_fra
from readiness.checks.fsd import check_fsd
from readiness.checks.modules import check_module_completeness, has_open_actions

__all__ = [
    "check_module_completeness",
    "has_open_actions",
    "check_fra",
    "check_fsd",
    "check_dsear",
]
