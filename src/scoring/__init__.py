"""Scoring modules for risk engineering surveys.

This package contains:
- aggregator.py: weighted pillar + occupancy driver score breakdown
- construction.py: construction & combustibility rating heuristic
- fire_protection.py: derived fire protection site score
- grades.py: overall grade and risk band from section grades
"""
from scoring.aggregator import (
    build_score_breakdown,
    calculate_score,
    ensure_ratings,
    get_rating,
    set_rating,
)
from scoring.construction import (
    compute_building_construction_rating,
    compute_construction_rating,
)
from scoring.fire_protection import (
    compute_building_fire_protection_score,
    compute_site_fire_protection_score,
)
from scoring.grades import (
    calculate_overall_grade,
    get_risk_band,
)

__all__ = [
    # Aggregator
    "build_score_breakdown",
    "calculate_score",
    "ensure_ratings",
    "get_rating",
    "set_rating",
    # Pillar helpers
    "compute_building_construction_rating",
    "compute_construction_rating",
    "compute_building_fire_protection_score",
    "compute_site_fire_protection_score",
    # Grades
    "calculate_overall_grade",
    "get_risk_band",
]
