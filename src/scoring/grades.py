"""Overall grade and risk band from section grades."""
from __future__ import annotations

from typing import Mapping, Optional


def calculate_overall_grade(section_grades: Mapping[str, Optional[float]]) -> float:
    """Mean of the positive section grades; 3 (Adequate) when none are set."""
    grades = [g for g in section_grades.values() if g is not None and g > 0]
    if not grades:
        return 3.0
    return sum(grades) / len(grades)


def get_risk_band(overall_grade: float) -> str:
    if overall_grade < 2.0:
        return "Critical"
    if overall_grade < 3.0:
        return "High"
    if overall_grade < 4.0:
        return "Medium"
    return "Low"
