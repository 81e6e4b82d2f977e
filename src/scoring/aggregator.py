"""Weighted score aggregator for risk engineering surveys.

Combines the four global pillars (always scored) with the industry-specific
occupancy drivers into a total/maximum score and a ranked list of top
contributors:
- score per factor = rating x weight
- max per factor = 5 x weight
- drivers with weight 0 are excluded from totals
"""
from __future__ import annotations

from typing import Any, Mapping, Optional, Union

import structlog

from config.loader import get_default_rating, get_weight_table
from config.tables import PillarSpec, WeightTable
from models.scoring import RiskEngineeringData, ScoreBreakdown, ScoreFactor
from scoring.construction import compute_construction_rating, round_half_up
from scoring.fire_protection import compute_site_fire_protection_score

logger = structlog.get_logger(__name__)

MAX_RATING = 5


def calculate_score(rating: float, weight: float) -> float:
    return rating * weight


def ensure_ratings(
    data: Union[RiskEngineeringData, Mapping[str, Any]],
    weight_table: Optional[WeightTable] = None,
) -> RiskEngineeringData:
    """Return a copy in which every canonical key has a rating."""
    table = weight_table or get_weight_table()
    if not isinstance(data, RiskEngineeringData):
        data = RiskEngineeringData.model_validate(dict(data))

    ratings = dict(data.ratings)
    for key in table.canonical_keys:
        if not _valid_grade(ratings.get(key)):
            ratings[key] = table.default_rating
    return data.model_copy(update={"ratings": ratings})


def get_rating(data: RiskEngineeringData, key: str, default: Optional[int] = None) -> int:
    return data.ratings.get(key, get_default_rating() if default is None else default)


def set_rating(data: RiskEngineeringData, key: str, rating: int) -> RiskEngineeringData:
    return data.model_copy(update={"ratings": {**data.ratings, key: rating}})


def _valid_grade(value: Any) -> bool:
    return isinstance(value, (int, float)) and 1 <= value <= MAX_RATING


def _pillar_rating(pillar: PillarSpec, data: RiskEngineeringData, table: WeightTable) -> tuple[int, str]:
    """Section grade -> computed value -> explicit rating -> default."""
    grade = data.section_grades.get(pillar.grade_key)
    if _valid_grade(grade):
        return round_half_up(grade), "section_grade"

    computed: Optional[int] = None
    if pillar.grade_key == "construction":
        computed = compute_construction_rating(data.construction)
    elif pillar.grade_key == "fire_protection":
        buildings = data.construction.buildings if data.construction else []
        computed = compute_site_fire_protection_score(data.fire_protection, buildings)
    if computed is not None:
        return computed, "computed"

    rating = data.ratings.get(pillar.key)
    if _valid_grade(rating):
        return int(rating), "rating"

    return table.default_rating, "default"


def _factor(key: str, label: str, rating: int, weight: float, source: str) -> ScoreFactor:
    return ScoreFactor(
        key=key,
        label=label,
        rating=rating,
        weight=weight,
        score=calculate_score(rating, weight),
        max_score=calculate_score(MAX_RATING, weight),
        source=source,
    )


def build_score_breakdown(
    data: Union[RiskEngineeringData, Mapping[str, Any]],
    weight_table: Optional[WeightTable] = None,
) -> ScoreBreakdown:
    """Build the full score breakdown for one survey.

    Deterministic for the same ratings, industry key and section grades.
    """
    table = weight_table or get_weight_table()
    if not isinstance(data, RiskEngineeringData):
        data = RiskEngineeringData.model_validate(dict(data))

    industry = table.industry(data.industry_key)
    industry_weights = industry.weights if industry else {}

    pillars: list[ScoreFactor] = []
    for pillar in table.pillars:
        rating, source = _pillar_rating(pillar, data, table)
        weight = industry_weights.get(pillar.key, table.default_weight)
        pillars.append(_factor(pillar.key, pillar.label, rating, weight, source))

    drivers: list[ScoreFactor] = []
    pillar_keys = set(table.pillar_keys)
    for key in table.canonical_keys:
        if key in pillar_keys:
            continue
        weight = industry_weights.get(key, 0)
        if weight <= 0:
            continue
        rating = data.ratings.get(key)
        source = "rating"
        if not _valid_grade(rating):
            rating, source = table.default_rating, "default"
        drivers.append(_factor(key, table.label_for(key), rating, weight, source))

    combined = pillars + drivers
    # sorted() is stable, so ties keep pillar-then-driver order
    ranked = sorted(combined, key=lambda f: f.score, reverse=True)

    breakdown = ScoreBreakdown(
        industry_key=data.industry_key,
        industry_label=industry.label if industry else "No Industry Selected",
        global_pillars=pillars,
        occupancy_drivers=drivers,
        total_score=sum(f.score for f in combined),
        max_score=sum(f.max_score for f in combined),
        top_contributors=ranked[: table.top_contributor_count],
    )

    if data.industry_key and industry is None:
        logger.warning("unknown_industry_key", industry_key=data.industry_key)

    logger.info(
        "score_breakdown_built",
        industry_key=breakdown.industry_key,
        pillars=len(pillars),
        drivers=len(drivers),
        total_score=breakdown.total_score,
        max_score=breakdown.max_score,
    )
    return breakdown
