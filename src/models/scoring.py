"""Rating and score breakdown models for the weighted score aggregator."""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


class Building(BaseModel):
    """RE-02 construction facts for one building."""
    id: Optional[str] = None
    frame_type: Optional[str] = None
    roof_ceiling_combustibility: Optional[str] = None
    wall_combustibility: Optional[str] = None
    area_weighted_combustible_percent: Optional[float] = None
    floor_area_sqm: Optional[float] = None
    footprint_m2: Optional[float] = None


class ConstructionData(BaseModel):
    """RE-02 module payload."""
    site_rating_1_5: Optional[int] = Field(default=None, ge=1, le=5)
    buildings: list[Building] = Field(default_factory=list)


class SystemRating(BaseModel):
    rating: Optional[int] = Field(default=None, ge=1, le=5)


class BuildingFireProtection(BaseModel):
    """RE-04 fire protection ratings for one building."""
    sprinklers: Optional[SystemRating] = None
    water_mist: Optional[SystemRating] = None
    detection_alarm: Optional[SystemRating] = None


class FireProtectionData(BaseModel):
    """RE-04 module payload, keyed by building id."""
    buildings: dict[str, BuildingFireProtection] = Field(default_factory=dict)
    water_supply_reliability: Literal["reliable", "unreliable", "unknown"] = "unknown"


class RiskEngineeringData(BaseModel):
    """Rating set plus the section data that feeds the global pillars."""
    industry_key: Optional[str] = None
    ratings: dict[str, int] = Field(default_factory=dict)
    section_grades: dict[str, float] = Field(default_factory=dict)
    construction: Optional[ConstructionData] = None
    fire_protection: Optional[FireProtectionData] = None


class ScoreFactor(BaseModel):
    """One scored factor: rating x weight out of 5 x weight."""
    key: str
    label: str
    rating: int
    weight: float
    score: float
    max_score: float
    source: Literal["section_grade", "computed", "rating", "default"] = "rating"


class ScoreBreakdown(BaseModel):
    industry_key: Optional[str] = None
    industry_label: str = "No Industry Selected"
    global_pillars: list[ScoreFactor] = Field(default_factory=list)
    occupancy_drivers: list[ScoreFactor] = Field(default_factory=list)
    total_score: float = 0.0
    max_score: float = 0.0
    top_contributors: list[ScoreFactor] = Field(default_factory=list)
