"""Construction rating helper for the construction & combustibility pillar.

Rating scale:
5 = Excellent (non-combustible, steel/concrete, well maintained)
4 = Good (mostly non-combustible, minor combustible elements)
3 = Adequate (mixed construction, some combustible content)
2 = Poor (high combustible content, older construction)
1 = Inadequate (heavy combustible loading, significant fire spread risk)
"""
from __future__ import annotations

import math
from typing import Optional

from models.scoring import Building, ConstructionData


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive ratings (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def clamp_rating(value: float) -> int:
    return max(1, min(5, round_half_up(value)))


def compute_building_construction_rating(building: Building) -> int:
    """Simplified heuristic over frame, roof, walls and combustible area."""
    rating = 3.0

    # Frame type (strong driver)
    frame = (building.frame_type or "").lower()
    if "steel" in frame or "concrete" in frame or "reinforced" in frame:
        rating += 1
    elif "timber" in frame or "wood" in frame:
        rating -= 2

    # Roof/ceiling combustibility (major driver); non-combustible is checked first
    roof = (building.roof_ceiling_combustibility or "").lower()
    if "non-combustible" in roof or "concrete" in roof or "metal" in roof:
        rating += 0.5
    elif "combustible" in roof or "timber" in roof or "wood" in roof:
        rating -= 1.5

    wall = (building.wall_combustibility or "").lower()
    if "non-combustible" in wall or "brick" in wall or "concrete" in wall:
        rating += 0.5
    elif "combustible" in wall or "metal clad" in wall:
        rating -= 0.5

    weighted = building.area_weighted_combustible_percent
    if weighted is not None:
        if weighted < 10:
            rating += 1
        elif weighted < 25:
            rating += 0.5
        elif weighted > 50:
            rating -= 1

    return clamp_rating(rating)


def compute_construction_rating(data: Optional[ConstructionData]) -> Optional[int]:
    """Worst-case (minimum) building rating, or the explicit site rating.

    Returns None when there is nothing to compute from.
    """
    if data is None:
        return None
    if data.site_rating_1_5:
        return data.site_rating_1_5
    if not data.buildings:
        return None
    return min(compute_building_construction_rating(b) for b in data.buildings)
