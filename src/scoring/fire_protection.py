"""Derived fire protection scoring for the fire protection pillar.

Building score: 0.7 x suppression + 0.3 x detection when both are rated,
otherwise whichever is present. Site score: floor-area-weighted mean of the
building scores, capped by water supply reliability (unknown <= 4,
unreliable <= 3).
"""
from __future__ import annotations

from typing import Iterable, Optional

from models.scoring import Building, BuildingFireProtection, FireProtectionData
from scoring.construction import clamp_rating

SUPPRESSION_WEIGHT = 0.7
DETECTION_WEIGHT = 0.3

WATER_SUPPLY_CAPS = {
    "reliable": 5,
    "unknown": 4,
    "unreliable": 3,
}


def compute_building_fire_protection_score(fp: Optional[BuildingFireProtection]) -> Optional[int]:
    if fp is None:
        return None

    suppression: Optional[int] = None
    if fp.sprinklers and fp.sprinklers.rating:
        suppression = fp.sprinklers.rating
    elif fp.water_mist and fp.water_mist.rating:
        suppression = fp.water_mist.rating

    detection = fp.detection_alarm.rating if fp.detection_alarm else None

    if suppression is not None and detection is not None:
        raw = SUPPRESSION_WEIGHT * suppression + DETECTION_WEIGHT * detection
    elif suppression is not None:
        raw = suppression
    elif detection is not None:
        raw = detection
    else:
        return None

    return clamp_rating(raw)


def compute_site_fire_protection_score(
    data: Optional[FireProtectionData],
    buildings_meta: Iterable[Building] = (),
) -> Optional[int]:
    if data is None or not data.buildings:
        return None

    areas: dict[str, float] = {}
    for meta in buildings_meta:
        if meta.id:
            area = meta.floor_area_sqm or meta.footprint_m2
            if area and area > 0:
                areas[meta.id] = area

    weighted_sum = 0.0
    total_weight = 0.0
    for building_id, fp in data.buildings.items():
        score = compute_building_fire_protection_score(fp)
        if score is None:
            continue
        weight = areas.get(building_id, 1.0)
        weighted_sum += score * weight
        total_weight += weight

    if total_weight == 0:
        return None

    site_score = clamp_rating(weighted_sum / total_weight)
    return min(site_score, WATER_SUPPLY_CAPS[data.water_supply_reliability])
