from __future__ import annotations

import sys
from pathlib import Path

# Add src directory to path immediately on import - MUST be before any other imports
_src_dir = Path(__file__).resolve().parents[1] / "src"
_src_str = str(_src_dir)
if _src_str not in sys.path:
    sys.path.insert(0, _src_str)

import pytest

from config.tables import WeightTable
from factories import make_survey
from models.findings import BuildingContext
from models.shared import OccupancyRisk
from models.survey import Survey


def pytest_configure(config: pytest.Config) -> None:
    """Ensure src directory is on sys.path so tests can import modules."""
    src_dir = Path(__file__).resolve().parents[1] / "src"
    src_str = str(src_dir)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)


TEST_SCORING_SECTION = {
    "default_rating": 3,
    "default_weight": 3,
    "top_contributor_count": 3,
    "global_pillars": [
        {"key": "construction_and_combustibility", "label": "Construction", "grade_key": "construction"},
        {"key": "fire_protection", "label": "Fire Protection", "grade_key": "fire_protection"},
        {"key": "exposure", "label": "Exposure", "grade_key": "exposure"},
        {"key": "management_systems", "label": "Management Systems", "grade_key": "management"},
    ],
    "occupancy_drivers": {
        "driver_a": "Driver A",
        "driver_b": "Driver B",
        "driver_c": "Driver C",
        "driver_d": "Driver D",
        "driver_zero": "Driver Zero",
    },
    "industries": {
        "test_industry": {
            "label": "Test Industry",
            "weights": {"driver_a": 1, "driver_b": 1, "driver_c": 1, "driver_d": 1, "driver_zero": 0},
        },
        "heavy_exposure": {
            "label": "Heavy Exposure",
            "weights": {"exposure": 5, "driver_a": 2},
        },
    },
}


@pytest.fixture
def weight_table() -> WeightTable:
    """Small substituted weighting table."""
    return WeightTable.from_config(TEST_SCORING_SECTION)


@pytest.fixture
def sleeping_context() -> BuildingContext:
    return BuildingContext(occupancy_risk=OccupancyRisk.SLEEPING, storeys=3)


@pytest.fixture
def fra_survey() -> Survey:
    """FRA draft that passes every readiness check."""
    return make_survey()

