"""Configuration loader for the EziRisk engine.

Provides centralized access to the rule and weighting tables. The tables are
loaded once and handed to the engines explicitly; tests substitute their own.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

import structlog
import yaml

from models.shared import SeverityTier
from config.tables import WeightTable

logger = structlog.get_logger(__name__)

CONFIG_FILE = Path(__file__).parent / "engine_config.yaml"
CONFIG_ENV_VAR = "EZIRISK_CONFIG"


def _resolve_config_path() -> Path:
    override = os.getenv(CONFIG_ENV_VAR)
    return Path(override) if override else CONFIG_FILE


class ConfigLoader:
    """Loads and provides access to engine configuration."""

    _instance: Optional[ConfigLoader] = None
    _config: Optional[dict[str, Any]] = None
    _weight_table: Optional[WeightTable] = None

    def __new__(cls) -> ConfigLoader:
        """Singleton pattern - ensure only one config instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize config loader (only runs once due to singleton)."""
        if self._config is None:
            self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        path = _resolve_config_path()
        if path.exists():
            with open(path, encoding="utf-8") as f:
                self._config = yaml.safe_load(f) or {}
            logger.info("config_loaded", path=str(path))
        else:
            logger.warning("config_file_not_found", path=str(path))
            self._config = {}
        self._weight_table = None

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dot-notation key.

        Examples:
            config.get("scoring.default_rating")
            config.get("scoring.industries.oil_gas_refining.weights")
            config.get("nonexistent.key", default=100)
        """
        if not self._config:
            return default

        value: Any = self._config
        for k in key.split("."):
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def get_section(self, section: str) -> dict[str, Any]:
        """Get entire configuration section."""
        return self.get(section, default={})

    def weight_table(self) -> WeightTable:
        """Scoring tables, built once per load."""
        if self._weight_table is None:
            self._weight_table = WeightTable.from_config(self.get_section("scoring"))
        return self._weight_table

    def reload(self) -> None:
        """Reload configuration from file."""
        self._config = None
        self._load_config()


# Singleton instance
_config = ConfigLoader()


def get_config() -> ConfigLoader:
    """Get the global config instance."""
    return _config


def get_weight_table() -> WeightTable:
    """Get the industry weighting tables."""
    return _config.weight_table()


def get_default_rating() -> int:
    """Rating assumed for any factor without an explicit value (3 = Adequate)."""
    return int(_config.get("scoring.default_rating", 3))


def get_legacy_score_bands() -> tuple[tuple[float, SeverityTier], ...]:
    """Get legacy risk-score bands as (min_score, tier), highest first."""
    bands = _config.get("severity.legacy_score_bands")
    if not bands:
        return (
            (20, SeverityTier.T4),
            (12, SeverityTier.T3),
            (6, SeverityTier.T2),
        )
    parsed = [(float(b["min_score"]), SeverityTier(b["tier"])) for b in bands]
    return tuple(sorted(parsed, key=lambda band: band[0], reverse=True))


def get_legacy_default_tier() -> SeverityTier:
    """Tier for legacy scores below every band."""
    return SeverityTier(_config.get("severity.legacy_default_tier", "T1"))
