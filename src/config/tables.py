"""Immutable weighting tables for the weighted score aggregator."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class PillarSpec:
    """A global pillar: always scored, rating looked up from its section grade."""
    key: str
    label: str
    grade_key: str


@dataclass(frozen=True)
class IndustryWeights:
    key: str
    label: str
    weights: Mapping[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class WeightTable:
    """Pillar and driver definitions plus per-industry weights.

    Canonical rating keys are the pillar keys followed by the driver keys.
    Pillars use ``default_weight`` unless an industry overrides them.
    """
    pillars: tuple[PillarSpec, ...]
    driver_labels: Mapping[str, str]
    industries: Mapping[str, IndustryWeights]
    default_rating: int = 3
    default_weight: float = 3
    top_contributor_count: int = 3

    @property
    def pillar_keys(self) -> tuple[str, ...]:
        return tuple(p.key for p in self.pillars)

    @property
    def canonical_keys(self) -> tuple[str, ...]:
        return self.pillar_keys + tuple(k for k in self.driver_labels if k not in self.pillar_keys)

    def industry(self, industry_key: Optional[str]) -> Optional[IndustryWeights]:
        if not industry_key:
            return None
        return self.industries.get(industry_key)

    def label_for(self, key: str) -> str:
        for pillar in self.pillars:
            if pillar.key == key:
                return pillar.label
        return self.driver_labels.get(key, key.replace("_", " ").title())

    @classmethod
    def from_config(cls, section: dict[str, Any]) -> WeightTable:
        """Build from the ``scoring`` section of the engine config."""
        pillars = tuple(
            PillarSpec(key=p["key"], label=p.get("label", p["key"]), grade_key=p.get("grade_key", p["key"]))
            for p in section.get("global_pillars", [])
        )
        industries = {
            key: IndustryWeights(
                key=key,
                label=cfg.get("label", key),
                weights=MappingProxyType({k: float(v) for k, v in (cfg.get("weights") or {}).items()}),
            )
            for key, cfg in (section.get("industries") or {}).items()
        }
        return cls(
            pillars=pillars,
            driver_labels=MappingProxyType(dict(section.get("occupancy_drivers") or {})),
            industries=MappingProxyType(industries),
            default_rating=int(section.get("default_rating", 3)),
            default_weight=float(section.get("default_weight", 3)),
            top_contributor_count=int(section.get("top_contributor_count", 3)),
        )
