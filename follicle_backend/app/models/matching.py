# follicle_backend/app/models/matching.py
from __future__ import annotations

from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from follicle_backend.app.schemas import (
    Damage, DataQuality, Density, EntityKind, HairType, Porosity, Thickness,
)

# tier -> meaningful interaction type -> count
TierCounts = Dict[str, Dict[str, int]]


class HairProfile(BaseModel):
    hair_type: HairType
    porosity: Porosity
    density: Density
    thickness: Thickness
    damage: Damage

    # recreated on every analysis, never edited in place
    model_config = ConfigDict(frozen=True)

    def value_of(self, attribute: str) -> str:
        return getattr(self, attribute).value


class IngredientResult(BaseModel):
    score: float
    reasons: List[str] = Field(default_factory=list)
    data_quality: DataQuality = DataQuality.OK


class EngagementResult(BaseModel):
    score: float
    reasons: List[str] = Field(default_factory=list)
    interactions_by_tier: Optional[TierCounts] = None
    data_quality: DataQuality = DataQuality.OK


class MatchScore(BaseModel):
    entity_id: str
    entity_kind: EntityKind
    total_score: float
    breakdown: Dict[str, float] = Field(default_factory=dict)
    match_reasons: List[str] = Field(default_factory=list)
    interactions_by_tier: Optional[TierCounts] = None
    # why a sub-score is what it is; "ok" unless a fallback kicked in
    data_quality: Dict[str, DataQuality] = Field(default_factory=dict)

    @classmethod
    def neutral(cls, entity_id: str, kind: EntityKind, neutral: float = 0.5) -> "MatchScore":
        """Stand-in for an entity whose scoring failed outright."""
        first = "ingredient_score" if kind == EntityKind.PRODUCT else "product_score"
        return cls(
            entity_id=entity_id,
            entity_kind=kind,
            total_score=neutral,
            breakdown={first: neutral, "engagement_score": neutral},
            data_quality={"overall": DataQuality.ERROR},
        )


__all__ = ["TierCounts", "HairProfile", "IngredientResult", "EngagementResult", "MatchScore"]
