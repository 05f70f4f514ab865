from __future__ import annotations
from dataclasses import dataclass, field, fields, replace
from functools import lru_cache
import os
from typing import Any, Dict, Mapping, Optional, Tuple

from follicle_backend.app.matching.library_loader import get_scoring_policy_overrides
from follicle_backend.app.utils.logs import get_logger

# Purpose:
# Every tunable of the match-scoring engine in one place. Similarity and
# ingredient scoring share the attribute weights so one knob tunes both.

log = get_logger("policy")

# Attribute order is the profile code segment order.
ATTRIBUTES: Tuple[str, ...] = ("hair_type", "porosity", "density", "thickness", "damage")

DEFAULT_ATTRIBUTE_WEIGHTS: Dict[str, float] = {
    "hair_type": 3.0,
    "porosity": 2.0,
    "density": 1.0,
    "thickness": 2.0,
    "damage": 1.0,
}

DEFAULT_PRODUCT_ENGAGEMENT_WEIGHTS: Dict[str, float] = {
    "routine": 0.35,   # strongest signal, they use it
    "save": 0.25,
    "like": 0.25,
    "dislike": -0.25,
    "reroll": -0.15,
    "view": 0.0,
}

DEFAULT_ROUTINE_ENGAGEMENT_WEIGHTS: Dict[str, float] = {
    "adapt": 0.4,
    "save": 0.3,
    "like": 0.2,
    "dislike": -0.3,
    "view": 0.0,
}

@dataclass(frozen=True)
class ScoringPolicy:
    attribute_weights: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_ATTRIBUTE_WEIGHTS))
    exact_match_boost: float = 1.5

    # similarity tiers
    min_similarity: float = 0.4
    tier_very_high: float = 0.8
    tier_high: float = 0.6

    neutral_score: float = 0.5

    # ingredient scoring
    beneficial_bonus: float = 0.1
    avoid_penalty: float = -0.25
    max_position_bonus: float = 0.2
    use_position_scoring: bool = True
    max_beneficial_per_attribute: int = 10
    max_avoided_per_attribute: int = 10
    max_reasons: int = 100

    # engagement scoring
    product_engagement_weights: Dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_PRODUCT_ENGAGEMENT_WEIGHTS))
    routine_engagement_weights: Dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_ROUTINE_ENGAGEMENT_WEIGHTS))

    # combination
    product_ingredient_weight: float = 0.6
    product_engagement_weight: float = 0.4
    routine_product_weight: float = 0.1
    routine_engagement_weight: float = 0.9
    category_overrides: Dict[str, Dict[str, float]] = field(default_factory=dict)

    # batching
    product_chunk_size: int = 2000
    routine_chunk_size: Optional[int] = None   # None: whole set in one chunk
    max_workers: int = 32
    write_batch_size: int = 500

    @property
    def total_attribute_weight(self) -> float:
        return sum(float(self.attribute_weights[a]) for a in ATTRIBUTES)

    def normalized_attribute_weights(self) -> Dict[str, float]:
        total = self.total_attribute_weight
        return {a: float(self.attribute_weights[a]) / total for a in ATTRIBUTES}

    def product_weights_for(self, category: Optional[str]) -> Tuple[float, float]:
        """(ingredient, engagement) weights, with per-category overrides applied."""
        ing, eng = self.product_ingredient_weight, self.product_engagement_weight
        override = self.category_overrides.get(category or "", {})
        return float(override.get("ingredient", ing)), float(override.get("engagement", eng))


# ──────────────────────────────────────────────────────────────────────────────
# Loading
# ──────────────────────────────────────────────────────────────────────────────
_ENV_INT_OVERRIDES = {
    "FOLLICLE_PRODUCT_CHUNK_SIZE": "product_chunk_size",
    "FOLLICLE_MAX_WORKERS": "max_workers",
    "FOLLICLE_WRITE_BATCH_SIZE": "write_batch_size",
    "FOLLICLE_MAX_REASONS": "max_reasons",
}

_DICT_FIELDS = {
    "attribute_weights", "product_engagement_weights",
    "routine_engagement_weights", "category_overrides",
}

def _validate(p: ScoringPolicy) -> ScoringPolicy:
    missing = [a for a in ATTRIBUTES if a not in p.attribute_weights]
    if missing:
        raise ValueError(f"attribute_weights missing {missing}")
    if p.total_attribute_weight <= 0:
        raise ValueError("attribute_weights must sum to a positive number")
    for name in ("product_chunk_size", "max_workers", "write_batch_size", "max_reasons"):
        if int(getattr(p, name)) < 1:
            raise ValueError(f"{name} must be >= 1")
    if p.write_batch_size > 500:
        raise ValueError("write_batch_size cannot exceed 500 writes per commit")
    for pair, label in (
        ((p.product_ingredient_weight, p.product_engagement_weight), "product"),
        ((p.routine_product_weight, p.routine_engagement_weight), "routine"),
    ):
        if abs(sum(pair) - 1.0) > 0.001:
            log.warning(f"[policy] {label} algorithm weights should sum to 1.0, got {sum(pair):.3f}")
    return p

def build_policy(overrides: Optional[Mapping[str, Any]] = None,
                 env: Optional[Mapping[str, str]] = None) -> ScoringPolicy:
    """
    Merge file/dict overrides and env overrides onto the defaults.
    Unknown keys are ignored with a log line.
    """
    base = ScoringPolicy()
    known = {f.name for f in fields(ScoringPolicy)}
    changes: Dict[str, Any] = {}
    for key, value in (overrides or {}).items():
        if key not in known:
            log.info(f"[policy] ignoring unknown key {key!r}")
            continue
        if key in _DICT_FIELDS and isinstance(value, dict):
            merged = dict(getattr(base, key))
            merged.update(value)
            changes[key] = merged
        else:
            changes[key] = value

    env = os.environ if env is None else env
    for var, attr in _ENV_INT_OVERRIDES.items():
        raw = (env.get(var) or "").strip()
        if not raw:
            continue
        try:
            changes[attr] = int(raw)
        except ValueError:
            raise ValueError(f"{var} must be an integer, got {raw!r}") from None

    return _validate(replace(base, **changes))

@lru_cache(maxsize=1)
def load_policy() -> ScoringPolicy:
    """Process-wide policy: scoring_policy.yaml (optional) + env overrides."""
    return build_policy(get_scoring_policy_overrides())
