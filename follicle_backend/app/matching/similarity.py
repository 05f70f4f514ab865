from __future__ import annotations
from typing import Optional

from follicle_backend.app.matching.policy import ATTRIBUTES, ScoringPolicy, load_policy
from follicle_backend.app.matching.profile_code import split_code
from follicle_backend.app.schemas import SimilarityTier
from follicle_backend.app.utils.logs import get_logger

log = get_logger("similarity")

# Purpose:
# Weighted agreement between two profile codes, in [0, 1].
# Pure: depends only on the two codes and the (static) policy weights.
def similarity(code_a: str, code_b: str, policy: Optional[ScoringPolicy] = None) -> float:
    p = policy or load_policy()
    if code_a == code_b:
        return min(1.0, 1.0 * p.exact_match_boost)

    parts_a, parts_b = split_code(code_a), split_code(code_b)
    if parts_a is None or parts_b is None:
        log.warning(f"[similarity] invalid profile code format: {code_a!r}, {code_b!r}")
        return 0.0

    matched = 0.0
    for attr, seg_a, seg_b in zip(ATTRIBUTES, parts_a, parts_b):
        if seg_a == seg_b:
            matched += float(p.attribute_weights[attr])
    return min(matched / p.total_attribute_weight, 1.0)

# Purpose:
# True when two codes are close enough for engagement to count.
def is_similar_enough(code_a: str, code_b: str, policy: Optional[ScoringPolicy] = None) -> bool:
    p = policy or load_policy()
    return similarity(code_a, code_b, p) >= p.min_similarity

# Purpose:
# Bucket a similarity; None means below the engagement threshold.
def similarity_tier(value: float, policy: Optional[ScoringPolicy] = None) -> Optional[SimilarityTier]:
    p = policy or load_policy()
    if value < p.min_similarity:
        return None
    if value == 1.0:
        return SimilarityTier.EXACT
    if value > p.tier_very_high:
        return SimilarityTier.VERY_HIGH
    if value > p.tier_high:
        return SimilarityTier.HIGH
    return SimilarityTier.MEDIUM
