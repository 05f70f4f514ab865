from __future__ import annotations
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from follicle_backend.app.matching.policy import ScoringPolicy, load_policy
from follicle_backend.app.matching.similarity import similarity, similarity_tier
from follicle_backend.app.models.interactions import InteractionEvent
from follicle_backend.app.models.matching import EngagementResult, TierCounts
from follicle_backend.app.schemas import DataQuality, EntityKind, SimilarityTier
from follicle_backend.app.utils.logs import get_logger

# Purpose:
# Community signal for one product or routine: how people with similar hair
# engaged with it. Every event counts with a weight equal to the actor's
# similarity to the querying profile; actions are turned into rates over
# (weighted) views and blended with signed per-action weights around 0.5.

log = get_logger("engagement")

FetchEvents = Callable[[str], Iterable[InteractionEvent]]

# Actions shown per tier in reasons (views, dislikes and rerolls are not).
MEANINGFUL_TYPES: Dict[EntityKind, Tuple[str, ...]] = {
    EntityKind.PRODUCT: ("routine", "save", "like"),
    EntityKind.ROUTINE: ("adapt", "save", "like"),
}

VERBS: Dict[str, str] = {
    "routine": "added to routine",
    "save": "saved this",
    "like": "liked this",
    "adapt": "adapted this routine",
}

# Most to least similar.
TIER_LABELS: Tuple[Tuple[SimilarityTier, str], ...] = (
    (SimilarityTier.EXACT, "identical"),
    (SimilarityTier.VERY_HIGH, "nearly identical"),
    (SimilarityTier.HIGH, "very similar"),
    (SimilarityTier.MEDIUM, "similar"),
)


def engagement_weights(kind: EntityKind, policy: Optional[ScoringPolicy] = None) -> Dict[str, float]:
    p = policy or load_policy()
    if kind == EntityKind.PRODUCT:
        return p.product_engagement_weights
    if kind == EntityKind.ROUTINE:
        return p.routine_engagement_weights
    raise ValueError(f"engagement scoring does not apply to {kind!r}")


def empty_tiers(kind: EntityKind) -> TierCounts:
    return {tier.value: {t: 0 for t in MEANINGFUL_TYPES[kind]} for tier, _ in TIER_LABELS}


def tier_reasons(tiers: TierCounts, kind: EntityKind) -> List[str]:
    """'3 people with nearly identical hair saved this', most similar tier first."""
    out: List[str] = []
    for tier, label in TIER_LABELS:
        counts = tiers.get(tier.value, {})
        for action in MEANINGFUL_TYPES[kind]:
            n = int(counts.get(action, 0))
            if n > 0:
                who = "person" if n == 1 else "people"
                out.append(f"{n} {who} with {label} hair {VERBS[action]}")
    return out


def aggregate_engagement(
    events: Iterable[InteractionEvent],
    profile_code: str,
    *,
    kind: EntityKind = EntityKind.PRODUCT,
    include_reasons: bool = True,
    policy: Optional[ScoringPolicy] = None,
) -> EngagementResult:
    """Pure part of engagement scoring, over an already-fetched event list."""
    p = policy or load_policy()
    weights = engagement_weights(kind, p)
    meaningful = MEANINGFUL_TYPES[kind]

    events = list(events)
    if not events:
        return EngagementResult(score=p.neutral_score, data_quality=DataQuality.COLD_START)

    weighted: Dict[str, float] = {t: 0.0 for t in weights}
    tiers = empty_tiers(kind)
    kept = 0

    for ev in events:
        sim = similarity(profile_code, ev.profile_code, p)
        tier = similarity_tier(sim, p)
        if tier is None:
            continue
        kept += 1
        action = ev.type.value
        if action not in weighted:
            continue
        weighted[action] += sim
        if action in meaningful:
            tiers[tier.value][action] += 1

    # nothing similar enough: same answer as having no history at all
    if kept == 0:
        return EngagementResult(score=p.neutral_score, data_quality=DataQuality.NO_SIMILAR_ACTORS)

    score = p.neutral_score
    quality = DataQuality.NO_VIEWS
    views = weighted.get("view", 0.0)
    if views > 0:
        raw = sum(
            (weighted[action] / views) * w
            for action, w in weights.items()
            if action != "view"
        )
        score = max(0.0, min(1.0, raw + 0.5))
        quality = DataQuality.OK

    reasons = tier_reasons(tiers, kind)[: p.max_reasons] if include_reasons else []
    return EngagementResult(score=score, reasons=reasons, interactions_by_tier=tiers, data_quality=quality)


def score_by_engagement(
    entity_id: str,
    profile_code: str,
    fetch_events: FetchEvents,
    *,
    kind: EntityKind = EntityKind.PRODUCT,
    include_reasons: bool = True,
    policy: Optional[ScoringPolicy] = None,
) -> EngagementResult:
    """
    Fetch the entity's events and aggregate them. Store failures never
    propagate: they are logged and the entity scores neutral with no reasons.
    """
    p = policy or load_policy()
    engagement_weights(kind, p)   # reject unscored kinds up front
    try:
        events = list(fetch_events(entity_id))
        return aggregate_engagement(events, profile_code, kind=kind,
                                    include_reasons=include_reasons, policy=p)
    except Exception:
        log.exception(f"[engagement] falling back to neutral for {kind.value} {entity_id}")
        return EngagementResult(score=p.neutral_score, data_quality=DataQuality.ERROR)


__all__ = [
    "FetchEvents", "MEANINGFUL_TYPES", "VERBS", "TIER_LABELS",
    "engagement_weights", "empty_tiers", "tier_reasons",
    "aggregate_engagement", "score_by_engagement",
]
