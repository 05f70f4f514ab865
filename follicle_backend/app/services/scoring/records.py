# follicle_backend/app/services/scoring/records.py
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from follicle_backend.app.models.catalog import Product, Routine
from follicle_backend.app.models.matching import MatchScore

# Purpose:
# Persisted score documents, one per (user, entity). They carry enough
# display data about the entity that a list page needs no join.

ROUTINE_PREVIEW_STEPS = 3


def _score_fields(score: MatchScore, rank: Optional[int], scored_at: float) -> Dict[str, Any]:
    return {
        "score": score.total_score,
        "rank": rank,
        "breakdown": dict(score.breakdown),
        "match_reasons": list(score.match_reasons),
        "interactions_by_tier": score.interactions_by_tier,
        "data_quality": {k: v.value for k, v in score.data_quality.items()},
        "scored_at": scored_at,
    }


def product_record(score: MatchScore, product: Optional[Product], rank: Optional[int],
                   scored_at: float) -> Dict[str, Any]:
    rec = _score_fields(score, rank, scored_at)
    if product is not None:
        rec.update({
            "category": product.category.value,
            "product_name": product.name,
            "product_brand": product.brand,
            "product_image_url": product.image_url,
            "product_price": product.price,
            "ingredient_refs": list(product.ingredient_refs),
        })
    return rec


def _step_preview(step, product_lookup: Callable[[str], Optional[Product]]) -> Dict[str, Any]:
    product = None
    if step.product_id:
        try:
            product = product_lookup(step.product_id)
        except Exception:
            product = None
    return {
        "order": step.order,
        "step_name": step.step_name,
        "product_id": step.product_id,
        "product_name": product.name if product else None,
        "product_brand": product.brand if product else None,
        "product_image_url": product.image_url if product else None,
    }


def routine_record(score: MatchScore, routine: Optional[Routine], rank: Optional[int], scored_at: float,
                   product_lookup: Callable[[str], Optional[Product]]) -> Dict[str, Any]:
    rec = _score_fields(score, rank, scored_at)
    if routine is not None:
        steps: List[Dict[str, Any]] = [
            _step_preview(step, product_lookup)
            for step in sorted(routine.steps, key=lambda s: s.order)[:ROUTINE_PREVIEW_STEPS]
        ]
        rec.update({
            "routine_name": routine.name,
            "routine_step_count": len(routine.steps),
            "routine_frequency": routine.frequency.model_dump(mode="json") if routine.frequency else None,
            "routine_user_id": routine.user_id,
            "routine_is_public": routine.is_public,
            "routine_steps": steps,
        })
    return rec


__all__ = ["ROUTINE_PREVIEW_STEPS", "product_record", "routine_record"]
