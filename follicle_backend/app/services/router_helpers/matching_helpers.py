# follicle_backend/app/services/router_helpers/matching_helpers.py
from __future__ import annotations
from typing import Any, Dict

from fastapi import HTTPException, status

from follicle_backend.app.matching.engine import MatchEngine
from follicle_backend.app.matching.ingredients import ingredient_score_breakdown
from follicle_backend.app.matching.profile_code import decode_for_display, try_decode_to_profile
from follicle_backend.app.matching.similarity import is_similar_enough, similarity, similarity_tier
from follicle_backend.app.schemas import EntityKind, PreviewRequest, SimilarityRequest
from follicle_backend.app.services.data_stores import load_product, store_sources
from .scoring_helpers import current_store, parse_scored_kind

# ---- public helpers used by router ----
def compare_codes(body: SimilarityRequest) -> Dict[str, Any]:
    value = similarity(body.code_a, body.code_b)
    tier = similarity_tier(value)
    return {
        "similarity": value,
        "tier": tier.value if tier else None,
        "similar_enough": is_similar_enough(body.code_a, body.code_b),
    }

def describe_code(code: str) -> Dict[str, Any]:
    profile = try_decode_to_profile(code)
    return {
        "profile_code": code,
        "valid": profile is not None,
        "profile": profile.model_dump(mode="json") if profile else None,
        "display": decode_for_display(code),
    }

def preview(body: PreviewRequest) -> Dict[str, Any]:
    """Live scores for a code against the catalog; nothing is persisted."""
    kind = parse_scored_kind(body.kind.value)
    engine = MatchEngine(store_sources(current_store()))
    if kind == EntityKind.PRODUCT:
        scores = engine.score_all(body.profile_code, kind, category=body.category,
                                  max_price=body.max_price, limit=body.limit)
    else:
        scores = engine.score_all(body.profile_code, kind, limit=body.limit)
    return {
        "profile_code": body.profile_code,
        "kind": kind.value,
        "count": len(scores),
        "data": [s.model_dump(mode="json") for s in scores],
    }

def ingredient_breakdown(product_id: str, profile_code: str) -> Dict[str, Any]:
    product = load_product(current_store(), product_id)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"product not found: {product_id}")
    return {"product_id": product_id, "profile_code": profile_code,
            **ingredient_score_breakdown(product, profile_code)}
