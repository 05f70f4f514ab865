from __future__ import annotations
from typing import Any, Dict
from fastapi import APIRouter, Query

from follicle_backend.app.schemas import PreviewRequest, SimilarityRequest
from follicle_backend.app.services.router_helpers.matching_helpers import (
    compare_codes as _compare,
    describe_code as _describe,
    preview as _preview,
    ingredient_breakdown as _breakdown,
)

router = APIRouter(prefix="/matching", tags=["matching"])

@router.post("/similarity")
def similarity(body: SimilarityRequest) -> Dict[str, Any]:
    return _compare(body)

@router.get("/profile-code/{code}")
def profile_code(code: str) -> Dict[str, Any]:
    return _describe(code)

@router.post("/preview")
def preview(body: PreviewRequest) -> Dict[str, Any]:
    """Score the catalog for any profile code without persisting anything."""
    return _preview(body)

@router.get("/ingredients/{product_id}")
def ingredient_breakdown(product_id: str, profile_code: str = Query(..., min_length=1)) -> Dict[str, Any]:
    return _breakdown(product_id, profile_code)
