from __future__ import annotations
from typing import Any, Dict, Optional
from fastapi import APIRouter, Query

from follicle_backend.app.schemas import RescoreSummaryOut
from follicle_backend.app.services.router_helpers.scoring_helpers import (
    list_scores as _list,
    get_score as _get,
    rescore_all as _rescore_all,
    rescore_one as _rescore_one,
)

router = APIRouter(prefix="/scores", tags=["scores"])

# --- reads (live generation only) ---
@router.get("/{kind}")
def list_scores(kind: str, user_id: str = Query(...),
                limit: Optional[int] = Query(None, ge=1, le=10000)) -> Dict[str, Any]:
    return _list(kind, user_id, limit)

@router.get("/{kind}/{entity_id}")
def get_score(kind: str, entity_id: str, user_id: str = Query(...)) -> Dict[str, Any]:
    return _get(kind, entity_id, user_id)

# --- rescoring ---
@router.post("/{kind}/rescore", response_model=RescoreSummaryOut)
def rescore_all(kind: str, user_id: str = Query(...)) -> Dict[str, Any]:
    """Rebuild every score of this kind for the user and publish the new set."""
    return _rescore_all(kind, user_id)

@router.post("/{kind}/{entity_id}/rescore")
def rescore_one(kind: str, entity_id: str, user_id: str = Query(...)) -> Dict[str, Any]:
    return _rescore_one(kind, entity_id, user_id)
