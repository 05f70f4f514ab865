from __future__ import annotations
from typing import Any, Dict
from fastapi import APIRouter

# Keep routers skinny; all persistence lives in helpers.
from follicle_backend.app.schemas import HairAnalysisIn
from follicle_backend.app.services.router_helpers.profile_helpers import (
    get_profile as _get,
    post_analysis as _post_analysis,
)

router = APIRouter(prefix="/profile", tags=["profile"])

@router.get("/{user_id}")
def get_profile(user_id: str) -> Dict[str, Any]:
    return _get(user_id)

@router.post("/{user_id}/analysis")
def post_analysis(user_id: str, payload: HairAnalysisIn) -> Dict[str, Any]:
    """
    Store a fresh hair analysis; rescoring runs when the profile code inputs changed.
    """
    return _post_analysis(user_id, payload)
