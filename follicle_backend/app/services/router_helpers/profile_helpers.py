# follicle_backend/app/services/router_helpers/profile_helpers.py
from __future__ import annotations
from typing import Any, Dict

from fastapi import HTTPException, status

from follicle_backend.app.matching.policy import ATTRIBUTES
from follicle_backend.app.matching.profile_code import decode_for_display
from follicle_backend.app.models.matching import HairProfile
from follicle_backend.app.schemas import HairAnalysisIn
from follicle_backend.app.services.data_stores import save_hair_profile
from .scoring_helpers import current_store, get_rescorer, require_user

# ---- public helpers used by router ----
def get_profile(user_id: str) -> Dict[str, Any]:
    """Stored analysis, code and display phrases for one user."""
    user = require_user(user_id)
    code = user.get("profile_code")
    return {
        "user_id": user_id,
        "profile_code": code,
        "hair_analysis": user.get("hair_analysis"),
        "display": decode_for_display(code) if code else None,
        "budget": user.get("budget"),
    }

def post_analysis(user_id: str, payload: HairAnalysisIn) -> Dict[str, Any]:
    """
    Save a (re)taken analysis. Scores are rebuilt for both kinds only when
    one of the five attributes changed.
    """
    uid = (user_id or "").strip()
    if not uid:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="user_id missing")
    profile = HairProfile(**{a: getattr(payload, a) for a in ATTRIBUTES})
    try:
        code, previous = save_hair_profile(current_store(), uid, profile, budget=payload.budget)
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"save profile failed: {e}")
    try:
        rescored = get_rescorer().on_profile_saved(uid, previous, profile)
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"rescore failed: {e}")
    return {
        "user_id": uid,
        "profile_code": code,
        "changed": bool(rescored),
        "rescored": rescored,
    }
