# follicle_backend/app/services/data_stores/users.py
from __future__ import annotations

import time
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError

from follicle_backend.app.matching.policy import ATTRIBUTES
from follicle_backend.app.matching.profile_code import encode
from follicle_backend.app.models.matching import HairProfile
from follicle_backend.app.utils.logs import get_logger
from .documents import JsonDocumentStore

# Purpose:
# Profile resolver: user id -> current profile code (or None before analysis).
# A user document looks like
#   {"profile_code": "CU-H-M-F-N", "hair_analysis": {...}, "budget": 30.0, "updated_at": ...}

USERS = "users"

log = get_logger("users")

def get_user(store: JsonDocumentStore, user_id: str) -> Optional[Dict[str, Any]]:
    return store.fetch_by_id(USERS, user_id)

def get_profile_code(store: JsonDocumentStore, user_id: str) -> Optional[str]:
    user = get_user(store, user_id) or {}
    code = str(user.get("profile_code") or "").strip()
    return code or None

def get_hair_profile(store: JsonDocumentStore, user_id: str) -> Optional[HairProfile]:
    raw = (get_user(store, user_id) or {}).get("hair_analysis")
    if not isinstance(raw, dict):
        return None
    try:
        return HairProfile(**{k: raw.get(k) for k in ATTRIBUTES})
    except ValidationError:
        log.warning(f"[users] stored hair analysis for {user_id} is malformed; ignoring")
        return None

def get_budget(store: JsonDocumentStore, user_id: str) -> Optional[float]:
    budget = (get_user(store, user_id) or {}).get("budget")
    if not isinstance(budget, (int, float)) or budget <= 0:
        return None   # unset or zero: no price filter
    return float(budget)

# Purpose:
# The five attributes decide the code; anything else (budget, notes) does not
# warrant a rescore.
def has_profile_changed(previous: Optional[HairProfile], current: HairProfile) -> bool:
    if previous is None:
        return True
    return any(previous.value_of(a) != current.value_of(a) for a in ATTRIBUTES)

def save_hair_profile(
    store: JsonDocumentStore,
    user_id: str,
    profile: HairProfile,
    budget: Optional[float] = None,
) -> Tuple[str, Optional[HairProfile]]:
    """
    Encode and store a fresh analysis. Returns (new code, previous profile).
    """
    previous = get_hair_profile(store, user_id)
    code = encode(profile)
    doc: Dict[str, Any] = {
        "profile_code": code,
        "hair_analysis": {a: profile.value_of(a) for a in ATTRIBUTES},
        "updated_at": time.time(),
    }
    if budget is not None:
        doc["budget"] = float(budget)
    store.set(USERS, user_id, doc, merge=True)
    log.info(f"[users] saved analysis for {user_id} -> {code}")
    return code, previous
