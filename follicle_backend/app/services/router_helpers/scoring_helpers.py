# follicle_backend/app/services/router_helpers/scoring_helpers.py
from __future__ import annotations

from threading import Lock
from typing import Any, Dict, Optional

from fastapi import HTTPException, status

from follicle_backend.app.matching.engine import EntityNotFound
from follicle_backend.app.schemas import SCORED_KINDS, EntityKind
from follicle_backend.app.services.data_stores import JsonDocumentStore, get_store, get_user
from follicle_backend.app.services.scoring.generations import ScoreSetRegistry
from follicle_backend.app.services.scoring.rescoring import Rescorer

# ---- process-wide services (tests swap them via reset_services) ----
_LOCK = Lock()
_STORE: Optional[JsonDocumentStore] = None
_REGISTRY: Optional[ScoreSetRegistry] = None

def current_store() -> JsonDocumentStore:
    return _STORE or get_store()

def current_registry() -> ScoreSetRegistry:
    global _REGISTRY
    with _LOCK:
        if _REGISTRY is None:
            _REGISTRY = ScoreSetRegistry()
        return _REGISTRY

def reset_services(store: Optional[JsonDocumentStore] = None,
                   registry: Optional[ScoreSetRegistry] = None) -> None:
    global _STORE, _REGISTRY
    with _LOCK:
        _STORE, _REGISTRY = store, registry

def get_rescorer() -> Rescorer:
    return Rescorer(current_store(), current_registry())

# ---- shared validation ----
def parse_scored_kind(kind: str) -> EntityKind:
    try:
        k = EntityKind(kind)
    except ValueError:
        k = None
    if k not in SCORED_KINDS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"unsupported kind: {kind!r}")
    return k

def require_user(user_id: str) -> Dict[str, Any]:
    user = get_user(current_store(), user_id) if user_id else None
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"user not found: {user_id!r}")
    return user

def require_profile_code(user: Dict[str, Any]) -> str:
    code = str(user.get("profile_code") or "").strip()
    if not code:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT,
                            detail="user has not completed hair analysis")
    return code

# ---- public helpers used by router ----
def list_scores(kind: str, user_id: str, limit: Optional[int] = None) -> Dict[str, Any]:
    k = parse_scored_kind(kind)
    require_user(user_id)
    records = get_rescorer().read_scores(user_id, k, limit=limit)
    return {"user_id": user_id, "kind": k.value, "count": len(records), "data": records}

def get_score(kind: str, entity_id: str, user_id: str) -> Dict[str, Any]:
    k = parse_scored_kind(kind)
    require_user(user_id)
    record = get_rescorer().read_score(user_id, k, entity_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"no score for {k.value} {entity_id}")
    return record

def rescore_all(kind: str, user_id: str) -> Dict[str, Any]:
    k = parse_scored_kind(kind)
    require_profile_code(require_user(user_id))
    try:
        return get_rescorer().rescore_all(user_id, k)
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"rescore failed: {e}")

def rescore_one(kind: str, entity_id: str, user_id: str) -> Dict[str, Any]:
    k = parse_scored_kind(kind)
    require_profile_code(require_user(user_id))
    try:
        record = get_rescorer().rescore_one(user_id, k, entity_id)
    except EntityNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{k.value} not found: {entity_id}")
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"rescore failed: {e}")
    return record
