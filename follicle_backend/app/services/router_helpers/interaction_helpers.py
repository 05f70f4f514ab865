# follicle_backend/app/services/router_helpers/interaction_helpers.py
from __future__ import annotations
import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException, status

from follicle_backend.app.schemas import SCORED_KINDS, EntityKind, InteractionType
from follicle_backend.app.services.data_stores import (
    DuplicateInteraction,
    load_product,
    load_routine,
    record_interaction,
    remove_interaction,
)
from .scoring_helpers import current_store, get_rescorer, require_user

logger = logging.getLogger("uvicorn.error")

def _parse(kind: str, type_: str):
    try:
        return EntityKind(kind), InteractionType(type_)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                            detail=f"unsupported interaction {kind!r}/{type_!r}")

def _require_entity(kind: EntityKind, entity_id: str) -> None:
    store = current_store()
    found = True
    if kind == EntityKind.PRODUCT:
        found = load_product(store, entity_id) is not None
    elif kind == EntityKind.ROUTINE:
        found = load_routine(store, entity_id) is not None
    if not found:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{kind.value} not found: {entity_id}")

def _refresh_score(user: Dict[str, Any], user_id: str, kind: EntityKind, entity_id: str) -> Optional[Dict[str, Any]]:
    # the actor's own score for this entity reflects the change right away;
    # the event is already committed, so a failed refresh only loses the score
    if kind not in SCORED_KINDS or not user.get("profile_code"):
        return None
    try:
        return get_rescorer().rescore_one(user_id, kind, entity_id)
    except Exception:
        logger.exception(f"[interactions] rescore of {kind.value} {entity_id} for {user_id} failed")
        return None

# ---- public helpers used by router ----
def post_interaction(kind: str, entity_id: str, type_: str, user_id: str) -> Dict[str, Any]:
    k, t = _parse(kind, type_)
    user = require_user(user_id)
    _require_entity(k, entity_id)
    try:
        event = record_interaction(current_store(), user_id, k, entity_id, t)
    except DuplicateInteraction as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return {
        "interaction": event.model_dump(mode="json"),
        "score": _refresh_score(user, user_id, k, entity_id),
    }

def delete_interaction(kind: str, entity_id: str, type_: str, user_id: str) -> Dict[str, Any]:
    k, t = _parse(kind, type_)
    user = require_user(user_id)
    _require_entity(k, entity_id)
    try:
        removed = remove_interaction(current_store(), user_id, k, entity_id, t)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if removed == 0:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="interaction not found")
    return {"removed": removed, "score": _refresh_score(user, user_id, k, entity_id)}
