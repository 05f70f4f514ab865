from __future__ import annotations
import logging
from typing import Any, Dict
from fastapi import APIRouter, HTTPException, Query, status

from follicle_backend.app.services.router_helpers.interaction_helpers import (
    post_interaction as _post,
    delete_interaction as _delete,
)

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/interactions", tags=["interactions"])

@router.post("/{kind}/{entity_id}/{type_}")
def post_interaction(kind: str, entity_id: str, type_: str, user_id: str = Query(...)) -> Dict[str, Any]:
    """Record an interaction, then refresh the actor's score for that entity."""
    try:
        return _post(kind, entity_id, type_, user_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("interaction write failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"interaction failed: {e}")

@router.delete("/{kind}/{entity_id}/{type_}")
def delete_interaction(kind: str, entity_id: str, type_: str, user_id: str = Query(...)) -> Dict[str, Any]:
    try:
        return _delete(kind, entity_id, type_, user_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("interaction delete failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"interaction failed: {e}")
