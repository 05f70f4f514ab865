# follicle_backend/app/models/interactions.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from follicle_backend.app.schemas import EntityKind, InteractionType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InteractionEvent(BaseModel):
    """One append-only interaction. `profile_code` is the actor's code when it happened."""
    id: Optional[str] = None
    user_id: str
    profile_code: str
    entity_id: str
    entity_kind: EntityKind
    type: InteractionType
    timestamp: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(frozen=True, extra="ignore")


__all__ = ["InteractionEvent"]
