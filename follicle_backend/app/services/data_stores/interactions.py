# follicle_backend/app/services/data_stores/interactions.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import ValidationError

from follicle_backend.app.models.interactions import InteractionEvent
from follicle_backend.app.schemas import ALLOWED_INTERACTIONS, EntityKind, InteractionType
from follicle_backend.app.utils.logs import get_logger
from .documents import JsonDocumentStore, new_id
from .users import get_profile_code

# Purpose:
# Append-only interaction log, one collection per entity kind
# ("product_interactions", "routine_interactions", "ingredient_interactions").
# Views may repeat; every other type is kept once per (user, entity), and
# like/dislike retract each other.

log = get_logger("interactions")

_OPPOSITE = {
    InteractionType.LIKE: InteractionType.DISLIKE,
    InteractionType.DISLIKE: InteractionType.LIKE,
}

class DuplicateInteraction(ValueError):
    """The user already has this (non-view) interaction with the entity."""

def collection_for(kind: EntityKind) -> str:
    return f"{EntityKind(kind).value}_interactions"

def _check_type(kind: EntityKind, type_: InteractionType) -> None:
    if type_ not in ALLOWED_INTERACTIONS[kind]:
        allowed = ", ".join(sorted(t.value for t in ALLOWED_INTERACTIONS[kind]))
        raise ValueError(f"invalid {kind.value} interaction {type_.value!r}; must be one of: {allowed}")

def _parse(doc: dict) -> Optional[InteractionEvent]:
    try:
        return InteractionEvent(**doc)
    except (ValidationError, TypeError):
        log.warning(f"[interactions] skipping malformed event {doc.get('id')!r}")
        return None

def list_interactions(
    store: JsonDocumentStore,
    kind: EntityKind,
    entity_id: Optional[str] = None,
    user_id: Optional[str] = None,
    type_: Optional[InteractionType] = None,
) -> List[InteractionEvent]:
    where = {}
    if entity_id is not None:
        where["entity_id"] = entity_id
    if user_id is not None:
        where["user_id"] = user_id
    if type_ is not None:
        where["type"] = InteractionType(type_).value
    events = [_parse(doc) for doc in store.fetch_where(collection_for(kind), **where)]
    return [ev for ev in events if ev is not None]

def events_for(store: JsonDocumentStore, kind: EntityKind, entity_id: str) -> List[InteractionEvent]:
    """Every event recorded against one entity (the engagement scorer's query)."""
    return list_interactions(store, kind, entity_id=entity_id)

def record_interaction(
    store: JsonDocumentStore,
    user_id: str,
    kind: EntityKind,
    entity_id: str,
    type_: InteractionType,
) -> InteractionEvent:
    kind, type_ = EntityKind(kind), InteractionType(type_)
    _check_type(kind, type_)
    collection = collection_for(kind)

    # the duplicate check and the write must not interleave with another request
    with store.transaction():
        if type_ != InteractionType.VIEW:
            if store.fetch_where(collection, user_id=user_id, entity_id=entity_id, type=type_.value):
                raise DuplicateInteraction(f"{user_id} already has {type_.value} on {kind.value} {entity_id}")

        event = InteractionEvent(
            id=new_id(),
            user_id=user_id,
            profile_code=get_profile_code(store, user_id) or "",
            entity_id=entity_id,
            entity_kind=kind,
            type=type_,
            timestamp=datetime.now(timezone.utc),
        )

        batch = store.batch()
        opposite = _OPPOSITE.get(type_)
        if opposite is not None:
            for doc in store.fetch_where(collection, user_id=user_id, entity_id=entity_id, type=opposite.value):
                batch.delete(collection, doc["id"])
        batch.set(collection, event.id, event.model_dump(mode="json"))
        batch.commit()
    return event

def remove_interaction(
    store: JsonDocumentStore,
    user_id: str,
    kind: EntityKind,
    entity_id: str,
    type_: InteractionType,
) -> int:
    """Delete the user's interactions of this type on the entity. Returns how many went."""
    kind, type_ = EntityKind(kind), InteractionType(type_)
    _check_type(kind, type_)
    collection = collection_for(kind)
    with store.transaction():
        docs = store.fetch_where(collection, user_id=user_id, entity_id=entity_id, type=type_.value)
        if not docs:
            return 0
        batch = store.batch()
        for doc in docs:
            batch.delete(collection, doc["id"])
        return batch.commit()
