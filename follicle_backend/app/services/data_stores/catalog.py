# follicle_backend/app/services/data_stores/catalog.py
from __future__ import annotations

from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from follicle_backend.app.matching.engine import MatchSources
from follicle_backend.app.models.catalog import Product, Routine
from follicle_backend.app.utils.logs import get_logger
from .documents import JsonDocumentStore
from .interactions import events_for

# Purpose:
# Read products and routines out of the document store as typed models.
# Documents that do not validate are skipped (and logged) instead of failing
# a whole catalog load.

PRODUCTS = "products"
ROUTINES = "routines"

log = get_logger("catalog")

M = TypeVar("M", bound=BaseModel)

def _parse(model: Type[M], doc: Dict[str, Any]) -> Optional[M]:
    try:
        return model(**doc)
    except (ValidationError, TypeError) as e:
        log.warning(f"[catalog] skipping malformed {model.__name__} {doc.get('id')!r}: {e.__class__.__name__}")
        return None

def load_products(store: JsonDocumentStore) -> List[Product]:
    items = [_parse(Product, doc) for doc in store.fetch_all(PRODUCTS)]
    return [p for p in items if p is not None]

def load_product(store: JsonDocumentStore, product_id: str) -> Optional[Product]:
    doc = store.fetch_by_id(PRODUCTS, product_id)
    return _parse(Product, doc) if doc is not None else None

def load_routine(store: JsonDocumentStore, routine_id: str) -> Optional[Routine]:
    """Any routine that is not deleted (private ones included)."""
    doc = store.fetch_by_id(ROUTINES, routine_id)
    routine = _parse(Routine, doc) if doc is not None else None
    if routine is None or routine.deleted_at:
        return None
    return routine

def load_public_routines(store: JsonDocumentStore) -> List[Routine]:
    items = [_parse(Routine, doc) for doc in store.fetch_where(ROUTINES, is_public=True)]
    return [r for r in items if r is not None and r.is_listed]

def upsert_product(store: JsonDocumentStore, product: Product) -> None:
    store.set(PRODUCTS, product.id, product.model_dump(mode="json"))

def upsert_routine(store: JsonDocumentStore, routine: Routine) -> None:
    store.set(ROUTINES, routine.id, routine.model_dump(mode="json"))

def store_sources(store: JsonDocumentStore) -> MatchSources:
    """Wire the engine's read side to this store."""
    return MatchSources(
        fetch_events=lambda kind, entity_id: events_for(store, kind, entity_id),
        product_lookup=lambda product_id: load_product(store, product_id),
        routine_lookup=lambda routine_id: load_routine(store, routine_id),
        all_products=lambda: load_products(store),
        all_routines=lambda: load_public_routines(store),
    )
