# follicle_backend/app/services/data_stores/__init__.py
"""
Unified export surface for data store helpers.

Import from here in routers/engine code, e.g.:
    from follicle_backend.app.services.data_stores import (
        get_store, JsonDocumentStore,
        get_profile_code, save_hair_profile,
        record_interaction, events_for,
        load_products, store_sources,
    )
"""

from __future__ import annotations

from threading import Lock
from typing import Optional

# ---- Low-level IO helpers ----
from .io_utils import read_json, atomic_write, append_jsonl  # noqa: F401

# ---- Document store ----
from .documents import (  # noqa: F401
    MAX_BATCH_OPS,
    BatchLimitExceeded,
    DocumentNotFound,
    JsonDocumentStore,
    WriteBatch,
    chunked,
    new_id,
)

# ---- Users / profile resolver ----
from .users import (  # noqa: F401
    USERS,
    get_user,
    get_profile_code,
    get_hair_profile,
    get_budget,
    has_profile_changed,
    save_hair_profile,
)

# ---- Interactions ----
from .interactions import (  # noqa: F401
    DuplicateInteraction,
    collection_for,
    events_for,
    list_interactions,
    record_interaction,
    remove_interaction,
)

# ---- Catalog ----
from .catalog import (  # noqa: F401
    PRODUCTS,
    ROUTINES,
    load_product,
    load_products,
    load_public_routines,
    load_routine,
    store_sources,
    upsert_product,
    upsert_routine,
)

_STORE: Optional[JsonDocumentStore] = None
_STORE_LOCK = Lock()

def get_store() -> JsonDocumentStore:
    """Process-wide store rooted at DATA_DIR/store (FastAPI dependency)."""
    global _STORE
    with _STORE_LOCK:
        if _STORE is None:
            _STORE = JsonDocumentStore()
        return _STORE

__all__ = [
    # io_utils
    "read_json", "atomic_write", "append_jsonl",
    # documents
    "MAX_BATCH_OPS", "BatchLimitExceeded", "DocumentNotFound", "JsonDocumentStore",
    "WriteBatch", "chunked", "new_id", "get_store",
    # users
    "USERS", "get_user", "get_profile_code", "get_hair_profile", "get_budget",
    "has_profile_changed", "save_hair_profile",
    # interactions
    "DuplicateInteraction", "collection_for", "events_for", "list_interactions",
    "record_interaction", "remove_interaction",
    # catalog
    "PRODUCTS", "ROUTINES", "load_product", "load_products", "load_public_routines",
    "load_routine", "store_sources", "upsert_product", "upsert_routine",
]
