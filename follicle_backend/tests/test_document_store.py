import concurrent.futures as cf
import pytest

from follicle_backend.app.schemas import EntityKind, InteractionType
from follicle_backend.app.services.data_stores import (
    BatchLimitExceeded,
    DocumentNotFound,
    DuplicateInteraction,
    chunked,
    events_for,
    list_interactions,
    load_public_routines,
    record_interaction,
    remove_interaction,
)

def test_set_fetch_merge_delete(store):
    store.set("things", "a", {"n": 1, "tag": "x"})
    store.set("things", "a", {"n": 2}, merge=True)
    assert store.get("things", "a") == {"n": 2, "tag": "x", "id": "a"}
    assert store.fetch_where("things", tag="x")[0]["id"] == "a"
    assert store.delete("things", "a") is True
    assert store.delete("things", "a") is False
    with pytest.raises(DocumentNotFound):
        store.get("things", "a")

def test_nested_collections_drop_cleanly(store):
    store.set("users/u1/product_scores/1", "p1", {"score": 0.5})
    assert store.count("users/u1/product_scores/1") == 1
    store.drop_collection("users/u1/product_scores/1")
    assert store.count("users/u1/product_scores/1") == 0
    assert not store.exists("users/u1/product_scores/1")

def test_rejects_path_escape(store):
    with pytest.raises(ValueError):
        store.set("../outside", "x", {})

def test_batch_is_capped_at_500(store):
    batch = store.batch()
    for i in range(500):
        batch.set("bulk", f"d{i}", {"i": i})
    with pytest.raises(BatchLimitExceeded):
        batch.set("bulk", "one-too-many", {})
    assert batch.commit() == 500
    assert store.count("bulk") == 500

def test_chunked_respects_size():
    sizes = [len(c) for c in chunked(range(1203), 500)]
    assert sizes == [500, 500, 203]

def test_parallel_writers_lose_nothing(store):
    def write(i):
        store.set("parallel", f"d{i}", {"i": i})

    with cf.ThreadPoolExecutor(max_workers=8) as ex:
        list(ex.map(write, range(40)))

    assert store.count("parallel") == 40

# --- interactions ---
def test_events_carry_actor_code(store, seed_user):
    code = seed_user("alice")
    event = record_interaction(store, "alice", EntityKind.PRODUCT, "p1", InteractionType.SAVE)
    assert event.profile_code == code
    assert [e.id for e in events_for(store, EntityKind.PRODUCT, "p1")] == [event.id]

def test_like_and_dislike_are_exclusive(store, seed_user):
    seed_user("alice")
    record_interaction(store, "alice", EntityKind.PRODUCT, "p1", InteractionType.LIKE)
    record_interaction(store, "alice", EntityKind.PRODUCT, "p1", InteractionType.DISLIKE)
    types = [e.type for e in list_interactions(store, EntityKind.PRODUCT, entity_id="p1", user_id="alice")]
    assert types == [InteractionType.DISLIKE]

def test_duplicates_rejected_except_views(store, seed_user):
    seed_user("alice")
    record_interaction(store, "alice", EntityKind.ROUTINE, "r1", InteractionType.SAVE)
    with pytest.raises(DuplicateInteraction):
        record_interaction(store, "alice", EntityKind.ROUTINE, "r1", InteractionType.SAVE)
    record_interaction(store, "alice", EntityKind.ROUTINE, "r1", InteractionType.VIEW)
    record_interaction(store, "alice", EntityKind.ROUTINE, "r1", InteractionType.VIEW)
    assert len(events_for(store, EntityKind.ROUTINE, "r1")) == 3

def test_type_must_fit_kind(store):
    with pytest.raises(ValueError):
        record_interaction(store, "alice", EntityKind.ROUTINE, "r1", InteractionType.REROLL)
    with pytest.raises(ValueError):
        record_interaction(store, "alice", EntityKind.PRODUCT, "p1", InteractionType.ALLERGIC)
    record_interaction(store, "alice", EntityKind.INGREDIENT, "glycerin", InteractionType.ALLERGIC)

def test_remove_interaction(store, seed_user):
    seed_user("alice")
    record_interaction(store, "alice", EntityKind.PRODUCT, "p1", InteractionType.LIKE)
    assert remove_interaction(store, "alice", EntityKind.PRODUCT, "p1", InteractionType.LIKE) == 1
    assert remove_interaction(store, "alice", EntityKind.PRODUCT, "p1", InteractionType.LIKE) == 0

def test_only_listed_routines_are_public(seed_routine, store):
    seed_routine("pub", [])
    seed_routine("priv", [], is_public=False)
    seed_routine("gone", [], deleted_at="2024-01-01T00:00:00Z")
    assert [r.id for r in load_public_routines(store)] == ["pub"]

def test_malformed_catalog_documents_are_skipped(store, seed_product):
    from follicle_backend.app.services.data_stores import load_products
    seed_product("good", ["water"])
    store.set("products", "bad", {"category": "Not A Category"})
    assert [p.id for p in load_products(store)] == ["good"]
