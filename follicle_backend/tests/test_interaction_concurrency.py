import concurrent.futures as cf
import threading
import pytest
from fastapi.testclient import TestClient

from follicle_backend.app.schemas import EntityKind, InteractionType
from follicle_backend.app.services.data_stores import (
    DuplicateInteraction,
    events_for,
    list_interactions,
    record_interaction,
)

def test_parallel_interactions_are_all_recorded(client: TestClient, store, seed_user, seed_product):
    seed_product("sham", ["water", "glycerin"])
    users = [f"u{i}" for i in range(8)]
    for uid in users:
        seed_user(uid)

    def act(uid):
        return [
            client.post("/api/interactions/product/sham/view", params={"user_id": uid}),
            client.post("/api/interactions/product/sham/like", params={"user_id": uid}),
        ]

    with cf.ThreadPoolExecutor(max_workers=8) as ex:
        resps = [r for pair in ex.map(act, users) for r in pair]

    assert all(r.status_code == 200 for r in resps)
    events = events_for(store, EntityKind.PRODUCT, "sham")
    assert len(events) == 16
    assert sorted({e.user_id for e in events}) == sorted(users)
    # scores written mid-flight saw partial counts; a fresh rescore sees all of them
    r = client.post("/api/scores/product/sham/rescore", params={"user_id": "u0"})
    assert r.json()["breakdown"]["engagement_score"] == pytest.approx(0.75)

def test_same_user_racing_likes_keep_one_per_product(store, seed_user, seed_product):
    seed_user("alice")
    products = [f"p{i}" for i in range(20)]
    for pid in products:
        seed_product(pid, ["water"])
    barrier = threading.Barrier(6)

    def act(worker):
        barrier.wait()
        kept = 0
        for pid in products:
            type_ = InteractionType.DISLIKE if worker == 0 else InteractionType.LIKE
            try:
                record_interaction(store, "alice", EntityKind.PRODUCT, pid, type_)
                kept += 1
            except DuplicateInteraction:
                pass
        return kept

    with cf.ThreadPoolExecutor(max_workers=6) as ex:
        list(ex.map(act, range(6)))

    for pid in products:
        types = [e.type for e in list_interactions(store, EntityKind.PRODUCT, entity_id=pid, user_id="alice")]
        assert len(types) == 1
        assert types[0] in (InteractionType.LIKE, InteractionType.DISLIKE)
