from dataclasses import replace
import pytest

from follicle_backend.app.matching.engine import EntityNotFound
from follicle_backend.app.matching.policy import ScoringPolicy
from follicle_backend.app.models.catalog import RoutineStep
from follicle_backend.app.models.matching import HairProfile
from follicle_backend.app.schemas import EntityKind, InteractionType
from follicle_backend.app.services.data_stores import record_interaction
from follicle_backend.app.services.scoring.generations import SetStatus, records_collection
from follicle_backend.app.services.scoring.rescoring import Rescorer

# Purpose:
# Bulk rescoring writes a new score set, verifies it and only then makes it
# live; readers never see a partial set.

@pytest.fixture
def rescorer(store, registry):
    return Rescorer(store, registry, ScoringPolicy())

@pytest.fixture
def catalog(seed_product, seed_routine):
    seed_product("sham", ["water", "sodium lauryl sulfate"], price=12.0)
    seed_product("oil", ["argania spinosa kernel oil", "glycerin"], category="Hair Oils", price=40.0)
    seed_product("mask", [], category="Hair Masks")
    seed_routine("r1", [RoutineStep(order=1, step_name="Shampoos", product_id="sham"),
                        RoutineStep(order=2, step_name="Hair Oils", product_id="oil")])
    seed_routine("r2", [RoutineStep(order=1, step_name="Finger detangle")])

def test_no_profile_code_skips(rescorer, catalog):
    out = rescorer.rescore_all("nobody", EntityKind.PRODUCT)
    assert out["skipped_reason"] == "no_profile_code"
    assert rescorer.read_scores("nobody", EntityKind.PRODUCT) == []

def test_rescore_publishes_ranked_records(rescorer, registry, catalog, seed_user):
    seed_user("alice")
    out = rescorer.rescore_all("alice", EntityKind.PRODUCT)
    assert out["written"] == out["verified"] == 3
    live = registry.published("alice", EntityKind.PRODUCT)
    assert live.id == out["generation_id"]
    assert live.record_count == 3

    records = rescorer.read_scores("alice", EntityKind.PRODUCT)
    assert [r["rank"] for r in records] == [1, 2, 3]
    scores = [r["score"] for r in records]
    assert scores == sorted(scores, reverse=True)
    top = records[0]
    assert {"breakdown", "match_reasons", "data_quality", "product_name", "category"} <= set(top)

def test_budget_filters_bulk_product_rescore(rescorer, catalog, seed_user):
    seed_user("bob", budget=20.0)
    rescorer.rescore_all("bob", EntityKind.PRODUCT)
    ids = {r["id"] for r in rescorer.read_scores("bob", EntityKind.PRODUCT)}
    assert ids == {"sham", "mask"}   # mask has no price

def test_zero_budget_means_no_price_filter(rescorer, catalog, seed_user):
    seed_user("zoe", budget=0.0)
    rescorer.rescore_all("zoe", EntityKind.PRODUCT)
    ids = {r["id"] for r in rescorer.read_scores("zoe", EntityKind.PRODUCT)}
    assert ids == {"sham", "oil", "mask"}

def test_second_run_swaps_generation_and_purges_the_old_one(rescorer, registry, store, catalog, seed_user):
    seed_user("alice")
    first = rescorer.rescore_all("alice", EntityKind.ROUTINE)
    second = rescorer.rescore_all("alice", EntityKind.ROUTINE)
    assert second["generation_id"] != first["generation_id"]
    assert registry.published("alice", EntityKind.ROUTINE).id == second["generation_id"]
    assert not store.exists(records_collection("alice", EntityKind.ROUTINE, first["generation_id"]))
    assert len(rescorer.read_scores("alice", EntityKind.ROUTINE)) == 2

def test_abandoned_draft_is_never_read_and_later_purged(rescorer, registry, store, catalog, seed_user):
    seed_user("alice")
    crashed = registry.begin_draft("alice", EntityKind.PRODUCT)
    store.set(records_collection("alice", EntityKind.PRODUCT, crashed.id), "sham", {"score": 0.99})
    assert rescorer.read_scores("alice", EntityKind.PRODUCT) == []

    rescorer.rescore_all("alice", EntityKind.PRODUCT)
    assert not store.exists(records_collection("alice", EntityKind.PRODUCT, crashed.id))
    assert all(r["score"] != 0.99 for r in rescorer.read_scores("alice", EntityKind.PRODUCT))

def test_short_write_leaves_previous_set_live(rescorer, registry, store, catalog, seed_user, monkeypatch):
    seed_user("alice")
    good = rescorer.rescore_all("alice", EntityKind.PRODUCT)

    real_count = store.count
    monkeypatch.setattr(store, "count", lambda collection: real_count(collection) - 1)
    out = rescorer.rescore_all("alice", EntityKind.PRODUCT)

    assert out["skipped_reason"] == "verification_failed"
    assert registry.published("alice", EntityKind.PRODUCT).id == good["generation_id"]
    monkeypatch.undo()
    assert len(rescorer.read_scores("alice", EntityKind.PRODUCT)) == 3

def test_writes_are_batched(store, registry, catalog, seed_user):
    seed_user("alice")
    rescorer = Rescorer(store, registry, replace(ScoringPolicy(), write_batch_size=2))
    out = rescorer.rescore_all("alice", EntityKind.PRODUCT)
    assert out["batches"] == [2, 1]

def test_rescore_one_patches_live_set(rescorer, store, catalog, seed_user):
    seed_user("alice")
    rescorer.rescore_all("alice", EntityKind.PRODUCT)
    before = rescorer.read_score("alice", EntityKind.PRODUCT, "oil")

    record_interaction(store, "alice", EntityKind.PRODUCT, "oil", InteractionType.VIEW)
    record_interaction(store, "alice", EntityKind.PRODUCT, "oil", InteractionType.SAVE)
    after = rescorer.rescore_one("alice", EntityKind.PRODUCT, "oil")

    assert after["score"] > before["score"]
    assert after["rank"] == before["rank"]
    assert rescorer.read_score("alice", EntityKind.PRODUCT, "oil")["score"] == after["score"]
    assert "1 person with identical hair saved this" in after["match_reasons"]

def test_rescore_one_without_prior_set(rescorer, registry, catalog, seed_user):
    seed_user("alice")
    record = rescorer.rescore_one("alice", EntityKind.ROUTINE, "r1")
    assert record["id"] == "r1"
    assert record["rank"] is None
    assert record["routine_steps"][0]["product_name"] == "Product sham"
    assert registry.published("alice", EntityKind.ROUTINE).record_count == 1

def test_rescore_one_unknown_entity(rescorer, catalog, seed_user):
    seed_user("alice")
    with pytest.raises(EntityNotFound):
        rescorer.rescore_one("alice", EntityKind.PRODUCT, "missing")

def test_profile_resave_only_rescores_on_change(rescorer, catalog, seed_user):
    seed_user("alice")
    same = HairProfile(hair_type="curly", porosity="high", density="medium", thickness="fine", damage="none")
    assert rescorer.on_profile_saved("alice", same, same) == []

    changed = HairProfile(hair_type="curly", porosity="low", density="medium", thickness="fine", damage="none")
    runs = rescorer.on_profile_saved("alice", same, changed)
    assert [r["kind"] for r in runs] == ["product", "routine"]

def test_registry_statuses(registry):
    a = registry.begin_draft("u", EntityKind.PRODUCT)
    registry.publish(a.id, 0)
    b = registry.begin_draft("u", EntityKind.PRODUCT)
    registry.publish(b.id, 0)
    stale = registry.stale("u", EntityKind.PRODUCT)
    assert [(r.id, r.status) for r in stale] == [(a.id, SetStatus.RETIRED.value)]
    with pytest.raises(ValueError):
        registry.publish(b.id, 0)
