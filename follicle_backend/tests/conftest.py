from __future__ import annotations
import os
import pytest
from fastapi.testclient import TestClient

from follicle_backend.app.db.session import make_engine
from follicle_backend.app.matching.policy import ScoringPolicy
from follicle_backend.app.models.catalog import Product, Routine
from follicle_backend.app.models.interactions import InteractionEvent
from follicle_backend.app.models.matching import HairProfile
from follicle_backend.app.schemas import EntityKind, InteractionType
from follicle_backend.app.services.data_stores import (
    JsonDocumentStore,
    save_hair_profile,
    upsert_product,
    upsert_routine,
)
from follicle_backend.app.services.router_helpers.scoring_helpers import reset_services
from follicle_backend.app.services.scoring.generations import ScoreSetRegistry

CURLY = "CU-H-M-F-N"

# --- Data tree override (traces and any default store land here) ---
@pytest.fixture(scope="session", autouse=True)
def tmp_data_tree(tmp_path_factory):
    tmp = tmp_path_factory.mktemp("data_tree")
    os.environ["DATA_DIR"] = str(tmp)
    return tmp

# --- Per-test stores ---
@pytest.fixture
def store(tmp_path) -> JsonDocumentStore:
    return JsonDocumentStore(tmp_path / "store")

@pytest.fixture
def registry(tmp_path) -> ScoreSetRegistry:
    return ScoreSetRegistry(make_engine(f"sqlite:///{tmp_path / 'scores.sqlite3'}"))

@pytest.fixture(autouse=True)
def wired_services(store, registry):
    """Routers and helpers see the per-test store and registry."""
    reset_services(store, registry)
    yield
    reset_services()

@pytest.fixture
def client() -> TestClient:
    from follicle_backend.app.main import app
    return TestClient(app)

@pytest.fixture
def policy() -> ScoringPolicy:
    # defaults only: no rules file, no env overrides
    return ScoringPolicy()

# --- Builders ---
@pytest.fixture
def make_event():
    def _make(type_, code, entity_id="p1", kind=EntityKind.PRODUCT, user_id="someone"):
        return InteractionEvent(
            user_id=user_id,
            profile_code=code,
            entity_id=entity_id,
            entity_kind=kind,
            type=InteractionType(type_),
        )
    return _make

@pytest.fixture
def seed_product(store):
    def _seed(pid, ingredients=(), category="Shampoos", price=None, **extra):
        product = Product(id=pid, category=category, name=f"Product {pid}", brand="Acme",
                          price=price, ingredients_normalized=list(ingredients), **extra)
        upsert_product(store, product)
        return product
    return _seed

@pytest.fixture
def seed_routine(store):
    def _seed(rid, steps, is_public=True, **extra):
        routine = Routine(id=rid, user_id="author", name=f"Routine {rid}",
                          is_public=is_public, steps=steps, **extra)
        upsert_routine(store, routine)
        return routine
    return _seed

@pytest.fixture
def seed_user(store):
    def _seed(user_id, hair_type="curly", porosity="high", density="medium",
              thickness="fine", damage="none", budget=None):
        profile = HairProfile(hair_type=hair_type, porosity=porosity, density=density,
                              thickness=thickness, damage=damage)
        code, _ = save_hair_profile(store, user_id, profile, budget=budget)
        return code
    return _seed
