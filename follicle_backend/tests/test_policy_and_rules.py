import pytest

from follicle_backend.app.matching.categories import STEP_CATEGORY_WEIGHTS
from follicle_backend.app.matching.library_loader import get_ingredient_profiles, get_scoring_policy_overrides
from follicle_backend.app.matching.policy import ATTRIBUTES, build_policy, load_policy
from follicle_backend.app.schemas import ProductCategory

def test_shipped_policy_matches_defaults():
    p = load_policy()
    assert (p.product_ingredient_weight, p.product_engagement_weight) == (0.6, 0.4)
    assert (p.routine_product_weight, p.routine_engagement_weight) == (0.1, 0.9)
    assert p.product_chunk_size == 2000
    assert p.write_batch_size == 500
    assert get_scoring_policy_overrides()["category_overrides"] == {}

def test_overrides_merge_and_env_wins():
    p = build_policy(
        {"attribute_weights": {"hair_type": 5}, "min_similarity": 0.5, "no_such_knob": 1},
        env={"FOLLICLE_PRODUCT_CHUNK_SIZE": "250"},
    )
    assert p.attribute_weights["hair_type"] == 5
    assert p.attribute_weights["porosity"] == 2.0
    assert p.min_similarity == 0.5
    assert p.product_chunk_size == 250

def test_invalid_policies_fail_loudly():
    with pytest.raises(ValueError):
        build_policy({"write_batch_size": 501}, env={})
    with pytest.raises(ValueError):
        build_policy({}, env={"FOLLICLE_MAX_WORKERS": "many"})
    with pytest.raises(ValueError):
        build_policy({"attribute_weights": {"hair_type": 0, "porosity": 0, "density": 0,
                                            "thickness": 0, "damage": 0}}, env={})

def test_every_category_has_a_step_weight():
    assert set(STEP_CATEGORY_WEIGHTS) == set(ProductCategory)
    assert all(0.5 <= w <= 1.0 for w in STEP_CATEGORY_WEIGHTS.values())

def test_ingredient_profiles_cover_every_attribute_value():
    from follicle_backend.app.schemas import Damage, Density, HairType, Porosity, Thickness
    enums = dict(zip(ATTRIBUTES, (HairType, Porosity, Density, Thickness, Damage)))
    profiles = get_ingredient_profiles()
    for attr, enum in enums.items():
        assert set(profiles[attr]) == {v.value for v in enum}
        for entry in profiles[attr].values():
            assert entry["beneficial"] == [i.lower() for i in entry["beneficial"]]
