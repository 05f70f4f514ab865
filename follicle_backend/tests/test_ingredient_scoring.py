import pytest

from follicle_backend.app.matching.ingredients import (
    INVALID_PROFILE_REASON,
    NO_INGREDIENT_DATA_REASON,
    ingredient_score_breakdown,
    match_category,
    position_bonus,
    score_by_ingredients,
    score_category,
)
from follicle_backend.app.matching.library_loader import get_ingredient_profiles
from follicle_backend.app.models.catalog import Product
from follicle_backend.app.schemas import DataQuality

# Only curly hair has opinions; every other attribute stays neutral.
CURLY_ONLY = {
    "hair_type": {
        "curly": {
            "beneficial": ["panthenol", "glycerin"],
            "avoid": ["sodium lauryl sulfate"],
        },
    },
}

def _product(*ingredients):
    return Product(id="p1", category="Shampoos", ingredients_normalized=list(ingredients))

def test_no_ingredients_is_neutral_with_marker(policy):
    result = score_by_ingredients(_product(), "CU-H-M-F-N", include_reasons=True, policy=policy)
    assert result.score == 0.5
    assert result.reasons == [NO_INGREDIENT_DATA_REASON]
    assert result.data_quality == DataQuality.NO_INGREDIENT_DATA

def test_invalid_code_is_neutral(policy):
    result = score_by_ingredients(_product("water"), "nope", include_reasons=True, policy=policy)
    assert result.score == 0.5
    assert result.reasons == [INVALID_PROFILE_REASON]
    assert result.data_quality == DataQuality.INVALID_PROFILE_CODE

def test_position_bonus_decays_linearly(policy):
    assert position_bonus(0, 4, policy) == pytest.approx(0.15)
    assert position_bonus(1, 4, policy) == pytest.approx(0.10)
    assert position_bonus(3, 4, policy) == 0.0

def test_last_position_gets_base_bonus_only(policy):
    # the shipped curly profile lists panthenol; nothing here is on its avoid list
    curly = get_ingredient_profiles()["hair_type"]["curly"]
    score = score_category(["water", "dimethicone", "panthenol"], curly, "curly hair", policy=policy)
    assert score == pytest.approx(0.6)

def test_avoided_ingredient_penalises_anywhere(policy):
    m = match_category(["sodium lauryl sulfate", "panthenol"], CURLY_ONLY["hair_type"]["curly"], policy)
    # 0.5 + 0.1 + 0 (last of 2) - 0.25
    assert m.score == pytest.approx(0.35)
    assert m.avoided == ["sodium lauryl sulfate"]

def test_substring_matching_runs_both_ways(policy):
    profile = {"beneficial": ["cocos nucifera oil"], "avoid": []}
    assert match_category(["oil", "water"], profile, policy).beneficial == [("cocos nucifera oil", 0)]
    profile = {"beneficial": ["oil"], "avoid": []}
    assert match_category(["water", "paraffinum liquidum oil"], profile, policy).beneficial == [("oil", 1)]

def test_category_score_is_clamped(policy):
    profile = {"beneficial": [], "avoid": ["a", "b", "c"]}
    assert match_category(["a", "b", "c"], profile, policy).score == 0.0
    profile = {"beneficial": [f"i{n}" for n in range(10)], "avoid": []}
    assert match_category([f"i{n}" for n in range(10)], profile, policy).score == 1.0

def test_attributes_blend_with_similarity_weights(policy):
    result = score_by_ingredients(_product("water", "dimethicone", "panthenol"), "CU-H-M-F-N",
                                  include_reasons=True, policy=policy, profiles=CURLY_ONLY)
    # hair_type (3/9) at 0.6, the other 6/9 neutral
    assert result.score == pytest.approx(0.6 * 3 / 9 + 0.5 * 6 / 9)
    assert result.reasons == ["Contains panthenol for curly hair"]
    assert result.data_quality == DataQuality.OK

def test_reasons_list_beneficial_by_position_and_first_avoided(policy):
    result = score_by_ingredients(
        _product("glycerin", "sodium lauryl sulfate", "panthenol"), "CU-H-M-F-N",
        include_reasons=True, policy=policy, profiles=CURLY_ONLY,
    )
    assert result.reasons == [
        "Contains glycerin, panthenol for curly hair",
        "⚠️ Contains sodium lauryl sulfate (not ideal for curly hair)",
    ]

def test_reasons_omitted_unless_requested(policy):
    result = score_by_ingredients(_product("panthenol"), "CU-H-M-F-N", policy=policy, profiles=CURLY_ONLY)
    assert result.reasons == []

@pytest.mark.parametrize("code", ["CU-H-M-F-N", "ST-L-L-F-N", "CO-H-H-C-V", "WV-M-M-M-S", "PR-L-H-C-N"])
def test_shipped_profiles_stay_in_bounds(policy, code):
    product = _product("aqua", "sodium laureth sulfate", "glycerin", "dimethicone",
                       "butyrospermum parkii butter", "panthenol", "parfum")
    result = score_by_ingredients(product, code, include_reasons=True, policy=policy)
    assert 0.0 <= result.score <= 1.0
    assert result.data_quality == DataQuality.OK

def test_breakdown_reports_every_attribute(policy):
    out = ingredient_score_breakdown(_product("water", "panthenol"), "CU-H-M-F-N",
                                     policy=policy, profiles=CURLY_ONLY)
    assert set(out["attributes"]) == {"hair_type", "porosity", "density", "thickness", "damage"}
    hair = out["attributes"]["hair_type"]
    assert hair["value"] == "curly"
    assert hair["beneficial_found"] == ["panthenol"]
    assert hair["weight"] == pytest.approx(3 / 9)
    assert out["attributes"]["porosity"]["score"] == 0.5
