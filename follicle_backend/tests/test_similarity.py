import pytest

from follicle_backend.app.matching.similarity import is_similar_enough, similarity, similarity_tier
from follicle_backend.app.schemas import SimilarityTier

def test_single_thickness_difference(policy):
    assert similarity("CU-H-M-F-N", "CU-H-M-C-N", policy) == pytest.approx(7 / 9)

def test_identical_codes_are_one(policy):
    assert similarity("CU-H-M-F-N", "CU-H-M-F-N", policy) == 1.0
    # short-circuits before parsing
    assert similarity("garbage", "garbage", policy) == 1.0

def test_malformed_is_zero_not_an_error(policy):
    assert similarity("CU-H-M-F-N", "CU-H", policy) == 0.0
    assert similarity("", "CU-H-M-F-N", policy) == 0.0

@pytest.mark.parametrize("a,b", [
    ("CU-H-M-F-N", "WV-H-L-F-S"),
    ("ST-L-L-C-V", "CO-H-H-F-N"),
    ("PR-M-M-M-S", "PR-M-H-M-S"),
])
def test_symmetric_and_bounded(policy, a, b):
    ab, ba = similarity(a, b, policy), similarity(b, a, policy)
    assert ab == ba
    assert 0.0 <= ab <= 1.0

def test_nothing_in_common(policy):
    assert similarity("ST-L-L-C-V", "CO-H-H-F-N", policy) == 0.0

@pytest.mark.parametrize("other,tier", [
    ("CU-H-M-F-N", SimilarityTier.EXACT),
    ("CU-H-L-F-N", SimilarityTier.VERY_HIGH),   # 8/9
    ("CU-H-M-C-N", SimilarityTier.HIGH),        # 7/9
    ("WV-H-M-F-N", SimilarityTier.HIGH),        # 6/9
    ("WV-H-L-F-N", SimilarityTier.MEDIUM),      # 5/9
    ("WV-L-M-F-N", SimilarityTier.MEDIUM),      # 4/9, on the floor
    ("WV-L-L-F-N", None),                       # 3/9
])
def test_tiers(policy, other, tier):
    value = similarity("CU-H-M-F-N", other, policy)
    assert similarity_tier(value, policy) == tier
    assert is_similar_enough("CU-H-M-F-N", other, policy) is (tier is not None)
