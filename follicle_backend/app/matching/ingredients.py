# follicle_backend/app/matching/ingredients.py
from __future__ import annotations

"""
Ingredient scoring: how well a product's ingredient list suits a profile code.

Each of the five hair attributes is scored on its own (start neutral, reward
beneficial ingredients with a position-aware bonus, penalise avoided ones),
then the five scores are blended with the normalized attribute weights that
similarity uses. Pure given (product, code, ingredient profiles): no I/O.

Matching is a case-insensitive substring test in either direction, so
"oil" in a list will match "argania spinosa kernel oil". That looseness is
intended.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from follicle_backend.app.matching.library_loader import get_ingredient_profiles
from follicle_backend.app.matching.policy import ATTRIBUTES, ScoringPolicy, load_policy
from follicle_backend.app.matching.profile_code import decode_for_display, try_decode_to_profile
from follicle_backend.app.models.catalog import Product
from follicle_backend.app.models.matching import IngredientResult
from follicle_backend.app.schemas import DataQuality

NO_INGREDIENT_DATA_REASON = "⚠️ Ingredient data not available"
INVALID_PROFILE_REASON = "⚠️ Could not analyze hair profile"

Profiles = Mapping[str, Mapping[str, Mapping[str, Sequence[str]]]]


@dataclass
class CategoryMatch:
    score: float
    beneficial: List[Tuple[str, int]] = field(default_factory=list)  # (ingredient, position)
    avoided: List[str] = field(default_factory=list)


def _matches(a: str, b: str) -> bool:
    return a in b or b in a


def position_bonus(position: int, total: int, policy: Optional[ScoringPolicy] = None) -> float:
    """Linear decay from max at position 0 to 0 at the last position."""
    p = policy or load_policy()
    if not p.use_position_scoring or total == 0:
        return 0.0
    return p.max_position_bonus * (1 - (position + 1) / total)


def match_category(
    ingredients: Sequence[str],
    profile: Optional[Mapping[str, Sequence[str]]],
    policy: Optional[ScoringPolicy] = None,
) -> CategoryMatch:
    p = policy or load_policy()
    if not profile:
        return CategoryMatch(score=p.neutral_score)

    total = len(ingredients)
    result = CategoryMatch(score=p.neutral_score)

    for wanted in profile.get("beneficial", []):
        w = wanted.lower()
        position = next((i for i, ing in enumerate(ingredients) if _matches(w, ing)), -1)
        if position != -1:
            result.beneficial.append((wanted, position))
            result.score += p.beneficial_bonus + position_bonus(position, total, p)

    for unwanted in profile.get("avoid", []):
        u = unwanted.lower()
        if any(_matches(u, ing) for ing in ingredients):
            result.avoided.append(unwanted)
            result.score += p.avoid_penalty

    result.score = max(0.0, min(1.0, result.score))
    return result


def score_category(
    ingredients: Sequence[str],
    profile: Optional[Mapping[str, Sequence[str]]],
    display: str,
    reasons: Optional[List[str]] = None,
    policy: Optional[ScoringPolicy] = None,
) -> float:
    """
    Score one attribute in [0, 1]. When `reasons` is a list, append up to one
    "Contains ..." line and one warning line, tagged with `display`.
    """
    p = policy or load_policy()
    m = match_category(ingredients, profile, p)
    if reasons is not None:
        top = sorted(m.beneficial, key=lambda item: item[1])[: p.max_beneficial_per_attribute]
        if top:
            reasons.append(f"Contains {', '.join(name for name, _ in top)} for {display}")
        avoided = m.avoided[: p.max_avoided_per_attribute]
        if avoided:
            reasons.append(f"⚠️ Contains {avoided[0]} (not ideal for {display})")
    return m.score


def _product_ingredients(product: Product) -> List[str]:
    return [ing.lower() for ing in (product.ingredients_normalized or [])]


def score_by_ingredients(
    product: Product,
    profile_code: str,
    include_reasons: bool = False,
    policy: Optional[ScoringPolicy] = None,
    profiles: Optional[Profiles] = None,
) -> IngredientResult:
    p = policy or load_policy()
    reasons: List[str] = []

    ingredients = _product_ingredients(product)
    if not ingredients:
        if include_reasons:
            reasons.append(NO_INGREDIENT_DATA_REASON)
        return IngredientResult(score=p.neutral_score, reasons=reasons,
                                data_quality=DataQuality.NO_INGREDIENT_DATA)

    hair = try_decode_to_profile(profile_code)
    display = decode_for_display(profile_code)
    if hair is None or display is None:
        if include_reasons:
            reasons.append(INVALID_PROFILE_REASON)
        return IngredientResult(score=p.neutral_score, reasons=reasons,
                                data_quality=DataQuality.INVALID_PROFILE_CODE)

    table = profiles if profiles is not None else get_ingredient_profiles()
    weights = p.normalized_attribute_weights()
    sink = reasons if include_reasons else None

    total = 0.0
    for attr in ATTRIBUTES:
        profile = table.get(attr, {}).get(hair.value_of(attr))
        total += score_category(ingredients, profile, display[attr], sink, p) * weights[attr]

    return IngredientResult(
        score=max(0.0, min(1.0, total)),
        reasons=reasons[: p.max_reasons],
        data_quality=DataQuality.OK,
    )


def ingredient_score_breakdown(
    product: Product,
    profile_code: str,
    policy: Optional[ScoringPolicy] = None,
    profiles: Optional[Profiles] = None,
) -> Dict[str, object]:
    """
    Per-attribute view of an ingredient score: score, weight, and which
    beneficial/avoided ingredients were found. For debugging and product pages.
    """
    p = policy or load_policy()
    overall = score_by_ingredients(product, profile_code, include_reasons=True, policy=p, profiles=profiles)
    out: Dict[str, object] = {
        "score": overall.score,
        "data_quality": overall.data_quality.value,
        "reasons": overall.reasons,
        "attributes": {},
    }
    hair = try_decode_to_profile(profile_code)
    ingredients = _product_ingredients(product)
    if hair is None or not ingredients:
        return out

    table = profiles if profiles is not None else get_ingredient_profiles()
    weights = p.normalized_attribute_weights()
    attributes: Dict[str, object] = {}
    for attr in ATTRIBUTES:
        value = hair.value_of(attr)
        m = match_category(ingredients, table.get(attr, {}).get(value), p)
        attributes[attr] = {
            "value": value,
            "score": m.score,
            "weight": weights[attr],
            "beneficial_found": [name for name, _ in sorted(m.beneficial, key=lambda item: item[1])],
            "avoided_found": list(m.avoided),
        }
    out["attributes"] = attributes
    return out


__all__ = [
    "NO_INGREDIENT_DATA_REASON", "INVALID_PROFILE_REASON", "CategoryMatch",
    "position_bonus", "match_category", "score_category",
    "score_by_ingredients", "ingredient_score_breakdown",
]
