from __future__ import annotations
from typing import Dict, Optional, Union

from follicle_backend.app.schemas import ProductCategory

# Purpose:
# Importance of each product category as a routine step (0.5 to 1.0).
# Core cleansing/conditioning weigh most, styling tools least.
STEP_CATEGORY_WEIGHTS: Dict[ProductCategory, float] = {
    ProductCategory.SHAMPOOS: 1.0,
    ProductCategory.CONDITIONERS: 1.0,
    ProductCategory.HAIR_MASKS: 0.95,
    ProductCategory.LEAVE_IN_TREATMENTS: 0.9,
    ProductCategory.SCALP_TREATMENTS: 0.9,
    ProductCategory.LEAVE_IN_CONDITIONERS: 0.85,
    ProductCategory.HAIR_OILS: 0.8,
    ProductCategory.HAIR_SERUMS: 0.8,
    ProductCategory.DETANGLERS: 0.75,
    ProductCategory.STYLING_CREAMS_SPRAYS: 0.7,
    ProductCategory.GEL_POMADE_WAX: 0.7,
    ProductCategory.MOUSSE_FOAM: 0.65,
    ProductCategory.HAIR_SPRAYS: 0.6,
    ProductCategory.HEAT_PROTECTANTS: 0.65,
    ProductCategory.DRY_SHAMPOOS: 0.6,
    ProductCategory.SCALP_SCRUBS: 0.7,
    ProductCategory.STYLING_TOOLS: 0.5,
    ProductCategory.OTHER_HAIR_CLEANSERS: 0.8,
    ProductCategory.HAIR_LOSS: 0.85,
    ProductCategory.OTHER_HAIRCARE: 0.7,
    ProductCategory.OTHER_STYLING: 0.6,
}

UNKNOWN_STEP_WEIGHT = 0.5

# Every category must carry a weight; fail at import rather than at scoring time.
_missing = [c.value for c in ProductCategory if c not in STEP_CATEGORY_WEIGHTS]
if _missing:
    raise RuntimeError(f"STEP_CATEGORY_WEIGHTS missing categories: {_missing}")


def parse_category(label: Union[str, ProductCategory, None]) -> Optional[ProductCategory]:
    if isinstance(label, ProductCategory):
        return label
    try:
        return ProductCategory(str(label or "").strip())
    except ValueError:
        return None


def step_category_weight(label: Union[str, ProductCategory, None]) -> float:
    category = parse_category(label)
    if category is None:
        return UNKNOWN_STEP_WEIGHT
    return STEP_CATEGORY_WEIGHTS[category]
