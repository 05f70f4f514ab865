from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from follicle_backend.app.matching.categories import step_category_weight
from follicle_backend.app.matching.policy import ScoringPolicy, load_policy
from follicle_backend.app.models.catalog import Frequency, Product, Routine
from follicle_backend.app.schemas import FrequencyUnit
from follicle_backend.app.utils.logs import get_logger

# Purpose:
# A routine's "product quality": each step's product score, weighted by how
# much that step category matters and how often the step is done.

log = get_logger("routines")

ProductLookup = Callable[[str], Optional[Product]]
ScoreProduct = Callable[[Product, str], float]

_TIMES_PER_MONTH = {
    FrequencyUnit.DAY: 30.0,
    FrequencyUnit.WEEK: 4.0,
    FrequencyUnit.MONTH: 1.0,
}


def frequency_weight(frequency: Frequency) -> float:
    """Occurrences per month scaled to [0.1, 1.0]: daily is 1.0, monthly hits the floor."""
    tpm = _TIMES_PER_MONTH[FrequencyUnit(frequency.unit)] / max(int(frequency.interval), 1)
    return max(min(tpm / 30.0, 1.0), 0.1)


@dataclass
class RoutineProductScore:
    score: float
    scored_steps: int = 0
    missing_products: List[str] = field(default_factory=list)


def aggregate_routine_products(
    routine: Routine,
    product_lookup: ProductLookup,
    profile_code: str,
    score_product: ScoreProduct,
    policy: Optional[ScoringPolicy] = None,
) -> RoutineProductScore:
    p = policy or load_policy()
    out = RoutineProductScore(score=p.neutral_score)
    weighted_sum = 0.0
    total_weight = 0.0

    for step in routine.steps:
        if not step.product_id:
            continue
        combined = step_category_weight(step.step_name) * frequency_weight(step.frequency)
        if combined <= 0:
            continue
        try:
            product = product_lookup(step.product_id)
        except Exception:
            log.exception(f"[routines] lookup failed for product {step.product_id} in routine {routine.id}")
            product = None
        if product is None:
            log.warning(f"[routines] product not found: {step.product_id} (routine {routine.id})")
            out.missing_products.append(step.product_id)
            continue

        weighted_sum += score_product(product, profile_code) * combined
        total_weight += combined
        out.scored_steps += 1

    if total_weight > 0:
        out.score = weighted_sum / total_weight
    return out


def score_routine_products(
    routine: Routine,
    product_lookup: ProductLookup,
    profile_code: str,
    score_product: ScoreProduct,
    policy: Optional[ScoringPolicy] = None,
) -> float:
    """Weighted mean of step product scores; 0.5 when no step resolves to a product."""
    return aggregate_routine_products(routine, product_lookup, profile_code, score_product, policy).score
