# follicle_backend/app/matching/engine.py
from __future__ import annotations

"""
MatchEngine: combines ingredient (or routine-product) scores with engagement
scores into one ranked MatchScore per entity.

    product total = ingredient * 0.6 + engagement * 0.4   (per-category overrides allowed)
    routine total = products   * 0.1 + engagement * 0.9

Entities are independent, so batches fan out on a bounded thread pool, one
chunk at a time. One entity failing never sinks the batch: it comes back as
a neutral score flagged with data_quality "error".
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, TypeVar, Union

from follicle_backend.app.matching.categories import parse_category
from follicle_backend.app.matching.engagement import score_by_engagement
from follicle_backend.app.matching.ingredients import Profiles, score_by_ingredients
from follicle_backend.app.matching.policy import ScoringPolicy, load_policy
from follicle_backend.app.matching.routines import ProductLookup, aggregate_routine_products
from follicle_backend.app.models.catalog import Product, Routine
from follicle_backend.app.models.interactions import InteractionEvent
from follicle_backend.app.models.matching import MatchScore
from follicle_backend.app.schemas import DataQuality, EntityKind, ProductCategory
from follicle_backend.app.utils.logs import get_logger

log = get_logger("engine")

T = TypeVar("T")


class EntityNotFound(KeyError):
    """No product/routine with that id (or it is not listed)."""


@dataclass
class MatchSources:
    """Read side of the stores, as plain callables."""
    fetch_events: Callable[[EntityKind, str], Iterable[InteractionEvent]]
    product_lookup: ProductLookup
    routine_lookup: Callable[[str], Optional[Routine]]
    all_products: Callable[[], List[Product]]
    all_routines: Callable[[], List[Routine]]


def combine_product(ingredient: float, engagement: float, category: Optional[str] = None,
                    policy: Optional[ScoringPolicy] = None) -> float:
    p = policy or load_policy()
    w_ing, w_eng = p.product_weights_for(category)
    return ingredient * w_ing + engagement * w_eng


def combine_routine(products: float, engagement: float, policy: Optional[ScoringPolicy] = None) -> float:
    p = policy or load_policy()
    return products * p.routine_product_weight + engagement * p.routine_engagement_weight


def filter_products(
    products: Sequence[Product],
    category: Union[str, ProductCategory, None] = None,
    max_price: Optional[float] = None,
) -> List[Product]:
    """Category and budget filters. Products without a price pass the budget check."""
    wanted = parse_category(category) if category else None
    if category and wanted is None:
        return []
    out = []
    for product in products:
        if wanted is not None and product.category != wanted:
            continue
        if max_price is not None and product.price is not None and product.price > max_price:
            continue
        out.append(product)
    return out


class MatchEngine:
    def __init__(self, sources: MatchSources, policy: Optional[ScoringPolicy] = None,
                 profiles: Optional[Profiles] = None):
        self.sources = sources
        self.policy = policy or load_policy()
        self.profiles = profiles

    # -------- single product --------
    def score_product(self, product: Product, profile_code: str, include_reasons: bool = True) -> MatchScore:
        p = self.policy
        ing = score_by_ingredients(product, profile_code, include_reasons, policy=p, profiles=self.profiles)
        eng = score_by_engagement(
            product.id, profile_code,
            lambda entity_id: self.sources.fetch_events(EntityKind.PRODUCT, entity_id),
            kind=EntityKind.PRODUCT, include_reasons=include_reasons, policy=p,
        )
        total = combine_product(ing.score, eng.score, product.category.value, p)
        return MatchScore(
            entity_id=product.id,
            entity_kind=EntityKind.PRODUCT,
            total_score=total,
            breakdown={"ingredient_score": ing.score, "engagement_score": eng.score},
            match_reasons=(ing.reasons + eng.reasons)[: p.max_reasons],
            interactions_by_tier=eng.interactions_by_tier,
            data_quality={"ingredients": ing.data_quality, "engagement": eng.data_quality},
        )

    def product_total(self, product: Product, profile_code: str) -> float:
        return self.score_product(product, profile_code, include_reasons=False).total_score

    # -------- single routine --------
    def score_routine(self, routine: Routine, profile_code: str, include_reasons: bool = True) -> MatchScore:
        p = self.policy
        products = aggregate_routine_products(
            routine, self.sources.product_lookup, profile_code, self.product_total, p,
        )
        eng = score_by_engagement(
            routine.id, profile_code,
            lambda entity_id: self.sources.fetch_events(EntityKind.ROUTINE, entity_id),
            kind=EntityKind.ROUTINE, include_reasons=include_reasons, policy=p,
        )
        return MatchScore(
            entity_id=routine.id,
            entity_kind=EntityKind.ROUTINE,
            total_score=combine_routine(products.score, eng.score, p),
            breakdown={"product_score": products.score, "engagement_score": eng.score},
            # routine reasons are community reasons only
            match_reasons=eng.reasons[: p.max_reasons],
            interactions_by_tier=eng.interactions_by_tier,
            data_quality={
                "products": DataQuality.OK if products.scored_steps else DataQuality.NO_SCORED_STEPS,
                "engagement": eng.data_quality,
            },
        )

    # -------- failure isolation --------
    def _guarded(self, kind: EntityKind, scorer: Callable[[T, str], MatchScore], profile_code: str):
        def run(entity: T) -> MatchScore:
            try:
                return scorer(entity, profile_code)
            except Exception:
                entity_id = getattr(entity, "id", "?")
                log.exception(f"[engine] scoring failed for {kind.value} {entity_id}; using neutral")
                return MatchScore.neutral(str(entity_id), kind, self.policy.neutral_score)
        return run

    def _run_chunked(self, items: Sequence[T], run: Callable[[T], MatchScore],
                     chunk_size: int, label: str) -> List[MatchScore]:
        if not items:
            return []
        chunk_size = max(int(chunk_size), 1)
        workers = max(1, min(chunk_size, len(items), self.policy.max_workers))
        results: List[MatchScore] = []
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=f"follicle-{label}") as pool:
            for start in range(0, len(items), chunk_size):
                chunk = items[start:start + chunk_size]
                results.extend(pool.map(run, chunk))   # map keeps input order
                log.info(f"[engine] scored {min(start + chunk_size, len(items))} / {len(items)} {label}s")
        # stable: ties keep input order
        results.sort(key=lambda s: s.total_score, reverse=True)
        return results

    # -------- batches --------
    def score_products(
        self,
        products: Sequence[Product],
        profile_code: str,
        category: Union[str, ProductCategory, None] = None,
        max_price: Optional[float] = None,
        limit: Optional[int] = None,
    ) -> List[MatchScore]:
        candidates = filter_products(products, category, max_price)
        run = self._guarded(EntityKind.PRODUCT, self.score_product, profile_code)
        ranked = self._run_chunked(candidates, run, self.policy.product_chunk_size, "product")
        return ranked[:limit] if limit is not None else ranked

    def score_routines(self, routines: Sequence[Routine], profile_code: str,
                       limit: Optional[int] = None) -> List[MatchScore]:
        chunk = self.policy.routine_chunk_size or max(len(routines), 1)
        run = self._guarded(EntityKind.ROUTINE, self.score_routine, profile_code)
        ranked = self._run_chunked(list(routines), run, chunk, "routine")
        return ranked[:limit] if limit is not None else ranked

    # -------- by id / everything --------
    def score_one(self, entity_id: str, profile_code: str, kind: EntityKind) -> MatchScore:
        """
        Score one entity by id with the batch math. Raises EntityNotFound when the
        id does not resolve; scoring problems after that degrade to neutral.
        """
        if kind == EntityKind.PRODUCT:
            product = self.sources.product_lookup(entity_id)
            if product is None:
                raise EntityNotFound(entity_id)
            return self._guarded(kind, self.score_product, profile_code)(product)
        if kind == EntityKind.ROUTINE:
            routine = self.sources.routine_lookup(entity_id)
            if routine is None:
                raise EntityNotFound(entity_id)
            return self._guarded(kind, self.score_routine, profile_code)(routine)
        raise ValueError(f"{kind.value} entities are not scored")

    def score_all(self, profile_code: str, kind: EntityKind, **filters) -> List[MatchScore]:
        if kind == EntityKind.PRODUCT:
            return self.score_products(self.sources.all_products(), profile_code, **filters)
        if kind == EntityKind.ROUTINE:
            return self.score_routines(self.sources.all_routines(), profile_code, **filters)
        raise ValueError(f"{kind.value} entities are not scored")


__all__ = [
    "EntityNotFound", "MatchSources", "MatchEngine",
    "combine_product", "combine_routine", "filter_products",
]
