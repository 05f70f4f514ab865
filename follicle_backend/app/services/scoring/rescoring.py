# follicle_backend/app/services/scoring/rescoring.py
from __future__ import annotations

import time
from typing import Any, Callable, Dict, List, Optional

from follicle_backend.app.matching.engine import MatchEngine
from follicle_backend.app.matching.ingredients import Profiles
from follicle_backend.app.matching.policy import ScoringPolicy, load_policy
from follicle_backend.app.models.matching import HairProfile, MatchScore
from follicle_backend.app.observability.rescore_trace import RescoreTrace
from follicle_backend.app.schemas import SCORED_KINDS, EntityKind
from follicle_backend.app.services.data_stores import (
    JsonDocumentStore,
    chunked,
    get_budget,
    get_profile_code,
    has_profile_changed,
    load_product,
    load_products,
    load_public_routines,
    load_routine,
    store_sources,
)
from follicle_backend.app.utils.logs import get_logger
from .generations import ScoreSetRegistry, records_collection
from .records import product_record, routine_record

log = get_logger("rescoring")

def _scored_kind(kind: EntityKind) -> EntityKind:
    kind = EntityKind(kind)
    if kind not in SCORED_KINDS:
        raise ValueError(f"{kind.value} entities are not scored")
    return kind

class Rescorer:
    """
    Writes a user's match scores into the document store.

    rescore_all builds a complete new generation and swaps it in; rescore_one
    patches a single record of the live generation right after an interaction.
    """
    def __init__(self, store: JsonDocumentStore, registry: ScoreSetRegistry,
                 policy: Optional[ScoringPolicy] = None, profiles: Optional[Profiles] = None):
        self.store = store
        self.registry = registry
        self.policy = policy or load_policy()
        self.profiles = profiles

    def engine(self) -> MatchEngine:
        return MatchEngine(store_sources(self.store), self.policy, self.profiles)

    # -------- bulk --------
    def rescore_all(self, user_id: str, kind: EntityKind) -> Dict[str, Any]:
        kind = _scored_kind(kind)
        trace = RescoreTrace(user_id, kind.value)
        code = get_profile_code(self.store, user_id)
        if code is None:
            log.info(f"[rescoring] {user_id} has no profile code; skipping {kind.value} rescore")
            trace.set_outputs(scored=0, written=0, skipped_reason="no_profile_code")
            return trace.summary()
        trace.set_meta(profile_code=code)

        engine = self.engine()
        scored_at = time.time()
        make_record: Callable[[MatchScore, int], Dict[str, Any]]
        if kind == EntityKind.PRODUCT:
            products = load_products(self.store)
            scores = engine.score_products(products, code, max_price=get_budget(self.store, user_id))
            by_id = {p.id: p for p in products}
            make_record = lambda s, rank: product_record(s, by_id.get(s.entity_id), rank, scored_at)
        else:
            routines = load_public_routines(self.store)
            scores = engine.score_routines(routines, code)
            by_id_r = {r.id: r for r in routines}
            make_record = lambda s, rank: routine_record(
                s, by_id_r.get(s.entity_id), rank, scored_at, engine.sources.product_lookup)
        trace.add_step("scored", count=len(scores))

        draft = self.registry.begin_draft(user_id, kind)
        collection = records_collection(user_id, kind, draft.id)
        trace.set_meta(generation_id=draft.id)
        try:
            for chunk in chunked(enumerate(scores, start=1), self.policy.write_batch_size):
                batch = self.store.batch()
                for rank, score in chunk:
                    batch.set(collection, score.entity_id, make_record(score, rank))
                batch.commit()
                trace.add_batch(len(chunk))

            written = self.store.count(collection)
            if written != len(scores):
                log.error(f"[rescoring] {user_id}/{kind.value}: wrote {written} of {len(scores)} records; "
                          f"leaving set {draft.id} unpublished")
                self._drop(user_id, kind, draft.id)
                trace.set_outputs(scored=len(scores), written=written, verified=written,
                                  skipped_reason="verification_failed")
                return trace.summary()

            live = self.registry.publish(draft.id, written)
        except Exception:
            log.exception(f"[rescoring] {user_id}/{kind.value}: run failed; discarding set {draft.id}")
            self._drop(user_id, kind, draft.id)
            raise

        purged = self.purge_stale(user_id, kind)
        trace.add_step("published", generation_id=live.id, purged=purged)
        trace.set_outputs(generation_id=live.id, scored=len(scores), written=written, verified=written)
        trace.persist()
        log.info(f"[rescoring] {user_id}/{kind.value}: {written} records live in set {live.id} "
                 f"({trace.elapsed_ms} ms, {len(trace.batches)} batches)")
        return trace.summary()

    def _drop(self, user_id: str, kind: EntityKind, set_id: int) -> None:
        self.store.drop_collection(records_collection(user_id, kind, set_id))
        self.registry.discard(set_id)

    def purge_stale(self, user_id: str, kind: EntityKind) -> int:
        """Delete retired and abandoned generations. Returns how many went."""
        stale = self.registry.stale(user_id, kind)
        for row in stale:
            self._drop(user_id, kind, row.id)
        return len(stale)

    # -------- single entity --------
    def rescore_one(self, user_id: str, kind: EntityKind, entity_id: str) -> Optional[Dict[str, Any]]:
        """
        Score one entity and write it into the live set. Returns the record, or
        None when the user has no profile code. Raises EntityNotFound for unknown ids.
        """
        kind = _scored_kind(kind)
        code = get_profile_code(self.store, user_id)
        if code is None:
            log.info(f"[rescoring] {user_id} has no profile code; skipping {kind.value} {entity_id}")
            return None

        engine = self.engine()
        score = engine.score_one(entity_id, code, kind)
        live = self.registry.ensure_published(user_id, kind)
        collection = records_collection(user_id, kind, live.id)
        previous = self.store.fetch_by_id(collection, entity_id) or {}
        rank = previous.get("rank")
        scored_at = time.time()
        if kind == EntityKind.PRODUCT:
            record = product_record(score, load_product(self.store, entity_id), rank, scored_at)
        else:
            record = routine_record(score, load_routine(self.store, entity_id), rank, scored_at,
                                    engine.sources.product_lookup)
        self.store.set(collection, entity_id, record)
        self.registry.set_count(live.id, self.store.count(collection))
        return {**record, "id": entity_id}

    # -------- profile changes --------
    def on_profile_saved(self, user_id: str, previous: Optional[HairProfile],
                         current: HairProfile) -> List[Dict[str, Any]]:
        """Rescore both kinds, but only when the five attributes actually changed."""
        if not has_profile_changed(previous, current):
            log.info(f"[rescoring] {user_id}: analysis unchanged; keeping scores")
            return []
        return [self.rescore_all(user_id, kind) for kind in SCORED_KINDS]

    # -------- reads (live generation only) --------
    def read_scores(self, user_id: str, kind: EntityKind, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        kind = _scored_kind(kind)
        live = self.registry.published(user_id, kind)
        if live is None:
            return []
        records = self.store.fetch_all(records_collection(user_id, kind, live.id))
        records.sort(key=lambda r: (r.get("rank") is None, r.get("rank") or 0, -float(r.get("score") or 0)))
        return records[:limit] if limit is not None else records

    def read_score(self, user_id: str, kind: EntityKind, entity_id: str) -> Optional[Dict[str, Any]]:
        kind = _scored_kind(kind)
        live = self.registry.published(user_id, kind)
        if live is None:
            return None
        return self.store.fetch_by_id(records_collection(user_id, kind, live.id), entity_id)


__all__ = ["Rescorer"]
