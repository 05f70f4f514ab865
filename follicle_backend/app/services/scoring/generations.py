# follicle_backend/app/services/scoring/generations.py
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from follicle_backend.app.db.models import ScoreSet
from follicle_backend.app.db.session import get_engine, init_db
from follicle_backend.app.schemas import EntityKind
from follicle_backend.app.utils.logs import get_logger

# Purpose:
# Versioned score sets. A bulk rescore writes into a fresh draft; publish()
# retires the previous published set and promotes the draft in a single
# transaction, so readers see either the old set or the new one, never a
# half-written mix. Drafts left behind by a crashed run are never read.

log = get_logger("generations")


class SetStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    RETIRED = "retired"


def records_collection(user_id: str, kind: EntityKind, set_id: int) -> str:
    """Document-store collection holding one set's records."""
    return f"users/{user_id}/{EntityKind(kind).value}_scores/{set_id}"


class ScoreSetRegistry:
    def __init__(self, engine: Optional[Engine] = None):
        self.engine = init_db(engine) if engine is not None else get_engine()

    def begin_draft(self, user_id: str, kind: EntityKind) -> ScoreSet:
        with Session(self.engine) as s:
            row = ScoreSet(user_id=user_id, kind=EntityKind(kind).value, status=SetStatus.DRAFT.value)
            s.add(row)
            s.commit()
            s.refresh(row)
            return row

    def published(self, user_id: str, kind: EntityKind) -> Optional[ScoreSet]:
        with Session(self.engine) as s:
            stmt = (
                select(ScoreSet)
                .where(ScoreSet.user_id == user_id)
                .where(ScoreSet.kind == EntityKind(kind).value)
                .where(ScoreSet.status == SetStatus.PUBLISHED.value)
                .order_by(ScoreSet.id.desc())
            )
            return s.exec(stmt).first()

    def publish(self, set_id: int, record_count: int) -> ScoreSet:
        """Promote a draft and retire whatever was live, atomically."""
        with Session(self.engine) as s:
            row = s.get(ScoreSet, set_id)
            if row is None:
                raise KeyError(f"score set {set_id} not found")
            if row.status != SetStatus.DRAFT.value:
                raise ValueError(f"score set {set_id} is {row.status}, not a draft")
            live = s.exec(
                select(ScoreSet)
                .where(ScoreSet.user_id == row.user_id)
                .where(ScoreSet.kind == row.kind)
                .where(ScoreSet.status == SetStatus.PUBLISHED.value)
            ).all()
            for old in live:
                old.status = SetStatus.RETIRED.value
                s.add(old)
            row.status = SetStatus.PUBLISHED.value
            row.record_count = int(record_count)
            row.published_at = datetime.now(timezone.utc)
            s.add(row)
            s.commit()
            s.refresh(row)
            log.info(f"[generations] published set {row.id} for {row.user_id}/{row.kind} "
                     f"({row.record_count} records, retired {len(live)})")
            return row

    def ensure_published(self, user_id: str, kind: EntityKind) -> ScoreSet:
        """The live set, creating an empty one when the user has none yet."""
        live = self.published(user_id, kind)
        if live is not None:
            return live
        draft = self.begin_draft(user_id, kind)
        return self.publish(draft.id, 0)

    def set_count(self, set_id: int, record_count: int) -> None:
        with Session(self.engine) as s:
            row = s.get(ScoreSet, set_id)
            if row is not None:
                row.record_count = int(record_count)
                s.add(row)
                s.commit()

    def stale(self, user_id: str, kind: EntityKind) -> List[ScoreSet]:
        """Retired sets plus drafts older than the live set (abandoned runs)."""
        live = self.published(user_id, kind)
        with Session(self.engine) as s:
            rows = s.exec(
                select(ScoreSet)
                .where(ScoreSet.user_id == user_id)
                .where(ScoreSet.kind == EntityKind(kind).value)
                .where(ScoreSet.status != SetStatus.PUBLISHED.value)
            ).all()
        if live is None:
            return [r for r in rows if r.status == SetStatus.RETIRED.value]
        return [r for r in rows if r.status == SetStatus.RETIRED.value or r.id < live.id]

    def discard(self, set_id: int) -> None:
        with Session(self.engine) as s:
            row = s.get(ScoreSet, set_id)
            if row is not None:
                s.delete(row)
                s.commit()


__all__ = ["SetStatus", "ScoreSetRegistry", "records_collection"]
