# models.py  (score set generations)

from __future__ import annotations
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------- Score sets ----------

# One row per rescoring run for a (user, kind). The records themselves live in
# the document store under the row's id; this table only says which run is live.
class ScoreSet(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    kind: str = Field(index=True)                  # "product" | "routine"
    status: str = Field(default="draft", index=True)  # draft | published | retired
    record_count: int = 0
    created_at: datetime = Field(default_factory=_utcnow)
    published_at: Optional[datetime] = None
