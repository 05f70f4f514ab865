# follicle_backend/app/services/data_stores/documents.py
from __future__ import annotations

"""
A small document store on top of JSON files.

Each collection is one file, <root>/<collection>.json, holding
{doc_id: document}. Collections may be nested with "/" in the name
("users/u1/product_scores/7" -> users/u1/product_scores/7.json).
Writes go through atomic_write under one re-entrant lock.

Batched writes are capped at 500 operations per commit, like the hosted
document stores this stands in for.
"""

import json
import shutil
import uuid
from contextlib import contextmanager
from pathlib import Path
from threading import RLock
from typing import Any, Dict, Iterable, List, Optional, Tuple

from follicle_backend.app.config.paths import current_data_dir
from .io_utils import atomic_write, read_json

MAX_BATCH_OPS = 500


class DocumentNotFound(KeyError):
    """No document with that id in the collection."""


class BatchLimitExceeded(ValueError):
    """More operations queued on one batch than a commit accepts."""


def new_id() -> str:
    return uuid.uuid4().hex


class JsonDocumentStore:
    def __init__(self, root: Optional[Path] = None, max_batch_ops: int = MAX_BATCH_OPS):
        self._root = Path(root) if root is not None else None
        self.max_batch_ops = int(max_batch_ops)
        self._lock = RLock()

    # ---- paths ----
    @property
    def root(self) -> Path:
        return self._root if self._root is not None else current_data_dir() / "store"

    def _path(self, collection: str) -> Path:
        parts = [p for p in collection.strip("/").split("/") if p]
        if not parts or any(p in (".", "..") for p in parts):
            raise ValueError(f"invalid collection name: {collection!r}")
        return self.root.joinpath(*parts[:-1], f"{parts[-1]}.json")

    def _dir(self, collection: str) -> Path:
        parts = [p for p in collection.strip("/").split("/") if p]
        return self.root.joinpath(*parts)

    # ---- raw collection IO ----
    def _read(self, collection: str) -> Dict[str, Dict[str, Any]]:
        raw = read_json(self._path(collection), default={})
        return raw if isinstance(raw, dict) else {}

    def _write(self, collection: str, docs: Dict[str, Dict[str, Any]]) -> None:
        atomic_write(self._path(collection), json.dumps(docs, ensure_ascii=False, indent=2, default=str))

    # ---- reads ----
    def fetch_all(self, collection: str) -> List[Dict[str, Any]]:
        with self._lock:
            docs = self._read(collection)
        return [{**doc, "id": doc_id} if isinstance(doc, dict) else doc for doc_id, doc in docs.items()]

    def fetch_by_id(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            doc = self._read(collection).get(doc_id)
        if doc is None:
            return None
        return {**doc, "id": doc_id} if isinstance(doc, dict) else doc

    def get(self, collection: str, doc_id: str) -> Dict[str, Any]:
        doc = self.fetch_by_id(collection, doc_id)
        if doc is None:
            raise DocumentNotFound(f"{collection}/{doc_id}")
        return doc

    def fetch_where(self, collection: str, **equals: Any) -> List[Dict[str, Any]]:
        """Documents whose fields equal every given value."""
        return [
            doc for doc in self.fetch_all(collection)
            if isinstance(doc, dict) and all(doc.get(k) == v for k, v in equals.items())
        ]

    def count(self, collection: str) -> int:
        with self._lock:
            return len(self._read(collection))

    def exists(self, collection: str) -> bool:
        return self._path(collection).exists()

    # ---- single writes ----
    def set(self, collection: str, doc_id: str, doc: Dict[str, Any], merge: bool = False) -> None:
        b = self.batch()
        b.set(collection, doc_id, doc, merge=merge)
        b.commit()

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._lock:
            docs = self._read(collection)
            if doc_id not in docs:
                return False
            docs.pop(doc_id)
            self._write(collection, docs)
            return True

    def drop_collection(self, collection: str) -> None:
        """Remove a collection file and any sub-collections beneath it."""
        with self._lock:
            path = self._path(collection)
            if path.exists():
                path.unlink()
            sub = self._dir(collection)
            if sub.is_dir():
                shutil.rmtree(sub)

    def batch(self) -> "WriteBatch":
        return WriteBatch(self)

    @contextmanager
    def transaction(self):
        """Hold the store lock so a read-check-write sequence runs alone."""
        with self._lock:
            yield self


class WriteBatch:
    """
    Queued set/delete operations applied together on commit().
    Each touched collection file is rewritten once.
    """
    def __init__(self, store: JsonDocumentStore):
        self._store = store
        self._ops: List[Tuple[str, str, str, Optional[Dict[str, Any]], bool]] = []
        self._committed = False

    def __len__(self) -> int:
        return len(self._ops)

    def _queue(self, op: Tuple[str, str, str, Optional[Dict[str, Any]], bool]) -> None:
        if self._committed:
            raise RuntimeError("batch already committed")
        if len(self._ops) >= self._store.max_batch_ops:
            raise BatchLimitExceeded(f"a batch holds at most {self._store.max_batch_ops} operations")
        self._ops.append(op)

    def set(self, collection: str, doc_id: str, doc: Dict[str, Any], merge: bool = False) -> "WriteBatch":
        payload = {k: v for k, v in dict(doc).items() if k != "id"}
        self._queue(("set", collection, doc_id, payload, merge))
        return self

    def delete(self, collection: str, doc_id: str) -> "WriteBatch":
        self._queue(("delete", collection, doc_id, None, False))
        return self

    def commit(self) -> int:
        store = self._store
        with store._lock:
            touched: Dict[str, Dict[str, Dict[str, Any]]] = {}
            for kind, collection, doc_id, payload, merge in self._ops:
                docs = touched.setdefault(collection, store._read(collection))
                if kind == "delete":
                    docs.pop(doc_id, None)
                elif merge and isinstance(docs.get(doc_id), dict):
                    docs[doc_id] = {**docs[doc_id], **payload}
                else:
                    docs[doc_id] = payload
            for collection, docs in touched.items():
                store._write(collection, docs)
        self._committed = True
        return len(self._ops)


def chunked(items: Iterable[Any], size: int) -> Iterable[List[Any]]:
    buf: List[Any] = []
    for item in items:
        buf.append(item)
        if len(buf) >= size:
            yield buf
            buf = []
    if buf:
        yield buf


__all__ = [
    "MAX_BATCH_OPS", "DocumentNotFound", "BatchLimitExceeded",
    "JsonDocumentStore", "WriteBatch", "new_id", "chunked",
]
