# follicle_backend/app/observability/rescore_trace.py
from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from follicle_backend.app.config.paths import path_under_data
from follicle_backend.app.services.data_stores.io_utils import append_jsonl

class RescoreTrace:
    """
    Lightweight, structured trace of one rescoring run: what was scored,
    how the writes were batched, which generation went live, and whether
    the written record count checked out. Safe to return in API responses.
    """
    def __init__(self, user_id: str, kind: str, run_id: Optional[str] = None) -> None:
        self._t0 = time.time()
        self.run_id = run_id or f"rescore-{int(self._t0*1000)}"
        self.meta: Dict[str, Any] = {"user_id": user_id, "kind": kind}
        self.steps: List[Dict[str, Any]] = []
        self.batches: List[int] = []
        self.outputs: Dict[str, Any] = {}

    # -------- meta --------
    def set_meta(self, **kwargs: Any) -> None:
        self.meta.update(kwargs)

    # -------- narrative steps (free-form) --------
    def add_step(self, label: str, **detail: Any) -> None:
        self.steps.append({"t": time.time(), "label": label, **detail})

    # -------- write batches --------
    def add_batch(self, size: int) -> None:
        self.batches.append(int(size))

    # -------- final outputs snapshot --------
    def set_outputs(self, **kwargs: Any) -> None:
        self.outputs.update(kwargs)

    @property
    def elapsed_ms(self) -> int:
        return int((time.time() - self._t0) * 1000)

    # -------- export --------
    def summary(self) -> Dict[str, Any]:
        """Flat shape used by the rescore endpoints."""
        return {
            **self.meta,
            "run_id": self.run_id,
            "batches": list(self.batches),
            "elapsed_ms": self.elapsed_ms,
            **self.outputs,
        }

    def to_public(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "elapsed_ms": self.elapsed_ms,
            "meta": self.meta,
            "steps": self.steps,
            "batches": self.batches,
            "outputs": self.outputs,
        }

    def persist(self, path: Optional[Path] = None) -> Path:
        """Append this trace to DATA_DIR/logs/rescore_traces.jsonl."""
        target = path or path_under_data("logs", "rescore_traces.jsonl")
        append_jsonl(target, self.to_public())
        return target
