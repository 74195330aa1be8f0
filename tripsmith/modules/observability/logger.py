"""
Structured JSON logger — append-only, one object per line (.jsonl).

Usage:
    from tripsmith.modules.observability.logger import StructuredLogger

    events = StructuredLogger()
    events.log("run_ab12cd", "pipeline_start", {"destination": "Hanoi"})
    with events.timed("run_ab12cd", "route"):
        ...

Logs are written to  <STRUCTURED_LOGS_DIR>/<session_id>.jsonl, defaulting to
logs/ next to the tripsmith package.
"""

from __future__ import annotations

import json
import os
import threading
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Iterator

from tripsmith import config

_LOGS_DIR: Path = (
    Path(config.STRUCTURED_LOGS_DIR)
    if config.STRUCTURED_LOGS_DIR
    else Path(__file__).resolve().parents[3] / "logs"
)


class StructuredLogger:
    """Thread-safe, append-only JSONL logger."""

    def __init__(self, logs_dir: Path | str | None = None) -> None:
        self._logs_dir = Path(logs_dir) if logs_dir else _LOGS_DIR
        self._lock = threading.Lock()
        self._handles: dict[str, IO[str]] = {}

    @property
    def logs_dir(self) -> Path:
        return self._logs_dir

    # ── public API ────────────────────────────────────────────────────────

    def log(self, session_id: str, event_type: str, payload: dict) -> None:
        """Append one structured JSON record to ``<session_id>.jsonl``."""
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "session_id": session_id,
            "event_type": event_type,
            "payload": payload,
        }
        line = json.dumps(record, default=str, ensure_ascii=False) + "\n"

        with self._lock:
            fh = self._handles.get(session_id)
            if fh is None:
                fh = self._open(session_id)
            fh.write(line)
            fh.flush()

    @contextmanager
    def timed(self, session_id: str, stage: str, **extra: object) -> Iterator[dict]:
        """
        Log a PERFORMANCE record with the stage's wall time on exit.
        The yielded dict is merged into the payload, so callers can add counts.
        """
        payload: dict = {"stage": stage, **extra}
        t0 = time.perf_counter()
        try:
            yield payload
        finally:
            payload["duration_ms"] = round((time.perf_counter() - t0) * 1000, 2)
            self.log(session_id, "PERFORMANCE", payload)

    def close(self, session_id: str | None = None) -> None:
        """Close one or all open file handles."""
        with self._lock:
            if session_id:
                fh = self._handles.pop(session_id, None)
                if fh:
                    fh.close()
            else:
                for fh in self._handles.values():
                    fh.close()
                self._handles.clear()

    # ── internals ─────────────────────────────────────────────────────────

    def _open(self, session_id: str) -> IO[str]:
        os.makedirs(self._logs_dir, exist_ok=True)
        path = self._logs_dir / f"{session_id}.jsonl"
        fh = open(path, "a", encoding="utf-8")  # noqa: SIM115
        self._handles[session_id] = fh
        return fh
