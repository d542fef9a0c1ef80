"""JSONL trace of embedding calls.

One line per call, appended to LLM_LOG_PATH when LLM_TRACE is on. Lines
written during a CLI invocation carry its RUN_ID so usage can be summed
per run afterwards.
"""
from __future__ import annotations

import hashlib
import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from config.settings import get_settings


def sha256_text(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def _trace_path() -> Optional[Path]:
    # Re-read the environment; tests toggle LLM_TRACE between calls
    get_settings.cache_clear()
    settings = get_settings()
    return Path(settings.llm_log_path) if settings.llm_trace else None


def log_call(
    *,
    caller: str,
    provider: str,
    model: Optional[str],
    operation: str,
    input_count: Optional[int] = None,
    input_hash: Optional[str] = None,
    duration_ms: Optional[int] = None,
    status: str = "ok",
    error: Optional[str] = None,
    usage: Optional[Dict[str, Any]] = None,
    extras: Optional[Dict[str, Any]] = None,
) -> None:
    path = _trace_path()
    if path is None:
        return

    record: Dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "caller": caller,
        "provider": provider,
        "model": model,
        "operation": operation,
        "input_count": input_count,
        "input_hash": input_hash,
        "duration_ms": duration_ms,
        "status": status,
        "error": error,
        "usage": usage or {},
    }
    if os.getenv("RUN_ID"):
        record["run_id"] = os.environ["RUN_ID"]
    if extras:
        record["extras"] = extras

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record, ensure_ascii=False) + "\n")
    except OSError:
        # Tracing is best-effort; a full disk must not fail a search
        return


def iter_calls(run_id: Optional[str] = None) -> Iterator[Dict[str, Any]]:
    """Yield traced calls, optionally only those of ``run_id``. Corrupt lines are skipped."""
    path = Path(get_settings().llm_log_path)
    if not path.exists():
        return
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            try:
                rec = json.loads(line)
            except json.JSONDecodeError:
                continue
            if not isinstance(rec, dict):
                continue
            if run_id is not None and rec.get("run_id") != run_id:
                continue
            yield rec


def usage_by_provider(run_id: str) -> Dict[str, Dict[str, int]]:
    """Sum calls and tokens per provider for one run, e.g. ``{"openai": {"calls": 2, "tokens": 40}}``."""
    totals: Dict[str, Dict[str, int]] = {}
    for rec in iter_calls(run_id):
        bucket = totals.setdefault(rec.get("provider") or "unknown", {"calls": 0, "tokens": 0})
        bucket["calls"] += 1
        bucket["tokens"] += int((rec.get("usage") or {}).get("total_tokens") or 0)
    return totals
