from __future__ import annotations

import logging
import sqlite3
import threading
import time
from typing import Callable, Iterable, Optional, TypeVar

import requests

from config.settings import get_settings
from models.ingestion_result import IngestionResult
from models.upload_file import UploadFile
from pipelines.runner import Pipeline, RunContext
from pipelines.steps import (
    NormalizeExport,
    PersistConnections,
    PersistEducation,
    PersistOwnerProfile,
    PersistPositions,
    PersistSkills,
    ResolveConnections,
    ValidateFiles,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Failures worth re-running the whole (idempotent) ingestion for
TRANSIENT_ERRORS = (sqlite3.OperationalError, requests.RequestException)


def build_pipeline(conn: sqlite3.Connection) -> Pipeline:
    """Profile before connections; connections resolved before history is written."""
    return Pipeline([
        ValidateFiles(get_settings().recognized_files),
        NormalizeExport(),
        PersistOwnerProfile(conn),
        ResolveConnections(conn),
        PersistConnections(conn),
        PersistPositions(conn),
        PersistEducation(conn),
        PersistSkills(conn),
    ])


def ingest_export(
    conn: sqlite3.Connection,
    files: Iterable[UploadFile],
    owner_profile_id: str,
    account_id: Optional[str] = None,
    owner_slug: Optional[str] = None,
    cancel: Optional[threading.Event] = None,
) -> IngestionResult:
    """Ingest one LinkedIn export for ``owner_profile_id``.

    ``files`` may hold the CSVs themselves, one ``.zip`` containing them, or
    both. Re-running with the same files writes nothing new.

    Raises:
        MissingRequiredFiles, InvalidArchive, MissingRequiredField,
        EntityWriteFailure, IngestionCancelled
    """
    ctx = RunContext(
        owner_profile_id=owner_profile_id,
        account_id=account_id,
        owner_slug=owner_slug,
        files=list(files),
        cancel=cancel,
    )
    ctx = build_pipeline(conn).run(ctx)
    assert ctx.profile is not None

    result = IngestionResult(
        profile=ctx.profile,
        positions_written=ctx.counts.get("positions_written", 0),
        education_written=ctx.counts.get("education_written", 0),
        skills_written=ctx.counts.get("skills_written", 0),
        connections_written=ctx.counts.get("connections_written", 0),
        shadow_profiles_created=ctx.counts.get("shadow_profiles_created", 0),
        shadow_profiles_enriched=ctx.counts.get("shadow_profiles_enriched", 0),
        warnings=ctx.warnings,
        state=ctx.state,
    )
    logger.info(
        f"Ingestion done: {result.connections_written} connections, {result.positions_written} positions, "
        f"{result.education_written} education, {result.skills_written} skills, {result.warning_count} warnings",
        extra={"profile_id": owner_profile_id, "status": result.state.value, "run_id": ctx.run_id},
    )
    return result


def run_with_retries(
    fn: Callable[[], T],
    *,
    max_attempts: Optional[int] = None,
    backoff_ms: Optional[int] = None,
) -> T:
    """Call ``fn`` again on transient database/storage errors, with linear backoff.

    Only whole runs are retried; ingestion is idempotent so a partial first
    attempt is harmless.
    """
    settings = get_settings()
    attempts = max(1, max_attempts if max_attempts is not None else settings.max_retries)
    backoff = backoff_ms if backoff_ms is not None else settings.retry_backoff_ms
    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except TRANSIENT_ERRORS as e:
            if attempt >= attempts:
                raise
            logger.warning(
                f"Transient failure on attempt {attempt}/{attempts}: {e}; retrying",
                extra={"status": "retry", "error": type(e).__name__},
            )
            time.sleep(backoff * attempt / 1000.0)
    raise AssertionError("unreachable")
