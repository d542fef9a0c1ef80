from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import PurePosixPath
from typing import Any, Optional

from db.repos.profiles_repo import ProfilesRepo
from db.repos.uploads_repo import UploadsRepo
from models.ingestion_result import IngestionResult
from pipelines.ingest_export import ingest_export, run_with_retries
from ports.blob import BlobStorePort
from services.blob_store import get_blob_store
from sources.registry import get_source

logger = logging.getLogger(__name__)


def record_upload(
    conn: sqlite3.Connection,
    profile_id: str,
    file_name: str,
    data: bytes,
    store: Optional[BlobStorePort] = None,
) -> int:
    """Store one raw uploaded file and append its uploads row; returns the row id.

    The owning profile row is created empty if it does not exist yet, so files
    can arrive before the first ingestion.
    """
    store = store or get_blob_store()
    base_name = PurePosixPath(file_name.replace("\\", "/")).name
    uploads = UploadsRepo(conn)
    profiles = ProfilesRepo(conn)
    if profiles.get(profile_id) is None:
        profiles.upsert_owner(profile_id, {})
    path = store.put(f"{profile_id}/{base_name}", data)
    upload_id = uploads.add(profile_id, base_name, path)
    logger.info(f"Recorded upload {base_name} -> {path}", extra={"profile_id": profile_id})
    return upload_id


def ingest_from_trigger(
    conn: sqlite3.Connection,
    trigger: str,
    request: Any,
    owner_profile_id: str,
    account_id: Optional[str] = None,
    owner_slug: Optional[str] = None,
    store: Optional[BlobStorePort] = None,
    cancel: Optional[threading.Event] = None,
) -> IngestionResult:
    """Collect files via the named trigger source and run the shared pipeline, retrying transient failures."""
    source = get_source(trigger, conn=conn, store=store)

    def _attempt() -> IngestionResult:
        files = source.collect(request)
        return ingest_export(conn, files, owner_profile_id, account_id=account_id, owner_slug=owner_slug, cancel=cancel)

    return run_with_retries(_attempt)


def ingest_uploads(
    conn: sqlite3.Connection,
    owner_profile_id: str,
    store: Optional[BlobStorePort] = None,
    owner_slug: Optional[str] = None,
) -> IngestionResult:
    """Ingest the latest stored upload of each export file for ``owner_profile_id``."""
    return ingest_from_trigger(
        conn,
        "storage_event",
        {"profile_id": owner_profile_id},
        owner_profile_id,
        owner_slug=owner_slug,
        store=store,
    )
