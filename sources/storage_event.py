from __future__ import annotations

import logging
import sqlite3
from typing import Any, List, Mapping, Optional

from db.repos.uploads_repo import UploadsRepo
from models.upload_file import UploadFile
from ports.blob import BlobStorePort
from services.blob_store import get_blob_store

logger = logging.getLogger(__name__)


class StorageEventSource:
    """Fired after raw files land in the blob store.

    The event names an owner (``profile_id``) or carries an uploads-table
    record; either way the latest upload per file name for that owner is
    fetched, so an export uploaded file by file is ingested as one set.
    """

    trigger = "storage_event"

    def __init__(self, conn: sqlite3.Connection, store: Optional[BlobStorePort] = None, **_: Any) -> None:
        self.uploads = UploadsRepo(conn)
        self.store = store or get_blob_store()

    @staticmethod
    def owner_of(request: Any) -> str:
        if isinstance(request, str):
            return request
        if isinstance(request, Mapping):
            record = request.get("record") or request
            owner = record.get("profile_id")
            if owner:
                return str(owner)
        raise ValueError("storage event carries no profile_id")

    def collect(self, request: Any) -> List[UploadFile]:
        owner = self.owner_of(request)
        files: List[UploadFile] = []
        for row in self.uploads.latest_for_profile(owner):
            files.append(UploadFile(name=row["file_name"], content=self.store.get(row["file_path"])))
        logger.info(f"Fetched {len(files)} uploaded files from storage", extra={"profile_id": owner})
        return files
