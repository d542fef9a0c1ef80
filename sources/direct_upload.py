from __future__ import annotations

from typing import Any, List, Mapping

from models.upload_file import UploadFile
from sources.base import as_upload_files


class DirectUploadSource:
    """Files posted straight to the ingestion endpoint: CSVs, one zip, or both."""

    trigger = "direct_upload"

    def __init__(self, **_: Any) -> None:
        pass

    def collect(self, request: Any) -> List[UploadFile]:
        if isinstance(request, Mapping):
            return as_upload_files(request.get("files"))
        return as_upload_files(request)
