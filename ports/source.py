from __future__ import annotations

from typing import Any, List, Literal, Protocol

from models.upload_file import UploadFile


TriggerName = Literal["direct_upload", "storage_event"]


class TriggerSourcePort(Protocol):
    """Turns one trigger payload into the files handed to the ingestion pipeline."""

    trigger: TriggerName

    def collect(self, request: Any) -> List[UploadFile]:
        ...
