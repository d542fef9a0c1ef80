"""Error kinds raised and recorded by the ingestion pipeline.

Fatal kinds subclass ``IngestionError`` and abort a run. Row-level problems
are recorded as ``IngestionWarning`` values and returned with the result.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from pydantic import BaseModel


def build_error_payload(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"error": {"code": code, "message": message}}
    if details is not None:
        payload["error"]["details"] = details
    return payload


class IngestionError(Exception):
    """Fatal ingestion failure with a machine-readable kind."""

    kind = "IngestionError"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_payload(self) -> Dict[str, Any]:
        return build_error_payload(self.kind, self.message, self.details or None)


class MissingRequiredFiles(IngestionError):
    kind = "MissingRequiredFiles"

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(
            f"Missing required files: {', '.join(self.missing)}. "
            "Upload them from your LinkedIn data export.",
            {"missing": self.missing},
        )


class InvalidArchive(IngestionError):
    kind = "InvalidArchive"

    def __init__(self, reason: str):
        super().__init__(f"The uploaded archive could not be opened: {reason}", {"reason": reason})


class MissingRequiredField(IngestionError):
    kind = "MissingRequiredField"

    def __init__(self, file_name: str, field: str):
        self.file_name = file_name
        self.field = field
        super().__init__(
            f"{file_name} is missing the required field '{field}' in its first row.",
            {"file": file_name, "field": field},
        )


class EntityWriteFailure(IngestionError):
    kind = "EntityWriteFailure"

    def __init__(self, entity: str, reason: str):
        self.entity = entity
        super().__init__(f"Could not write {entity}: {reason}", {"entity": entity, "reason": reason})


class IngestionCancelled(IngestionError):
    kind = "IngestionCancelled"

    def __init__(self) -> None:
        super().__init__("Ingestion was cancelled before it finished; already written rows were kept.")


class IngestionWarning(BaseModel):
    """Non-fatal problem recorded during a run."""

    kind: str
    message: str
    file: Optional[str] = None
    row: Optional[int] = None
