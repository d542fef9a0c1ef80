from __future__ import annotations

from typing import Any, List, Mapping

from models.upload_file import UploadFile


def as_upload_files(items: Any) -> List[UploadFile]:
    """Coerce ``{"name", "content"}`` mappings (or UploadFile objects) into UploadFile values."""
    files: List[UploadFile] = []
    for item in items or []:
        if isinstance(item, UploadFile):
            files.append(item)
        elif isinstance(item, Mapping):
            files.append(UploadFile.model_validate(item))
        else:
            raise TypeError(f"Unsupported upload item: {type(item).__name__}")
    return files
