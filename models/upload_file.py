from __future__ import annotations

from pathlib import PurePosixPath

from pydantic import BaseModel


class UploadFile(BaseModel):
    """One file handed to the ingestion entrypoint."""

    name: str
    content: bytes | str

    @property
    def base_name(self) -> str:
        return PurePosixPath(self.name.replace("\\", "/")).name

    @property
    def is_archive(self) -> bool:
        return self.base_name.lower().endswith(".zip")

    def as_bytes(self) -> bytes:
        if isinstance(self.content, bytes):
            return self.content
        return self.content.encode("utf-8")

    def as_text(self) -> str:
        if isinstance(self.content, str):
            return self.content
        # LinkedIn exports are UTF-8, sometimes with a BOM
        return self.content.decode("utf-8-sig", errors="replace")
