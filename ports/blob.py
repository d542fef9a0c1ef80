from __future__ import annotations

from typing import Protocol


class BlobStorePort(Protocol):
    def put(self, path: str, data: bytes) -> str:
        ...

    def get(self, path: str) -> bytes:
        ...
