from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import requests

from config.settings import get_settings
from ports.blob import BlobStorePort

logger = logging.getLogger(__name__)


class LocalBlobStore:
    """Blob store backed by a directory; paths are relative to ``root``."""

    def __init__(self, root: str):
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        target = (self.root / path).resolve()
        if self.root.resolve() not in target.parents:
            raise ValueError(f"blob path escapes store root: {path!r}")
        return target

    def put(self, path: str, data: bytes) -> str:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        return path

    def get(self, path: str) -> bytes:
        return self._resolve(path).read_bytes()


class HttpBlobStore:
    """Blob store behind a plain HTTP object API (GET/PUT on ``{base_url}/{path}``)."""

    def __init__(self, base_url: str, api_key: Optional[str] = None, timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        if api_key:
            self.session.headers["Authorization"] = f"Bearer {api_key}"

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def put(self, path: str, data: bytes) -> str:
        resp = self.session.put(self._url(path), data=data, timeout=self.timeout)
        resp.raise_for_status()
        return path

    def get(self, path: str) -> bytes:
        resp = self.session.get(self._url(path), timeout=self.timeout)
        resp.raise_for_status()
        return resp.content


def get_blob_store() -> BlobStorePort:
    settings = get_settings()
    if settings.blob_base_url:
        logger.debug(f"Using HTTP blob store at {settings.blob_base_url}")
        return HttpBlobStore(settings.blob_base_url, settings.blob_api_key, settings.request_timeout_seconds)
    return LocalBlobStore(settings.blob_root)
