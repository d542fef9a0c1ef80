from __future__ import annotations

import io
import logging
import zipfile
from pathlib import PurePosixPath
from typing import Dict, Iterable

from services.errors import InvalidArchive

logger = logging.getLogger(__name__)

# macOS Finder adds these when a folder is compressed
_SYSTEM_DIRS = ("__MACOSX",)


def _is_hidden_or_system(path: PurePosixPath) -> bool:
    if any(part in _SYSTEM_DIRS for part in path.parts):
        return True
    return path.name.startswith(".")


def extract_export_files(data: bytes, recognized: Iterable[str]) -> Dict[str, str]:
    """Return ``{base_name: text}`` for recognized CSV entries of a zip bundle.

    Directory entries, hidden files and unrecognized names are skipped. When a
    name occurs more than once (nested folders) the first entry wins.

    Raises:
        InvalidArchive: ``data`` is not a readable zip archive
    """
    wanted = set(recognized)
    found: Dict[str, str] = {}
    try:
        with zipfile.ZipFile(io.BytesIO(data), "r") as zf:
            for info in zf.infolist():
                if info.is_dir():
                    continue
                path = PurePosixPath(info.filename.replace("\\", "/"))
                if _is_hidden_or_system(path):
                    continue
                if path.name not in wanted or path.name in found:
                    continue
                found[path.name] = zf.read(info).decode("utf-8-sig", errors="replace")
    except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError) as e:
        raise InvalidArchive(str(e) or "not a zip file") from e

    logger.info(f"Extracted {len(found)} export files from archive: {sorted(found)}")
    return found
