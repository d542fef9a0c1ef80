from __future__ import annotations

import logging
import os
import sys
from typing import Any, Optional, TextIO

from config.settings import get_settings


_INITIALIZED: bool = False

# HTTP clients used by the blob store and the embedder log every request at INFO
_NOISY_LOGGERS = ("urllib3", "httpx", "httpcore", "openai")


class ContextFormatter(logging.Formatter):
    """Formats records carrying ingestion context passed through ``extra``.

    Missing fields render as ``-``; ``run_id`` falls back to the RUN_ID
    environment variable so CLI runs are correlated without threading it
    through every call.
    """

    FIELDS: dict[str, Any] = {
        "step": "-",
        "status": "-",
        "duration_ms": "-",
        "profile_id": "-",
        "file": "-",
        "row": "-",
        "error": "-",
    }

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        for key, default in self.FIELDS.items():
            if not hasattr(record, key):
                setattr(record, key, default)
        if not getattr(record, "run_id", None):
            record.run_id = os.getenv("RUN_ID") or "-"
        return super().format(record)


def init_logging(level: Optional[str] = None, stream: Optional[TextIO] = None) -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return

    log_level = getattr(logging, (level or get_settings().log_level).upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if not root_logger.handlers:
        handler = logging.StreamHandler(stream or sys.stdout)
        handler.setLevel(log_level)
        handler.setFormatter(
            ContextFormatter(
                fmt=(
                    "%(asctime)s %(levelname)s %(name)s %(message)s "
                    "step=%(step)s status=%(status)s duration_ms=%(duration_ms)s "
                    "profile_id=%(profile_id)s file=%(file)s row=%(row)s "
                    "error=%(error)s run_id=%(run_id)s"
                )
            )
        )
        root_logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    _INITIALIZED = True
