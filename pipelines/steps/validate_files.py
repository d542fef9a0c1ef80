from __future__ import annotations

import logging
from typing import Iterable, Optional

from models.ingestion_result import IngestionState
from pipelines.runner import RunContext
from services.archive import extract_export_files
from services.errors import MissingRequiredFiles
from services.export_normalizer import RECOGNIZED_FILES, missing_required

logger = logging.getLogger(__name__)


class ValidateFiles:
    """Collect recognized export files (expanding zips) and check the required ones are there."""

    state = IngestionState.VALIDATING

    def __init__(self, recognized: Optional[Iterable[str]] = None) -> None:
        self.recognized = tuple(recognized or RECOGNIZED_FILES)

    def run(self, ctx: RunContext) -> RunContext:
        for upload in ctx.files:
            if upload.is_archive:
                for name, text in extract_export_files(upload.as_bytes(), self.recognized).items():
                    ctx.texts.setdefault(name, text)
            elif upload.base_name in self.recognized:
                ctx.texts.setdefault(upload.base_name, upload.as_text())
            else:
                logger.debug(f"Ignoring unrecognized file {upload.name!r}")

        missing = missing_required(ctx.texts)
        if missing:
            raise MissingRequiredFiles(missing)
        ctx.meta["files"] = sorted(ctx.texts)
        return ctx
