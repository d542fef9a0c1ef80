from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Tuple

from models.export_records import LinkedInConnection, ProcessedExport
from models.ingestion_result import IngestionState
from models.profile_record import ProfileRecord
from models.upload_file import UploadFile
from services.errors import IngestionCancelled, IngestionError, IngestionWarning
from utils.logging_setup import init_logging

logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    owner_profile_id: str
    account_id: Optional[str] = None
    owner_slug: Optional[str] = None
    files: List[UploadFile] = field(default_factory=list)
    texts: Dict[str, str] = field(default_factory=dict)
    export: Optional[ProcessedExport] = None
    profile: Optional[ProfileRecord] = None
    # (connection row, canonical profile id) in file order
    resolved: List[Tuple[LinkedInConnection, str]] = field(default_factory=list)
    counts: Dict[str, int] = field(default_factory=dict)
    warnings: List[IngestionWarning] = field(default_factory=list)
    state: IngestionState = IngestionState.AWAITING_FILES
    # Reason for the transition to FAILED; IngestionError kinds or the raw exception
    failure: Optional[Exception] = None
    cancel: Optional[threading.Event] = None
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    meta: dict = field(default_factory=dict)

    def bump(self, key: str, by: int = 1) -> None:
        self.counts[key] = self.counts.get(key, 0) + by

    def warn(self, kind: str, message: str, file: Optional[str] = None, row: Optional[int] = None) -> None:
        self.warnings.append(IngestionWarning(kind=kind, message=message, file=file, row=row))
        logger.warning(
            message,
            extra={"status": kind, "file": file or "-", "row": row if row is not None else "-",
                   "profile_id": self.owner_profile_id, "run_id": self.run_id},
        )


class Step(Protocol):
    state: IngestionState

    def run(self, ctx: RunContext) -> RunContext:
        ...


class Pipeline:
    def __init__(self, steps: List[Step]):
        self.steps = steps

    def run(self, ctx: RunContext) -> RunContext:
        # Make logging idempotent for any direct runner use
        init_logging()
        for step in self.steps:
            name = type(step).__name__
            started = time.perf_counter()
            try:
                if ctx.cancel is not None and ctx.cancel.is_set():
                    raise IngestionCancelled()
                ctx.state = getattr(step, "state", ctx.state)
                ctx = step.run(ctx)
            except IngestionError as e:
                ctx.state = IngestionState.FAILED
                ctx.failure = e
                logger.error(
                    e.message,
                    extra={"step": name, "status": "failed", "error": e.kind,
                           "profile_id": ctx.owner_profile_id, "run_id": ctx.run_id},
                )
                raise
            except Exception as e:
                ctx.state = IngestionState.FAILED
                ctx.failure = e
                logger.error(
                    f"{name} failed: {e}",
                    extra={"step": name, "status": "failed", "error": type(e).__name__,
                           "profile_id": ctx.owner_profile_id, "run_id": ctx.run_id},
                )
                raise
            logger.info(
                f"{name} finished in state {ctx.state.value}",
                extra={
                    "step": name,
                    "status": "ok",
                    "duration_ms": int((time.perf_counter() - started) * 1000),
                    "profile_id": ctx.owner_profile_id,
                    "run_id": ctx.run_id,
                },
            )
        ctx.state = IngestionState.DONE
        return ctx
