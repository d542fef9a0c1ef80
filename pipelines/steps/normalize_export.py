from __future__ import annotations

from models.ingestion_result import IngestionState
from pipelines.runner import RunContext
from services.export_normalizer import normalize_export


class NormalizeExport:
    state = IngestionState.NORMALIZING

    def run(self, ctx: RunContext) -> RunContext:
        ctx.export = normalize_export(ctx.texts)
        ctx.warnings.extend(ctx.export.warnings)
        return ctx
