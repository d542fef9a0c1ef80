from __future__ import annotations

import logging
import sqlite3

from models.ingestion_result import IngestionState
from pipelines.runner import RunContext
from services.identity_resolver import IdentityResolver, ResolveOutcome

logger = logging.getLogger(__name__)


class ResolveConnections:
    state = IngestionState.RESOLVING_IDENTITIES

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.resolver = IdentityResolver(conn)

    def run(self, ctx: RunContext) -> RunContext:
        assert ctx.export is not None
        # The declared slug, not the stored one: a conflicting claim leaves the profile without a slug
        own_slug = ctx.owner_slug or ctx.export.profile.linkedin_slug or (ctx.profile.linkedin_slug if ctx.profile else None)
        for row_no, connection in enumerate(ctx.export.connections, start=1):
            if own_slug and connection.linkedin_slug == own_slug:
                continue
            try:
                profile, outcome = self.resolver.resolve(connection)
            except sqlite3.OperationalError:
                raise
            except sqlite3.Error as e:
                ctx.warn("EntityWriteFailure", f"profile for {connection.linkedin_slug}: {e}", "Connections.csv", row_no)
                continue
            if outcome is ResolveOutcome.CREATED:
                ctx.bump("shadow_profiles_created")
            elif outcome is ResolveOutcome.ENRICHED:
                ctx.bump("shadow_profiles_enriched")
            if profile.id != ctx.owner_profile_id:
                ctx.resolved.append((connection, profile.id))
        logger.info(
            f"Resolved {len(ctx.resolved)} connections "
            f"({ctx.counts.get('shadow_profiles_created', 0)} new shadows)",
            extra={"profile_id": ctx.owner_profile_id, "run_id": ctx.run_id},
        )
        return ctx
