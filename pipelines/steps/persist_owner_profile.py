from __future__ import annotations

import logging
import sqlite3

from db.repos.profiles_repo import ProfilesRepo
from models.ingestion_result import IngestionState
from pipelines.runner import RunContext
from services.errors import EntityWriteFailure
from services.identity_resolver import ClaimOutcome, claim_slug

logger = logging.getLogger(__name__)


class PersistOwnerProfile:
    """Write the uploader's own profile, then claim the slug it declares.

    A failure here is fatal: every later write hangs off this profile id.
    """

    state = IngestionState.RESOLVING_IDENTITIES

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self.profiles = ProfilesRepo(conn)

    def run(self, ctx: RunContext) -> RunContext:
        assert ctx.export is not None
        own = ctx.export.profile
        fields = own.model_dump(exclude={"linkedin_slug"})
        try:
            ctx.profile = self.profiles.upsert_owner(ctx.owner_profile_id, fields, account_id=ctx.account_id)
        except sqlite3.OperationalError:
            raise
        except sqlite3.Error as e:
            raise EntityWriteFailure("profile", str(e)) from e

        slug = ctx.owner_slug or own.linkedin_slug
        if slug:
            try:
                outcome = claim_slug(self.conn, ctx.owner_profile_id, slug)
            except sqlite3.OperationalError:
                raise
            except sqlite3.Error as e:
                raise EntityWriteFailure("profile", f"could not claim slug {slug!r}: {e}") from e
            ctx.meta["slug_claim"] = outcome.value
            if outcome is ClaimOutcome.CONFLICT:
                ctx.warn(
                    "SlugClaimConflict",
                    f"LinkedIn slug {slug!r} already belongs to another registered profile; "
                    "this profile was flagged for manual reconciliation",
                    file="Profile.csv",
                )
            ctx.profile = self.profiles.get(ctx.owner_profile_id) or ctx.profile
        return ctx
