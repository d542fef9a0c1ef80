"""
Identity resolution

Maps each LinkedIn slug to exactly one profile. Connections that are not
yet registered get a shadow profile; a shadow that later gets claimed by a
real user is merged into that user's profile.
"""

import logging
import sqlite3
from enum import Enum
from typing import Optional, Tuple

from db.connection import immediate_transaction
from db.repos.connections_repo import ConnectionsRepo
from db.repos.history_repo import EducationRepo, PositionsRepo, SkillsRepo
from db.repos.profiles_repo import PROFILE_FIELDS, ProfilesRepo
from models.export_records import LinkedInConnection
from models.profile_record import ProfileRecord
from ports.repos import ProfilesRepoPort

logger = logging.getLogger(__name__)


class ResolveOutcome(str, Enum):
    CREATED = "created"
    ENRICHED = "enriched"
    UNCHANGED = "unchanged"


class ClaimOutcome(str, Enum):
    ALREADY_OWNED = "already_owned"
    CLAIMED = "claimed"
    PROMOTED = "promoted"
    CONFLICT = "conflict"


class IdentityResolver:
    def __init__(self, conn: sqlite3.Connection, profiles: Optional[ProfilesRepoPort] = None):
        self.conn = conn
        self.profiles = profiles or ProfilesRepo(conn)

    def resolve(self, connection: LinkedInConnection) -> Tuple[ProfileRecord, ResolveOutcome]:
        """Return the profile for ``connection.linkedin_slug``.

        Unknown slugs become shadow profiles. Known shadows only get their
        empty fields filled; real profiles are returned untouched.
        """
        fields = {
            "first_name": connection.first_name,
            "last_name": connection.last_name,
            "headline": connection.derived_headline,
            "email": connection.email,
        }
        profile, created = self.profiles.create_shadow(
            connection.linkedin_slug,
            fields["first_name"],
            fields["last_name"],
            fields["headline"],
        )
        if created:
            if connection.email:
                self.profiles.fill_missing(profile.id, {"email": connection.email})
            return profile, ResolveOutcome.CREATED
        if not profile.is_shadow:
            return profile, ResolveOutcome.UNCHANGED
        if self.profiles.fill_missing(profile.id, fields):
            refreshed = self.profiles.get(profile.id)
            return refreshed or profile, ResolveOutcome.ENRICHED
        return profile, ResolveOutcome.UNCHANGED


def claim_slug(conn: sqlite3.Connection, profile_id: str, slug: str) -> ClaimOutcome:
    """Attach ``slug`` to the real profile ``profile_id``.

    Runs under an immediate transaction so that of two claimants the first
    to commit wins. A shadow holding the slug is merged into the claimant
    and deleted. A real profile holding it is left alone and the claimant
    is flagged for reconciliation.
    """
    profiles = ProfilesRepo(conn, autocommit=False)
    with immediate_transaction(conn):
        holder = profiles.get_by_slug(slug)
        if holder is None:
            profiles.set_slug(profile_id, slug)
            outcome = ClaimOutcome.CLAIMED
        elif holder.id == profile_id:
            outcome = ClaimOutcome.ALREADY_OWNED
        elif holder.is_shadow:
            _merge_shadow(conn, profiles, holder, profile_id)
            profiles.set_slug(profile_id, slug)
            outcome = ClaimOutcome.PROMOTED
        else:
            profiles.flag_reconciliation(profile_id)
            outcome = ClaimOutcome.CONFLICT

    if outcome is ClaimOutcome.CONFLICT:
        logger.warning(
            f"Slug {slug!r} already belongs to profile {holder.id}; profile flagged for reconciliation",
            extra={"profile_id": profile_id, "status": "conflict"},
        )
    else:
        logger.info(f"Slug {slug!r} {outcome.value}", extra={"profile_id": profile_id, "status": outcome.value})
    return outcome


def _merge_shadow(conn: sqlite3.Connection, profiles: ProfilesRepo, shadow: ProfileRecord, target_id: str) -> None:
    """Fold a shadow profile into ``target_id`` inside the caller's transaction."""
    fill = {f: getattr(shadow, f) for f in PROFILE_FIELDS if getattr(shadow, f)}
    if fill:
        sets = ", ".join(f"{k} = COALESCE({k}, ?)" for k in fill)
        conn.execute(f"UPDATE profiles SET {sets} WHERE id = ?", (*fill.values(), target_id))

    moved_edges = ConnectionsRepo(conn, autocommit=False).repoint(shadow.id, target_id)
    for repo in (PositionsRepo, EducationRepo, SkillsRepo):
        repo(conn, autocommit=False).reassign(shadow.id, target_id)
    profiles.delete(shadow.id)
    logger.info(
        f"Merged shadow {shadow.id} into {target_id} ({moved_edges} connections carried over)",
        extra={"profile_id": target_id},
    )
