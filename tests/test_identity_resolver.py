from __future__ import annotations

from db.repos.connections_repo import ConnectionsRepo
from db.repos.history_repo import SkillsRepo
from db.repos.profiles_repo import ProfilesRepo
from models.export_records import LinkedInConnection
from services.identity_resolver import ClaimOutcome, IdentityResolver, ResolveOutcome, claim_slug


def _conn_row(**kw):
    base = {"first_name": "Jane", "last_name": "Doe", "linkedin_slug": "janedoe"}
    base.update(kw)
    return LinkedInConnection(**base)


def test_unknown_slug_creates_shadow_with_derived_headline(conn):
    profile, outcome = IdentityResolver(conn).resolve(_conn_row(company="Acme", position="CTO"))
    assert outcome is ResolveOutcome.CREATED
    assert profile.is_shadow is True
    assert profile.account_id is None
    assert profile.headline == "CTO at Acme"


def test_enrichment_never_overwrites_existing_fields(conn):
    resolver = IdentityResolver(conn)
    first, _ = resolver.resolve(_conn_row(company="Acme", position="CTO"))
    again, outcome = resolver.resolve(_conn_row(first_name="Janet", company="Other", position="Intern"))
    assert outcome is ResolveOutcome.UNCHANGED
    assert again.id == first.id
    stored = ProfilesRepo(conn).get(first.id)
    assert stored.headline == "CTO at Acme"
    assert stored.first_name == "Jane"


def test_shadow_null_fields_are_filled(conn):
    resolver = IdentityResolver(conn)
    first, _ = resolver.resolve(_conn_row())
    assert first.headline is None
    enriched, outcome = resolver.resolve(_conn_row(company="Acme", position="CTO"))
    assert outcome is ResolveOutcome.ENRICHED
    assert enriched.headline == "CTO at Acme"


def test_real_profile_is_returned_unchanged(conn):
    profiles = ProfilesRepo(conn)
    profiles.upsert_owner("real-1", {"first_name": "Jane", "last_name": "Doe", "headline": None})
    profiles.set_slug("real-1", "janedoe")
    profile, outcome = IdentityResolver(conn).resolve(_conn_row(company="Acme", position="CTO"))
    assert outcome is ResolveOutcome.UNCHANGED
    assert profile.id == "real-1"
    assert profiles.get("real-1").headline is None


def test_claim_merges_shadow_into_real_profile(conn):
    profiles = ProfilesRepo(conn)
    shadow, _ = IdentityResolver(conn).resolve(_conn_row(company="Acme", position="CTO"))
    profiles.upsert_owner("friend", {"first_name": "Fred", "last_name": "Friend"})
    profiles.upsert_owner("jane-real", {"first_name": "Jane", "last_name": "Doe"})
    ConnectionsRepo(conn).add("friend", shadow.id)
    ConnectionsRepo(conn).add("jane-real", shadow.id)
    SkillsRepo(conn).insert(shadow.id, "Leadership")

    assert claim_slug(conn, "jane-real", "janedoe") is ClaimOutcome.PROMOTED

    assert profiles.get(shadow.id) is None
    holder = profiles.get_by_slug("janedoe")
    assert holder.id == "jane-real" and holder.is_shadow is False
    # filled from the shadow since the real profile had no headline
    assert holder.headline == "CTO at Acme"
    edges = ConnectionsRepo(conn)
    assert edges.neighbour_ids("jane-real") == ["friend"]
    assert edges.count() == 1
    assert [s["name"] for s in SkillsRepo(conn).list_for_profile("jane-real")] == ["Leadership"]


def test_claim_of_slug_held_by_real_profile_is_flagged(conn):
    profiles = ProfilesRepo(conn)
    profiles.upsert_owner("first", {"first_name": "A", "last_name": "A"})
    profiles.upsert_owner("second", {"first_name": "B", "last_name": "B"})
    assert claim_slug(conn, "first", "taken") is ClaimOutcome.CLAIMED
    assert claim_slug(conn, "first", "taken") is ClaimOutcome.ALREADY_OWNED
    assert claim_slug(conn, "second", "taken") is ClaimOutcome.CONFLICT
    assert profiles.get_by_slug("taken").id == "first"
    second = profiles.get("second")
    assert second.linkedin_slug is None
    assert second.needs_reconciliation is True
