from __future__ import annotations

import logging
import sqlite3
import uuid
from typing import Any, Dict, Iterable, List, Optional, Tuple

from db.connection import fetch_all, fetch_one
from models.profile_record import ProfileRecord

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("first_name", "last_name", "headline", "summary", "industry", "location", "email")


def new_profile_id() -> str:
    return uuid.uuid4().hex


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ProfilesRepo:
    def __init__(self, conn: sqlite3.Connection, autocommit: bool = True):
        self.conn = conn
        self.autocommit = autocommit

    def _commit(self) -> None:
        if self.autocommit:
            self.conn.commit()

    def _one(self, where: str, params: Tuple[Any, ...]) -> Optional[ProfileRecord]:
        cur = self.conn.execute(f"SELECT * FROM profiles WHERE {where} LIMIT 1", params)
        row = fetch_one(cur)
        return ProfileRecord.from_row(row) if row else None

    def get(self, profile_id: str) -> Optional[ProfileRecord]:
        return self._one("id = ?", (profile_id,))

    def get_by_slug(self, slug: str) -> Optional[ProfileRecord]:
        return self._one("linkedin_slug = ?", (slug,))

    def get_many(self, profile_ids: Iterable[str]) -> List[ProfileRecord]:
        """Fetch profiles by id, preserving the order of ``profile_ids``."""
        ids = list(profile_ids)
        if not ids:
            return []
        marks = ",".join("?" for _ in ids)
        cur = self.conn.execute(f"SELECT * FROM profiles WHERE id IN ({marks})", ids)
        by_id = {r["id"]: ProfileRecord.from_row(r) for r in fetch_all(cur)}
        return [by_id[i] for i in ids if i in by_id]

    def upsert_owner(self, profile_id: str, fields: Dict[str, Optional[str]], account_id: Optional[str] = None) -> ProfileRecord:
        """Insert or update a real (non-shadow) profile from the uploader's own export.

        Non-null incoming values overwrite stored ones; nulls keep what is there.
        """
        values = [fields.get(f) for f in PROFILE_FIELDS]
        sql = (
            "INSERT INTO profiles (id, account_id, first_name, last_name, headline, summary, industry, location, email, is_shadow) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, 0) "
            "ON CONFLICT(id) DO UPDATE SET "
            " account_id = COALESCE(profiles.account_id, excluded.account_id), "
            " first_name = COALESCE(excluded.first_name, profiles.first_name), "
            " last_name = COALESCE(excluded.last_name, profiles.last_name), "
            " headline = COALESCE(excluded.headline, profiles.headline), "
            " summary = COALESCE(excluded.summary, profiles.summary), "
            " industry = COALESCE(excluded.industry, profiles.industry), "
            " location = COALESCE(excluded.location, profiles.location), "
            " email = COALESCE(excluded.email, profiles.email), "
            " is_shadow = 0, "
            " updated_at = datetime('now') "
            "RETURNING *;"
        )
        cur = self.conn.execute(sql, (profile_id, account_id, *values))
        row = fetch_all(cur)[0]
        self._commit()
        return ProfileRecord.from_row(row)

    def create_shadow(
        self,
        slug: str,
        first_name: Optional[str],
        last_name: Optional[str],
        headline: Optional[str],
    ) -> Tuple[ProfileRecord, bool]:
        """Return the profile holding ``slug``, creating a shadow if none exists.

        The second element is True when this call inserted the row. A
        concurrent insert of the same slug surfaces as an IntegrityError on
        the unique slug index and is resolved by re-reading the winner.
        """
        existing = self.get_by_slug(slug)
        if existing is not None:
            return existing, False
        profile_id = new_profile_id()
        try:
            self.conn.execute(
                (
                    "INSERT INTO profiles (id, first_name, last_name, headline, linkedin_slug, is_shadow) "
                    "VALUES (?, ?, ?, ?, ?, 1)"
                ),
                (profile_id, first_name, last_name, headline, slug),
            )
            self._commit()
        except sqlite3.IntegrityError:
            logger.debug(f"Slug {slug!r} was claimed concurrently; re-reading winner")
            winner = self.get_by_slug(slug)
            if winner is None:
                raise
            return winner, False
        created = self.get(profile_id)
        assert created is not None
        return created, True

    def fill_missing(self, profile_id: str, fields: Dict[str, Optional[str]]) -> bool:
        """Fill null columns of a shadow profile; populated columns are never touched.

        Returns True when at least one column changed.
        """
        present = {k: v for k, v in fields.items() if k in PROFILE_FIELDS and v}
        if not present:
            return False
        sets = ", ".join(f"{k} = COALESCE({k}, ?)" for k in present)
        null_any = " OR ".join(f"{k} IS NULL" for k in present)
        cur = self.conn.execute(
            f"UPDATE profiles SET {sets}, updated_at = datetime('now') "
            f"WHERE id = ? AND is_shadow = 1 AND ({null_any})",
            (*present.values(), profile_id),
        )
        self._commit()
        return cur.rowcount > 0

    def update_fields(self, profile_id: str, fields: Dict[str, Optional[str]]) -> None:
        """Overwrite the given columns (explicit user edits; None clears)."""
        cols = [k for k in fields if k in PROFILE_FIELDS]
        if not cols:
            return
        sets = ", ".join(f"{k} = ?" for k in cols)
        self.conn.execute(
            f"UPDATE profiles SET {sets}, updated_at = datetime('now') WHERE id = ?",
            (*[fields[k] for k in cols], profile_id),
        )
        self._commit()

    def set_slug(self, profile_id: str, slug: str) -> None:
        self.conn.execute(
            "UPDATE profiles SET linkedin_slug = ?, updated_at = datetime('now') WHERE id = ?",
            (slug, profile_id),
        )
        self._commit()

    def flag_reconciliation(self, profile_id: str) -> None:
        self.conn.execute("UPDATE profiles SET needs_reconciliation = 1 WHERE id = ?", (profile_id,))
        self._commit()

    def delete(self, profile_id: str) -> bool:
        cur = self.conn.execute("DELETE FROM profiles WHERE id = ?", (profile_id,))
        self._commit()
        return cur.rowcount > 0

    def search_keyword(self, query: str, limit: int = 50) -> List[ProfileRecord]:
        """Case-insensitive substring match over first name, last name and headline."""
        terms = [t for t in (query or "").split() if t]
        if not terms:
            return []
        clauses = []
        params: List[Any] = []
        for term in terms:
            pattern = f"%{_escape_like(term.lower())}%"
            clauses.append(
                "(lower(COALESCE(first_name,'')) LIKE ? ESCAPE '\\' "
                "OR lower(COALESCE(last_name,'')) LIKE ? ESCAPE '\\' "
                "OR lower(COALESCE(headline,'')) LIKE ? ESCAPE '\\')"
            )
            params.extend([pattern, pattern, pattern])
        sql = (
            "SELECT * FROM profiles WHERE " + " AND ".join(clauses)
            + " ORDER BY is_shadow ASC, last_name, first_name LIMIT ?"
        )
        cur = self.conn.execute(sql, (*params, int(limit)))
        return [ProfileRecord.from_row(r) for r in fetch_all(cur)]

    def count(self, shadow: Optional[bool] = None) -> int:
        if shadow is None:
            row = self.conn.execute("SELECT COUNT(*) FROM profiles").fetchone()
        else:
            row = self.conn.execute("SELECT COUNT(*) FROM profiles WHERE is_shadow = ?", (1 if shadow else 0,)).fetchone()
        return int(row[0])
