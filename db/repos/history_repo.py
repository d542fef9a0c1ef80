from __future__ import annotations

import sqlite3
from typing import Any, Dict, Iterable, List, Optional, Set

from db.connection import fetch_all


class _ProfileOwnedRepo:
    table: str = ""

    def __init__(self, conn: sqlite3.Connection, autocommit: bool = True):
        self.conn = conn
        self.autocommit = autocommit

    def _commit(self) -> None:
        if self.autocommit:
            self.conn.commit()

    def ids_for_profile(self, profile_id: str) -> Set[int]:
        cur = self.conn.execute(f"SELECT id FROM {self.table} WHERE profile_id = ?", (profile_id,))
        return {int(r[0]) for r in cur.fetchall()}

    def delete_ids(self, profile_id: str, ids: Iterable[int]) -> int:
        ids = list(ids)
        if not ids:
            return 0
        marks = ",".join("?" for _ in ids)
        cur = self.conn.execute(
            f"DELETE FROM {self.table} WHERE profile_id = ? AND id IN ({marks})",
            (profile_id, *ids),
        )
        self._commit()
        return cur.rowcount

    def reassign(self, from_profile_id: str, to_profile_id: str) -> int:
        """Move rows to another profile; rows that would duplicate one it already has stay behind."""
        cur = self.conn.execute(
            f"UPDATE OR IGNORE {self.table} SET profile_id = ? WHERE profile_id = ?",
            (to_profile_id, from_profile_id),
        )
        self._commit()
        return cur.rowcount


class PositionsRepo(_ProfileOwnedRepo):
    table = "positions"

    def insert(
        self,
        profile_id: str,
        company_id: Optional[int],
        title: Optional[str],
        description: Optional[str] = None,
        location: Optional[str] = None,
        started_on: Optional[str] = None,
        finished_on: Optional[str] = None,
    ) -> bool:
        """Insert one position; returns False when the same position is already stored."""
        cur = self.conn.execute(
            (
                "INSERT OR IGNORE INTO positions (profile_id, company_id, title, description, location, started_on, finished_on) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)"
            ),
            (profile_id, company_id, title, description, location, started_on, finished_on),
        )
        self._commit()
        return cur.rowcount == 1

    def update(
        self,
        row_id: int,
        profile_id: str,
        company_id: Optional[int],
        title: Optional[str],
        description: Optional[str],
        location: Optional[str],
        started_on: Optional[str],
        finished_on: Optional[str],
    ) -> bool:
        cur = self.conn.execute(
            (
                "UPDATE positions SET company_id = ?, title = ?, description = ?, location = ?, "
                "started_on = ?, finished_on = ? WHERE id = ? AND profile_id = ?"
            ),
            (company_id, title, description, location, started_on, finished_on, row_id, profile_id),
        )
        self._commit()
        return cur.rowcount == 1

    def list_for_profile(self, profile_id: str) -> List[Dict[str, Any]]:
        cur = self.conn.execute(
            (
                "SELECT p.id, c.name AS company, p.title, p.description, p.location, p.started_on, p.finished_on "
                "FROM positions p LEFT JOIN companies c ON c.id = p.company_id "
                "WHERE p.profile_id = ? ORDER BY COALESCE(p.started_on, '') DESC, p.id"
            ),
            (profile_id,),
        )
        return fetch_all(cur)


class EducationRepo(_ProfileOwnedRepo):
    table = "education"

    def insert(
        self,
        profile_id: str,
        institution_id: Optional[int],
        degree_name: Optional[str] = None,
        field_of_study: Optional[str] = None,
        activities: Optional[str] = None,
        notes: Optional[str] = None,
        started_on: Optional[str] = None,
        finished_on: Optional[str] = None,
    ) -> bool:
        cur = self.conn.execute(
            (
                "INSERT OR IGNORE INTO education (profile_id, institution_id, degree_name, field_of_study, "
                "activities, notes, started_on, finished_on) VALUES (?, ?, ?, ?, ?, ?, ?, ?)"
            ),
            (profile_id, institution_id, degree_name, field_of_study, activities, notes, started_on, finished_on),
        )
        self._commit()
        return cur.rowcount == 1

    def update(
        self,
        row_id: int,
        profile_id: str,
        institution_id: Optional[int],
        degree_name: Optional[str],
        field_of_study: Optional[str],
        activities: Optional[str],
        notes: Optional[str],
        started_on: Optional[str],
        finished_on: Optional[str],
    ) -> bool:
        cur = self.conn.execute(
            (
                "UPDATE education SET institution_id = ?, degree_name = ?, field_of_study = ?, activities = ?, "
                "notes = ?, started_on = ?, finished_on = ? WHERE id = ? AND profile_id = ?"
            ),
            (institution_id, degree_name, field_of_study, activities, notes, started_on, finished_on, row_id, profile_id),
        )
        self._commit()
        return cur.rowcount == 1

    def list_for_profile(self, profile_id: str) -> List[Dict[str, Any]]:
        cur = self.conn.execute(
            (
                "SELECT e.id, i.name AS school, e.degree_name AS degree, e.field_of_study, e.activities, e.notes, "
                "e.started_on, e.finished_on "
                "FROM education e LEFT JOIN institutions i ON i.id = e.institution_id "
                "WHERE e.profile_id = ? ORDER BY COALESCE(e.started_on, '') DESC, e.id"
            ),
            (profile_id,),
        )
        return fetch_all(cur)


class SkillsRepo(_ProfileOwnedRepo):
    table = "skills"

    def insert(self, profile_id: str, name: str) -> bool:
        cur = self.conn.execute(
            "INSERT OR IGNORE INTO skills (profile_id, name) VALUES (?, ?)",
            (profile_id, name),
        )
        self._commit()
        return cur.rowcount == 1

    def update(self, row_id: int, profile_id: str, name: str) -> bool:
        cur = self.conn.execute(
            "UPDATE OR IGNORE skills SET name = ? WHERE id = ? AND profile_id = ?",
            (name, row_id, profile_id),
        )
        self._commit()
        return cur.rowcount == 1

    def list_for_profile(self, profile_id: str) -> List[Dict[str, Any]]:
        cur = self.conn.execute(
            "SELECT id, name FROM skills WHERE profile_id = ? ORDER BY name",
            (profile_id,),
        )
        return fetch_all(cur)
