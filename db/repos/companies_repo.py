from __future__ import annotations

import logging
import sqlite3
from typing import Optional

logger = logging.getLogger(__name__)


class NamedLookupRepo:
    """Get-or-create access to a table of unique names (companies, institutions)."""

    table: str = ""

    def __init__(self, conn: sqlite3.Connection, autocommit: bool = True):
        self.conn = conn
        self.autocommit = autocommit

    def find_id(self, name: str) -> Optional[int]:
        row = self.conn.execute(f"SELECT id FROM {self.table} WHERE name = ?", (name,)).fetchone()
        return int(row[0]) if row else None

    def get_or_create(self, name: str) -> int:
        """Return the id for ``name``, inserting it when new.

        Two writers inserting the same name at once both reach the INSERT;
        the loser gets an IntegrityError and reads the winner's row.
        """
        name = name.strip()
        if not name:
            raise ValueError(f"{self.table} name must not be empty")
        existing = self.find_id(name)
        if existing is not None:
            return existing
        try:
            cur = self.conn.execute(f"INSERT INTO {self.table} (name) VALUES (?)", (name,))
            if self.autocommit:
                self.conn.commit()
            return int(cur.lastrowid)
        except sqlite3.IntegrityError:
            logger.debug(f"Concurrent insert into {self.table} for {name!r}; re-reading")
            winner = self.find_id(name)
            if winner is None:
                raise
            return winner


class CompaniesRepo(NamedLookupRepo):
    table = "companies"


class InstitutionsRepo(NamedLookupRepo):
    table = "institutions"
