from __future__ import annotations

import sqlite3
from typing import Optional

from db.repos.connections_repo import ConnectionsRepo
from models.ingestion_result import IngestionState
from pipelines.runner import RunContext
from ports.repos import ConnectionsRepoPort
from utils.date_parsing import parse_linkedin_date


class PersistConnections:
    state = IngestionState.WRITING_GRAPH

    def __init__(self, conn: sqlite3.Connection, repo: Optional[ConnectionsRepoPort] = None) -> None:
        self.repo = repo or ConnectionsRepo(conn)

    def _connected_on(self, ctx: RunContext, raw: Optional[str], row_no: int) -> Optional[str]:
        try:
            return parse_linkedin_date(raw)
        except ValueError:
            ctx.warn("MalformedRow", f"unparseable Connected On date {raw!r}; stored without date",
                     "Connections.csv", row_no)
            return None

    def run(self, ctx: RunContext) -> RunContext:
        written = 0
        for row_no, (connection, profile_id) in enumerate(ctx.resolved, start=1):
            connected_on = self._connected_on(ctx, connection.connected_on, row_no)
            try:
                if self.repo.add(ctx.owner_profile_id, profile_id, connected_on):
                    written += 1
            except sqlite3.OperationalError:
                raise
            except sqlite3.Error as e:
                ctx.warn("EntityWriteFailure", f"connection to {connection.linkedin_slug}: {e}", "Connections.csv", row_no)
        ctx.counts["connections_written"] = written
        return ctx
