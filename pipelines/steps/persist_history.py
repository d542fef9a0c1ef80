from __future__ import annotations

import sqlite3
from typing import Optional

from db.repos.companies_repo import CompaniesRepo, InstitutionsRepo
from db.repos.history_repo import EducationRepo, PositionsRepo, SkillsRepo
from models.ingestion_result import IngestionState
from pipelines.runner import RunContext
from ports.repos import LookupRepoPort
from services.export_normalizer import EDUCATION_FILE, POSITIONS_FILE, SKILLS_FILE
from utils.date_parsing import parse_linkedin_date


def _lookup_id(ctx: RunContext, repo: LookupRepoPort, name: str, file_name: str, row_no: int) -> Optional[int]:
    """Get-or-create a company/institution; on failure the row is still written without it."""
    try:
        return repo.get_or_create(name)
    except sqlite3.OperationalError:
        raise
    except sqlite3.Error as e:
        ctx.warn("EntityWriteFailure", f"{repo.table} {name!r}: {e}", file_name, row_no)
        return None


class PersistPositions:
    state = IngestionState.WRITING_GRAPH

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.positions = PositionsRepo(conn)
        self.companies = CompaniesRepo(conn)

    def run(self, ctx: RunContext) -> RunContext:
        assert ctx.export is not None
        written = 0
        for row_no, pos in enumerate(ctx.export.positions or [], start=1):
            try:
                started_on = parse_linkedin_date(pos.started_on)
                finished_on = parse_linkedin_date(pos.finished_on)
            except ValueError as e:
                ctx.warn("EntityWriteFailure", f"position at {pos.company}: {e}", POSITIONS_FILE, row_no)
                continue
            company_id = _lookup_id(ctx, self.companies, pos.company, POSITIONS_FILE, row_no)
            try:
                if self.positions.insert(
                    ctx.owner_profile_id, company_id, pos.title, pos.description, pos.location, started_on, finished_on
                ):
                    written += 1
            except sqlite3.OperationalError:
                raise
            except sqlite3.Error as e:
                ctx.warn("EntityWriteFailure", f"position at {pos.company}: {e}", POSITIONS_FILE, row_no)
        ctx.counts["positions_written"] = written
        return ctx


class PersistEducation:
    state = IngestionState.WRITING_GRAPH

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.education = EducationRepo(conn)
        self.institutions = InstitutionsRepo(conn)

    def run(self, ctx: RunContext) -> RunContext:
        assert ctx.export is not None
        written = 0
        for row_no, edu in enumerate(ctx.export.education or [], start=1):
            try:
                started_on = parse_linkedin_date(edu.started_on)
                finished_on = parse_linkedin_date(edu.finished_on)
            except ValueError as e:
                ctx.warn("EntityWriteFailure", f"education at {edu.school}: {e}", EDUCATION_FILE, row_no)
                continue
            institution_id = _lookup_id(ctx, self.institutions, edu.school, EDUCATION_FILE, row_no)
            try:
                if self.education.insert(
                    ctx.owner_profile_id, institution_id, edu.degree, edu.field_of_study,
                    edu.activities, edu.notes, started_on, finished_on,
                ):
                    written += 1
            except sqlite3.OperationalError:
                raise
            except sqlite3.Error as e:
                ctx.warn("EntityWriteFailure", f"education at {edu.school}: {e}", EDUCATION_FILE, row_no)
        ctx.counts["education_written"] = written
        return ctx


class PersistSkills:
    state = IngestionState.WRITING_GRAPH

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.skills = SkillsRepo(conn)

    def run(self, ctx: RunContext) -> RunContext:
        assert ctx.export is not None
        written = 0
        for row_no, skill in enumerate(ctx.export.skills or [], start=1):
            try:
                if self.skills.insert(ctx.owner_profile_id, skill.name):
                    written += 1
            except sqlite3.OperationalError:
                raise
            except sqlite3.Error as e:
                ctx.warn("EntityWriteFailure", f"skill {skill.name!r}: {e}", SKILLS_FILE, row_no)
        ctx.counts["skills_written"] = written
        return ctx
