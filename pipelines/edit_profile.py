from __future__ import annotations

import logging
import sqlite3
from typing import Callable, Dict, List, Optional, Sequence, TypeVar

from db.repos.companies_repo import CompaniesRepo, InstitutionsRepo
from db.repos.history_repo import EducationRepo, PositionsRepo, SkillsRepo
from db.repos.profiles_repo import ProfilesRepo
from models.profile_edit import EditResult, EducationEdit, PositionEdit, ProfileEdit, SectionChanges, SkillEdit
from services.errors import EntityWriteFailure, IngestionWarning
from utils.date_parsing import parse_linkedin_date

logger = logging.getLogger(__name__)

E = TypeVar("E", PositionEdit, EducationEdit, SkillEdit)

_PROFILE_EDIT_FIELDS = ("first_name", "last_name", "headline", "summary", "industry", "location")


def _apply_section(
    section: str,
    existing_ids: set,
    rows: Sequence[E],
    delete: Callable[[List[int]], int],
    write: Callable[[E], bool],
    warnings: List[IngestionWarning],
) -> SectionChanges:
    """Delete rows missing from ``rows``, then update rows with an id and insert the rest."""
    changes = SectionChanges()
    submitted = {r.id for r in rows if r.id is not None}
    removed = sorted(existing_ids - submitted)
    changes.deleted = delete(removed)

    for idx, row in enumerate(rows, start=1):
        if row.id is not None and row.id not in existing_ids:
            warnings.append(IngestionWarning(
                kind="EntityWriteFailure", message=f"{section} id {row.id} does not belong to this profile", row=idx,
            ))
            continue
        try:
            ok = write(row)
        except (ValueError, sqlite3.IntegrityError) as e:
            warnings.append(IngestionWarning(kind="EntityWriteFailure", message=f"{section}: {e}", row=idx))
            continue
        if not ok:
            continue
        if row.id is None:
            changes.inserted += 1
        else:
            changes.updated += 1
    return changes


def apply_profile_edit(conn: sqlite3.Connection, profile_id: str, edit: ProfileEdit) -> EditResult:
    """Apply a user's edit of their own profile.

    Profile fields explicitly set on ``edit`` are overwritten. Each history
    section given as a list replaces the stored one by set difference on row id.
    """
    profiles = ProfilesRepo(conn)
    if profiles.get(profile_id) is None:
        raise EntityWriteFailure("profile", f"no profile with id {profile_id}")

    fields: Dict[str, Optional[str]] = {
        f: getattr(edit, f) for f in _PROFILE_EDIT_FIELDS if f in edit.model_fields_set
    }
    profiles.update_fields(profile_id, fields)

    result = EditResult()
    companies = CompaniesRepo(conn)
    institutions = InstitutionsRepo(conn)

    if edit.positions is not None:
        repo = PositionsRepo(conn)

        def write_position(p: PositionEdit) -> bool:
            company_id = companies.get_or_create(p.company) if p.company else None
            args = (company_id, p.title, p.description, p.location,
                    parse_linkedin_date(p.started_on), parse_linkedin_date(p.finished_on))
            if p.id is None:
                return repo.insert(profile_id, *args)
            return repo.update(p.id, profile_id, *args)

        result.positions = _apply_section(
            "position", repo.ids_for_profile(profile_id), edit.positions,
            lambda ids: repo.delete_ids(profile_id, ids), write_position, result.warnings,
        )

    if edit.education is not None:
        repo_e = EducationRepo(conn)

        def write_education(e: EducationEdit) -> bool:
            institution_id = institutions.get_or_create(e.school) if e.school else None
            args = (institution_id, e.degree, e.field_of_study, e.activities, e.notes,
                    parse_linkedin_date(e.started_on), parse_linkedin_date(e.finished_on))
            if e.id is None:
                return repo_e.insert(profile_id, *args)
            return repo_e.update(e.id, profile_id, *args)

        result.education = _apply_section(
            "education", repo_e.ids_for_profile(profile_id), edit.education,
            lambda ids: repo_e.delete_ids(profile_id, ids), write_education, result.warnings,
        )

    if edit.skills is not None:
        repo_s = SkillsRepo(conn)

        def write_skill(s: SkillEdit) -> bool:
            name = s.name.strip()
            if not name:
                raise ValueError("skill name must not be empty")
            if s.id is None:
                return repo_s.insert(profile_id, name)
            return repo_s.update(s.id, profile_id, name)

        result.skills = _apply_section(
            "skill", repo_s.ids_for_profile(profile_id), edit.skills,
            lambda ids: repo_s.delete_ids(profile_id, ids), write_skill, result.warnings,
        )

    logger.info(
        f"Profile edit applied: positions {result.positions.model_dump()}, "
        f"education {result.education.model_dump()}, skills {result.skills.model_dump()}",
        extra={"profile_id": profile_id},
    )
    return result
