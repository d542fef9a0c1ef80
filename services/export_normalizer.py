"""
LinkedIn Export Normalization

Turns the raw CSV texts of one export into a ``ProcessedExport``.
"""

import logging
from typing import Dict, List, Mapping, Optional, Tuple

from models.export_records import (
    LinkedInConnection,
    LinkedInEducation,
    LinkedInPosition,
    LinkedInProfile,
    LinkedInSkill,
    ProcessedExport,
)
from services.csv_rows import CsvRows, locate_header
from services.errors import IngestionWarning, MissingRequiredField, MissingRequiredFiles
from services.slugs import extract_linkedin_slug

logger = logging.getLogger(__name__)

PROFILE_FILE = "Profile.csv"
CONNECTIONS_FILE = "Connections.csv"
POSITIONS_FILE = "Positions.csv"
EDUCATION_FILE = "Education.csv"
SKILLS_FILE = "Skills.csv"

REQUIRED_FILES = (PROFILE_FILE, CONNECTIONS_FILE)
RECOGNIZED_FILES = REQUIRED_FILES + (POSITIONS_FILE, EDUCATION_FILE, SKILLS_FILE)

CONNECTIONS_HEADER_TOKEN = "First Name"

# Header aliases per semantic field, tried in order; first non-empty wins.
FIELD_ALIASES: Dict[str, Dict[str, Tuple[str, ...]]] = {
    PROFILE_FILE: {
        "first_name": ("First Name",),
        "last_name": ("Last Name",),
        "headline": ("Headline",),
        "summary": ("Summary",),
        "industry": ("Industry",),
        "location": ("Geo Location", "Location"),
        "email": ("Email Address", "Email"),
        "profile_url": ("Profile URL", "Public Profile Url", "Public Profile URL", "URL"),
    },
    CONNECTIONS_FILE: {
        "first_name": ("First Name",),
        "last_name": ("Last Name",),
        "url": ("URL", "Profile URL"),
        "email": ("Email Address",),
        "company": ("Company",),
        "position": ("Position",),
        "connected_on": ("Connected On",),
    },
    POSITIONS_FILE: {
        "title": ("Title", "Position"),
        "company": ("Company Name", "Company"),
        "description": ("Description",),
        "location": ("Location",),
        "started_on": ("Started On", "Start Date"),
        "finished_on": ("Finished On", "End Date"),
    },
    EDUCATION_FILE: {
        "school": ("School Name", "School"),
        "degree": ("Degree Name", "Degree"),
        "field_of_study": ("Field of Study", "Field"),
        "activities": ("Activities",),
        "notes": ("Notes",),
        "started_on": ("Start Date", "Started On"),
        "finished_on": ("End Date", "Finished On"),
    },
    SKILLS_FILE: {
        "name": ("Name", "Skill Name", "Skill"),
    },
}


def _pick(row: Mapping[str, Optional[str]], aliases: Tuple[str, ...]) -> Optional[str]:
    for alias in aliases:
        value = row.get(alias)
        if value:
            return value
    return None


def _map_row(file_name: str, row: Mapping[str, Optional[str]]) -> Dict[str, Optional[str]]:
    return {field: _pick(row, aliases) for field, aliases in FIELD_ALIASES[file_name].items()}


def _record_parse_errors(file_name: str, rows: CsvRows, warnings: List[IngestionWarning]) -> None:
    for err in rows.errors:
        logger.warning(f"Malformed row in {file_name}: {err.reason}")
        warnings.append(IngestionWarning(kind="MalformedRow", message=err.reason, file=file_name, row=err.line))


def _drop(file_name: str, row_no: int, field: str, warnings: List[IngestionWarning]) -> None:
    warnings.append(IngestionWarning(
        kind="MissingRequiredField",
        message=f"row dropped: no {field}",
        file=file_name,
        row=row_no,
    ))


def normalize_profile(text: str, warnings: List[IngestionWarning]) -> LinkedInProfile:
    """Read the uploader's profile from the first data row of Profile.csv."""
    rows = CsvRows(text)
    first = next(iter(rows), None)
    _record_parse_errors(PROFILE_FILE, rows, warnings)
    if first is None:
        raise MissingRequiredField(PROFILE_FILE, "First Name")

    fields = _map_row(PROFILE_FILE, first)
    if not fields["first_name"]:
        raise MissingRequiredField(PROFILE_FILE, "First Name")
    if not fields["last_name"]:
        raise MissingRequiredField(PROFILE_FILE, "Last Name")

    return LinkedInProfile(
        first_name=fields["first_name"],
        last_name=fields["last_name"],
        headline=fields["headline"],
        summary=fields["summary"],
        industry=fields["industry"],
        location=fields["location"],
        email=fields["email"],
        linkedin_slug=extract_linkedin_slug(fields["profile_url"]),
    )


def normalize_connections(text: str, warnings: List[IngestionWarning]) -> List[LinkedInConnection]:
    """Parse Connections.csv, discarding the "Notes:" preamble LinkedIn prepends."""
    header_idx = locate_header(text, CONNECTIONS_HEADER_TOKEN)
    if header_idx is None:
        logger.warning("Connections.csv has no 'First Name' header line; no connections loaded")
        warnings.append(IngestionWarning(
            kind="MissingRequiredField",
            message="no header line starting with 'First Name'",
            file=CONNECTIONS_FILE,
        ))
        return []

    records: List[LinkedInConnection] = []
    rows = CsvRows(text, skip_lines=header_idx)
    for row_no, row in enumerate(rows, start=1):
        fields = _map_row(CONNECTIONS_FILE, row)
        if not any(fields.values()):
            continue
        missing = next((f for f in ("first_name", "last_name", "url") if not fields[f]), None)
        if missing:
            _drop(CONNECTIONS_FILE, row_no, missing, warnings)
            continue
        slug = extract_linkedin_slug(fields["url"])
        if not slug:
            _drop(CONNECTIONS_FILE, row_no, "profile slug in URL", warnings)
            continue
        records.append(LinkedInConnection(
            first_name=fields["first_name"],
            last_name=fields["last_name"],
            linkedin_slug=slug,
            email=fields["email"],
            company=fields["company"],
            position=fields["position"],
            connected_on=fields["connected_on"],
        ))
    _record_parse_errors(CONNECTIONS_FILE, rows, warnings)

    logger.info(f"Loaded {len(records)} connections from {CONNECTIONS_FILE}")
    return records


def normalize_positions(text: str, warnings: List[IngestionWarning]) -> List[LinkedInPosition]:
    records: List[LinkedInPosition] = []
    rows = CsvRows(text)
    for row_no, row in enumerate(rows, start=1):
        fields = _map_row(POSITIONS_FILE, row)
        if not any(fields.values()):
            continue
        if not fields["company"]:
            _drop(POSITIONS_FILE, row_no, "company name", warnings)
            continue
        records.append(LinkedInPosition(**fields))
    _record_parse_errors(POSITIONS_FILE, rows, warnings)
    logger.info(f"Loaded {len(records)} positions from {POSITIONS_FILE}")
    return records


def normalize_education(text: str, warnings: List[IngestionWarning]) -> List[LinkedInEducation]:
    records: List[LinkedInEducation] = []
    rows = CsvRows(text)
    for row_no, row in enumerate(rows, start=1):
        fields = _map_row(EDUCATION_FILE, row)
        if not any(fields.values()):
            continue
        if not fields["school"]:
            _drop(EDUCATION_FILE, row_no, "school name", warnings)
            continue
        records.append(LinkedInEducation(**fields))
    _record_parse_errors(EDUCATION_FILE, rows, warnings)
    logger.info(f"Loaded {len(records)} education rows from {EDUCATION_FILE}")
    return records


def normalize_skills(text: str, warnings: List[IngestionWarning]) -> List[LinkedInSkill]:
    records: List[LinkedInSkill] = []
    rows = CsvRows(text)
    for row_no, row in enumerate(rows, start=1):
        fields = _map_row(SKILLS_FILE, row)
        if not fields["name"]:
            if any(v for v in row.values()):
                _drop(SKILLS_FILE, row_no, "skill name", warnings)
            continue
        records.append(LinkedInSkill(name=fields["name"]))
    _record_parse_errors(SKILLS_FILE, rows, warnings)
    logger.info(f"Loaded {len(records)} skills from {SKILLS_FILE}")
    return records


def missing_required(files: Mapping[str, str]) -> List[str]:
    return [name for name in REQUIRED_FILES if name not in files]


def normalize_export(files: Mapping[str, str]) -> ProcessedExport:
    """Normalize the CSV texts of one export, keyed by recognized file name.

    Raises:
        MissingRequiredFiles: Profile.csv or Connections.csv is absent
        MissingRequiredField: Profile.csv has no name in its first row
    """
    missing = missing_required(files)
    if missing:
        raise MissingRequiredFiles(missing)

    warnings: List[IngestionWarning] = []
    profile = normalize_profile(files[PROFILE_FILE], warnings)
    export = ProcessedExport(
        profile=profile,
        connections=normalize_connections(files[CONNECTIONS_FILE], warnings),
        positions=normalize_positions(files[POSITIONS_FILE], warnings) if POSITIONS_FILE in files else None,
        education=normalize_education(files[EDUCATION_FILE], warnings) if EDUCATION_FILE in files else None,
        skills=normalize_skills(files[SKILLS_FILE], warnings) if SKILLS_FILE in files else None,
    )
    export.warnings = warnings

    logger.info(
        f"LinkedIn export normalized: {len(export.connections)} connections, "
        f"{len(export.positions or [])} positions, "
        f"{len(export.education or [])} education, "
        f"{len(export.skills or [])} skills, "
        f"{len(warnings)} warnings"
    )
    return export
