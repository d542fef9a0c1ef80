from __future__ import annotations

import pytest

from services.errors import MissingRequiredField, MissingRequiredFiles
from services.export_normalizer import (
    normalize_connections,
    normalize_education,
    normalize_export,
    normalize_positions,
    normalize_skills,
)


CONNECTIONS_BODY = (
    "First Name,Last Name,URL,Email Address,Company,Position,Connected On\n"
    "Jane,Doe,https://www.linkedin.com/in/janedoe,,Acme,Engineer,12 Mar 2024\n"
    "John,Roe,https://www.linkedin.com/in/john-roe-42?trk=abc,john@example.com,,,01 Jan 2023\n"
)


def test_connections_preamble_is_discarded():
    preamble = (
        "Notes:\n"
        "\"When exporting your connection data, you may notice that some of the email addresses are missing.\"\n"
    )
    with_pre = normalize_connections(preamble + CONNECTIONS_BODY, [])
    without = normalize_connections(CONNECTIONS_BODY, [])
    assert with_pre == without
    assert [c.linkedin_slug for c in without] == ["janedoe", "john-roe-42"]
    assert without[0].derived_headline == "Engineer at Acme"
    assert without[1].derived_headline is None


def test_connections_rows_without_usable_url_are_dropped():
    text = CONNECTIONS_BODY + "No,Url,,,,,\nBad,Shape,https://www.linkedin.com/company/acme,,,,\n"
    warnings = []
    out = normalize_connections(text, warnings)
    assert len(out) == 2
    assert [w.kind for w in warnings] == ["MissingRequiredField", "MissingRequiredField"]
    assert all(w.file == "Connections.csv" for w in warnings)


def test_connections_without_header_loads_nothing():
    warnings = []
    assert normalize_connections("Notes:\nnothing here\n", warnings) == []
    assert len(warnings) == 1


def test_position_column_variants_normalize_the_same():
    old = normalize_positions("Position,Company\nEngineer,Acme\n", [])
    new = normalize_positions("Title,Company Name\nEngineer,Acme\n", [])
    assert old == new
    assert (old[0].title, old[0].company) == ("Engineer", "Acme")


def test_positions_require_company():
    warnings = []
    out = normalize_positions("Title,Company Name\nEngineer,\nManager,Acme\n", warnings)
    assert [p.company for p in out] == ["Acme"]
    assert warnings[0].row == 1


def test_education_and_skills_aliases():
    edu = normalize_education("School,Degree,Start Date\nMIT,BSc,2010\n", [])
    assert (edu[0].school, edu[0].degree, edu[0].started_on) == ("MIT", "BSc", "2010")
    skills = normalize_skills("Skill Name\nPython\n\nSQL\n", [])
    assert [s.name for s in skills] == ["Python", "SQL"]


def test_missing_required_files_lists_both():
    with pytest.raises(MissingRequiredFiles) as ei:
        normalize_export({"Skills.csv": "Name\nPython"})
    assert ei.value.missing == ["Profile.csv", "Connections.csv"]
    assert "Profile.csv" in ei.value.message and "Connections.csv" in ei.value.message
    assert ei.value.to_payload()["error"]["code"] == "MissingRequiredFiles"


def test_profile_without_name_is_fatal():
    files = {"Profile.csv": "First Name,Last Name,Headline\n,,Engineer\n", "Connections.csv": CONNECTIONS_BODY}
    with pytest.raises(MissingRequiredField) as ei:
        normalize_export(files)
    assert ei.value.field == "First Name"


def test_optional_sections_absent_vs_empty(export_texts):
    minimal = normalize_export({k: export_texts[k] for k in ("Profile.csv", "Connections.csv")})
    assert minimal.positions is None and minimal.education is None and minimal.skills is None

    with_empty = dict(export_texts, **{"Skills.csv": "Name\n"})
    export = normalize_export(with_empty)
    assert export.skills == []
    assert export.profile.first_name == "Ada"
    assert export.profile.location == "London"
    assert len(export.connections) == 2
    # the "No,Url" row
    assert any(w.kind == "MissingRequiredField" for w in export.warnings)


def test_profile_url_yields_claim_slug():
    files = {
        "Profile.csv": "First Name,Last Name,Profile URL\nJane,Doe,https://www.linkedin.com/in/janedoe/\n",
        "Connections.csv": CONNECTIONS_BODY,
    }
    assert normalize_export(files).profile.linkedin_slug == "janedoe"


def test_stray_quotes_drop_only_their_own_connection_rows():
    text = (
        "First Name,Last Name,URL,Email Address,Company,Position,Connected On\n"
        'Ann,Lee,https://www.linkedin.com/in/ann,,"Acme,Engineer,01 Jan 2024\n'
        "Bob,Ray,https://www.linkedin.com/in/bob,,Globex,Manager,02 Jan 2024\n"
        'Cat,Fox,https://www.linkedin.com/in/cat,,Initech,Sr. 6" Engineer,03 Jan 2024\n'
        'Dan,Ito,https://www.linkedin.com/in/dan,,Umbrella,"Eng,04 Jan 2024\n'
        "Eve,Kim,https://www.linkedin.com/in/eve,,Hooli,Designer,05 Jan 2024\n"
    )
    warnings = []
    connections = normalize_connections(text, warnings)
    assert [c.linkedin_slug for c in connections] == ["bob", "cat", "eve"]
    assert connections[1].position == 'Sr. 6" Engineer'
    malformed = [w for w in warnings if w.kind == "MalformedRow"]
    assert [(w.file, w.row) for w in malformed] == [("Connections.csv", 2), ("Connections.csv", 5)]
