from __future__ import annotations

import io
import zipfile

import pytest

from services.archive import extract_export_files
from services.errors import InvalidArchive
from services.export_normalizer import RECOGNIZED_FILES


def _zip(entries):
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, data in entries:
            if name.endswith("/"):
                zf.writestr(zipfile.ZipInfo(name), b"")
            else:
                zf.writestr(name, data)
    return buf.getvalue()


def test_extracts_only_recognized_visible_files():
    data = _zip([
        ("Basic_LinkedInDataExport/", b""),
        ("Basic_LinkedInDataExport/Profile.csv", "\ufeffFirst Name,Last Name\nAda,Lovelace\n".encode("utf-8")),
        ("Basic_LinkedInDataExport/Connections.csv", b"First Name,Last Name,URL\n"),
        ("Basic_LinkedInDataExport/Invitations.csv", b"From,To\n"),
        ("__MACOSX/Basic_LinkedInDataExport/._Profile.csv", b"\x00\x01"),
        (".Skills.csv", b"Name\nHidden\n"),
    ])
    files = extract_export_files(data, RECOGNIZED_FILES)
    assert sorted(files) == ["Connections.csv", "Profile.csv"]
    assert files["Profile.csv"].startswith("First Name")


def test_first_entry_wins_for_duplicate_names():
    data = _zip([("a/Skills.csv", b"Name\nFirst\n"), ("b/Skills.csv", b"Name\nSecond\n")])
    assert extract_export_files(data, RECOGNIZED_FILES)["Skills.csv"] == "Name\nFirst\n"


def test_unreadable_bundle_is_invalid_archive():
    with pytest.raises(InvalidArchive) as ei:
        extract_export_files(b"definitely not a zip", RECOGNIZED_FILES)
    assert ei.value.kind == "InvalidArchive"
    assert "could not be opened" in ei.value.message
