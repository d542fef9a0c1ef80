from __future__ import annotations

import pytest

from db.repos.uploads_repo import UploadsRepo
from pipelines.ingest_uploads import ingest_uploads, record_upload
from services.blob_store import LocalBlobStore
from sources.storage_event import StorageEventSource


def test_local_blob_store_round_trip_and_containment(tmp_path):
    store = LocalBlobStore(str(tmp_path / "blobs"))
    path = store.put("owner/Profile.csv", b"data")
    assert store.get(path) == b"data"
    with pytest.raises(ValueError):
        store.put("../escape.csv", b"x")


def test_stored_uploads_are_ingested_with_latest_version(conn, tmp_path, export_texts):
    store = LocalBlobStore(str(tmp_path / "blobs"))
    for name, text in export_texts.items():
        record_upload(conn, "owner-ada", name, text.encode("utf-8"), store=store)
    record_upload(conn, "owner-ada", "Skills.csv", b"Name\nMathematics\nProgramming\nPoetry\n", store=store)

    latest = UploadsRepo(conn).latest_for_profile("owner-ada")
    assert sorted(r["file_name"] for r in latest) == sorted(export_texts)
    assert conn.execute("SELECT COUNT(*) FROM uploads").fetchone()[0] == 6

    result = ingest_uploads(conn, "owner-ada", store=store)
    assert result.connections_written == 2
    assert result.skills_written == 3
    assert result.profile.first_name == "Ada"


def test_storage_event_needs_an_owner(conn, tmp_path):
    src = StorageEventSource(conn, store=LocalBlobStore(str(tmp_path)))
    assert StorageEventSource.owner_of({"record": {"profile_id": "p1", "file_name": "Profile.csv"}}) == "p1"
    with pytest.raises(ValueError):
        src.collect({"record": {}})
