from __future__ import annotations

import json
import sqlite3
import sys
from typing import List

import pytest


def _run_cli_with_args(args_list: List[str]) -> None:
    """Run cli.py main() with provided argv in-process (no subprocess)."""
    argv_backup = sys.argv[:]
    try:
        sys.argv = ["cli.py"] + args_list
        # Import fresh to ensure clean parser each time
        if "cli" in sys.modules:
            del sys.modules["cli"]
        import cli  # type: ignore
        try:
            cli.main()  # type: ignore[attr-defined]
        except SystemExit as e:
            code = int(getattr(e, "code", 0) or 0)
            if code not in (0, None):
                raise
    finally:
        sys.argv = argv_backup


def _write_export(tmp_path, export_texts):
    paths = []
    for name, text in export_texts.items():
        p = tmp_path / name
        p.write_text(text, encoding="utf-8")
        paths.append(str(p))
    return paths


def test_cli_ingest_writes_graph(tmp_path, monkeypatch, capsys, export_texts):
    monkeypatch.setenv("RUN_ENV", "test")
    db_path = tmp_path / "cli_ingest.db"
    _run_cli_with_args(["--db", str(db_path), "bootstrap"])
    _run_cli_with_args(["--db", str(db_path), "ingest", "--owner", "owner-ada", *_write_export(tmp_path, export_texts)])

    out = capsys.readouterr().out
    assert "Connections: 2" in out
    assert "Processed with 1 warnings" in out

    conn = sqlite3.connect(str(db_path))
    try:
        cur = conn.cursor()
        cur.execute("SELECT COUNT(*) FROM connections")
        assert cur.fetchone()[0] == 2
        cur.execute("SELECT name FROM companies ORDER BY name")
        assert cur.fetchall() == [("Analytical Engines",), ("Royal Society",)]
    finally:
        conn.close()

    _run_cli_with_args(["--db", str(db_path), "search", "babbage"])
    hits = json.loads(capsys.readouterr().out)
    assert [h["slug"] for h in hits] == ["charles-babbage"]

    _run_cli_with_args(["--db", str(db_path), "report-profile", "--profile", "owner-ada"])
    report = json.loads(capsys.readouterr().out)
    assert report["connections"] == 2
    assert report["skills"] == ["Mathematics", "Programming"]


def test_cli_ingest_reports_missing_files(tmp_path, capsys):
    db_path = tmp_path / "cli_missing.db"
    skills = tmp_path / "Skills.csv"
    skills.write_text("Name\nPython\n", encoding="utf-8")
    with pytest.raises(SystemExit) as ei:
        _run_cli_with_args(["--db", str(db_path), "ingest", "--owner", "o1", str(skills)])
    assert ei.value.code == 2
    payload = json.loads(capsys.readouterr().err)
    assert payload["error"]["code"] == "MissingRequiredFiles"
    assert payload["error"]["details"]["missing"] == ["Profile.csv", "Connections.csv"]


def test_cli_edit_and_delete_profile(tmp_path, capsys, export_texts):
    db_path = tmp_path / "cli_edit.db"
    _run_cli_with_args(["--db", str(db_path), "ingest", "--owner", "owner-ada", *_write_export(tmp_path, export_texts)])
    edit = tmp_path / "edit.json"
    edit.write_text(json.dumps({"headline": "Countess", "skills": [{"name": "Poetry"}]}), encoding="utf-8")
    capsys.readouterr()

    _run_cli_with_args(["--db", str(db_path), "edit-profile", "--profile", "owner-ada", "--input", str(edit)])
    changes = json.loads(capsys.readouterr().out)
    assert changes["skills"] == {"inserted": 1, "updated": 0, "deleted": 2}

    _run_cli_with_args(["--db", str(db_path), "delete-profile", "--profile", "owner-ada", "--yes"])
    assert "Deleted profile owner-ada" in capsys.readouterr().out
    conn = sqlite3.connect(str(db_path))
    try:
        assert conn.execute("SELECT COUNT(*) FROM connections").fetchone()[0] == 0
        assert conn.execute("SELECT COUNT(*) FROM profiles WHERE is_shadow = 1").fetchone()[0] == 2
    finally:
        conn.close()
