from __future__ import annotations

import sqlite3


def bootstrap(conn: sqlite3.Connection) -> None:
    """Create normalized schema, indexes, and views (idempotent)."""
    conn.execute("PRAGMA foreign_keys=ON;")
    cur = conn.cursor()

    # Profiles: real users and shadow placeholders for their connections
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS profiles (\n"
            "  id TEXT PRIMARY KEY,\n"
            "  account_id TEXT UNIQUE,\n"
            "  first_name TEXT,\n"
            "  last_name TEXT,\n"
            "  headline TEXT,\n"
            "  summary TEXT,\n"
            "  industry TEXT,\n"
            "  location TEXT,\n"
            "  email TEXT,\n"
            "  linkedin_slug TEXT UNIQUE,\n"
            "  is_shadow INTEGER NOT NULL DEFAULT 0,\n"
            "  needs_reconciliation INTEGER NOT NULL DEFAULT 0,\n"
            "  created_at TEXT NOT NULL DEFAULT (datetime('now')),\n"
            "  updated_at TEXT NOT NULL DEFAULT (datetime('now')),\n"
            "  CHECK (is_shadow = 0 OR account_id IS NULL)\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_profiles_last_first ON profiles(last_name, first_name);")

    # Shared lookup tables, deduplicated by exact name
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS companies (\n"
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            "  name TEXT NOT NULL UNIQUE,\n"
            "  created_at TEXT NOT NULL DEFAULT (datetime('now'))\n"
            ")"
        )
    )
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS institutions (\n"
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            "  name TEXT NOT NULL UNIQUE,\n"
            "  created_at TEXT NOT NULL DEFAULT (datetime('now'))\n"
            ")"
        )
    )

    # Profile-owned history
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS positions (\n"
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            "  profile_id TEXT NOT NULL,\n"
            "  company_id INTEGER,\n"
            "  title TEXT,\n"
            "  description TEXT,\n"
            "  location TEXT,\n"
            "  started_on TEXT,\n"
            "  finished_on TEXT,\n"
            "  FOREIGN KEY(profile_id) REFERENCES profiles(id) ON DELETE CASCADE,\n"
            "  FOREIGN KEY(company_id) REFERENCES companies(id) ON DELETE SET NULL\n"
            ")"
        )
    )
    cur.execute(
        "CREATE UNIQUE INDEX IF NOT EXISTS ux_positions_natural ON positions("
        "profile_id, COALESCE(company_id, 0), COALESCE(title, ''), COALESCE(started_on, ''));"
    )

    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS education (\n"
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            "  profile_id TEXT NOT NULL,\n"
            "  institution_id INTEGER,\n"
            "  degree_name TEXT,\n"
            "  field_of_study TEXT,\n"
            "  activities TEXT,\n"
            "  notes TEXT,\n"
            "  started_on TEXT,\n"
            "  finished_on TEXT,\n"
            "  FOREIGN KEY(profile_id) REFERENCES profiles(id) ON DELETE CASCADE,\n"
            "  FOREIGN KEY(institution_id) REFERENCES institutions(id) ON DELETE SET NULL\n"
            ")"
        )
    )
    cur.execute(
        "CREATE UNIQUE INDEX IF NOT EXISTS ux_education_natural ON education("
        "profile_id, COALESCE(institution_id, 0), COALESCE(degree_name, ''), COALESCE(started_on, ''));"
    )

    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS skills (\n"
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            "  profile_id TEXT NOT NULL,\n"
            "  name TEXT NOT NULL,\n"
            "  UNIQUE(profile_id, name),\n"
            "  FOREIGN KEY(profile_id) REFERENCES profiles(id) ON DELETE CASCADE\n"
            ")"
        )
    )

    # Undirected edges, canonical order a < b
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS connections (\n"
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            "  profile_id_a TEXT NOT NULL,\n"
            "  profile_id_b TEXT NOT NULL,\n"
            "  connected_on TEXT,\n"
            "  created_at TEXT NOT NULL DEFAULT (datetime('now')),\n"
            "  CHECK (profile_id_a < profile_id_b),\n"
            "  UNIQUE(profile_id_a, profile_id_b),\n"
            "  FOREIGN KEY(profile_id_a) REFERENCES profiles(id) ON DELETE CASCADE,\n"
            "  FOREIGN KEY(profile_id_b) REFERENCES profiles(id) ON DELETE CASCADE\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_connections_b ON connections(profile_id_b);")

    # Append-only audit of raw uploaded files
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS uploads (\n"
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            "  profile_id TEXT NOT NULL,\n"
            "  file_name TEXT NOT NULL,\n"
            "  file_path TEXT NOT NULL,\n"
            "  created_at TEXT NOT NULL DEFAULT (datetime('now')),\n"
            "  FOREIGN KEY(profile_id) REFERENCES profiles(id) ON DELETE CASCADE\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_uploads_profile ON uploads(profile_id, file_name);")

    # Semantic search vectors
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS profile_embeddings (\n"
            "  profile_id TEXT PRIMARY KEY,\n"
            "  model TEXT NOT NULL,\n"
            "  text_hash TEXT NOT NULL,\n"
            "  vector_json TEXT NOT NULL,\n"
            "  updated_at TEXT NOT NULL DEFAULT (datetime('now')),\n"
            "  FOREIGN KEY(profile_id) REFERENCES profiles(id) ON DELETE CASCADE\n"
            ")"
        )
    )

    # Joined reads: one row per (profile, neighbour)
    cur.execute("DROP VIEW IF EXISTS v_profile_neighbours;")
    cur.execute(
        (
            "CREATE VIEW v_profile_neighbours AS\n"
            "SELECT c.profile_id_a AS profile_id, c.profile_id_b AS neighbour_id, c.connected_on\n"
            "FROM connections c\n"
            "UNION ALL\n"
            "SELECT c.profile_id_b AS profile_id, c.profile_id_a AS neighbour_id, c.connected_on\n"
            "FROM connections c;"
        )
    )

    conn.commit()
