import argparse
import json
import os
import sys
import uuid as _uuid
from pathlib import Path

from config.settings import get_settings
from db import schema
from db.connection import get_connection
from db.repos.connections_repo import ConnectionsRepo
from db.repos.history_repo import EducationRepo, PositionsRepo, SkillsRepo
from db.repos.profiles_repo import ProfilesRepo
from models.profile_edit import ProfileEdit
from models.upload_file import UploadFile
from pipelines.edit_profile import apply_profile_edit
from pipelines.ingest_uploads import ingest_from_trigger, ingest_uploads, record_upload
from services.errors import IngestionError
from services.llm_client import LLMClient
from services.reporting import print_llm_usage, print_summary
from services.semantic_search import ProfileIndexer, SemanticSearch
from utils.logging_setup import init_logging


def _open(args):
    conn = get_connection(args.db, timeout=get_settings().request_timeout_seconds)
    schema.bootstrap(conn)
    return conn


def _fail(err: IngestionError) -> None:
    print(json.dumps(err.to_payload(), indent=2, ensure_ascii=False), file=sys.stderr)
    raise SystemExit(2)


def _ensure_run_id() -> None:
    if not os.getenv("RUN_ID"):
        os.environ["RUN_ID"] = _uuid.uuid4().hex


def cmd_bootstrap(args):
    _open(args)
    print("Schema ready")


def cmd_ingest(args):
    conn = _open(args)
    files = [UploadFile(name=Path(p).name, content=Path(p).read_bytes()) for p in args.files]
    try:
        result = ingest_from_trigger(
            conn,
            "direct_upload",
            {"files": files},
            args.owner,
            account_id=args.account,
            owner_slug=args.slug,
        )
    except IngestionError as e:
        _fail(e)
        return
    print_summary(result)


def cmd_upload(args):
    conn = _open(args)
    for p in args.files:
        upload_id = record_upload(conn, args.owner, Path(p).name, Path(p).read_bytes())
        print(f"Stored {Path(p).name} as upload {upload_id}")


def cmd_ingest_uploads(args):
    conn = _open(args)
    try:
        result = ingest_uploads(conn, args.owner, owner_slug=args.slug)
    except IngestionError as e:
        _fail(e)
        return
    print_summary(result)


def cmd_report_profile(args):
    conn = _open(args)
    profiles = ProfilesRepo(conn)
    profile = profiles.get(args.profile) if args.profile else profiles.get_by_slug(args.slug)
    if not profile:
        print("No record found for profile")
        return
    out = profile.model_dump()
    out["positions"] = PositionsRepo(conn).list_for_profile(profile.id)
    out["education"] = EducationRepo(conn).list_for_profile(profile.id)
    out["skills"] = [s["name"] for s in SkillsRepo(conn).list_for_profile(profile.id)]
    out["connections"] = ConnectionsRepo(conn).count_for(profile.id)
    print(json.dumps(out, indent=2, ensure_ascii=False))


def cmd_connections(args):
    conn = _open(args)
    rows = ConnectionsRepo(conn).neighbours(args.profile, limit=args.limit)
    print(json.dumps(rows, indent=2, ensure_ascii=False))


def cmd_search(args):
    conn = _open(args)
    hits = ProfilesRepo(conn).search_keyword(args.query, limit=args.limit)
    out = [
        {"id": p.id, "name": p.display_name, "headline": p.headline, "slug": p.linkedin_slug, "is_shadow": p.is_shadow}
        for p in hits
    ]
    print(json.dumps(out, indent=2, ensure_ascii=False))


def cmd_ai_search(args):
    _ensure_run_id()
    conn = _open(args)
    search = SemanticSearch(conn, LLMClient())
    if args.profile:
        hits = search.search_connections(args.profile, args.query, k=args.k or 10)
    else:
        hits = search.search(args.query, k=args.k)
    out = [
        {"id": h.profile.id, "name": h.profile.display_name, "headline": h.profile.headline, "score": round(h.score, 4)}
        for h in hits
    ]
    print(json.dumps(out, indent=2, ensure_ascii=False))
    print_llm_usage()


def cmd_index_embeddings(args):
    _ensure_run_id()
    conn = _open(args)
    embedded = ProfileIndexer(conn, LLMClient(), batch_size=args.batch_size).index_profiles()
    print(f"Embedded {embedded} profiles")
    print_llm_usage()


def cmd_edit_profile(args):
    conn = _open(args)
    edit = ProfileEdit.model_validate(json.loads(Path(args.input).read_text(encoding="utf-8")))
    try:
        result = apply_profile_edit(conn, args.profile, edit)
    except IngestionError as e:
        _fail(e)
        return
    print(json.dumps(result.model_dump(), indent=2, ensure_ascii=False))


def cmd_delete_profile(args):
    conn = _open(args)
    if not args.yes:
        print("Refusing to delete without --yes (removes positions, education, skills and connections)")
        return
    if ProfilesRepo(conn).delete(args.profile):
        print(f"Deleted profile {args.profile}")
    else:
        print("No record found for profile")


def main():
    settings = get_settings()
    init_logging(settings.log_level)
    parser = argparse.ArgumentParser(description="LinkedIn export graph CLI")
    parser.add_argument("--db", default=settings.db_path, help="Path to SQLite DB (default from settings)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_boot = sub.add_parser("bootstrap", help="Create tables and indexes")
    p_boot.set_defaults(func=cmd_bootstrap)

    p_ing = sub.add_parser("ingest", help="Ingest LinkedIn export CSVs (or one .zip) for a profile")
    p_ing.add_argument("files", nargs="+", help="Profile.csv, Connections.csv, ... or a LinkedIn export .zip")
    p_ing.add_argument("--owner", required=True, help="Profile id of the uploader")
    p_ing.add_argument("--account", default=None, help="Account id to attach to the profile")
    p_ing.add_argument("--slug", default=None, help="LinkedIn slug to claim (default: from Profile.csv)")
    p_ing.set_defaults(func=cmd_ingest)

    p_up = sub.add_parser("upload", help="Store raw export files in the blob store for later ingestion")
    p_up.add_argument("files", nargs="+")
    p_up.add_argument("--owner", required=True)
    p_up.set_defaults(func=cmd_upload)

    p_iu = sub.add_parser("ingest-uploads", help="Ingest the latest stored uploads of a profile")
    p_iu.add_argument("--owner", required=True)
    p_iu.add_argument("--slug", default=None)
    p_iu.set_defaults(func=cmd_ingest_uploads)

    p_rp = sub.add_parser("report-profile", help="Show a profile with its history and connection count")
    who = p_rp.add_mutually_exclusive_group(required=True)
    who.add_argument("--profile", help="Profile id")
    who.add_argument("--slug", help="LinkedIn slug")
    p_rp.set_defaults(func=cmd_report_profile)

    p_con = sub.add_parser("connections", help="List a profile's connections")
    p_con.add_argument("--profile", required=True)
    p_con.add_argument("--limit", type=int, default=None)
    p_con.set_defaults(func=cmd_connections)

    p_s = sub.add_parser("search", help="Keyword search over names and headlines")
    p_s.add_argument("query")
    p_s.add_argument("--limit", type=int, default=50)
    p_s.set_defaults(func=cmd_search)

    p_ai = sub.add_parser("ai-search", help="Semantic search over embedded profiles")
    p_ai.add_argument("query")
    p_ai.add_argument("--profile", default=None, help="Restrict to this profile's connections")
    p_ai.add_argument("-k", type=int, default=None, help="Max results")
    p_ai.set_defaults(func=cmd_ai_search)

    p_ix = sub.add_parser("index-embeddings", help="Embed profiles with headlines for semantic search")
    p_ix.add_argument("--batch-size", type=int, default=64)
    p_ix.set_defaults(func=cmd_index_embeddings)

    p_ed = sub.add_parser("edit-profile", help="Apply a JSON profile edit")
    p_ed.add_argument("--profile", required=True)
    p_ed.add_argument("--input", required=True, help="Path to JSON edit")
    p_ed.set_defaults(func=cmd_edit_profile)

    p_del = sub.add_parser("delete-profile", help="Delete a profile and everything it owns")
    p_del.add_argument("--profile", required=True)
    p_del.add_argument("--yes", action="store_true")
    p_del.set_defaults(func=cmd_delete_profile)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
