import argparse
import json
from pathlib import Path

from .env import load_env

from . import __version__
from .config import Settings
from .database import init_database, get_session
from .errors import ContentOpsError, ValidationError
from .identity import EnvIdentityResolver
from .logger import get_logger
from .normalize import normalize_body
from .service import ContentService
from storage.repositories import ContentRepository


def _load_json(path_str: str) -> dict:
    input_path = Path(path_str)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _service(args: argparse.Namespace) -> ContentService:
    db_path = Path(args.db)
    if not db_path.exists():
        raise SystemExit(f"Database not found: {db_path}. Run 'contentops init-db' first.")
    logger = get_logger(level=args.settings.log_level, log_dir=args.settings.log_dir)
    return ContentService(
        ContentRepository(get_session(db_path)),
        EnvIdentityResolver(),
        logger=logger,
        version_attempts=args.settings.version_attempts,
    )


def _prepare_form(args: argparse.Namespace, form: dict) -> dict:
    if args.normalize and isinstance(form.get("body"), str):
        form = {**form, "body": normalize_body(form["body"])}
    return form


def cmd_init_db(args: argparse.Namespace) -> None:
    db_path = Path(args.db)
    init_database(db_path)
    print(f"Database ready: {db_path}")


def cmd_save(args: argparse.Namespace) -> None:
    form = _prepare_form(args, _load_json(args.input))
    service = _service(args)
    try:
        result = service.save_draft(form, content_id=args.content_id)
    except ValidationError as e:
        print("Invalid:")
        for err in e.errors:
            print(f" - {err}")
        raise SystemExit(2)
    print(f"Content: {result.content_id}")
    print(f"Status: {result.status}")
    if result.version is not None:
        print(f"Version: {result.version.version_number}")


def cmd_check(args: argparse.Namespace) -> None:
    form = _prepare_form(args, _load_json(args.input))
    body = form.get("body")
    if not isinstance(body, str):
        raise SystemExit("Input must contain a string 'body' field")
    changed = _service(args).check(args.content_id, body)
    print("Would create a new version" if changed else "No change: body matches latest version")


def cmd_submit(args: argparse.Namespace) -> None:
    item = _service(args).submit(args.content_id)
    print(f"Content: {item.id}")
    print(f"Status: {item.status}")


def cmd_transition(args: argparse.Namespace) -> None:
    try:
        item = _service(args).transition(args.content_id, args.status)
    except ValueError as e:
        raise SystemExit(str(e))
    print(f"Content: {item.id}")
    print(f"Status: {item.status}")


def cmd_list(args: argparse.Namespace) -> None:
    status = args.status.upper() if args.status else None
    items = _service(args).list_content(status=status)
    if not items:
        print("No content found.")
        return
    print(f"Found {len(items)} content items:\n")
    for item in items:
        latest = item.latest_version
        print(f"ID: {item.id}")
        print(f"  Title: {item.title}")
        print(f"  Status: {item.status}")
        print(f"  Latest version: {latest.version_number if latest else '-'}")
        print(f"  Updated: {item.updated_at.isoformat(timespec='seconds')}")
        print()


def cmd_history(args: argparse.Namespace) -> None:
    versions = _service(args).history(args.content_id)
    if not versions:
        print("No versions.")
        return
    for v in versions:
        author = v.created_by_user_id or "unknown"
        print(f"v{v.version_number}  {v.created_at.isoformat(timespec='seconds')}  by {author}  ({len(v.body)} chars)")


def cmd_show(args: argparse.Namespace) -> None:
    item = _service(args).get_content(args.content_id)
    latest = item.latest_version
    print(f"ID: {item.id}")
    print(f"Title: {item.title}")
    print(f"Status: {item.status}")
    print(f"Compliance score: {item.compliance_score if item.compliance_score is not None else '-'}")
    if latest is None:
        print("No versions.")
        return
    print(f"Version: {latest.version_number}")
    print()
    print(latest.body)


def main(argv=None):
    load_env()
    settings = Settings.from_env()
    parser = argparse.ArgumentParser(prog="contentops", description="Content drafts, versions and review workflow")
    parser.add_argument("--version", action="store_true", help="Show version")

    db_default = str(settings.db_path)
    db_help = f"Path to SQLite database (default: {db_default})"

    subparsers = parser.add_subparsers(dest="command")
    ini = subparsers.add_parser("init-db", help="Create the database and tables")
    ini.add_argument("--db", default=db_default, help=db_help)
    ini.set_defaults(func=cmd_init_db)

    sav = subparsers.add_parser("save", help="Save a content form JSON as a draft (new item or new version)")
    sav.add_argument("--input", required=True, help="Path to content form JSON")
    sav.add_argument("--content-id", help="Existing content id (omit to create new content)")
    sav.add_argument("--normalize", action="store_true", help="Strip trailing whitespace and line-ending noise from the body")
    sav.add_argument("--db", default=db_default, help=db_help)
    sav.set_defaults(func=cmd_save)

    chk = subparsers.add_parser("check", help="Report whether a body would create a new version")
    chk.add_argument("--input", required=True, help="Path to JSON with a 'body' field")
    chk.add_argument("--content-id", required=True, help="Existing content id")
    chk.add_argument("--normalize", action="store_true", help="Normalize the body before comparing")
    chk.add_argument("--db", default=db_default, help=db_help)
    chk.set_defaults(func=cmd_check)

    sub = subparsers.add_parser("submit", help="Submit a draft for review")
    sub.add_argument("--content-id", required=True, help="Content id")
    sub.add_argument("--db", default=db_default, help=db_help)
    sub.set_defaults(func=cmd_submit)

    trn = subparsers.add_parser("transition", help="Move content to another workflow status")
    trn.add_argument("--content-id", required=True, help="Content id")
    trn.add_argument("--status", required=True, help="DRAFT, SUBMITTED, IN_REVIEW, APPROVED or REJECTED")
    trn.add_argument("--db", default=db_default, help=db_help)
    trn.set_defaults(func=cmd_transition)

    lst = subparsers.add_parser("list", help="List content items")
    lst.add_argument("--status", help="Only show items in this status")
    lst.add_argument("--db", default=db_default, help=db_help)
    lst.set_defaults(func=cmd_list)

    his = subparsers.add_parser("history", help="Show version history for a content item")
    his.add_argument("--content-id", required=True, help="Content id")
    his.add_argument("--db", default=db_default, help=db_help)
    his.set_defaults(func=cmd_history)

    shw = subparsers.add_parser("show", help="Show a content item and its latest body")
    shw.add_argument("--content-id", required=True, help="Content id")
    shw.add_argument("--db", default=db_default, help=db_help)
    shw.set_defaults(func=cmd_show)

    args = parser.parse_args(argv)
    args.settings = settings

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        try:
            args.func(args)
        except ContentOpsError as e:
            raise SystemExit(str(e))
        return

    parser.print_help()


if __name__ == "__main__":
    main()
