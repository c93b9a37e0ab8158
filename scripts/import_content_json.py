#!/usr/bin/env python3
"""
Import content items and their version history from a JSON dump.

Each entry is stored in one commit: the item together with its versions,
where consecutive identical bodies collapse into one version. An entry
with a malformed version is reported and leaves nothing behind.

Usage:
    python scripts/import_content_json.py --json data/export.json --db data/content.db

Expected shape:
    {"contents": [{"id": "...", "title": "...", "organization_id": "...",
                   "versions": [{"body": "...", "created_by_user_id": "..."}]}]}
"""

import argparse
import json
from pathlib import Path
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from contentops.database import init_database, get_session
from contentops.errors import ConflictError
from pipelines.versioning import VersioningPolicy
from storage.repositories import ContentRepository

VERSION_FIELDS = ("title", "topic", "audience", "tone", "compliance_score")


def import_contents(json_path: Path, db_path: Path, dry_run: bool = False):
    """
    Import content from JSON into the database.

    Args:
        json_path: Path to JSON export
        db_path: Path to SQLite database file
        dry_run: If True, don't write to database

    Returns:
        Dict of counts (items, versions, skipped, errors)
    """
    print(f"Loading content from {json_path}...")
    with open(json_path, encoding="utf-8") as f:
        data = json.load(f)

    contents = data.get("contents", [])
    print(f"Found {len(contents)} content items in JSON export")
    counts = {"items": 0, "versions": 0, "skipped": 0, "errors": 0}

    if dry_run:
        print("\n[DRY RUN] Would import the following content:")
        for i, entry in enumerate(contents[:5], 1):
            print(f"  {i}. {entry.get('id', '<new>')}: {entry.get('title')} ({len(entry.get('versions', []))} versions)")
        if len(contents) > 5:
            print(f"  ... and {len(contents) - 5} more")
        return counts

    print(f"\nInitializing database at {db_path}...")
    init_database(db_path)
    session = get_session(db_path)
    repository = ContentRepository(session)
    policy = VersioningPolicy(repository)

    try:
        for entry in contents:
            content_id = entry.get("id")
            title = entry.get("title")
            if not title:
                print(f"Skipping {content_id}: missing title")
                counts["skipped"] += 1
                continue

            if content_id and repository.get_item(content_id) is not None:
                print(f"Content {content_id} already exists, skipping")
                counts["skipped"] += 1
                continue

            try:
                drafts = [
                    (raw["body"], raw.get("created_by_user_id"), {k: raw[k] for k in VERSION_FIELDS if k in raw})
                    for raw in entry.get("versions", [])
                ]
                versions = policy.plan_history(drafts)
                repository.create_item(
                    title=title,
                    organization_id=entry.get("organization_id"),
                    created_by_user_id=entry.get("created_by_user_id"),
                    content_id=content_id,
                    compliance_score=entry.get("compliance_score"),
                    versions=versions,
                )
            except (ConflictError, KeyError) as e:
                print(f"Error importing {content_id}: {e}")
                counts["errors"] += 1
                continue
            counts["items"] += 1
            counts["versions"] += len(versions)
            counts["skipped"] += len(drafts) - len(versions)
    finally:
        session.close()

    print("\nImport complete!")
    print(f"   Items:    {counts['items']}")
    print(f"   Versions: {counts['versions']}")
    print(f"   Skipped:  {counts['skipped']}")
    print(f"   Errors:   {counts['errors']}")
    return counts


def main():
    parser = argparse.ArgumentParser(description="Import content and versions from JSON")
    parser.add_argument("--json", type=Path, required=True,
                        help="Path to JSON export file")
    parser.add_argument("--db", type=Path, default=Path("data/content.db"),
                        help="Path to SQLite database file")
    parser.add_argument("--dry-run", action="store_true",
                        help="Show what would be imported without writing")

    args = parser.parse_args()

    if not args.json.exists():
        print(f"JSON file not found: {args.json}")
        sys.exit(1)

    counts = import_contents(args.json, args.db, dry_run=args.dry_run)
    if counts["errors"]:
        sys.exit(1)


if __name__ == "__main__":
    main()
