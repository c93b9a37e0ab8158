#!/usr/bin/env python3
"""
Check that every content item's versions are numbered 1..n.

Reports gaps and duplicates. Gaps can appear when versions are removed
by an external retention job; they are reported but do not fail the
audit unless --strict is passed.

Usage:
    python scripts/audit_versions.py --db data/content.db [--strict]
"""

import argparse
from collections import defaultdict
from pathlib import Path
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from contentops.database import ContentItem, ContentVersion, get_session


def find_problems(session):
    """
    Return (gaps, duplicates, empty) for all content items.

    gaps: {content_id: [missing version numbers]}
    duplicates: {content_id: [repeated version numbers]}
    empty: [content_id, ...] items with no versions at all
    """
    numbers = defaultdict(list)
    for content_id, version_number in session.query(ContentVersion.content_id, ContentVersion.version_number):
        numbers[content_id].append(version_number)

    gaps, duplicates = {}, {}
    for content_id, nums in numbers.items():
        seen = set()
        dups = set()
        for n in nums:
            if n in seen:
                dups.add(n)
            seen.add(n)
        if dups:
            duplicates[content_id] = sorted(dups)
        missing = sorted(set(range(1, max(nums) + 1)) - seen)
        if missing:
            gaps[content_id] = missing

    empty = [item_id for (item_id,) in session.query(ContentItem.id) if item_id not in numbers]
    return gaps, duplicates, sorted(empty)


def audit(db_path: Path, strict: bool = False) -> bool:
    print(f"Auditing versions in {db_path}...")
    session = get_session(db_path)
    try:
        gaps, duplicates, empty = find_problems(session)
    finally:
        session.close()

    for content_id, dups in duplicates.items():
        print(f"DUPLICATE {content_id}: {dups}")
    for content_id, missing in gaps.items():
        print(f"GAP {content_id}: missing {missing}")
    for content_id in empty:
        print(f"EMPTY {content_id}: no versions")

    ok = not duplicates and (not strict or not gaps)
    print("\nAudit passed" if ok else "\nAudit failed")
    return ok


def main():
    parser = argparse.ArgumentParser(description="Audit content version numbering")
    parser.add_argument("--db", type=Path, default=Path("data/content.db"),
                        help="Path to SQLite database file")
    parser.add_argument("--strict", action="store_true",
                        help="Treat numbering gaps as failures")
    args = parser.parse_args()

    if not args.db.exists():
        print(f"Database not found: {args.db}")
        sys.exit(1)

    if not audit(args.db, strict=args.strict):
        sys.exit(1)


if __name__ == "__main__":
    main()
