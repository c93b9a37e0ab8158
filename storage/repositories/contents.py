"""
Contents Repository.

Responsibilities:
- CRUD operations for contents and content_versions tables.
- Transaction-safe, append-only version writes.
- Translate (content_id, version_number) collisions into ConflictError.

Non-Responsibilities:
- No versioning decisions.
- No workflow rules.
- No authentication.

Invariant:
Repositories must not encode domain decisions.
A stored version row is never updated or deleted here.
An item and the versions written with it land in one commit.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from contentops.database import ContentItem, ContentVersion
from contentops.errors import ConflictError, NotFoundError

MUTABLE_ITEM_FIELDS = ("title", "status", "compliance_score")
VERSION_UNIQUE_CONSTRAINT = "uq_content_version_number"


def is_unique_violation(error: IntegrityError, table: str, columns: Sequence[str]) -> bool:
    """
    True if error is a unique violation on table(columns).

    SQLite reports "UNIQUE constraint failed: t.a, t.b"; PostgreSQL and
    others name the constraint instead.
    """
    message = str(error.orig)
    if VERSION_UNIQUE_CONSTRAINT in message and table == "content_versions":
        return True
    if "UNIQUE" not in message.upper():
        return False
    return all(f"{table}.{column}" in message for column in columns)


def _is_version_collision(error: IntegrityError) -> bool:
    return is_unique_violation(error, "content_versions", ("content_id", "version_number"))


def _check_item_fields(fields: Dict[str, Any]) -> None:
    unknown = set(fields) - set(MUTABLE_ITEM_FIELDS)
    if unknown:
        raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")


class ContentRepository:
    """SQLAlchemy-backed content store bound to a single session."""

    def __init__(self, session):
        self.session = session

    # Items

    def create_item(
        self,
        title: str,
        organization_id: Optional[str] = None,
        created_by_user_id: Optional[str] = None,
        content_id: Optional[str] = None,
        compliance_score: Optional[int] = None,
        versions: Optional[List[ContentVersion]] = None,
    ) -> ContentItem:
        """
        Create an item, optionally together with its first versions.

        Either the item and all given versions are stored, or nothing is.

        Raises:
            ConflictError: content_id is already taken
        """
        item = ContentItem(
            title=title,
            organization_id=organization_id,
            created_by_user_id=created_by_user_id,
            compliance_score=compliance_score,
        )
        if content_id is not None:
            if self.get_item(content_id) is not None:
                raise ConflictError(content_id, message=f"Content already exists: {content_id}")
            item.id = content_id
        item.versions = list(versions or [])
        self.session.add(item)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            if is_unique_violation(e, "contents", ("id",)):
                raise ConflictError(content_id, message=f"Content already exists: {content_id}") from e
            raise
        return item

    def get_item(self, content_id: str) -> Optional[ContentItem]:
        return self.session.get(ContentItem, content_id)

    def require_item(self, content_id: str) -> ContentItem:
        item = self.get_item(content_id)
        if item is None:
            raise NotFoundError(content_id)
        return item

    def list_items(self, organization_id: Optional[str] = None, status: Optional[str] = None) -> List[ContentItem]:
        query = self.session.query(ContentItem)
        if organization_id is not None:
            query = query.filter(ContentItem.organization_id == organization_id)
        if status is not None:
            query = query.filter(ContentItem.status == status)
        return query.order_by(ContentItem.updated_at.desc(), ContentItem.id).all()

    def update_item(self, content_id: str, **fields) -> ContentItem:
        _check_item_fields(fields)
        item = self.require_item(content_id)
        for name, value in fields.items():
            setattr(item, name, value)
        self.session.commit()
        return item

    # Versions

    def get_latest_version(self, content_id: str) -> Optional[ContentVersion]:
        return (
            self.session.query(ContentVersion)
            .filter(ContentVersion.content_id == content_id)
            .order_by(ContentVersion.version_number.desc())
            .first()
        )

    def list_versions(self, content_id: str) -> List[ContentVersion]:
        return (
            self.session.query(ContentVersion)
            .filter(ContentVersion.content_id == content_id)
            .order_by(ContentVersion.version_number.desc())
            .all()
        )

    def _latest_version_number(self, content_id: str) -> int:
        latest = (
            self.session.query(func.max(ContentVersion.version_number))
            .filter(ContentVersion.content_id == content_id)
            .scalar()
        )
        return latest or 0

    def append_version(
        self,
        content_id: str,
        version: ContentVersion,
        item_fields: Optional[Dict[str, Any]] = None,
    ) -> ContentVersion:
        """
        Persist a new version for an existing item.

        item_fields (title, status, compliance_score) are applied to the
        item in the same commit as the version.

        Raises:
            NotFoundError: content_id does not reference an item
            ConflictError: the version number is already taken
        """
        _check_item_fields(item_fields or {})
        item = self.require_item(content_id)
        return self._insert(item, version, item_fields or {})

    def append_version_if_latest_matches(
        self,
        content_id: str,
        expected_latest_version_number: Optional[int],
        version: ContentVersion,
        item_fields: Optional[Dict[str, Any]] = None,
    ) -> ContentVersion:
        """
        Persist a version only if nobody else has written since the caller read.

        expected_latest_version_number is the number the caller saw as
        latest (None or 0 when the item had no versions).
        """
        _check_item_fields(item_fields or {})
        item = self.require_item(content_id)
        actual = self._latest_version_number(content_id)
        expected = expected_latest_version_number or 0
        if actual != expected:
            self.session.rollback()
            raise ConflictError(
                content_id,
                version.version_number,
                message=(
                    f"Latest version of {content_id} is {actual}, expected {expected}"
                ),
            )
        return self._insert(item, version, item_fields or {})

    def _insert(self, item: ContentItem, version: ContentVersion, item_fields: Dict[str, Any]) -> ContentVersion:
        content_id = item.id
        version_number = version.version_number
        version.content_id = content_id
        self.session.add(version)
        for name, value in item_fields.items():
            setattr(item, name, value)
        item.updated_at = datetime.now()
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            if _is_version_collision(e):
                raise ConflictError(content_id, version_number) from e
            raise
        return version
