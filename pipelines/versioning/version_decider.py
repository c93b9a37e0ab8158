"""
Content Version Classification.

Responsibilities:
- Determine whether a proposed body warrants a new immutable version.
- Compare the proposed body against the latest content version.
- Append the next version number when the body changed.

Non-Responsibilities:
- No authentication (the author is resolved by the caller).
- No body normalization or diff generation.
- No logging.

Invariant:
Version numbers per content item start at 1 and strictly increase.
An unchanged body never produces a new content_version row.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Tuple

from contentops.database import ContentVersion
from contentops.errors import ConflictError
from contentops.retry import RetryError, exponential_backoff

FIRST_VERSION = "first_version"
BODY_CHANGED = "body_changed"
UNCHANGED = "unchanged"


class ContentStore(Protocol):
    def get_latest_version(self, content_id: str) -> Optional[ContentVersion]:
        ...

    def append_version_if_latest_matches(
        self,
        content_id: str,
        expected_latest_version_number: Optional[int],
        version: ContentVersion,
        item_fields: Optional[Dict[str, Any]] = None,
    ) -> ContentVersion:
        ...


@dataclass(frozen=True)
class VersionDecision:
    should_version: bool
    reason: str
    latest_version_number: int
    next_version_number: Optional[int]


def _author_id(author) -> Optional[str]:
    if author is None or isinstance(author, str):
        return author
    return author.user_id


def _changed(previous_body: Optional[str], new_body: str) -> bool:
    # Exact comparison; callers normalize beforehand if they need to
    return previous_body != new_body


class VersioningPolicy:
    """
    Decide and apply content versioning against an injected store.

    Args:
        store: Anything providing get_latest_version and
            append_version_if_latest_matches
        clock: Returns the timestamp stamped on new versions
    """

    def __init__(self, store: ContentStore, clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.clock = clock or datetime.now

    def decide(self, content_id: str, new_body: str) -> VersionDecision:
        latest = self.store.get_latest_version(content_id)
        if latest is None:
            return VersionDecision(True, FIRST_VERSION, 0, 1)
        if _changed(latest.body, new_body):
            return VersionDecision(True, BODY_CHANGED, latest.version_number, latest.version_number + 1)
        return VersionDecision(False, UNCHANGED, latest.version_number, None)

    def should_version(self, content_id: str, new_body: str) -> bool:
        return self.decide(content_id, new_body).should_version

    def build_version(self, version_number: int, body: str, author, **metadata) -> ContentVersion:
        """Unsaved version row, for callers that store it alongside a new item."""
        return ContentVersion(
            version_number=version_number,
            body=body,
            created_by_user_id=_author_id(author),
            created_at=self.clock(),
            **metadata,
        )

    def plan_history(self, drafts: Iterable[Tuple[str, Any, Dict[str, Any]]]) -> List[ContentVersion]:
        """
        Number a sequence of (body, author, metadata) drafts for a new item.

        Consecutive identical bodies collapse into one version, the same
        rule create_version_if_changed applies one save at a time.
        """
        versions: List[ContentVersion] = []
        for body, author, metadata in drafts:
            previous = versions[-1].body if versions else None
            if versions and not _changed(previous, body):
                continue
            versions.append(self.build_version(len(versions) + 1, body, author, **metadata))
        return versions

    def create_version_if_changed(
        self,
        content_id: str,
        new_body: str,
        author,
        item_fields: Optional[Dict[str, Any]] = None,
        **metadata,
    ) -> Optional[ContentVersion]:
        """
        Append a new version when the body differs from the latest one.

        Args:
            content_id: Existing content item id
            new_body: Proposed body text
            author: Identity (or user id) stamped on the version
            item_fields: Item columns to update in the same commit
            **metadata: Snapshot fields (title, topic, audience, tone, compliance_score)

        Returns:
            The stored version, or None when the body is unchanged

        Raises:
            NotFoundError: The content item does not exist
            ConflictError: Another writer stored a version since the read
        """
        decision = self.decide(content_id, new_body)
        if not decision.should_version:
            return None

        version = self.build_version(decision.next_version_number, new_body, author, **metadata)
        return self.store.append_version_if_latest_matches(
            content_id, decision.latest_version_number, version, item_fields=item_fields
        )

    def create_version_with_retry(
        self,
        content_id: str,
        new_body: str,
        author,
        attempts: int = 3,
        on_retry: Optional[Callable] = None,
        item_fields: Optional[Dict[str, Any]] = None,
        **metadata,
    ) -> Optional[ContentVersion]:
        """
        Like create_version_if_changed, re-reading the latest version after a conflict.

        Only ConflictError is retried; any other error propagates at once.

        Raises:
            ConflictError: Every attempt conflicted (chained from the RetryError)
        """
        attempts = max(attempts, 1)

        @exponential_backoff(
            max_retries=attempts - 1,
            base_delay=0.0,
            exceptions=(ConflictError,),
            on_retry=on_retry,
        )
        def _attempt():
            return self.create_version_if_changed(
                content_id, new_body, author, item_fields=item_fields, **metadata
            )

        try:
            return _attempt()
        except RetryError as e:
            raise ConflictError(
                content_id,
                message=f"Version conflict on {content_id} persisted after {attempts} attempts",
            ) from e
