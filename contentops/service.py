"""
Draft saving and review workflow for content items.

Every operation resolves the acting user first and scopes reads to the
user's organization when the identity carries one. Items outside that
organization are reported as not found.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pipelines.versioning import VersioningPolicy

from .database import ContentItem, ContentVersion
from .errors import ConflictError, InvalidTransitionError, NotFoundError, ValidationError
from .identity import Identity, IdentityResolver, require_user
from .logger import StructuredLogger, get_logger
from .normalize import normalize_title
from .schema import validate_content_form
from .workflow import ContentStatus, ensure_transition

VERSION_METADATA_FIELDS = ("title", "topic", "audience", "tone")


@dataclass
class SaveResult:
    content_id: str
    version: Optional[ContentVersion] = None
    created: bool = False
    skipped: bool = False
    compliance_score: Optional[int] = None

    @property
    def status(self) -> str:
        if self.created:
            return "created"
        if self.skipped:
            return "no-change"
        return "versioned"


class ContentService:
    def __init__(
        self,
        repository,
        resolver: IdentityResolver,
        policy: Optional[VersioningPolicy] = None,
        logger: Optional[StructuredLogger] = None,
        version_attempts: int = 3,
    ):
        self.repository = repository
        self.resolver = resolver
        self.policy = policy or VersioningPolicy(repository)
        self.logger = logger or get_logger()
        self.version_attempts = version_attempts

    def _scoped_item(self, identity: Identity, content_id: str) -> ContentItem:
        item = self.repository.get_item(content_id)
        if item is None or (
            identity.organization_id is not None
            and item.organization_id != identity.organization_id
        ):
            self.logger.record_failure("NotFoundError")
            raise NotFoundError(content_id)
        return item

    def _on_conflict(self, content_id: str):
        def _log(attempt, exc, delay):
            self.logger.record_conflict()
            self.logger.warning(
                "Version conflict, retrying",
                content_id=content_id,
                attempt=attempt,
                error=str(exc),
            )
        return _log

    def save_draft(self, form: Dict[str, Any], content_id: Optional[str] = None) -> SaveResult:
        """
        Validate a content form and store it as a draft version.

        A new item is created when content_id is None. An existing item
        must still be a draft, and gets a new version only if its body
        changed.

        Raises:
            UnauthorizedError: No current user
            ValidationError: Form failed validation
            NotFoundError: Item missing or in another organization
            InvalidTransitionError: Item is no longer a draft
            ConflictError: Version conflicts persisted across all attempts
        """
        identity = require_user(self.resolver)
        self.logger.record_save_attempt()

        errors = validate_content_form(form)
        if errors:
            self.logger.record_failure("ValidationError")
            self.logger.info("Rejected invalid content form", content_id=content_id, errors=errors)
            raise ValidationError(errors)

        title = normalize_title(form["title"])
        score = form.get("compliance_score")
        metadata = {field: form[field] for field in VERSION_METADATA_FIELDS}
        metadata["title"] = title
        metadata["compliance_score"] = score

        if content_id is None:
            first = self.policy.build_version(1, form["body"], identity, **metadata)
            item = self.repository.create_item(
                title=title,
                organization_id=identity.organization_id,
                created_by_user_id=identity.user_id,
                compliance_score=score,
                versions=[first],
            )
            self.logger.record_version_created()
            self.logger.info("Created content", content_id=item.id, user_id=identity.user_id)
            return SaveResult(item.id, version=first, created=True, compliance_score=score)

        item = self._scoped_item(identity, content_id)
        if item.status != ContentStatus.DRAFT.value:
            self.logger.record_failure("InvalidTransitionError")
            raise InvalidTransitionError(
                item.status,
                ContentStatus.DRAFT.value,
                message=f"Can only edit draft content (status is {item.status})",
            )

        try:
            version = self.policy.create_version_with_retry(
                content_id,
                form["body"],
                identity,
                attempts=self.version_attempts,
                on_retry=self._on_conflict(content_id),
                item_fields={"title": title, "compliance_score": score},
                **metadata,
            )
        except ConflictError:
            self.logger.record_failure("ConflictError")
            self.logger.error("Gave up after repeated version conflicts", content_id=content_id)
            raise
        if version is None:
            self.logger.record_version_skipped()
            self.logger.debug("Body unchanged, no version created", content_id=content_id)
            return SaveResult(content_id, skipped=True)

        self.logger.record_version_created()
        self.logger.info(
            "Stored new version",
            content_id=content_id,
            version_number=version.version_number,
            user_id=identity.user_id,
        )
        return SaveResult(content_id, version=version, compliance_score=score)

    def check(self, content_id: str, body: str) -> bool:
        """Report whether saving body would create a version, without writing."""
        identity = require_user(self.resolver)
        self._scoped_item(identity, content_id)
        return self.policy.should_version(content_id, body)

    def transition(self, content_id: str, new_status) -> ContentItem:
        identity = require_user(self.resolver)
        item = self._scoped_item(identity, content_id)
        target = ensure_transition(item.status, new_status)
        previous = item.status
        item = self.repository.update_item(content_id, status=target.value)
        self.logger.info(
            "Content status changed",
            content_id=content_id,
            from_status=previous,
            to_status=target.value,
            user_id=identity.user_id,
        )
        return item

    def submit(self, content_id: str) -> ContentItem:
        return self.transition(content_id, ContentStatus.SUBMITTED)

    def get_content(self, content_id: str) -> ContentItem:
        identity = require_user(self.resolver)
        return self._scoped_item(identity, content_id)

    def list_content(self, status: Optional[str] = None) -> List[ContentItem]:
        identity = require_user(self.resolver)
        return self.repository.list_items(organization_id=identity.organization_id, status=status)

    def history(self, content_id: str) -> List[ContentVersion]:
        identity = require_user(self.resolver)
        self._scoped_item(identity, content_id)
        return self.repository.list_versions(content_id)
