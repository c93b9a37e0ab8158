"""
Error taxonomy for content operations.

NotFoundError and ValidationError are terminal for the request.
ConflictError is safe to retry after re-reading the latest version.
Store-level failures (connectivity, timeouts) are not wrapped here and
propagate as raised by SQLAlchemy.
"""

from typing import List, Optional


class ContentOpsError(Exception):
    """Base class for all content operation errors."""
    pass


class NotFoundError(ContentOpsError):
    """Raised when a referenced content item does not exist."""

    def __init__(self, content_id: str):
        self.content_id = content_id
        super().__init__(f"Content not found: {content_id}")


class ConflictError(ContentOpsError):
    """Raised when a version number collides with an existing version."""

    def __init__(self, content_id: str, version_number: Optional[int] = None, message: Optional[str] = None):
        self.content_id = content_id
        self.version_number = version_number
        if message is None:
            message = f"Version {version_number} already exists for content {content_id}"
        super().__init__(message)


class UnauthorizedError(ContentOpsError):
    """Raised when no authenticated identity is available."""
    pass


class ValidationError(ContentOpsError):
    """Raised when submitted content fails form validation."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__("Invalid form data: " + "; ".join(errors))


class InvalidTransitionError(ContentOpsError):
    """Raised when a status change is not allowed by the workflow."""

    def __init__(self, current: str, requested: str, message: Optional[str] = None):
        self.current = current
        self.requested = requested
        super().__init__(message or f"Cannot move content from {current} to {requested}")
