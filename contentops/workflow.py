"""
Content review workflow.

Allowed status moves:
    DRAFT      -> SUBMITTED
    SUBMITTED  -> IN_REVIEW, DRAFT
    IN_REVIEW  -> APPROVED, REJECTED
    APPROVED   -> (terminal)
    REJECTED   -> DRAFT
"""

from enum import Enum
from typing import Dict, List, Union

from .errors import InvalidTransitionError


class ContentStatus(str, Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    IN_REVIEW = "IN_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


STATUS_TRANSITIONS: Dict[ContentStatus, List[ContentStatus]] = {
    ContentStatus.DRAFT: [ContentStatus.SUBMITTED],
    ContentStatus.SUBMITTED: [ContentStatus.IN_REVIEW, ContentStatus.DRAFT],
    ContentStatus.IN_REVIEW: [ContentStatus.APPROVED, ContentStatus.REJECTED],
    ContentStatus.APPROVED: [],
    ContentStatus.REJECTED: [ContentStatus.DRAFT],
}


def parse_status(value: Union[str, ContentStatus]) -> ContentStatus:
    try:
        return ContentStatus(value.upper() if isinstance(value, str) else value)
    except ValueError:
        valid = ", ".join(s.value for s in ContentStatus)
        raise ValueError(f"Unknown status {value!r}. Use one of: {valid}")


def can_transition_to(current: Union[str, ContentStatus], new: Union[str, ContentStatus]) -> bool:
    return parse_status(new) in STATUS_TRANSITIONS[parse_status(current)]


def ensure_transition(current: Union[str, ContentStatus], new: Union[str, ContentStatus]) -> ContentStatus:
    """Return the target status, or raise InvalidTransitionError."""
    target = parse_status(new)
    if not can_transition_to(current, target):
        raise InvalidTransitionError(parse_status(current).value, target.value)
    return target
