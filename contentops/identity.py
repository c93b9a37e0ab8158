"""
Current-user resolution.

Authentication happens elsewhere; these resolvers only report who the
caller is. A missing identity must stop a mutation before it reaches the
versioning policy.
"""

import os
from dataclasses import dataclass
from typing import Optional, Protocol

from .errors import UnauthorizedError


@dataclass(frozen=True)
class Identity:
    user_id: str
    organization_id: Optional[str] = None
    email: Optional[str] = None


class IdentityResolver(Protocol):
    def get_current_user(self) -> Optional[Identity]:
        ...


class StaticIdentityResolver:
    """Resolver that always returns the identity it was built with."""

    def __init__(self, identity: Optional[Identity]):
        self.identity = identity

    def get_current_user(self) -> Optional[Identity]:
        return self.identity


class EnvIdentityResolver:
    """Resolve the acting user from CONTENTOPS_USER_ID / _ORG_ID / _USER_EMAIL."""

    def get_current_user(self) -> Optional[Identity]:
        user_id = os.getenv("CONTENTOPS_USER_ID", "").strip()
        if not user_id:
            return None
        return Identity(
            user_id=user_id,
            organization_id=os.getenv("CONTENTOPS_ORG_ID") or None,
            email=os.getenv("CONTENTOPS_USER_EMAIL") or None,
        )


def require_user(resolver: IdentityResolver) -> Identity:
    identity = resolver.get_current_user()
    if identity is None:
        raise UnauthorizedError("Unauthorized: no current user")
    return identity
