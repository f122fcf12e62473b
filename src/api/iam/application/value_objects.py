"""Application-layer value objects for IAM bounded context.

These are value objects specific to the application layer: results handed
back to the presentation layer that carry raw tokens or secrets exactly
once, and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from iam.domain.aggregates import Invitation, Principal
from shared_kernel.authorization.types import Scope


@dataclass(frozen=True)
class IssuedSession:
    """A freshly minted session token.

    Attributes:
        token: Raw token for the session cookie (only copy outside storage)
        remember_me: Whether a long-lived remember-me cookie should be written
        remember_me_max_age: Lifetime of the remember-me cookie
    """

    token: str
    remember_me: bool
    remember_me_max_age: timedelta


@dataclass(frozen=True)
class ResolvedSession:
    """Outcome of resolving a session token for a request.

    Attributes:
        scope: Fresh snapshot of the caller's identity
        reissued_token: Replacement token when the presented one was rotated
    """

    scope: Scope
    reissued_token: str | None = None


@dataclass(frozen=True)
class AuthenticatedSession:
    """Result of a successful sign in."""

    principal: Principal
    session: IssuedSession

    @property
    def must_change_password(self) -> bool:
        return self.principal.must_change_password


@dataclass(frozen=True)
class IssuedInvitation:
    """A newly created invitation with its one-time token and link."""

    invitation: Invitation
    token: str
    url: str


@dataclass(frozen=True)
class TemporaryPassword:
    """A password reset result; the plaintext is shown to the admin once."""

    principal: Principal
    password: str


@dataclass(frozen=True)
class SessionSummary:
    """One of a principal's live sessions, as shown on their session list.

    Attributes:
        id: Session identifier, used to revoke it
        created_at: When the current token value was minted
        authenticated_at: When the principal last proved their identity
        current: Whether this is the session making the request
    """

    id: str
    created_at: datetime
    authenticated_at: datetime
    current: bool = False
