"""SessionToken aggregate for IAM context."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from iam.domain.value_objects import PrincipalId, SessionTokenId, TokenContext


@dataclass
class SessionToken:
    """A stored token hash granting access for one purpose.

    Only the SHA-256 hash of the token is kept; the raw token exists in the
    client's cookie or e-mail and nowhere else.

    Business rules:
    - authenticated_at is when the principal last proved their identity and
      is carried over unchanged when a token is reissued
    - created_at is when this particular token value was minted
    - A token is never renewed once the inactivity window has passed
    """

    id: SessionTokenId
    principal_id: PrincipalId
    token_hash: str
    context: TokenContext
    created_at: datetime
    authenticated_at: datetime
    sent_to: str | None = None

    @classmethod
    def issue(
        cls,
        principal_id: PrincipalId,
        token_hash: str,
        context: TokenContext,
        now: datetime,
        authenticated_at: datetime | None = None,
        sent_to: str | None = None,
    ) -> SessionToken:
        """Create a new stored token.

        Args:
            principal_id: Principal the token authenticates
            token_hash: SHA-256 hex digest of the raw token
            context: Purpose of the token
            now: Minting instant
            authenticated_at: Carried-over authentication instant on reissue
            sent_to: E-mail address a mailed token was delivered to
        """
        return cls(
            id=SessionTokenId.generate(),
            principal_id=principal_id,
            token_hash=token_hash,
            context=context,
            created_at=now,
            authenticated_at=authenticated_at or now,
            sent_to=sent_to,
        )

    def is_inactive(self, now: datetime, inactivity_window: timedelta) -> bool:
        """Whether the principal has not re-authenticated within the window."""
        return now - self.authenticated_at > inactivity_window

    def needs_reissue(self, now: datetime, reissue_after: timedelta) -> bool:
        """Whether this token value is old enough to be rotated."""
        return now - self.created_at >= reissue_after

    def is_older_than(self, now: datetime, max_age: timedelta) -> bool:
        return now - self.created_at > max_age
