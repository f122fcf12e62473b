"""Session application service for IAM bounded context.

Issues, resolves, rotates and revokes session tokens. Only token hashes are
stored; the raw token lives in the client's cookie.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from iam.application.observability import (
    DefaultSessionServiceProbe,
    SessionServiceProbe,
)
from iam.application.security import generate_token, hash_token
from iam.application.value_objects import (
    IssuedSession,
    ResolvedSession,
    SessionSummary,
)
from iam.domain.aggregates import Principal, SessionToken
from iam.domain.value_objects import (
    MAILED_CONTEXTS,
    PrincipalId,
    SessionTokenId,
    TokenContext,
)
from iam.ports.exceptions import SessionExpiredError, SessionNotFoundError
from iam.ports.repositories import IPrincipalRepository, ISessionTokenRepository
from shared_kernel.audit.ports import IAuditLogger, RequestContext
from shared_kernel.authorization.types import Scope
from shared_kernel.clock import Clock, utc_now
from shared_kernel.events import IEventBus, SessionDisconnectRequested, session_topic

SESSIONS_INVALIDATED_ALL = "session.invalidated_all"
SESSIONS_INVALIDATED_ALL_EXCEPT_CURRENT = "session.invalidated_all_except_current"
SESSION_REJECTED = "session.rejected"
SESSION_REVOKED = "session.revoked"


MAILED_TOKEN_MAX_AGES: dict[TokenContext, timedelta] = {
    TokenContext.MAGIC_LINK: timedelta(minutes=15),
    TokenContext.PASSWORD_RESET: timedelta(days=1),
    TokenContext.EMAIL_CHANGE: timedelta(days=7),
}


@dataclass(frozen=True)
class SessionPolicy:
    """Time windows governing stored tokens.

    Attributes:
        inactivity_window: Maximum age of authenticated_at before a session dies
        reissue_after: Age of a token value after which it is rotated
        remember_me_max_age: Lifetime of the remember-me cookie
        mailed_token_max_ages: Validity of tokens delivered by e-mail, per
            context; contexts left out keep their defaults
    """

    inactivity_window: timedelta = timedelta(hours=24)
    reissue_after: timedelta = timedelta(days=7)
    remember_me_max_age: timedelta = timedelta(days=14)
    mailed_token_max_ages: dict[TokenContext, timedelta] | None = None

    def max_age_for(self, context: TokenContext) -> timedelta:
        ages = {**MAILED_TOKEN_MAX_AGES, **(self.mailed_token_max_ages or {})}
        return ages[context]


class SessionService:
    """Application service for session lifecycle.

    Login success/failure and logout are audited by the authentication
    service; this service audits bulk invalidation and rejected sessions.
    """

    def __init__(
        self,
        session: AsyncSession,
        token_repository: ISessionTokenRepository,
        principal_repository: IPrincipalRepository,
        audit: IAuditLogger,
        event_bus: IEventBus,
        policy: SessionPolicy | None = None,
        probe: SessionServiceProbe | None = None,
        clock: Clock = utc_now,
    ):
        """Initialize SessionService with dependencies.

        Args:
            session: Database session for transaction management
            token_repository: Repository for stored token hashes
            principal_repository: Repository used to build fresh scopes
            audit: Audit logger for bulk invalidation entries
            event_bus: Bus receiving disconnect notifications
            policy: Token time windows
            probe: Optional domain probe for observability
            clock: Time source
        """
        self._session = session
        self._tokens = token_repository
        self._principals = principal_repository
        self._audit = audit
        self._event_bus = event_bus
        self._policy = policy or SessionPolicy()
        self._probe = probe or DefaultSessionServiceProbe()
        self._clock = clock

    async def issue(
        self, principal: Principal, remember_me: bool = False
    ) -> IssuedSession:
        """Mint a session token for a principal who just authenticated.

        Returns:
            IssuedSession carrying the raw token exactly once

        Raises:
            PrincipalInactiveError: If the principal may not sign in
        """
        principal.ensure_active()
        token = generate_token()
        stored = SessionToken.issue(
            principal_id=principal.id,
            token_hash=hash_token(token),
            context=TokenContext.SESSION,
            now=self._clock(),
        )

        async with self._session.begin():
            await self._tokens.add(stored)

        self._probe.session_issued(principal.id.value, remember_me)
        return IssuedSession(
            token=token,
            remember_me=remember_me,
            remember_me_max_age=self._policy.remember_me_max_age,
        )

    async def resolve(
        self, token: str, request: RequestContext | None = None
    ) -> ResolvedSession:
        """Turn a presented token into a fresh Scope.

        A token past the inactivity window is rejected and never renewed. A
        valid token whose value is older than the reissue threshold is
        replaced in the same transaction; the replacement keeps the
        original authenticated_at. Rejections are audited with their reason;
        callers only ever see the generic error.

        Raises:
            SessionNotFoundError: Unknown token, or principal missing/inactive
            SessionExpiredError: The inactivity window has passed
        """
        token_hash = hash_token(token)
        now = self._clock()
        reissued_token: str | None = None
        stored: SessionToken | None = None
        principal: Principal | None = None
        reason = "unknown_token"

        try:
            async with self._session.begin():
                stored = await self._tokens.get_by_hash(
                    token_hash, TokenContext.SESSION
                )
                if stored is None:
                    self._probe.session_not_found(reason)
                    raise SessionNotFoundError("Session not found")

                principal = await self._principals.get_by_id(stored.principal_id)
                if stored.is_inactive(now, self._policy.inactivity_window):
                    reason = "expired"
                    self._probe.session_expired(stored.principal_id.value)
                    raise SessionExpiredError("Session expired")

                if principal is None or not principal.is_active:
                    reason = "principal_unavailable"
                    self._probe.session_not_found(reason)
                    raise SessionNotFoundError("Session not found")

                if stored.needs_reissue(now, self._policy.reissue_after):
                    reissued_token = generate_token()
                    await self._tokens.delete_by_hash(token_hash)
                    await self._tokens.add(
                        SessionToken.issue(
                            principal_id=principal.id,
                            token_hash=hash_token(reissued_token),
                            context=TokenContext.SESSION,
                            now=now,
                            authenticated_at=stored.authenticated_at,
                        )
                    )
                    self._probe.session_reissued(principal.id.value)
        except (SessionNotFoundError, SessionExpiredError):
            await self._audit.record(
                None,
                SESSION_REJECTED,
                tenant_id=(
                    principal.tenant_id.value
                    if principal and principal.tenant_id
                    else None
                ),
                resource_type="principal",
                resource_id=stored.principal_id.value if stored else None,
                changes={"reason": reason},
                request=request,
            )
            raise

        self._probe.session_resolved(principal.id.value)
        return ResolvedSession(
            scope=principal.to_scope(), reissued_token=reissued_token
        )

    async def revoke(self, token: str) -> bool:
        """Delete a single session token.

        Returns:
            True if the token existed
        """
        async with self._session.begin():
            found = await self._tokens.delete_by_hash(hash_token(token))
        self._probe.session_revoked(found)
        return found

    async def list_sessions(
        self, principal_id: PrincipalId, current_token: str | None = None
    ) -> list[SessionSummary]:
        """List a principal's live sessions, most recently authenticated first.

        Sessions past the inactivity window are left out; they can no longer
        be resolved.
        """
        current_hash = hash_token(current_token) if current_token else None
        now = self._clock()
        async with self._session.begin():
            stored = await self._tokens.list_for_principal(
                principal_id, TokenContext.SESSION
            )
        return [
            SessionSummary(
                id=token.id.value,
                created_at=token.created_at,
                authenticated_at=token.authenticated_at,
                current=token.token_hash == current_hash,
            )
            for token in stored
            if not token.is_inactive(now, self._policy.inactivity_window)
        ]

    async def revoke_session(
        self,
        principal_id: PrincipalId,
        session_id: str,
        *,
        actor: Scope | None = None,
        request: RequestContext | None = None,
    ) -> bool:
        """Revoke one of a principal's sessions by its id.

        The session must belong to the principal. Its holder is told to
        disconnect and the revocation is audited.

        Returns:
            True if the session existed and was revoked
        """
        try:
            token_id = SessionTokenId.from_string(session_id)
        except ValueError:
            return False

        async with self._session.begin():
            token_hash = await self._tokens.delete_by_id(
                principal_id, token_id, TokenContext.SESSION
            )
        self._probe.session_revoked(token_hash is not None)
        if token_hash is None:
            return False

        self._event_bus.publish(
            session_topic(token_hash),
            SessionDisconnectRequested(
                principal_id=principal_id.value,
                token_hash=token_hash,
                occurred_at=self._clock(),
            ),
        )
        await self._audit.record(
            actor,
            SESSION_REVOKED,
            tenant_id=actor.tenant_id if actor else None,
            resource_type="session",
            resource_id=session_id,
            request=request,
        )
        return True

    async def revoke_all_except(
        self,
        principal_id: PrincipalId,
        current_token: str | None,
        *,
        actor: Scope | None = None,
        tenant_id: str | None = None,
        request: RequestContext | None = None,
    ) -> int:
        """Revoke every session of a principal except the caller's own.

        Publishes one disconnect event per revoked token and records a
        single audit entry carrying the count.

        Returns:
            Number of sessions revoked
        """
        except_hash = hash_token(current_token) if current_token else None
        return await self._revoke_many(
            principal_id,
            except_hash,
            SESSIONS_INVALIDATED_ALL_EXCEPT_CURRENT,
            actor=actor,
            tenant_id=tenant_id,
            request=request,
        )

    async def revoke_all(
        self,
        principal_id: PrincipalId,
        *,
        actor: Scope | None = None,
        tenant_id: str | None = None,
        request: RequestContext | None = None,
    ) -> int:
        """Revoke every session of a principal.

        Used when a principal is deactivated, deleted or has their password
        reset by an administrator.

        Returns:
            Number of sessions revoked
        """
        return await self._revoke_many(
            principal_id,
            None,
            SESSIONS_INVALIDATED_ALL,
            actor=actor,
            tenant_id=tenant_id,
            request=request,
        )

    async def _revoke_many(
        self,
        principal_id: PrincipalId,
        except_hash: str | None,
        audit_action: str,
        *,
        actor: Scope | None,
        tenant_id: str | None,
        request: RequestContext | None,
    ) -> int:
        async with self._session.begin():
            revoked = await self._tokens.delete_for_principal(
                principal_id, TokenContext.SESSION, except_hash=except_hash
            )

        now = self._clock()
        for token_hash in revoked:
            self._event_bus.publish(
                session_topic(token_hash),
                SessionDisconnectRequested(
                    principal_id=principal_id.value,
                    token_hash=token_hash,
                    occurred_at=now,
                ),
            )

        self._probe.sessions_revoked(
            principal_id.value, len(revoked), kept_current=except_hash is not None
        )
        if tenant_id is None and actor is not None:
            tenant_id = actor.tenant_id
        await self._audit.record(
            actor,
            audit_action,
            tenant_id=tenant_id,
            resource_type="principal",
            resource_id=principal_id.value,
            changes={"count": len(revoked)},
            request=request,
        )
        return len(revoked)

    async def issue_email_token(
        self, principal: Principal, context: TokenContext, sent_to: str | None = None
    ) -> str:
        """Mint a single-use token to be delivered by e-mail.

        Returns:
            The raw token to embed in a link

        Raises:
            ValueError: If the context is not delivered by e-mail
            PrincipalInactiveError: If the principal may not sign in
        """
        if context not in MAILED_CONTEXTS:
            raise ValueError(f"Tokens for context {context} are not mailed")
        principal.ensure_active()

        token = generate_token()
        async with self._session.begin():
            await self._tokens.add(
                SessionToken.issue(
                    principal_id=principal.id,
                    token_hash=hash_token(token),
                    context=context,
                    now=self._clock(),
                    sent_to=sent_to or principal.email,
                )
            )

        self._probe.email_token_issued(principal.id.value, context.value)
        return token

    async def consume_email_token(self, token: str, context: TokenContext) -> Principal:
        """Validate and burn a mailed token.

        The lookup is restricted to the given context, so a session token
        can never be used here and a mailed token can never act as a session.

        Raises:
            SessionNotFoundError: Unknown token, wrong context, or principal unavailable
            SessionExpiredError: The token is older than its context allows
        """
        principal, _ = await self._consume(token, context)
        return principal

    async def consume_email_change_token(self, token: str) -> tuple[Principal, str]:
        """Burn an e-mail change token.

        Returns:
            The principal and the address the token was sent to, which is the
            address they asked to move to

        Raises:
            SessionNotFoundError: Unknown token, or principal unavailable
            SessionExpiredError: The token is older than its context allows
        """
        principal, stored = await self._consume(token, TokenContext.EMAIL_CHANGE)
        if stored.sent_to is None:
            self._probe.email_token_rejected(stored.context.value, "no_recipient")
            raise SessionNotFoundError("Token not found")
        return principal, stored.sent_to

    async def discard_mailed_tokens(
        self, principal_id: PrincipalId, context: TokenContext
    ) -> int:
        """Delete every outstanding mailed token of one context for a principal.

        Returns:
            Number of tokens deleted
        """
        if context not in MAILED_CONTEXTS:
            raise ValueError(f"Tokens for context {context} are not mailed")
        async with self._session.begin():
            deleted = await self._tokens.delete_for_principal(principal_id, context)
        return len(deleted)

    async def _consume(
        self, token: str, context: TokenContext
    ) -> tuple[Principal, SessionToken]:
        token_hash = hash_token(token)
        now = self._clock()
        expired = False

        async with self._session.begin():
            stored = await self._tokens.get_by_hash(token_hash, context)
            if stored is None:
                self._probe.email_token_rejected(context.value, "unknown_token")
                raise SessionNotFoundError("Token not found")

            await self._tokens.delete_by_hash(token_hash)
            if stored.is_older_than(now, self._policy.max_age_for(context)):
                expired = True
                principal = None
            else:
                principal = await self._principals.get_by_id(stored.principal_id)

        if expired:
            self._probe.email_token_rejected(context.value, "expired")
            raise SessionExpiredError("Token expired")

        if principal is None or not principal.is_active:
            self._probe.email_token_rejected(context.value, "principal_unavailable")
            raise SessionNotFoundError("Token not found")

        self._probe.email_token_consumed(principal.id.value, context.value)
        return principal, stored
