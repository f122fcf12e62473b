"""Authentication application service for IAM bounded context.

Orchestrates sign in and sign out across the credential and session
services, and owns the audit trail for those events.
"""

from __future__ import annotations

from typing import Callable

from iam.application.observability import (
    AuthenticationProbe,
    DefaultAuthenticationProbe,
)
from iam.application.services.credential_service import CredentialService
from iam.application.services.session_service import SessionService
from iam.application.value_objects import AuthenticatedSession
from iam.domain.aggregates import Principal
from iam.domain.validation import normalize_email
from iam.domain.value_objects import TokenContext
from iam.ports.exceptions import InvalidCredentialsError
from iam.ports.notifications import IMagicLinkNotifier
from shared_kernel.audit.ports import IAuditLogger, RequestContext
from shared_kernel.authorization.types import Scope

LOGIN_SUCCEEDED = "login.succeeded"
LOGIN_FAILED = "login.failed"
LOGOUT = "logout"
MAGIC_LINK_REQUESTED = "login.magic_link_requested"


class AuthenticationService:
    """Application service for signing principals in and out."""

    def __init__(
        self,
        credential_service: CredentialService,
        session_service: SessionService,
        audit: IAuditLogger,
        magic_link_notifier: IMagicLinkNotifier,
        probe: AuthenticationProbe | None = None,
    ):
        self._credentials = credential_service
        self._sessions = session_service
        self._audit = audit
        self._magic_links = magic_link_notifier
        self._probe = probe or DefaultAuthenticationProbe()

    async def authenticate(
        self,
        email: str,
        password: str,
        remember_me: bool = False,
        request: RequestContext | None = None,
    ) -> AuthenticatedSession:
        """Sign in with e-mail and password.

        A failed attempt is audited against the principal owning the
        e-mail, if any, so administrators can see attacks on an account.

        Raises:
            InvalidCredentialsError: On any failure, without saying why
        """
        principal = await self._credentials.verify(email, password)
        if principal is None:
            known = await self._credentials.find_by_email(email)
            await self._audit.record(
                known.to_scope() if known else None,
                LOGIN_FAILED,
                tenant_id=known.tenant_value if known else None,
                resource_type="principal",
                resource_id=known.id.value if known else None,
                changes={"email": normalize_email(email)},
                request=request,
            )
            self._probe.login_failed()
            raise InvalidCredentialsError()

        return await self._sign_in(principal, remember_me, "password", request)

    async def logout(
        self,
        token: str | None,
        scope: Scope | None = None,
        request: RequestContext | None = None,
    ) -> None:
        """End the current session. Safe to call with an unknown token."""
        if token:
            await self._sessions.revoke(token)
        if scope is not None:
            await self._audit.record(
                scope,
                LOGOUT,
                tenant_id=scope.tenant_id,
                resource_type="principal",
                resource_id=scope.principal_id,
                request=request,
            )
        self._probe.logged_out(scope.principal_id if scope else None)

    async def request_magic_link(
        self,
        email: str,
        url_builder: Callable[[str], str],
        request: RequestContext | None = None,
    ) -> None:
        """Mail a one-time sign-in link.

        Behaves identically whether or not the e-mail is known, so the
        endpoint cannot be used to discover accounts.
        """
        principal = await self._credentials.find_by_email(email)
        if principal is None or not principal.is_active:
            self._probe.magic_link_requested(delivered=False)
            return

        token = await self._sessions.issue_email_token(
            principal, TokenContext.MAGIC_LINK, sent_to=principal.email
        )
        await self._magic_links.deliver_magic_link(principal.email, url_builder(token))
        await self._audit.record(
            principal.to_scope(),
            MAGIC_LINK_REQUESTED,
            tenant_id=principal.tenant_value,
            resource_type="principal",
            resource_id=principal.id.value,
            request=request,
        )
        self._probe.magic_link_requested(delivered=True)

    async def login_with_magic_link(
        self,
        token: str,
        remember_me: bool = False,
        request: RequestContext | None = None,
    ) -> AuthenticatedSession:
        """Exchange a mailed sign-in token for a session.

        Raises:
            SessionNotFoundError: Unknown or already used token
            SessionExpiredError: Token older than its validity
        """
        principal = await self._sessions.consume_email_token(
            token, TokenContext.MAGIC_LINK
        )
        self._probe.magic_link_login_succeeded(principal.id.value)
        return await self._sign_in(principal, remember_me, "magic_link", request)

    async def _sign_in(
        self,
        principal: Principal,
        remember_me: bool,
        method: str,
        request: RequestContext | None,
    ) -> AuthenticatedSession:
        issued = await self._sessions.issue(principal, remember_me)
        await self._credentials.record_login(principal)
        await self._audit.record(
            principal.to_scope(),
            LOGIN_SUCCEEDED,
            tenant_id=principal.tenant_value,
            resource_type="principal",
            resource_id=principal.id.value,
            changes={"method": method, "remember_me": remember_me},
            request=request,
        )
        self._probe.login_succeeded(principal.id.value, remember_me)
        return AuthenticatedSession(principal=principal, session=issued)
