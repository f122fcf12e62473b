"""Authentication dependencies: who is making this request.

Every protected route depends on ``get_current_scope``, which resolves the
session token from the cookie (or a bearer header) into a fresh Scope.
"""

from __future__ import annotations

from typing import Annotated, Awaitable, Callable

from fastapi import Depends, HTTPException, Request, Response, status

from iam.application.observability import (
    AuthenticationProbe,
    DefaultAuthenticationProbe,
)
from iam.application.services import SessionService
from iam.dependencies.cookies import clear_remember_me_header, set_session_cookies
from iam.dependencies.repositories import get_audit_logger
from iam.dependencies.services import get_session_service
from iam.ports.exceptions import SessionExpiredError, SessionNotFoundError
from infrastructure.settings import get_session_settings
from shared_kernel.audit.ports import IAuditLogger, RequestContext
from shared_kernel.authorization.guard import AUTHORIZATION_DENIED
from shared_kernel.authorization.types import Role, Scope

SESSION_FAILURE_DETAIL = "Please log in again"


def get_authentication_probe() -> AuthenticationProbe:
    """Get AuthenticationProbe instance.

    Returns:
        DefaultAuthenticationProbe instance for observability
    """
    return DefaultAuthenticationProbe()


def get_request_context(request: Request) -> RequestContext:
    """Capture client address and user agent for audit entries."""
    return RequestContext(
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


def get_session_token(request: Request) -> str | None:
    """Extract the raw session token.

    Order: bearer header, session cookie, remember-me cookie.
    """
    authorization = request.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()

    settings = get_session_settings()
    return request.cookies.get(settings.cookie_name) or request.cookies.get(
        settings.remember_me_cookie_name
    )


async def get_current_scope(
    request: Request,
    response: Response,
    token: Annotated[str | None, Depends(get_session_token)],
    sessions: Annotated[SessionService, Depends(get_session_service)],
    probe: Annotated[AuthenticationProbe, Depends(get_authentication_probe)],
    context: Annotated[RequestContext, Depends(get_request_context)],
) -> Scope:
    """Resolve the caller's Scope, rotating the token when it is due.

    Raises:
        HTTPException: 401 "Please log in again" for a missing, unknown or
            expired session; the remember-me cookie is cleared as well
    """
    if token is None:
        probe.authentication_failed("missing_token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=SESSION_FAILURE_DETAIL,
        )

    try:
        resolved = await sessions.resolve(token, context)
    except (SessionNotFoundError, SessionExpiredError) as e:
        probe.authentication_failed(e.code)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=SESSION_FAILURE_DETAIL,
            headers=clear_remember_me_header(),
        ) from e

    if resolved.reissued_token is not None:
        remember_me = (
            request.cookies.get(get_session_settings().remember_me_cookie_name)
            == token
        )
        set_session_cookies(response, resolved.reissued_token, remember_me)
        # Routes that log the caller out need the token now in effect
        request.state.session_token = resolved.reissued_token

    return resolved.scope


def get_current_token(
    request: Request,
    token: Annotated[str | None, Depends(get_session_token)],
    _: Annotated[Scope, Depends(get_current_scope)],
) -> str | None:
    """The token of the resolved session, after any rotation."""
    return getattr(request.state, "session_token", token)


def require_roles(*roles: Role) -> Callable[..., Awaitable[Scope]]:
    """Build a dependency admitting only callers holding one of ``roles``.

    A coarse gate for whole routes; per-tenant checks still happen in the
    services. Rejections are audited like any other denial.
    """
    allowed = frozenset(roles)

    async def dependency(
        scope: Annotated[Scope, Depends(get_current_scope)],
        audit: Annotated[IAuditLogger, Depends(get_audit_logger)],
        context: Annotated[RequestContext, Depends(get_request_context)],
    ) -> Scope:
        if scope.role in allowed:
            return scope

        await audit.record(
            scope,
            AUTHORIZATION_DENIED,
            tenant_id=scope.tenant_id,
            resource_type="route",
            changes={
                "actor_role": scope.role.value,
                "required_roles": sorted(role.value for role in allowed),
            },
            request=context,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not authorized to perform this action",
        )

    return dependency
