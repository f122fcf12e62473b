"""HTTP routes for signing in and out and for managing one's own account."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status

from iam.application.services import (
    AuthenticationService,
    CredentialService,
    SessionService,
)
from iam.application.value_objects import AuthenticatedSession
from iam.dependencies.authentication import (
    get_current_scope,
    get_current_token,
    get_request_context,
    get_session_token,
)
from iam.dependencies.cookies import clear_session_cookies, set_session_cookies
from iam.dependencies.services import (
    get_authentication_service,
    get_credential_service,
    get_session_service,
)
from iam.domain.value_objects import PrincipalId
from iam.ports.exceptions import (
    IdentityError,
    InvalidCredentialsError,
    SessionExpiredError,
    SessionNotFoundError,
)
from iam.presentation.auth.models import (
    ChangePasswordRequest,
    ChangePasswordResponse,
    EmailChangeConfirmRequest,
    EmailChangeRequest,
    LoginRequest,
    LoginResponse,
    MagicLinkConsumeRequest,
    MagicLinkRequest,
    SessionResponse,
)
from iam.presentation.errors import SESSION_FAILURE_DETAIL, to_http_exception
from iam.presentation.models import PrincipalResponse, ScopeResponse
from infrastructure.settings import get_settings
from shared_kernel.audit.ports import RequestContext
from shared_kernel.authorization.types import Scope

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)

EMAIL_CHANGE_LINK_DETAIL = "This link is invalid or has expired"


def _start_session(response: Response, authenticated: AuthenticatedSession) -> None:
    issued = authenticated.session
    set_session_cookies(
        response,
        issued.token,
        issued.remember_me,
        int(issued.remember_me_max_age.total_seconds()),
    )


@router.post("/login")
async def login(
    request: LoginRequest,
    response: Response,
    service: Annotated[AuthenticationService, Depends(get_authentication_service)],
    context: Annotated[RequestContext, Depends(get_request_context)],
) -> LoginResponse:
    """Sign in with e-mail and password.

    Raises:
        HTTPException: 401 with a message that does not say which field was wrong
    """
    try:
        authenticated = await service.authenticate(
            request.email, request.password, request.remember_me, context
        )
    except InvalidCredentialsError as e:
        raise to_http_exception(e) from e

    _start_session(response, authenticated)
    return LoginResponse.from_domain(authenticated)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    response: Response,
    token: Annotated[str | None, Depends(get_session_token)],
    sessions: Annotated[SessionService, Depends(get_session_service)],
    service: Annotated[AuthenticationService, Depends(get_authentication_service)],
    context: Annotated[RequestContext, Depends(get_request_context)],
) -> None:
    """Sign out. Always succeeds, and always clears the cookies."""
    scope: Scope | None = None
    if token is not None:
        try:
            resolved = await sessions.resolve(token)
            scope = resolved.scope
            token = resolved.reissued_token or token
        except (SessionNotFoundError, SessionExpiredError):
            scope = None

    await service.logout(token, scope, context)
    clear_session_cookies(response)


@router.get("/me")
async def me(
    scope: Annotated[Scope, Depends(get_current_scope)],
) -> ScopeResponse:
    """Return the caller's identity."""
    return ScopeResponse.from_scope(scope)


@router.post("/password")
async def change_password(
    request: ChangePasswordRequest,
    scope: Annotated[Scope, Depends(get_current_scope)],
    token: Annotated[str | None, Depends(get_current_token)],
    service: Annotated[CredentialService, Depends(get_credential_service)],
    context: Annotated[RequestContext, Depends(get_request_context)],
) -> ChangePasswordResponse:
    """Change the caller's password, signing out their other sessions.

    Raises:
        HTTPException: 401 if the current password is wrong
        HTTPException: 422 if the new password is rejected
    """
    try:
        revoked = await service.change_password(
            PrincipalId(value=scope.principal_id),
            request.current_password,
            request.new_password,
            current_token=token,
            request=context,
        )
    except IdentityError as e:
        raise to_http_exception(e) from e

    return ChangePasswordResponse(sessions_revoked=revoked)


@router.post("/magic-link", status_code=status.HTTP_202_ACCEPTED)
async def request_magic_link(
    request: MagicLinkRequest,
    service: Annotated[AuthenticationService, Depends(get_authentication_service)],
    context: Annotated[RequestContext, Depends(get_request_context)],
) -> dict[str, str]:
    """Mail a one-time sign-in link.

    The response is the same whether or not the address is registered.
    """
    base_url = get_settings().public_url.rstrip("/")
    await service.request_magic_link(
        request.email,
        lambda token: f"{base_url}/login/magic?token={token}",
        context,
    )
    return {"status": "If the address is registered, a link is on its way"}


@router.post("/magic-link/consume")
async def consume_magic_link(
    request: MagicLinkConsumeRequest,
    response: Response,
    service: Annotated[AuthenticationService, Depends(get_authentication_service)],
    context: Annotated[RequestContext, Depends(get_request_context)],
) -> LoginResponse:
    """Sign in with a token from a mailed link.

    Raises:
        HTTPException: 401 if the link is unknown, used, or expired
    """
    try:
        authenticated = await service.login_with_magic_link(
            request.token, request.remember_me, context
        )
    except (SessionNotFoundError, SessionExpiredError) as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=SESSION_FAILURE_DETAIL,
        ) from e

    _start_session(response, authenticated)
    return LoginResponse.from_domain(authenticated)


@router.post("/email", status_code=status.HTTP_202_ACCEPTED)
async def request_email_change(
    request: EmailChangeRequest,
    scope: Annotated[Scope, Depends(get_current_scope)],
    service: Annotated[CredentialService, Depends(get_credential_service)],
    context: Annotated[RequestContext, Depends(get_request_context)],
) -> dict[str, str]:
    """Mail a confirmation link to a new address.

    Raises:
        HTTPException: 401 if the current password is wrong
        HTTPException: 409 if the address belongs to someone else
        HTTPException: 422 if the address is invalid or unchanged
    """
    base_url = get_settings().public_url.rstrip("/")
    try:
        await service.request_email_change(
            PrincipalId(value=scope.principal_id),
            request.new_email,
            request.current_password,
            lambda token: f"{base_url}/settings/email/confirm?token={token}",
            context,
        )
    except IdentityError as e:
        raise to_http_exception(e) from e
    return {"status": "A confirmation link was sent to the new address"}


@router.post("/email/confirm")
async def confirm_email_change(
    request: EmailChangeConfirmRequest,
    scope: Annotated[Scope, Depends(get_current_scope)],
    service: Annotated[CredentialService, Depends(get_credential_service)],
    context: Annotated[RequestContext, Depends(get_request_context)],
) -> PrincipalResponse:
    """Switch to the address the confirmation link was sent to.

    Raises:
        HTTPException: 400 if the link is unknown, used, expired or not the
            caller's
        HTTPException: 409 if the address was taken in the meantime
    """
    try:
        principal = await service.confirm_email_change(
            PrincipalId(value=scope.principal_id), request.token, context
        )
    except (SessionNotFoundError, SessionExpiredError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=EMAIL_CHANGE_LINK_DETAIL,
        ) from e
    except IdentityError as e:
        raise to_http_exception(e) from e
    return PrincipalResponse.from_domain(principal)


@router.get("/sessions")
async def list_sessions(
    scope: Annotated[Scope, Depends(get_current_scope)],
    token: Annotated[str | None, Depends(get_current_token)],
    sessions: Annotated[SessionService, Depends(get_session_service)],
) -> list[SessionResponse]:
    """List the caller's live sessions, most recently authenticated first."""
    summaries = await sessions.list_sessions(
        PrincipalId(value=scope.principal_id), current_token=token
    )
    return [SessionResponse.from_summary(s) for s in summaries]


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_session(
    session_id: str,
    scope: Annotated[Scope, Depends(get_current_scope)],
    sessions: Annotated[SessionService, Depends(get_session_service)],
    context: Annotated[RequestContext, Depends(get_request_context)],
) -> None:
    """Sign out one of the caller's sessions.

    Raises:
        HTTPException: 404 if the caller has no such session
    """
    revoked = await sessions.revoke_session(
        PrincipalId(value=scope.principal_id),
        session_id,
        actor=scope,
        request=context,
    )
    if not revoked:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Session not found"
        )
