"""Mapping of IAM errors to HTTP responses.

Unauthenticated callers and invitees get generic messages; administrators
get the specific reason.
"""

from __future__ import annotations

from fastapi import HTTPException, status

from iam.dependencies.authentication import SESSION_FAILURE_DETAIL
from iam.ports.exceptions import (
    CannotModifySelfError,
    DuplicateEmailError,
    DuplicateTenantSlugError,
    IdentityError,
    InvalidCredentialsError,
    InvitationAlreadyAcceptedError,
    InvitationExpiredError,
    InvitationNotFoundError,
    PrincipalInactiveError,
    PrincipalNotFoundError,
    SessionExpiredError,
    SessionNotFoundError,
    TenantNotFoundError,
    UnauthorizedError,
    ValidationFailedError,
)

INVITATION_FAILURE_DETAIL = "This invitation is no longer valid"


def to_http_exception(error: IdentityError) -> HTTPException:
    """Translate an IAM error raised to an authenticated caller."""
    match error:
        case SessionNotFoundError() | SessionExpiredError():
            return HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=SESSION_FAILURE_DETAIL,
            )
        case InvalidCredentialsError():
            return HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED, detail=str(error)
            )
        case UnauthorizedError() | PrincipalInactiveError():
            return HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail=str(error)
            )
        case ValidationFailedError():
            return HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail={"message": str(error), "errors": error.errors},
            )
        case DuplicateEmailError() | DuplicateTenantSlugError():
            return HTTPException(
                status_code=status.HTTP_409_CONFLICT, detail=str(error)
            )
        case (
            PrincipalNotFoundError()
            | TenantNotFoundError()
            | InvitationNotFoundError()
        ):
            return HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail=str(error)
            )
        case InvitationExpiredError() | InvitationAlreadyAcceptedError():
            return HTTPException(status_code=status.HTTP_410_GONE, detail=str(error))
        case CannotModifySelfError():
            return HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(error)
            )
        case _:
            return HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(error)
            )


def to_invitee_http_exception(error: IdentityError) -> HTTPException:
    """Translate an error raised while an invitee redeems a token.

    Every invitation failure looks the same to the invitee.
    """
    if isinstance(
        error,
        (
            InvitationNotFoundError,
            InvitationExpiredError,
            InvitationAlreadyAcceptedError,
        ),
    ):
        return HTTPException(
            status_code=status.HTTP_410_GONE, detail=INVITATION_FAILURE_DETAIL
        )
    return to_http_exception(error)
