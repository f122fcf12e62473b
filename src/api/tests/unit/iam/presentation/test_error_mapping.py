"""Unit tests for translating IAM errors into HTTP responses."""

import pytest
from fastapi import status

from iam.ports.exceptions import (
    CannotModifySelfError,
    DuplicateEmailError,
    DuplicateTenantSlugError,
    InvalidCredentialsError,
    InvitationExpiredError,
    InvitationNotFoundError,
    PrincipalInactiveError,
    PrincipalNotFoundError,
    SessionExpiredError,
    SessionNotFoundError,
    TenantNotFoundError,
    ValidationFailedError,
)
from iam.presentation.errors import to_http_exception, to_invitee_http_exception
from shared_kernel.authorization.exceptions import UnauthorizedError


@pytest.mark.parametrize(
    ("error", "status_code"),
    [
        (InvalidCredentialsError(), status.HTTP_401_UNAUTHORIZED),
        (SessionNotFoundError("x"), status.HTTP_401_UNAUTHORIZED),
        (UnauthorizedError(), status.HTTP_403_FORBIDDEN),
        (PrincipalInactiveError("x"), status.HTTP_403_FORBIDDEN),
        (ValidationFailedError({"email": ["is invalid"]}), 422),
        (DuplicateEmailError("x"), status.HTTP_409_CONFLICT),
        (DuplicateTenantSlugError("x"), status.HTTP_409_CONFLICT),
        (PrincipalNotFoundError("x"), status.HTTP_404_NOT_FOUND),
        (TenantNotFoundError("x"), status.HTTP_404_NOT_FOUND),
        (InvitationExpiredError("x"), status.HTTP_410_GONE),
        (CannotModifySelfError("x"), status.HTTP_400_BAD_REQUEST),
    ],
)
def test_status_codes(error, status_code):
    assert to_http_exception(error).status_code == status_code


def test_session_failures_share_one_message():
    expired = to_http_exception(SessionExpiredError("Session expired"))
    unknown = to_http_exception(SessionNotFoundError("Session not found"))

    assert expired.detail == unknown.detail == "Please log in again"


def test_denial_does_not_leak_details():
    exc = to_http_exception(UnauthorizedError(resource_tenant_id="01TENANT"))

    assert "01TENANT" not in str(exc.detail)


def test_invitee_sees_generic_message():
    exc = to_invitee_http_exception(InvitationNotFoundError("Invitation not found"))

    assert exc.status_code == status.HTTP_410_GONE
    assert exc.detail == "This invitation is no longer valid"


def test_invitee_password_errors_stay_specific():
    exc = to_invitee_http_exception(
        ValidationFailedError({"password": ["can't be blank"]})
    )

    assert exc.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert exc.detail["errors"] == {"password": ["can't be blank"]}
