"""Pydantic models for authentication API requests and responses."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from iam.application.value_objects import AuthenticatedSession, SessionSummary
from iam.presentation.models import PrincipalResponse


class LoginRequest(BaseModel):
    """Request model for e-mail/password sign in."""

    email: str = Field(..., min_length=1, max_length=160)
    password: str = Field(..., min_length=1)
    remember_me: bool = Field(False, description="Keep the session across restarts")


class LoginResponse(BaseModel):
    """Response model for a successful sign in.

    The session token itself travels only in cookies.
    """

    principal: PrincipalResponse
    must_change_password: bool

    @classmethod
    def from_domain(cls, authenticated: AuthenticatedSession) -> LoginResponse:
        return cls(
            principal=PrincipalResponse.from_domain(authenticated.principal),
            must_change_password=authenticated.must_change_password,
        )


class ChangePasswordRequest(BaseModel):
    """Request model for changing one's own password."""

    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)


class ChangePasswordResponse(BaseModel):
    """Response model for a password change."""

    sessions_revoked: int = Field(
        ..., description="Other sessions signed out by the change"
    )


class MagicLinkRequest(BaseModel):
    """Request model for mailing a sign-in link."""

    email: str = Field(..., min_length=1, max_length=160)


class MagicLinkConsumeRequest(BaseModel):
    """Request model for signing in with a mailed link."""

    token: str = Field(..., min_length=1)
    remember_me: bool = False


class EmailChangeRequest(BaseModel):
    """Request model for moving to a new e-mail address."""

    new_email: str = Field(..., min_length=1, max_length=160)
    current_password: str = Field(..., min_length=1)


class EmailChangeConfirmRequest(BaseModel):
    """Request model for confirming a new e-mail address."""

    token: str = Field(..., min_length=1)


class SessionResponse(BaseModel):
    """One of the caller's live sessions."""

    id: str
    created_at: datetime
    authenticated_at: datetime
    current: bool = Field(..., description="Whether this request uses the session")

    @classmethod
    def from_summary(cls, summary: SessionSummary) -> SessionResponse:
        return cls(
            id=summary.id,
            created_at=summary.created_at,
            authenticated_at=summary.authenticated_at,
            current=summary.current,
        )
