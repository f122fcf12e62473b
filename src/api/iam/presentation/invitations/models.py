"""Pydantic models for invitation API requests and responses."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from iam.domain.aggregates import Invitation


class CreateInvitationRequest(BaseModel):
    """Request model for inviting someone to a tenant."""

    email: str = Field(..., min_length=1, max_length=160)
    role: str = Field(..., description="operator or viewer")
    tenant_id: str | None = Field(
        None, description="Target tenant; defaults to the caller's tenant"
    )


class InvitationResponse(BaseModel):
    """Response model for an invitation. The token is never returned."""

    id: str
    email: str
    role: str
    tenant_id: str
    status: str
    expires_at: datetime

    @classmethod
    def from_domain(cls, invitation: Invitation) -> InvitationResponse:
        return cls(
            id=invitation.id.value,
            email=invitation.email,
            role=invitation.role.value,
            tenant_id=invitation.tenant_id.value,
            status=invitation.status.value,
            expires_at=invitation.expires_at,
        )


class RedeemInvitationRequest(BaseModel):
    """Request model for accepting an invitation.

    E-mail, role and tenant come from the invitation, never from here.
    """

    token: str = Field(..., min_length=1)
    password: str | None = Field(
        None, min_length=1, description="Omit to sign in by magic link only"
    )
    display_name: str | None = Field(None, max_length=255)
