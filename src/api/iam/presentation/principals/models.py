"""Pydantic models for principal API requests and responses."""

from __future__ import annotations

from pydantic import BaseModel, Field

from iam.presentation.models import PrincipalResponse


class CreatePrincipalRequest(BaseModel):
    """Request model for creating a principal directly.

    When no password is given a temporary one is generated and returned once.
    """

    email: str = Field(..., min_length=1, max_length=160)
    role: str = Field(..., description="root_admin, tenant_admin, operator or viewer")
    tenant_id: str | None = Field(
        None, description="Owning tenant; defaults to the caller's tenant"
    )
    password: str | None = Field(None, description="Initial password")
    display_name: str | None = Field(None, max_length=255)


class PrincipalCreatedResponse(BaseModel):
    """Response model for a created principal."""

    principal: PrincipalResponse
    temporary_password: str | None = Field(
        None, description="Generated password, shown only in this response"
    )


class ChangeRoleRequest(BaseModel):
    """Request model for changing a principal's role."""

    role: str = Field(..., description="tenant_admin, operator or viewer")


class TemporaryPasswordResponse(BaseModel):
    """Response model for an administrative password reset."""

    principal_id: str
    temporary_password: str = Field(
        ..., description="Generated password, shown only in this response"
    )
