"""Pydantic models shared by the IAM routers."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from iam.domain.aggregates import Principal
from shared_kernel.authorization.types import Scope


class PrincipalResponse(BaseModel):
    """Response model for a principal. Never carries credentials."""

    id: str = Field(..., description="Principal ID (ULID format)")
    email: str = Field(..., description="E-mail address")
    role: str = Field(..., description="Role")
    tenant_id: str | None = Field(None, description="Tenant ID; null for root admins")
    status: str = Field(..., description="active or inactive")
    display_name: str | None = Field(None, description="Display name")
    must_change_password: bool = Field(..., description="Password change pending")
    last_login_at: datetime | None = Field(None, description="Last sign in")

    @classmethod
    def from_domain(cls, principal: Principal) -> PrincipalResponse:
        """Convert domain Principal aggregate to API response."""
        return cls(
            id=principal.id.value,
            email=principal.email,
            role=principal.role.value,
            tenant_id=principal.tenant_value,
            status=principal.status.value,
            display_name=principal.display_name,
            must_change_password=principal.must_change_password,
            last_login_at=principal.last_login_at,
        )


class ScopeResponse(BaseModel):
    """The caller's identity as resolved from their session."""

    principal_id: str
    email: str
    role: str
    tenant_id: str | None

    @classmethod
    def from_scope(cls, scope: Scope) -> ScopeResponse:
        return cls(
            principal_id=scope.principal_id,
            email=scope.email,
            role=scope.role.value,
            tenant_id=scope.tenant_id,
        )
