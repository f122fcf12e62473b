"""Pydantic models for tenant API requests and responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from iam.domain.aggregates import Tenant
from iam.presentation.models import PrincipalResponse


class CreateTenantRequest(BaseModel):
    """Request model for creating a tenant.

    With admin_email, the tenant's first tenant admin is created as well.
    """

    name: str = Field(..., description="Tenant name", min_length=1, max_length=255)
    slug: str = Field(..., description="URL-safe identifier", min_length=1)
    contact_email: str | None = Field(None, max_length=160)
    contact_phone: str | None = Field(None, max_length=20)
    admin_email: str | None = Field(
        None, description="E-mail of the first tenant admin"
    )


class TenantResponse(BaseModel):
    """Response model for tenant."""

    id: str = Field(..., description="Tenant ID (ULID format)")
    name: str
    slug: str
    active: bool
    contact_email: str | None
    contact_phone: str | None
    settings: dict[str, Any]

    @classmethod
    def from_domain(cls, tenant: Tenant) -> TenantResponse:
        """Convert domain Tenant aggregate to API response."""
        return cls(
            id=tenant.id.value,
            name=tenant.name,
            slug=tenant.slug,
            active=tenant.active,
            contact_email=tenant.contact_email,
            contact_phone=tenant.contact_phone,
            settings=dict(tenant.settings),
        )


class TenantCreatedResponse(BaseModel):
    """Response model for a created tenant."""

    tenant: TenantResponse
    admin: PrincipalResponse | None = None
    temporary_password: str | None = Field(
        None, description="The admin's generated password, shown only here"
    )


class UpdateTenantSettingsRequest(BaseModel):
    """Request model for changing tenant settings. Unlisted keys are kept."""

    settings: dict[str, Any] = Field(..., min_length=1)
