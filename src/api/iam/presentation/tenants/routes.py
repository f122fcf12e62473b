"""HTTP routes for tenant management."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from iam.application.services import TenantService
from iam.dependencies.authentication import (
    get_current_scope,
    get_request_context,
    require_roles,
)
from iam.dependencies.services import get_tenant_service
from iam.domain.value_objects import TenantId
from iam.ports.exceptions import IdentityError
from iam.presentation.errors import to_http_exception
from iam.presentation.models import PrincipalResponse
from iam.presentation.tenants.models import (
    CreateTenantRequest,
    TenantCreatedResponse,
    TenantResponse,
    UpdateTenantSettingsRequest,
)
from shared_kernel.audit.ports import RequestContext
from shared_kernel.authorization.types import Role, Scope

router = APIRouter(
    prefix="/tenants",
    tags=["tenants"],
)

require_root_admin = require_roles(Role.ROOT_ADMIN)


def _parse_tenant_id(tenant_id: str) -> TenantId:
    try:
        return TenantId.from_string(tenant_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid tenant ID format: {e}",
        ) from e


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_tenant(
    request: CreateTenantRequest,
    scope: Annotated[Scope, Depends(require_root_admin)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
    context: Annotated[RequestContext, Depends(get_request_context)],
) -> TenantCreatedResponse:
    """Create a tenant, optionally with its first tenant admin.

    Raises:
        HTTPException: 403 unless the caller is a root admin
        HTTPException: 409 if the slug or admin e-mail is taken
        HTTPException: 422 if any field is invalid
    """
    try:
        if request.admin_email is None:
            tenant = await service.create_tenant(
                scope,
                name=request.name,
                slug=request.slug,
                contact_email=request.contact_email,
                contact_phone=request.contact_phone,
                request=context,
            )
            return TenantCreatedResponse(tenant=TenantResponse.from_domain(tenant))

        tenant, admin, password = await service.create_tenant_with_admin(
            scope,
            name=request.name,
            slug=request.slug,
            admin_email=request.admin_email,
            contact_email=request.contact_email,
            contact_phone=request.contact_phone,
            request=context,
        )
    except IdentityError as e:
        raise to_http_exception(e) from e

    return TenantCreatedResponse(
        tenant=TenantResponse.from_domain(tenant),
        admin=PrincipalResponse.from_domain(admin),
        temporary_password=password,
    )


@router.get("")
async def list_tenants(
    scope: Annotated[Scope, Depends(require_root_admin)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> list[TenantResponse]:
    """List every tenant (root admins only)."""
    try:
        tenants = await service.list_tenants(scope)
    except IdentityError as e:
        raise to_http_exception(e) from e
    return [TenantResponse.from_domain(t) for t in tenants]


@router.get("/{tenant_id}")
async def get_tenant(
    tenant_id: str,
    scope: Annotated[Scope, Depends(get_current_scope)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    """Get a tenant. Members may read their own tenant."""
    try:
        tenant = await service.get_tenant(scope, _parse_tenant_id(tenant_id))
    except IdentityError as e:
        raise to_http_exception(e) from e
    return TenantResponse.from_domain(tenant)


@router.patch("/{tenant_id}/settings")
async def update_tenant_settings(
    tenant_id: str,
    request: UpdateTenantSettingsRequest,
    scope: Annotated[Scope, Depends(get_current_scope)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
    context: Annotated[RequestContext, Depends(get_request_context)],
) -> TenantResponse:
    """Merge new values into the tenant's settings.

    Raises:
        HTTPException: 403 unless the caller administers the tenant
        HTTPException: 422 for unknown keys or invalid values
    """
    try:
        tenant = await service.update_settings(
            scope, _parse_tenant_id(tenant_id), request.settings, context
        )
    except IdentityError as e:
        raise to_http_exception(e) from e
    return TenantResponse.from_domain(tenant)


@router.post("/{tenant_id}/deactivate")
async def deactivate_tenant(
    tenant_id: str,
    scope: Annotated[Scope, Depends(get_current_scope)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
    context: Annotated[RequestContext, Depends(get_request_context)],
) -> TenantResponse:
    """Deactivate a tenant. Its principals and data are kept.

    Raises:
        HTTPException: 403 unless the caller administers the tenant
        HTTPException: 404 if the tenant does not exist
    """
    try:
        tenant = await service.deactivate_tenant(
            scope, _parse_tenant_id(tenant_id), context
        )
    except IdentityError as e:
        raise to_http_exception(e) from e
    return TenantResponse.from_domain(tenant)


@router.post("/{tenant_id}/activate")
async def activate_tenant(
    tenant_id: str,
    scope: Annotated[Scope, Depends(get_current_scope)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
    context: Annotated[RequestContext, Depends(get_request_context)],
) -> TenantResponse:
    """Reactivate a deactivated tenant."""
    try:
        tenant = await service.activate_tenant(
            scope, _parse_tenant_id(tenant_id), context
        )
    except IdentityError as e:
        raise to_http_exception(e) from e
    return TenantResponse.from_domain(tenant)
