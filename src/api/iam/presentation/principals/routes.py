"""HTTP routes for principal management."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from iam.application.services import CredentialService, PrincipalService
from iam.dependencies.authentication import get_current_scope, get_request_context
from iam.dependencies.services import get_credential_service, get_principal_service
from iam.domain.value_objects import PrincipalId, TenantId
from iam.ports.exceptions import IdentityError
from iam.presentation.errors import to_http_exception
from iam.presentation.models import PrincipalResponse
from iam.presentation.principals.models import (
    ChangeRoleRequest,
    CreatePrincipalRequest,
    PrincipalCreatedResponse,
    TemporaryPasswordResponse,
)
from shared_kernel.audit.ports import RequestContext
from shared_kernel.authorization.types import Role, Scope

router = APIRouter(
    prefix="/principals",
    tags=["principals"],
)


def _parse_principal_id(principal_id: str) -> PrincipalId:
    try:
        return PrincipalId.from_string(principal_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid principal ID format: {e}",
        ) from e


def _parse_tenant_id(tenant_id: str | None) -> TenantId | None:
    if tenant_id is None:
        return None
    try:
        return TenantId.from_string(tenant_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid tenant ID format: {e}",
        ) from e


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_principal(
    request: CreatePrincipalRequest,
    scope: Annotated[Scope, Depends(get_current_scope)],
    service: Annotated[PrincipalService, Depends(get_principal_service)],
    context: Annotated[RequestContext, Depends(get_request_context)],
) -> PrincipalCreatedResponse:
    """Create a principal.

    Tenant admins may create operators and viewers in their own tenant.
    Only root admins may create tenant admins or root admins.

    Raises:
        HTTPException: 403 if the caller may not grant the role
        HTTPException: 409 if the e-mail is registered
        HTTPException: 422 if any field is invalid
    """
    tenant_id = request.tenant_id
    if tenant_id is None and request.role != Role.ROOT_ADMIN.value:
        tenant_id = scope.tenant_id

    try:
        principal, temporary_password = await service.create_principal(
            scope,
            email=request.email,
            role=request.role,
            tenant_id=_parse_tenant_id(tenant_id),
            password=request.password,
            display_name=request.display_name,
            request=context,
        )
    except IdentityError as e:
        raise to_http_exception(e) from e

    return PrincipalCreatedResponse(
        principal=PrincipalResponse.from_domain(principal),
        temporary_password=temporary_password,
    )


@router.get("")
async def list_principals(
    scope: Annotated[Scope, Depends(get_current_scope)],
    service: Annotated[PrincipalService, Depends(get_principal_service)],
    tenant_id: Annotated[str | None, Query(description="Root admins only")] = None,
) -> list[PrincipalResponse]:
    """List principals of the caller's tenant (any tenant for root admins)."""
    try:
        principals = await service.list_principals(scope, _parse_tenant_id(tenant_id))
    except IdentityError as e:
        raise to_http_exception(e) from e
    return [PrincipalResponse.from_domain(p) for p in principals]


@router.get("/{principal_id}")
async def get_principal(
    principal_id: str,
    scope: Annotated[Scope, Depends(get_current_scope)],
    service: Annotated[PrincipalService, Depends(get_principal_service)],
) -> PrincipalResponse:
    try:
        principal = await service.get_principal(
            scope, _parse_principal_id(principal_id)
        )
    except IdentityError as e:
        raise to_http_exception(e) from e
    return PrincipalResponse.from_domain(principal)


@router.patch("/{principal_id}/role")
async def change_role(
    principal_id: str,
    request: ChangeRoleRequest,
    scope: Annotated[Scope, Depends(get_current_scope)],
    service: Annotated[PrincipalService, Depends(get_principal_service)],
    context: Annotated[RequestContext, Depends(get_request_context)],
) -> PrincipalResponse:
    """Change a principal's role within its tenant."""
    try:
        principal = await service.change_role(
            scope, _parse_principal_id(principal_id), request.role, context
        )
    except IdentityError as e:
        raise to_http_exception(e) from e
    return PrincipalResponse.from_domain(principal)


@router.post("/{principal_id}/deactivate")
async def deactivate_principal(
    principal_id: str,
    scope: Annotated[Scope, Depends(get_current_scope)],
    service: Annotated[PrincipalService, Depends(get_principal_service)],
    context: Annotated[RequestContext, Depends(get_request_context)],
) -> PrincipalResponse:
    """Deactivate a principal and end all of their sessions."""
    try:
        principal = await service.deactivate(
            scope, _parse_principal_id(principal_id), context
        )
    except IdentityError as e:
        raise to_http_exception(e) from e
    return PrincipalResponse.from_domain(principal)


@router.post("/{principal_id}/activate")
async def activate_principal(
    principal_id: str,
    scope: Annotated[Scope, Depends(get_current_scope)],
    service: Annotated[PrincipalService, Depends(get_principal_service)],
    context: Annotated[RequestContext, Depends(get_request_context)],
) -> PrincipalResponse:
    try:
        principal = await service.activate(
            scope, _parse_principal_id(principal_id), context
        )
    except IdentityError as e:
        raise to_http_exception(e) from e
    return PrincipalResponse.from_domain(principal)


@router.delete("/{principal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_principal(
    principal_id: str,
    scope: Annotated[Scope, Depends(get_current_scope)],
    service: Annotated[PrincipalService, Depends(get_principal_service)],
    context: Annotated[RequestContext, Depends(get_request_context)],
) -> None:
    """Delete a principal. Their audit history is kept."""
    try:
        await service.delete(scope, _parse_principal_id(principal_id), context)
    except IdentityError as e:
        raise to_http_exception(e) from e


@router.post("/{principal_id}/password-reset")
async def reset_password(
    principal_id: str,
    scope: Annotated[Scope, Depends(get_current_scope)],
    service: Annotated[CredentialService, Depends(get_credential_service)],
    context: Annotated[RequestContext, Depends(get_request_context)],
) -> TemporaryPasswordResponse:
    """Replace a principal's password with a temporary one.

    All of the principal's sessions end; the temporary password is shown
    once and must be changed at next sign in.
    """
    try:
        result = await service.reset_password(
            _parse_principal_id(principal_id), scope, context
        )
    except IdentityError as e:
        raise to_http_exception(e) from e

    return TemporaryPasswordResponse(
        principal_id=result.principal.id.value,
        temporary_password=result.password,
    )
