"""HTTP routes for invitations."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from iam.application.services import InvitationService, RedemptionAttributes
from iam.dependencies.authentication import get_current_scope, get_request_context
from iam.dependencies.services import get_invitation_service
from iam.domain.value_objects import TenantId
from iam.ports.exceptions import IdentityError
from iam.presentation.errors import to_http_exception, to_invitee_http_exception
from iam.presentation.invitations.models import (
    CreateInvitationRequest,
    InvitationResponse,
    RedeemInvitationRequest,
)
from iam.presentation.models import PrincipalResponse
from infrastructure.settings import get_settings
from shared_kernel.audit.ports import RequestContext
from shared_kernel.authorization.types import Scope

router = APIRouter(
    prefix="/invitations",
    tags=["invitations"],
)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_invitation(
    request: CreateInvitationRequest,
    scope: Annotated[Scope, Depends(get_current_scope)],
    service: Annotated[InvitationService, Depends(get_invitation_service)],
    context: Annotated[RequestContext, Depends(get_request_context)],
) -> InvitationResponse:
    """Invite someone to join a tenant as operator or viewer.

    The link is handed to the notifier, not returned.

    Raises:
        HTTPException: 403 if the caller may not manage users in the tenant
        HTTPException: 409 if the e-mail is registered
        HTTPException: 422 if the e-mail or role is invalid
    """
    raw_tenant_id = request.tenant_id or scope.tenant_id
    if raw_tenant_id is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="tenant_id is required",
        )
    try:
        tenant_id = TenantId.from_string(raw_tenant_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid tenant ID format: {e}",
        ) from e

    base_url = get_settings().public_url.rstrip("/")
    try:
        issued = await service.create(
            email=request.email,
            role=request.role,
            tenant_id=tenant_id,
            inviter=scope,
            url_builder=lambda token: f"{base_url}/invitations/accept?token={token}",
            request=context,
        )
    except IdentityError as e:
        raise to_http_exception(e) from e

    return InvitationResponse.from_domain(issued.invitation)


@router.post("/redeem", status_code=status.HTTP_201_CREATED)
async def redeem_invitation(
    request: RedeemInvitationRequest,
    service: Annotated[InvitationService, Depends(get_invitation_service)],
    context: Annotated[RequestContext, Depends(get_request_context)],
) -> PrincipalResponse:
    """Accept an invitation, creating the invitee's account.

    Raises:
        HTTPException: 410 "This invitation is no longer valid" for unknown,
            expired, or already used tokens
        HTTPException: 422 if the password is rejected
    """
    try:
        principal = await service.redeem(
            request.token,
            RedemptionAttributes(
                password=request.password, display_name=request.display_name
            ),
            context,
        )
    except IdentityError as e:
        raise to_invitee_http_exception(e) from e

    return PrincipalResponse.from_domain(principal)
