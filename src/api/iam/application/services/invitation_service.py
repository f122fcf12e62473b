"""Invitation application service for IAM bounded context.

Runs the invitation state machine: pending -> accepted on redemption,
pending -> expired on sweep or when redeemed too late.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from iam.application.audit_translation import record_events
from iam.application.observability import (
    DefaultInvitationServiceProbe,
    InvitationServiceProbe,
)
from iam.application.security import (
    generate_token,
    hash_password,
    hash_token,
    token_matches,
)
from iam.application.value_objects import IssuedInvitation
from iam.domain.aggregates import Invitation, Principal
from iam.domain.validation import (
    Invalid,
    normalize_email,
    validate_invitation,
    validate_password,
)
from iam.domain.value_objects import PrincipalId, TenantId
from iam.ports.exceptions import (
    DuplicateEmailError,
    IdentityError,
    InvitationExpiredError,
    InvitationNotFoundError,
    TenantNotFoundError,
    ValidationFailedError,
)
from iam.ports.notifications import IInvitationNotifier
from iam.ports.repositories import (
    IInvitationRepository,
    IPrincipalRepository,
    ITenantRepository,
)
from shared_kernel.audit.ports import IAuditLogger, RequestContext
from shared_kernel.authorization.guard import TenantIsolationGuard
from shared_kernel.authorization.types import Action, Role, Scope
from shared_kernel.clock import Clock, utc_now


@dataclass(frozen=True)
class RedemptionAttributes:
    """What the invitee supplies when accepting.

    E-mail, role and tenant always come from the invitation itself. A
    missing password yields a passwordless principal.
    """

    password: str | None = None
    display_name: str | None = None


class InvitationService:
    """Application service for invitations.

    Manages database transactions. Raw tokens are returned once from
    create() and otherwise only exist in the invitation link.
    """

    def __init__(
        self,
        session: AsyncSession,
        invitation_repository: IInvitationRepository,
        principal_repository: IPrincipalRepository,
        tenant_repository: ITenantRepository,
        guard: TenantIsolationGuard,
        audit: IAuditLogger,
        notifier: IInvitationNotifier,
        validity: timedelta = timedelta(days=7),
        min_password_length: int = 12,
        bcrypt_rounds: int = 12,
        probe: InvitationServiceProbe | None = None,
        clock: Clock = utc_now,
    ):
        self._session = session
        self._invitations = invitation_repository
        self._principals = principal_repository
        self._tenants = tenant_repository
        self._guard = guard
        self._audit = audit
        self._notifier = notifier
        self._validity = validity
        self._min_password_length = min_password_length
        self._bcrypt_rounds = bcrypt_rounds
        self._probe = probe or DefaultInvitationServiceProbe()
        self._clock = clock

    async def create(
        self,
        email: str,
        role: str,
        tenant_id: TenantId,
        inviter: Scope,
        url_builder: Callable[[str], str],
        request: RequestContext | None = None,
    ) -> IssuedInvitation:
        """Invite an e-mail address to join a tenant.

        Args:
            email: Invitee e-mail address
            role: Role to grant, operator or viewer
            tenant_id: Tenant the invitee joins
            inviter: Scope of the administrator sending the invitation
            url_builder: Builds the invitation link from the raw token;
                called exactly once
            request: Client metadata for the audit entry

        Returns:
            The invitation, its raw token and link

        Raises:
            UnauthorizedError: If the inviter lacks manage_users on the tenant
            ValidationFailedError: If the e-mail or role is invalid
            DuplicateEmailError: If the e-mail already belongs to a principal
            TenantNotFoundError: If the tenant does not exist
        """
        await self._guard.require(
            inviter, Action.MANAGE_USERS, tenant_id.value, request
        )

        now = self._clock()
        try:
            email = normalize_email(email)
            result = validate_invitation(email, role)
            if isinstance(result, Invalid):
                raise ValidationFailedError(result.errors)

            token = generate_token()
            async with self._session.begin():
                if await self._tenants.get_by_id(tenant_id) is None:
                    raise TenantNotFoundError(f"Tenant {tenant_id.value} not found")
                if await self._principals.get_by_email(email) is not None:
                    raise DuplicateEmailError(f"{email} is already registered")

                invitation = Invitation.create(
                    email=email,
                    role=Role.parse(role),
                    tenant_id=tenant_id,
                    token_hash=hash_token(token),
                    validity=self._validity,
                    invited_by_id=PrincipalId(value=inviter.principal_id),
                    now=now,
                )
                await self._invitations.save(invitation)
                events = invitation.collect_events()
        except IdentityError as e:
            self._probe.invitation_creation_failed(tenant_id.value, e.code)
            raise

        await record_events(self._audit, inviter, events, request)

        url = url_builder(token)
        await self._notifier.deliver_invitation(invitation, url)

        self._probe.invitation_created(
            invitation.id.value, tenant_id.value, invitation.role.value
        )
        return IssuedInvitation(invitation=invitation, token=token, url=url)

    async def redeem(
        self,
        token: str,
        attributes: RedemptionAttributes,
        request: RequestContext | None = None,
    ) -> Principal:
        """Accept an invitation and create the invitee's principal.

        The invitation row is locked for the whole transaction. Its state is
        settled before anything the invitee supplied is looked at: a pending
        invitation redeemed after its expiry is moved to expired and that
        change is committed before InvitationExpiredError is raised.

        Without a password the principal is created passwordless and signs
        in by magic link.

        Returns:
            The newly created principal

        Raises:
            InvitationNotFoundError: Unknown token
            InvitationAlreadyAcceptedError: Already redeemed
            InvitationExpiredError: Expired, or pending but past expiry
            DuplicateEmailError: The e-mail was registered in the meantime
            ValidationFailedError: The password violates the policy
        """
        try:
            now = self._clock()
            principal: Principal | None = None

            async with self._session.begin():
                invitation = await self._invitations.get_by_token_hash(
                    hash_token(token), for_update=True
                )
                if invitation is None or not token_matches(
                    token, invitation.token_hash
                ):
                    raise InvitationNotFoundError("Invitation not found")

                invitation.ensure_redeemable()

                if invitation.is_past_expiry(now):
                    invitation.expire(now)
                    await self._invitations.save(invitation)
                else:
                    principal = await self._create_invitee(
                        invitation, attributes, now
                    )
                    invitation.accept(principal.id, now)
                    await self._invitations.save(invitation)

            if principal is None:
                await record_events(
                    self._audit, None, invitation.collect_events(), request
                )
                raise InvitationExpiredError(
                    f"Invitation {invitation.id.value} has expired"
                )
        except IdentityError as e:
            self._probe.invitation_redeem_failed(e.code)
            raise

        events = principal.collect_events() + invitation.collect_events()
        await record_events(self._audit, principal.to_scope(), events, request)
        self._probe.invitation_redeemed(invitation.id.value, principal.id.value)
        return principal

    async def _create_invitee(
        self,
        invitation: Invitation,
        attributes: RedemptionAttributes,
        now: datetime,
    ) -> Principal:
        password_hash = None
        if attributes.password is not None:
            result = validate_password(
                attributes.password, self._min_password_length
            )
            if isinstance(result, Invalid):
                raise ValidationFailedError(result.errors)
            password_hash = hash_password(
                attributes.password, rounds=self._bcrypt_rounds
            )

        if await self._principals.get_by_email(invitation.email) is not None:
            raise DuplicateEmailError(f"{invitation.email} is already registered")

        principal = Principal.create(
            email=invitation.email,
            role=invitation.role,
            tenant_id=invitation.tenant_id,
            password_hash=password_hash,
            display_name=attributes.display_name,
            now=now,
        )
        await self._principals.save(principal)
        return principal

    async def sweep(self) -> int:
        """Expire every pending invitation past its expiry.

        A single conditional bulk update, safe to run repeatedly.

        Returns:
            Number of invitations expired by this run
        """
        async with self._session.begin():
            count = await self._invitations.expire_pending_before(self._clock())
        self._probe.invitations_swept(count)
        return count
