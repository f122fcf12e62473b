"""Principal application service for IAM bounded context.

Administrative lifecycle of principals: creation, role changes,
deactivation and deletion, with escalation and self-modification rules.
"""

from __future__ import annotations

from typing import Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from iam.application.audit_translation import record_events
from iam.application.observability import (
    DefaultPrincipalServiceProbe,
    PrincipalServiceProbe,
)
from iam.application.security import generate_temporary_password, hash_password
from iam.application.services.session_service import SessionService
from iam.domain.aggregates import Principal
from iam.domain.validation import (
    Invalid,
    normalize_email,
    validate_password,
    validate_principal,
)
from iam.domain.value_objects import PrincipalId, TenantId
from iam.ports.exceptions import (
    CannotModifySelfError,
    DuplicateEmailError,
    PrincipalNotFoundError,
    TenantNotFoundError,
    ValidationFailedError,
)
from iam.ports.repositories import IPrincipalRepository, ITenantRepository
from shared_kernel.audit.ports import IAuditLogger, RequestContext
from shared_kernel.authorization.guard import TenantIsolationGuard
from shared_kernel.authorization.types import Action, Role, Scope
from shared_kernel.clock import Clock, utc_now


class PrincipalService:
    """Application service for principal administration.

    Business rules enforced here:
    - manage_users on the target tenant is required for every operation
    - Only root admins may grant or take away privileged roles
    - Administrators cannot demote, deactivate or delete themselves
    """

    def __init__(
        self,
        session: AsyncSession,
        principal_repository: IPrincipalRepository,
        tenant_repository: ITenantRepository,
        session_service: SessionService,
        guard: TenantIsolationGuard,
        audit: IAuditLogger,
        min_password_length: int = 12,
        bcrypt_rounds: int = 12,
        probe: PrincipalServiceProbe | None = None,
        clock: Clock = utc_now,
    ):
        self._session = session
        self._principals = principal_repository
        self._tenants = tenant_repository
        self._sessions = session_service
        self._guard = guard
        self._audit = audit
        self._min_password_length = min_password_length
        self._bcrypt_rounds = bcrypt_rounds
        self._probe = probe or DefaultPrincipalServiceProbe()
        self._clock = clock

    async def create_principal(
        self,
        scope: Scope,
        email: str,
        role: str,
        tenant_id: TenantId | None,
        password: str | None = None,
        display_name: str | None = None,
        request: RequestContext | None = None,
    ) -> tuple[Principal, str | None]:
        """Create a principal directly, without an invitation.

        When no password is given a temporary one is generated and the
        principal must change it at first sign in.

        Returns:
            Tuple of (Principal, temporary password or None)

        Raises:
            UnauthorizedError: If the caller may not create this principal
            ValidationFailedError: If any attribute is invalid
            DuplicateEmailError: If the e-mail is already registered
            TenantNotFoundError: If the tenant does not exist
        """
        tenant_value = tenant_id.value if tenant_id else None
        await self._guard.require(scope, Action.MANAGE_USERS, tenant_value, request)

        email = normalize_email(email)
        result = validate_principal(email, role, tenant_value, display_name)
        if isinstance(result, Invalid):
            raise ValidationFailedError(result.errors)
        parsed_role = Role.parse(role)
        await self._guard.require_grant(scope, parsed_role, tenant_value, request)

        temporary: str | None = None
        if password is None:
            temporary = generate_temporary_password()
        else:
            checked = validate_password(password, self._min_password_length)
            if isinstance(checked, Invalid):
                raise ValidationFailedError(checked.errors)

        try:
            async with self._session.begin():
                tenant = await self._tenants.get_by_id(tenant_id) if tenant_id else None
                if tenant_id is not None and tenant is None:
                    raise TenantNotFoundError(f"Tenant {tenant_value} not found")
                if await self._principals.get_by_email(email) is not None:
                    raise DuplicateEmailError(f"{email} is already registered")

                principal = Principal.create(
                    email=email,
                    role=parsed_role,
                    tenant_id=tenant_id,
                    password_hash=hash_password(
                        password or temporary, rounds=self._bcrypt_rounds
                    ),
                    display_name=display_name,
                    must_change_password=temporary is not None,
                    now=self._clock(),
                )
                await self._principals.save(principal)
                events = principal.collect_events()
        except Exception as e:
            self._probe.principal_operation_failed("create", None, str(e))
            raise

        await record_events(self._audit, scope, events, request)
        self._probe.principal_created(principal.id.value, parsed_role.value)
        return principal, temporary

    async def get_principal(
        self, scope: Scope, principal_id: PrincipalId
    ) -> Principal:
        """Retrieve a principal visible to the caller.

        Raises:
            PrincipalNotFoundError: If missing or in another tenant
        """
        async with self._session.begin():
            principal = await self._principals.get_by_id(principal_id)
        if principal is None or not self._visible_to(scope, principal):
            self._probe.principal_not_found(principal_id.value)
            raise PrincipalNotFoundError(f"Principal {principal_id.value} not found")
        return principal

    async def list_principals(
        self, scope: Scope, tenant_id: TenantId | None = None
    ) -> list[Principal]:
        """List principals of a tenant.

        Non-root callers always get their own tenant, whatever they asked for.
        """
        requested = tenant_id.value if tenant_id else None
        effective = self._guard.effective_tenant(scope, requested)
        await self._guard.require(scope, Action.MANAGE_USERS, effective)

        async with self._session.begin():
            principals = await self._principals.list_by_tenant(
                TenantId(value=effective) if effective else None
            )
        self._probe.principals_listed(effective, len(principals))
        return principals

    async def change_role(
        self,
        scope: Scope,
        principal_id: PrincipalId,
        role: str,
        request: RequestContext | None = None,
    ) -> Principal:
        """Assign a new role to a principal.

        Raises:
            PrincipalNotFoundError: If the principal does not exist
            UnauthorizedError: If the caller may not grant the old or new role
            CannotModifySelfError: If the caller targets themselves
            ValidationFailedError: If the role is unknown or breaks the tenant rule
        """
        try:
            new_role = Role.parse(role)
        except ValueError as e:
            raise ValidationFailedError({"role": ["is invalid"]}) from e

        async def mutate(principal: Principal) -> None:
            await self._guard.require_grant(
                scope, principal.role, principal.tenant_value, request
            )
            await self._guard.require_grant(
                scope, new_role, principal.tenant_value, request
            )
            principal.change_role(new_role, self._clock())

        return await self._manage(scope, principal_id, "change_role", mutate, request)

    async def deactivate(
        self,
        scope: Scope,
        principal_id: PrincipalId,
        request: RequestContext | None = None,
    ) -> Principal:
        """Prevent a principal from signing in and end all their sessions."""

        async def mutate(principal: Principal) -> None:
            await self._guard.require_grant(
                scope, principal.role, principal.tenant_value, request
            )
            principal.deactivate(self._clock())

        principal = await self._manage(
            scope, principal_id, "deactivate", mutate, request
        )
        await self._sessions.revoke_all(
            principal.id,
            actor=scope,
            tenant_id=principal.tenant_value,
            request=request,
        )
        return principal

    async def activate(
        self,
        scope: Scope,
        principal_id: PrincipalId,
        request: RequestContext | None = None,
    ) -> Principal:
        """Allow a deactivated principal to sign in again."""

        async def mutate(principal: Principal) -> None:
            await self._guard.require_grant(
                scope, principal.role, principal.tenant_value, request
            )
            principal.activate(self._clock())

        return await self._manage(scope, principal_id, "activate", mutate, request)

    async def delete(
        self,
        scope: Scope,
        principal_id: PrincipalId,
        request: RequestContext | None = None,
    ) -> None:
        """Delete a principal.

        Sessions are revoked first so live connections receive a disconnect.
        Audit entries survive the deletion through their snapshot columns.
        """
        target = await self._load_managed(scope, principal_id, request)
        await self._guard.require_grant(
            scope, target.role, target.tenant_value, request
        )
        if target.id.value == scope.principal_id:
            raise CannotModifySelfError("You cannot delete your own account")

        await self._sessions.revoke_all(
            target.id, actor=scope, tenant_id=target.tenant_value, request=request
        )

        try:
            async with self._session.begin():
                principal = await self._principals.get_by_id(principal_id)
                if principal is None:
                    raise PrincipalNotFoundError(
                        f"Principal {principal_id.value} not found"
                    )
                principal.mark_for_deletion(self._clock())
                await self._principals.delete(principal)
                events = principal.collect_events()
        except Exception as e:
            self._probe.principal_operation_failed(
                "delete", principal_id.value, str(e)
            )
            raise

        await record_events(self._audit, scope, events, request)
        self._probe.principal_deleted(principal_id.value)

    async def _load_managed(
        self,
        scope: Scope,
        principal_id: PrincipalId,
        request: RequestContext | None,
    ) -> Principal:
        async with self._session.begin():
            principal = await self._principals.get_by_id(principal_id)
        if principal is None:
            self._probe.principal_not_found(principal_id.value)
            raise PrincipalNotFoundError(f"Principal {principal_id.value} not found")
        await self._guard.require(
            scope, Action.MANAGE_USERS, principal.tenant_value, request
        )
        return principal

    async def _manage(
        self,
        scope: Scope,
        principal_id: PrincipalId,
        operation: str,
        mutate: Callable[[Principal], Awaitable[None]],
        request: RequestContext | None,
    ) -> Principal:
        """Load, authorize, mutate and save a principal, then audit the events."""
        try:
            await self._load_managed(scope, principal_id, request)
            if principal_id.value == scope.principal_id:
                raise CannotModifySelfError("You cannot change your own account")

            async with self._session.begin():
                principal = await self._principals.get_by_id(principal_id)
                if principal is None:
                    raise PrincipalNotFoundError(
                        f"Principal {principal_id.value} not found"
                    )
                await mutate(principal)
                await self._principals.save(principal)
                events = principal.collect_events()
        except Exception as e:
            self._probe.principal_operation_failed(
                operation, principal_id.value, str(e)
            )
            raise

        await record_events(self._audit, scope, events, request)
        self._probe.principal_updated(principal_id.value, operation)
        return principal

    @staticmethod
    def _visible_to(scope: Scope, principal: Principal) -> bool:
        return scope.is_root_admin or principal.tenant_value == scope.tenant_id
