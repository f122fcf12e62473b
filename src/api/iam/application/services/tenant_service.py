"""Tenant application service for IAM bounded context.

Handles tenant management operations (create, read, list, settings,
activation).
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from iam.application.audit_translation import record_events
from iam.application.observability import DefaultTenantServiceProbe, TenantServiceProbe
from iam.application.security import generate_temporary_password, hash_password
from iam.domain.aggregates import Principal, Tenant
from iam.domain.validation import normalize_email
from iam.domain.value_objects import TenantId
from iam.ports.exceptions import (
    DuplicateEmailError,
    DuplicateTenantSlugError,
    TenantNotFoundError,
)
from iam.ports.repositories import IPrincipalRepository, ITenantRepository
from shared_kernel.audit.ports import IAuditLogger, RequestContext
from shared_kernel.authorization.guard import TenantIsolationGuard
from shared_kernel.authorization.types import Action, Role, Scope
from shared_kernel.clock import Clock, utc_now


class TenantService:
    """Application service for tenant management.

    Creating and listing tenants is reserved for root admins. Tenant
    administrators may read and configure their own tenant.
    """

    def __init__(
        self,
        session: AsyncSession,
        tenant_repository: ITenantRepository,
        principal_repository: IPrincipalRepository,
        guard: TenantIsolationGuard,
        audit: IAuditLogger,
        bcrypt_rounds: int = 12,
        probe: TenantServiceProbe | None = None,
        clock: Clock = utc_now,
    ):
        """Initialize TenantService with dependencies.

        Args:
            session: Database session for transaction management
            tenant_repository: Repository for tenant persistence
            principal_repository: Repository for the first tenant admin
            guard: Tenant isolation guard
            audit: Audit logger
            bcrypt_rounds: bcrypt work factor for generated passwords
            probe: Optional domain probe for observability
            clock: Time source
        """
        self._session = session
        self._tenants = tenant_repository
        self._principals = principal_repository
        self._guard = guard
        self._audit = audit
        self._bcrypt_rounds = bcrypt_rounds
        self._probe = probe or DefaultTenantServiceProbe()
        self._clock = clock

    async def create_tenant(
        self,
        scope: Scope,
        name: str,
        slug: str,
        contact_email: str | None = None,
        contact_phone: str | None = None,
        request: RequestContext | None = None,
    ) -> Tenant:
        """Create a new tenant.

        Raises:
            UnauthorizedError: If the caller is not a root admin
            ValidationFailedError: If any attribute is invalid
            DuplicateTenantSlugError: If the slug is already taken
        """
        tenant, _, _ = await self._create(
            scope, name, slug, contact_email, contact_phone, None, request
        )
        return tenant

    async def create_tenant_with_admin(
        self,
        scope: Scope,
        name: str,
        slug: str,
        admin_email: str,
        contact_email: str | None = None,
        contact_phone: str | None = None,
        request: RequestContext | None = None,
    ) -> tuple[Tenant, Principal, str]:
        """Create a tenant and its first tenant admin in one transaction.

        The admin receives a temporary password that must be changed at
        first sign in.

        Returns:
            Tuple of (Tenant, admin Principal, temporary password)

        Raises:
            UnauthorizedError: If the caller is not a root admin
            ValidationFailedError: If any attribute is invalid
            DuplicateTenantSlugError: If the slug is already taken
            DuplicateEmailError: If the admin e-mail is already registered
        """
        tenant, admin, temporary = await self._create(
            scope, name, slug, contact_email, contact_phone, admin_email, request
        )
        assert admin is not None and temporary is not None
        return tenant, admin, temporary

    async def _create(
        self,
        scope: Scope,
        name: str,
        slug: str,
        contact_email: str | None,
        contact_phone: str | None,
        admin_email: str | None,
        request: RequestContext | None,
    ) -> tuple[Tenant, Principal | None, str | None]:
        await self._guard.require(scope, Action.MANAGE_TENANT_SETTINGS, None, request)
        now = self._clock()

        async with self._session.begin():
            tenant = Tenant.create(
                name=name,
                slug=slug,
                contact_email=contact_email,
                contact_phone=contact_phone,
                now=now,
            )
            if await self._tenants.get_by_slug(slug) is not None:
                self._probe.duplicate_tenant_slug(slug)
                raise DuplicateTenantSlugError(f"Tenant slug '{slug}' is already taken")
            await self._tenants.save(tenant)

            admin: Principal | None = None
            temporary: str | None = None
            if admin_email is not None:
                email = normalize_email(admin_email)
                if await self._principals.get_by_email(email) is not None:
                    raise DuplicateEmailError(f"{email} is already registered")
                temporary = generate_temporary_password()
                admin = Principal.create(
                    email=email,
                    role=Role.TENANT_ADMIN,
                    tenant_id=tenant.id,
                    password_hash=hash_password(temporary, rounds=self._bcrypt_rounds),
                    must_change_password=True,
                    now=now,
                )
                await self._principals.save(admin)

            events = tenant.collect_events()
            if admin is not None:
                events += admin.collect_events()

        await record_events(self._audit, scope, events, request)
        self._probe.tenant_created(tenant.id.value, tenant.slug)
        if admin is not None:
            self._probe.tenant_admin_provisioned(tenant.id.value, admin.id.value)
        return tenant, admin, temporary

    async def get_tenant(self, scope: Scope, tenant_id: TenantId) -> Tenant:
        """Retrieve a tenant the caller belongs to (any tenant for root admins).

        Raises:
            UnauthorizedError: If the tenant is not the caller's
            TenantNotFoundError: If the tenant does not exist
        """
        await self._guard.require(scope, Action.VIEW_REPORTS, tenant_id.value)
        async with self._session.begin():
            tenant = await self._tenants.get_by_id(tenant_id)
        if tenant is None:
            self._probe.tenant_not_found(tenant_id.value)
            raise TenantNotFoundError(f"Tenant {tenant_id.value} not found")
        self._probe.tenant_retrieved(tenant_id.value)
        return tenant

    async def list_tenants(self, scope: Scope) -> list[Tenant]:
        """List all tenants (root admins only)."""
        await self._guard.require(scope, Action.MANAGE_TENANT_SETTINGS, None)
        async with self._session.begin():
            tenants = await self._tenants.list_all()
        self._probe.tenants_listed(len(tenants))
        return tenants

    async def update_settings(
        self,
        scope: Scope,
        tenant_id: TenantId,
        changes: dict[str, Any],
        request: RequestContext | None = None,
    ) -> Tenant:
        """Merge changes into a tenant's settings.

        Raises:
            UnauthorizedError: If the caller lacks manage_tenant_settings
            TenantNotFoundError: If the tenant does not exist
            ValidationFailedError: If a key is unknown or a value invalid
        """
        await self._guard.require(
            scope, Action.MANAGE_TENANT_SETTINGS, tenant_id.value, request
        )
        async with self._session.begin():
            tenant = await self._tenants.get_by_id(tenant_id)
            if tenant is None:
                self._probe.tenant_not_found(tenant_id.value)
                raise TenantNotFoundError(f"Tenant {tenant_id.value} not found")
            tenant.update_settings(changes, self._clock())
            await self._tenants.save(tenant)
            events = tenant.collect_events()

        await record_events(self._audit, scope, events, request)
        self._probe.tenant_settings_updated(tenant_id.value, sorted(changes))
        return tenant

    async def deactivate_tenant(
        self,
        scope: Scope,
        tenant_id: TenantId,
        request: RequestContext | None = None,
    ) -> Tenant:
        """Switch a tenant off.

        Raises:
            UnauthorizedError: If the caller lacks manage_tenant_settings
            TenantNotFoundError: If the tenant does not exist
        """
        return await self._set_active(scope, tenant_id, False, request)

    async def activate_tenant(
        self,
        scope: Scope,
        tenant_id: TenantId,
        request: RequestContext | None = None,
    ) -> Tenant:
        """Switch a deactivated tenant back on.

        Raises:
            UnauthorizedError: If the caller lacks manage_tenant_settings
            TenantNotFoundError: If the tenant does not exist
        """
        return await self._set_active(scope, tenant_id, True, request)

    async def _set_active(
        self,
        scope: Scope,
        tenant_id: TenantId,
        active: bool,
        request: RequestContext | None,
    ) -> Tenant:
        await self._guard.require(
            scope, Action.MANAGE_TENANT_SETTINGS, tenant_id.value, request
        )
        async with self._session.begin():
            tenant = await self._tenants.get_by_id(tenant_id)
            if tenant is None:
                self._probe.tenant_not_found(tenant_id.value)
                raise TenantNotFoundError(f"Tenant {tenant_id.value} not found")
            if active:
                tenant.activate(self._clock())
            else:
                tenant.deactivate(self._clock())
            await self._tenants.save(tenant)
            events = tenant.collect_events()

        await record_events(self._audit, scope, events, request)
        if events:
            self._probe.tenant_status_changed(tenant_id.value, active)
        return tenant
