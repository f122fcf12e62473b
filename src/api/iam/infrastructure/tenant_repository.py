"""PostgreSQL implementation of ITenantRepository.

Tenants are simple aggregates: metadata plus a JSON settings map.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from iam.domain.aggregates import Tenant
from iam.domain.value_objects import TenantId
from iam.infrastructure.models import TenantModel
from iam.infrastructure.observability import (
    DefaultTenantRepositoryProbe,
    TenantRepositoryProbe,
)
from iam.ports.exceptions import DuplicateTenantSlugError
from iam.ports.repositories import ITenantRepository


class TenantRepository(ITenantRepository):
    """Repository managing PostgreSQL storage for Tenant aggregates."""

    def __init__(
        self,
        session: AsyncSession,
        probe: TenantRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with database session.

        Args:
            session: AsyncSession from FastAPI dependency injection
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultTenantRepositoryProbe()

    async def save(self, tenant: Tenant) -> None:
        """Persist tenant metadata to PostgreSQL.

        Args:
            tenant: The Tenant aggregate to persist

        Raises:
            DuplicateTenantSlugError: If the slug already exists
        """
        existing = await self.get_by_slug(tenant.slug)
        if existing and existing.id != tenant.id:
            self._probe.duplicate_tenant_slug(tenant.slug)
            raise DuplicateTenantSlugError(f"Tenant slug '{tenant.slug}' is taken")

        stmt = select(TenantModel).where(TenantModel.id == tenant.id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            model = TenantModel(id=tenant.id.value)
            if tenant.created_at is not None:
                model.created_at = tenant.created_at
            self._session.add(model)

        model.name = tenant.name
        model.slug = tenant.slug
        model.active = tenant.active
        model.contact_email = tenant.contact_email
        model.contact_phone = tenant.contact_phone
        # New dict so the JSON column registers the change
        model.settings = dict(tenant.settings)

        try:
            await self._session.flush()
        except IntegrityError as e:
            if "uq_tenants_slug" in str(e):
                self._probe.duplicate_tenant_slug(tenant.slug)
                raise DuplicateTenantSlugError(
                    f"Tenant slug '{tenant.slug}' is taken"
                ) from e
            raise

        self._probe.tenant_saved(tenant.id.value)

    async def get_by_id(self, tenant_id: TenantId) -> Tenant | None:
        stmt = select(TenantModel).where(TenantModel.id == tenant_id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_aggregate(model) if model else None

    async def get_by_slug(self, slug: str) -> Tenant | None:
        stmt = select(TenantModel).where(TenantModel.slug == slug)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_aggregate(model) if model else None

    async def list_all(self) -> list[Tenant]:
        """Fetch all tenants ordered by name."""
        stmt = select(TenantModel).order_by(TenantModel.name)
        result = await self._session.execute(stmt)
        tenants = [self._to_aggregate(model) for model in result.scalars().all()]

        self._probe.tenants_listed(len(tenants))
        return tenants

    @staticmethod
    def _to_aggregate(model: TenantModel) -> Tenant:
        return Tenant(
            id=TenantId(value=model.id),
            name=model.name,
            slug=model.slug,
            active=model.active,
            contact_email=model.contact_email,
            contact_phone=model.contact_phone,
            settings=dict(model.settings or {}),
            created_at=model.created_at,
        )
