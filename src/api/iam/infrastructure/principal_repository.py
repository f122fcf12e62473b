"""PostgreSQL implementation of IPrincipalRepository.

E-mail uniqueness is checked twice: a lookup before the write gives a
friendly error, and the ``uq_principals_email`` constraint settles races
between concurrent writers.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from iam.domain.aggregates import Principal
from iam.domain.validation import normalize_email
from iam.domain.value_objects import PrincipalId, PrincipalStatus, TenantId
from iam.infrastructure.models import PrincipalModel
from iam.infrastructure.observability import (
    DefaultPrincipalRepositoryProbe,
    PrincipalRepositoryProbe,
)
from iam.ports.exceptions import DuplicateEmailError
from iam.ports.repositories import IPrincipalRepository
from shared_kernel.authorization.types import Role

EMAIL_CONSTRAINT = "uq_principals_email"


class PrincipalRepository(IPrincipalRepository):
    """Repository managing PostgreSQL storage for Principal aggregates.

    The repository never opens or commits transactions; the calling
    service owns them.
    """

    def __init__(
        self,
        session: AsyncSession,
        probe: PrincipalRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with database session.

        Args:
            session: AsyncSession from FastAPI dependency injection
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultPrincipalRepositoryProbe()

    async def save(self, principal: Principal) -> None:
        """Insert or update a principal.

        Raises:
            DuplicateEmailError: If the e-mail belongs to another principal
        """
        existing = await self.get_by_email(principal.email)
        if existing and existing.id != principal.id:
            self._probe.duplicate_email(principal.email)
            raise DuplicateEmailError(
                f"Email '{principal.email}' is already registered"
            )

        stmt = select(PrincipalModel).where(PrincipalModel.id == principal.id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            model = PrincipalModel(id=principal.id.value)
            if principal.created_at is not None:
                model.created_at = principal.created_at
            self._session.add(model)

        model.email = principal.email
        model.password_hash = principal.password_hash
        model.role = principal.role.value
        model.tenant_id = principal.tenant_value
        model.status = principal.status.value
        model.must_change_password = principal.must_change_password
        model.display_name = principal.display_name
        model.last_login_at = principal.last_login_at

        try:
            await self._session.flush()
        except IntegrityError as e:
            if EMAIL_CONSTRAINT in str(e):
                self._probe.duplicate_email(principal.email)
                raise DuplicateEmailError(
                    f"Email '{principal.email}' is already registered"
                ) from e
            raise

        self._probe.principal_saved(principal.id.value)

    async def get_by_id(self, principal_id: PrincipalId) -> Principal | None:
        stmt = select(PrincipalModel).where(PrincipalModel.id == principal_id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_aggregate(model) if model else None

    async def get_by_email(self, email: str) -> Principal | None:
        stmt = select(PrincipalModel).where(
            PrincipalModel.email == normalize_email(email)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_aggregate(model) if model else None

    async def list_by_tenant(self, tenant_id: TenantId | None) -> list[Principal]:
        stmt = select(PrincipalModel).order_by(PrincipalModel.email)
        if tenant_id is not None:
            stmt = stmt.where(PrincipalModel.tenant_id == tenant_id.value)
        result = await self._session.execute(stmt)
        return [self._to_aggregate(model) for model in result.scalars().all()]

    async def delete(self, principal: Principal) -> bool:
        """Delete a principal row.

        Session tokens go with it (ON DELETE CASCADE); audit entries keep
        their snapshot columns.

        Returns:
            True if deleted, False if not found
        """
        stmt = select(PrincipalModel).where(PrincipalModel.id == principal.id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return False

        await self._session.delete(model)
        await self._session.flush()

        self._probe.principal_deleted(principal.id.value)
        return True

    @staticmethod
    def _to_aggregate(model: PrincipalModel) -> Principal:
        return Principal(
            id=PrincipalId(value=model.id),
            email=model.email,
            role=Role(model.role),
            tenant_id=TenantId(value=model.tenant_id) if model.tenant_id else None,
            password_hash=model.password_hash,
            status=PrincipalStatus(model.status),
            must_change_password=model.must_change_password,
            display_name=model.display_name,
            last_login_at=model.last_login_at,
            created_at=model.created_at,
        )
