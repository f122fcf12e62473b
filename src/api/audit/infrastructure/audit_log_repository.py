"""PostgreSQL implementation of IAuditLogRepository."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from audit.domain import AuditEntry, AuditFilters
from audit.infrastructure.models import AuditLogModel
from audit.ports.repositories import IAuditLogRepository


class AuditLogRepository(IAuditLogRepository):
    """Append/read repository for the audit log.

    There is no update or delete method on purpose.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def append(self, entry: AuditEntry) -> None:
        self._session.add(
            AuditLogModel(
                id=entry.id,
                actor_id=entry.actor_id,
                actor_email=entry.actor_email,
                actor_role=entry.actor_role,
                tenant_id=entry.tenant_id,
                action=entry.action,
                resource_type=entry.resource_type,
                resource_id=entry.resource_id,
                changes=entry.changes,
                ip_address=entry.ip_address,
                user_agent=entry.user_agent,
                occurred_at=entry.occurred_at,
            )
        )
        await self._session.flush()

    async def query(
        self, tenant_id: str | None, filters: AuditFilters
    ) -> list[AuditEntry]:
        stmt = self._scoped(select(AuditLogModel), tenant_id)

        if filters.action is not None:
            stmt = stmt.where(AuditLogModel.action == filters.action)
        if filters.resource_type is not None:
            stmt = stmt.where(AuditLogModel.resource_type == filters.resource_type)
        if filters.actor_id is not None:
            stmt = stmt.where(AuditLogModel.actor_id == filters.actor_id)
        if filters.occurred_after is not None:
            stmt = stmt.where(AuditLogModel.occurred_at >= filters.occurred_after)
        if filters.occurred_before is not None:
            stmt = stmt.where(AuditLogModel.occurred_at < filters.occurred_before)

        stmt = (
            stmt.order_by(AuditLogModel.occurred_at.desc(), AuditLogModel.id.desc())
            .limit(filters.limit)
            .offset(filters.offset)
        )
        result = await self._session.execute(stmt)
        return [self._to_entry(model) for model in result.scalars().all()]

    async def count(self, tenant_id: str | None, action: str, since: datetime) -> int:
        stmt = self._scoped(select(func.count(AuditLogModel.id)), tenant_id).where(
            AuditLogModel.action == action,
            AuditLogModel.occurred_at >= since,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    @staticmethod
    def _scoped(stmt: Select, tenant_id: str | None) -> Select:
        if tenant_id is None:
            return stmt
        return stmt.where(AuditLogModel.tenant_id == tenant_id)

    @staticmethod
    def _to_entry(model: AuditLogModel) -> AuditEntry:
        return AuditEntry(
            id=model.id,
            action=model.action,
            occurred_at=model.occurred_at,
            actor_id=model.actor_id,
            actor_email=model.actor_email,
            actor_role=model.actor_role,
            tenant_id=model.tenant_id,
            resource_type=model.resource_type,
            resource_id=model.resource_id,
            changes=dict(model.changes or {}),
            ip_address=model.ip_address,
            user_agent=model.user_agent,
        )
