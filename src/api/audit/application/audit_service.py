"""Audit application service.

Implements ``IAuditLogger`` for every other context and serves the
tenant-scoped read side. Each append runs in a session and transaction of
its own, so recording can neither roll back nor be rolled back by the
caller's work.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from audit.application.observability import AuditProbe, DefaultAuditProbe
from audit.domain import ActivitySummary, AuditEntry, AuditFilters
from audit.ports.repositories import IAuditLogRepository
from shared_kernel.audit.ports import RequestContext
from shared_kernel.authorization.guard import TenantIsolationGuard
from shared_kernel.authorization.observability import AuthorizationProbe
from shared_kernel.authorization.types import Action, Scope
from shared_kernel.cache import CacheKey, ITTLCache
from shared_kernel.clock import Clock, utc_now

LOGIN_SUCCEEDED = "login.succeeded"
RECENT_ACTIVITY_SIZE = 10


class AuditService:
    """Records and queries audit entries."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        repository_factory: Callable[[AsyncSession], IAuditLogRepository],
        cache: ITTLCache,
        activity_cache_ttl_seconds: float = 300,
        probe: AuditProbe | None = None,
        authorization_probe: AuthorizationProbe | None = None,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize the service.

        Args:
            session_factory: Factory for the sessions appends and reads run in
            repository_factory: Builds a repository bound to a session
            cache: TTL cache for activity summaries
            activity_cache_ttl_seconds: Lifetime of a cached summary
            probe: Optional domain probe for observability
            authorization_probe: Optional probe for the read-side guard
            clock: Source of the current UTC time
        """
        self._session_factory = session_factory
        self._repository_factory = repository_factory
        self._cache = cache
        self._activity_ttl = activity_cache_ttl_seconds
        self._probe = probe or DefaultAuditProbe()
        self._clock = clock
        # Denied reads are themselves audited through this service
        self._guard = TenantIsolationGuard(audit=self, probe=authorization_probe)

    async def record(
        self,
        actor: Scope | None,
        action: str,
        *,
        tenant_id: str | None = None,
        resource_type: str | None = None,
        resource_id: str | None = None,
        changes: dict[str, Any] | None = None,
        request: RequestContext | None = None,
    ) -> None:
        """Append one entry. Storage failures are logged, never raised."""
        entry = AuditEntry.create(
            actor,
            action,
            occurred_at=self._clock(),
            tenant_id=tenant_id,
            resource_type=resource_type,
            resource_id=resource_id,
            changes=changes,
            ip_address=request.ip_address if request else None,
            user_agent=request.user_agent if request else None,
        )

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await self._repository_factory(session).append(entry)
        except (SQLAlchemyError, OSError) as e:
            self._probe.entry_record_failed(action, tenant_id, str(e))
            return

        self._probe.entry_recorded(action, tenant_id)

    async def query(
        self,
        scope: Scope,
        tenant_id: str | None = None,
        filters: AuditFilters | None = None,
        request: RequestContext | None = None,
    ) -> list[AuditEntry]:
        """Read entries visible to the caller, newest first.

        Non-root callers only ever see their own tenant, whatever
        ``tenant_id`` they pass.

        Raises:
            UnauthorizedError: If the caller may not view audit logs
        """
        effective = await self._authorize_read(scope, tenant_id, request)
        entries = await self._read(effective, filters or AuditFilters())
        self._probe.entries_queried(effective, len(entries))
        return entries

    async def activity_summary(
        self,
        scope: Scope,
        tenant_id: str | None = None,
        request: RequestContext | None = None,
    ) -> ActivitySummary:
        """Sign-in counts for the last 7 and 30 days plus the latest entries.

        Raises:
            UnauthorizedError: If the caller may not view audit logs
        """
        effective = await self._authorize_read(scope, tenant_id, request)

        key = CacheKey.build(effective, "audit.activity_summary")
        cached = await self._cache.get(key)
        if cached is not None:
            self._probe.activity_summary_served(effective, cached=True)
            return cached

        now = self._clock()
        async with self._session_factory() as session:
            repository = self._repository_factory(session)
            summary = ActivitySummary(
                tenant_id=effective,
                logins_last_7_days=await repository.count(
                    effective, LOGIN_SUCCEEDED, now - timedelta(days=7)
                ),
                logins_last_30_days=await repository.count(
                    effective, LOGIN_SUCCEEDED, now - timedelta(days=30)
                ),
                recent=await repository.query(
                    effective, AuditFilters(limit=RECENT_ACTIVITY_SIZE)
                ),
            )

        await self._cache.set(key, summary, self._activity_ttl)
        self._probe.activity_summary_served(effective, cached=False)
        return summary

    async def _authorize_read(
        self,
        scope: Scope,
        tenant_id: str | None,
        request: RequestContext | None,
    ) -> str | None:
        effective = self._guard.effective_tenant(scope, tenant_id)
        await self._guard.require(scope, Action.VIEW_AUDIT_LOGS, effective, request)
        return effective

    async def _read(
        self, tenant_id: str | None, filters: AuditFilters
    ) -> list[AuditEntry]:
        async with self._session_factory() as session:
            return await self._repository_factory(session).query(tenant_id, filters)
