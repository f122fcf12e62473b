"""FastAPI dependency providers for the Audit bounded context."""

from __future__ import annotations

from functools import lru_cache

from audit.application.audit_service import AuditService
from audit.infrastructure import AuditLogRepository
from infrastructure.database.dependencies import get_sessionmaker
from infrastructure.dependencies import get_cache
from infrastructure.settings import get_audit_settings


@lru_cache
def get_audit_service() -> AuditService:
    """Get the application-scoped AuditService.

    The service opens its own sessions, so one instance serves every
    request and every bounded context.
    """
    return AuditService(
        session_factory=get_sessionmaker(),
        repository_factory=AuditLogRepository,
        cache=get_cache(),
        activity_cache_ttl_seconds=get_audit_settings().activity_cache_ttl_seconds,
    )
