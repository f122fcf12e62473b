"""Infrastructure layer for Audit bounded context."""

from audit.infrastructure.audit_log_repository import AuditLogRepository
from audit.infrastructure.models import AuditLogModel

__all__ = ["AuditLogModel", "AuditLogRepository"]
