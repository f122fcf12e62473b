"""Ports for Audit bounded context."""

from audit.ports.repositories import IAuditLogRepository

__all__ = ["IAuditLogRepository"]
