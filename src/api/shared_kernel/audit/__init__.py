"""Audit port shared by bounded contexts that record audit entries."""

from shared_kernel.audit.ports import IAuditLogger, RequestContext

__all__ = ["IAuditLogger", "RequestContext"]
