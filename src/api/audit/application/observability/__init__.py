"""Domain-Oriented Observability for the Audit application layer."""

from audit.application.observability.audit_probe import (
    AuditProbe,
    DefaultAuditProbe,
)

__all__ = ["AuditProbe", "DefaultAuditProbe"]
