"""Domain layer for Audit bounded context."""

from audit.domain.entry import (
    REDACTED,
    ActivitySummary,
    AuditEntry,
    AuditFilters,
    normalize_ip,
    redact,
)

__all__ = [
    "REDACTED",
    "ActivitySummary",
    "AuditEntry",
    "AuditFilters",
    "normalize_ip",
    "redact",
]
