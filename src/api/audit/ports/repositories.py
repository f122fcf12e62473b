"""Repository protocol for the audit log.

Append and read only. The audit log has no update or delete path.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from audit.domain import AuditEntry, AuditFilters


@runtime_checkable
class IAuditLogRepository(Protocol):
    """Repository for audit log entries."""

    async def append(self, entry: AuditEntry) -> None:
        """Insert one entry. The caller owns the transaction."""
        ...

    async def query(
        self, tenant_id: str | None, filters: AuditFilters
    ) -> list[AuditEntry]:
        """Return entries newest first.

        Args:
            tenant_id: Restrict to one tenant; None returns every tenant's entries
            filters: Field filters plus limit/offset
        """
        ...

    async def count(self, tenant_id: str | None, action: str, since: datetime) -> int:
        """Count entries with the given action at or after ``since``."""
        ...
