"""Port for recording audit entries.

Bounded contexts depend on this protocol rather than on the audit context
itself. The audit context provides the implementation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from shared_kernel.authorization.types import Scope


@dataclass(frozen=True)
class RequestContext:
    """Client metadata captured from the inbound request."""

    ip_address: str | None = None
    user_agent: str | None = None


@runtime_checkable
class IAuditLogger(Protocol):
    """Append-only audit recorder.

    There is intentionally no update or delete operation.
    """

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
        """Append one audit entry.

        Implementations write in their own transaction and never raise;
        a failed append is reported through observability instead.

        Args:
            actor: Scope of the principal that acted (None for system actions)
            action: Namespaced action name (e.g. "principal.created")
            tenant_id: Tenant the action applies to
            resource_type: Type of the affected resource
            resource_id: Identifier of the affected resource
            changes: Before/after details of the change
            request: Client IP address and user agent
        """
        ...
