"""SQLAlchemy ORM model for the audit_log table.

Actor and tenant columns deliberately carry no foreign keys: entries must
outlive the principals and tenants they mention.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base


class AuditLogModel(Base):
    """ORM model for audit_log table (append only)."""

    __tablename__ = "audit_log"
    __table_args__ = (
        Index("idx_audit_log_tenant_occurred_at", "tenant_id", "occurred_at"),
        Index("idx_audit_log_action_occurred_at", "action", "occurred_at"),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    actor_id: Mapped[str | None] = mapped_column(String(26), nullable=True)
    actor_email: Mapped[str | None] = mapped_column(String(160), nullable=True)
    actor_role: Mapped[str | None] = mapped_column(String(32), nullable=True)
    tenant_id: Mapped[str | None] = mapped_column(String(26), nullable=True)
    action: Mapped[str] = mapped_column(String(255), nullable=False)
    resource_type: Mapped[str | None] = mapped_column(String(255), nullable=True)
    resource_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    changes: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<AuditLogModel(id={self.id}, action={self.action})>"
