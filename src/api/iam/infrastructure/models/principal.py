"""SQLAlchemy ORM model for the principals table.

A principal is any account that can sign in. Root admins carry no tenant;
every other principal belongs to exactly one.
"""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class PrincipalModel(Base, TimestampMixin):
    """ORM model for principals table.

    E-mail addresses are stored lower-cased so the unique constraint is
    effectively case-insensitive.
    """

    __tablename__ = "principals"
    __table_args__ = (
        UniqueConstraint("email", name="uq_principals_email"),
        CheckConstraint(
            "(role = 'root_admin') = (tenant_id IS NULL)",
            name="ck_principals_root_admin_tenant",
        ),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    email: Mapped[str] = mapped_column(String(160), nullable=False)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(32), nullable=False)
    tenant_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("tenants.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")
    must_change_password: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_login_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<PrincipalModel(id={self.id}, email={self.email}, role={self.role})>"
