"""SQLAlchemy ORM model for the session_tokens table.

Only SHA-256 digests of tokens are stored. Timestamps come from the
aggregate since expiry and reissue are computed from them.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base


class SessionTokenModel(Base):
    """ORM model for session_tokens table."""

    __tablename__ = "session_tokens"
    __table_args__ = (
        Index("idx_session_tokens_principal_context", "principal_id", "context"),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    principal_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("principals.id", ondelete="CASCADE"),
        nullable=False,
    )
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    context: Mapped[str] = mapped_column(String(32), nullable=False)
    sent_to: Mapped[str | None] = mapped_column(String(160), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    authenticated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<SessionTokenModel(id={self.id}, principal_id={self.principal_id}, "
            f"context={self.context})>"
        )
