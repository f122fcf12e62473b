"""create audit log table

Revision ID: 8c4e2b6f1d35
Revises: 3f1a9c2d7b10
Create Date: 2026-09-14 10:40:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "8c4e2b6f1d35"
down_revision: Union[str, Sequence[str], None] = "3f1a9c2d7b10"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema.

    No foreign keys: entries outlive the principals and tenants they name.
    """
    op.create_table(
        "audit_log",
        sa.Column("id", sa.String(length=26), nullable=False),
        sa.Column("actor_id", sa.String(length=26), nullable=True),
        sa.Column("actor_email", sa.String(length=160), nullable=True),
        sa.Column("actor_role", sa.String(length=32), nullable=True),
        sa.Column("tenant_id", sa.String(length=26), nullable=True),
        sa.Column("action", sa.String(length=255), nullable=False),
        sa.Column("resource_type", sa.String(length=255), nullable=True),
        sa.Column("resource_id", sa.String(length=255), nullable=True),
        sa.Column("changes", sa.JSON(), nullable=False),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_audit_log"),
    )
    op.create_index(
        "idx_audit_log_tenant_occurred_at", "audit_log", ["tenant_id", "occurred_at"]
    )
    op.create_index(
        "idx_audit_log_action_occurred_at", "audit_log", ["action", "occurred_at"]
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("idx_audit_log_action_occurred_at", table_name="audit_log")
    op.drop_index("idx_audit_log_tenant_occurred_at", table_name="audit_log")
    op.drop_table("audit_log")
