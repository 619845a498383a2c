"""Initial schema for the alumni ledger.

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "20261018_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    role_name = sa.Enum("admin", "treasurer", "alumni", name="role_name")
    entry_kind = sa.Enum("contribution", "expense", name="entry_kind")
    contribution_type = sa.Enum("basic", "additional", name="contribution_type")
    bucket = sa.Enum("lift", "alumni_association", name="bucket")
    entry_status = sa.Enum("pending", "approved", "rejected", name="entry_status")
    audit_action = sa.Enum("approved", "rejected", "edited", name="audit_action")

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("role", role_name, nullable=False, server_default="alumni"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "ledger_entries",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("kind", entry_kind, nullable=False),
        sa.Column("contribution_type", contribution_type, nullable=True),
        sa.Column("bucket", bucket, nullable=True),
        sa.Column("status", entry_status, nullable=False, server_default="pending"),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("lift_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("aa_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("lift_pct", sa.Numeric(9, 6), nullable=True),
        sa.Column("aa_pct", sa.Numeric(9, 6), nullable=True),
        sa.Column("entry_date", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("purpose", sa.String(length=255), nullable=True),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("vendor", sa.String(length=255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("member_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column(
            "submitted_by_user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_ledger_entries_kind", "ledger_entries", ["kind"])
    op.create_index("ix_ledger_entries_status", "ledger_entries", ["status"])
    op.create_index("ix_ledger_entries_entry_date", "ledger_entries", ["entry_date"])
    op.create_index("ix_ledger_entries_member_id", "ledger_entries", ["member_id"])
    op.create_index("ix_ledger_entries_submitted_by_user_id", "ledger_entries", ["submitted_by_user_id"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("ledger_entry_id", sa.String(length=36), nullable=False),
        sa.Column(
            "entity_type",
            postgresql.ENUM("contribution", "expense", name="entry_kind", create_type=False),
            nullable=False,
        ),
        sa.Column("action", audit_action, nullable=False),
        sa.Column(
            "actor_user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("changes", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_audit_logs_id", "audit_logs", ["id"])
    op.create_index("ix_audit_logs_ledger_entry_id", "audit_logs", ["ledger_entry_id"])

    op.create_table(
        "settings",
        sa.Column("key", sa.String(length=100), primary_key=True),
        sa.Column("value", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "updated_by_user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("settings")
    op.drop_index("ix_audit_logs_ledger_entry_id", table_name="audit_logs")
    op.drop_index("ix_audit_logs_id", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("ix_ledger_entries_submitted_by_user_id", table_name="ledger_entries")
    op.drop_index("ix_ledger_entries_member_id", table_name="ledger_entries")
    op.drop_index("ix_ledger_entries_entry_date", table_name="ledger_entries")
    op.drop_index("ix_ledger_entries_status", table_name="ledger_entries")
    op.drop_index("ix_ledger_entries_kind", table_name="ledger_entries")
    op.drop_table("ledger_entries")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_id", table_name="users")
    op.drop_table("users")

    audit_action = sa.Enum("approved", "rejected", "edited", name="audit_action")
    entry_status = sa.Enum("pending", "approved", "rejected", name="entry_status")
    bucket = sa.Enum("lift", "alumni_association", name="bucket")
    contribution_type = sa.Enum("basic", "additional", name="contribution_type")
    entry_kind = sa.Enum("contribution", "expense", name="entry_kind")
    role_name = sa.Enum("admin", "treasurer", "alumni", name="role_name")

    audit_action.drop(op.get_bind(), checkfirst=True)
    entry_status.drop(op.get_bind(), checkfirst=True)
    bucket.drop(op.get_bind(), checkfirst=True)
    contribution_type.drop(op.get_bind(), checkfirst=True)
    entry_kind.drop(op.get_bind(), checkfirst=True)
    role_name.drop(op.get_bind(), checkfirst=True)
