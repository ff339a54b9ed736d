"""initial schema

Revision ID: 0001
Revises: 
Create Date: 2026-10-19 00:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("tg_id", sa.BigInteger(), nullable=False, unique=True),
        sa.Column("username", sa.Text()),
        sa.Column("full_name", sa.Text()),
        sa.Column("household_id", sa.BigInteger()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "households",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("invite_code", sa.String(length=6), nullable=False, unique=True),
        sa.Column("created_by", sa.BigInteger(), sa.ForeignKey("users.id")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_foreign_key(
        "users_household_id_fkey",
        "users",
        "households",
        ["household_id"],
        ["id"],
        ondelete="SET NULL",
    )

    op.create_table(
        "household_members",
        sa.Column("household_id", sa.BigInteger(), sa.ForeignKey("households.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "expenses",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("household_id", sa.BigInteger(), sa.ForeignKey("households.id", ondelete="CASCADE"), nullable=False),
        sa.Column("paid_by", sa.BigInteger(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("category", sa.Text(), nullable=False, server_default="other"),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("split_between", postgresql.ARRAY(sa.BigInteger()), nullable=False),
        sa.Column("split_type", sa.Text(), nullable=False, server_default="equal"),
        sa.Column("custom_splits", postgresql.JSONB()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("amount > 0", name="expenses_amount_positive"),
        sa.CheckConstraint("split_type in ('equal','custom')", name="expenses_split_type_check"),
        sa.CheckConstraint(
            "(split_type = 'custom') = (custom_splits IS NOT NULL)",
            name="expenses_custom_splits_check",
        ),
    )

    op.create_table(
        "chores",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("household_id", sa.BigInteger(), sa.ForeignKey("households.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("assigned_to", sa.BigInteger(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("assigned_by", sa.BigInteger(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("due_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("priority", sa.Text(), nullable=False, server_default="medium"),
        sa.Column("recurring", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("recurring_interval", sa.Text()),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
        sa.Column("completed_by", sa.BigInteger(), sa.ForeignKey("users.id")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("priority in ('low','medium','high')", name="chores_priority_check"),
        sa.CheckConstraint(
            "recurring_interval is null or recurring_interval in ('daily','weekly','monthly')",
            name="chores_recurring_interval_check",
        ),
    )

    op.create_table(
        "reminders",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("chore_id", sa.BigInteger(), sa.ForeignKey("chores.id", ondelete="CASCADE"), nullable=False),
        sa.Column("remind_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("sent", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.UniqueConstraint("chore_id", "remind_at", name="reminders_chore_remind_at_key"),
    )

    op.create_index("idx_household_members_user", "household_members", ["user_id"])
    op.create_index("idx_expenses_household_date", "expenses", ["household_id", "date"])
    op.create_index("idx_chores_household_due", "chores", ["household_id", "due_at"])
    op.create_index("idx_reminders_pending", "reminders", ["remind_at"], postgresql_where=sa.text("sent = false"))


def downgrade() -> None:
    op.drop_index("idx_reminders_pending", table_name="reminders")
    op.drop_index("idx_chores_household_due", table_name="chores")
    op.drop_index("idx_expenses_household_date", table_name="expenses")
    op.drop_index("idx_household_members_user", table_name="household_members")

    op.drop_table("reminders")
    op.drop_table("chores")
    op.drop_table("expenses")
    op.drop_table("household_members")
    op.drop_constraint("users_household_id_fkey", "users", type_="foreignkey")
    op.drop_table("households")
    op.drop_table("users")
