"""budget alerts baseline

Revision ID: 20261001_baseline
Revises:
Create Date: 2026-10-01 00:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from app.core.types import GUID

# revision identifiers, used by Alembic.
revision: str = "20261001_baseline"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


DEFAULT_NOW = sa.func.now()

ENTRY_TYPES = ("EXPENSE", "INCOME")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("budget_alerts_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("daily_reminders_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("reminder_time", sa.String(length=5), nullable=True),
        sa.Column(
            "notification_method",
            sa.Enum("IN_APP", "EMAIL", "BOTH", name="notificationmethodenum"),
            nullable=False,
            server_default="IN_APP",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=DEFAULT_NOW),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "categories",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("user_id", GUID(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("type", sa.Enum(*ENTRY_TYPES, name="categorytypeenum"), nullable=False),
        sa.Column("is_predefined", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=DEFAULT_NOW),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("user_id", "name", "type", name="uq_categories_user_name_type"),
    )

    op.create_table(
        "transactions",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("user_id", GUID(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("type", sa.Enum(*ENTRY_TYPES, name="transactiontypeenum"), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("category_id", GUID(), sa.ForeignKey("categories.id"), nullable=True),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("description", sa.String(length=200), nullable=True),
        sa.Column(
            "payment_method",
            sa.Enum("CASH", "CARD", "BANK_TRANSFER", "OTHER", name="paymentmethodenum"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=DEFAULT_NOW),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "idx_transactions_budget_lookup",
        "transactions",
        ["user_id", "category_id", "type", "date"],
    )

    op.create_table(
        "budgets",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("user_id", GUID(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("category_id", GUID(), sa.ForeignKey("categories.id"), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("month", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=DEFAULT_NOW),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("user_id", "category_id", "month", name="uq_budgets_user_category_month"),
    )


def downgrade() -> None:
    op.drop_table("budgets")
    op.drop_index("idx_transactions_budget_lookup", table_name="transactions")
    op.drop_table("transactions")
    op.drop_table("categories")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    for enum_name in ("paymentmethodenum", "transactiontypeenum", "categorytypeenum", "notificationmethodenum"):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
