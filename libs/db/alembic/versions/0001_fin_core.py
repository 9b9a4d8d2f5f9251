"""Finance core tables and seed categories.

Revision ID: 0001_fin_core
Revises: None
Create Date: 2026-10-18
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001_fin_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

# Mirrors statement_ingest.categories.CATALOGUE at the time of this revision.
_SEED: tuple[tuple[str, str, str, str, str], ...] = (
    ("food_dining", "Food & Dining", "expense", "🍕", "#FF6B6B"),
    ("transport", "Transport", "expense", "🚗", "#4ECDC4"),
    ("entertainment", "Entertainment", "expense", "🎬", "#45B7D1"),
    ("shopping", "Shopping", "expense", "🛍️", "#96CEB4"),
    ("bills_utilities", "Bills & Utilities", "expense", "⚡", "#FECA57"),
    ("healthcare", "Healthcare", "expense", "🏥", "#FF9FF3"),
    ("education", "Education", "expense", "📚", "#54A0FF"),
    ("travel", "Travel", "expense", "✈️", "#5F27CD"),
    ("personal_care", "Personal Care", "expense", "💄", "#00D2D3"),
    ("home_garden", "Home & Garden", "expense", "🏠", "#FF9F43"),
    ("insurance", "Insurance", "expense", "🛡️", "#A55EEA"),
    ("taxes", "Taxes", "expense", "📋", "#26DE81"),
    ("gifts_donations", "Gifts & Donations", "expense", "🎁", "#FD79A8"),
    ("business", "Business", "expense", "💼", "#6C5CE7"),
    ("other_expenses", "Other Expenses", "expense", "💸", "#A0A0A0"),
    ("salary", "Salary", "income", "💰", "#00B894"),
    ("freelance", "Freelance", "income", "💻", "#00CEC9"),
    ("investment", "Investment", "income", "📈", "#81ECEC"),
    ("business_income", "Business Income", "income", "🏢", "#55A3FF"),
    ("other_income", "Other Income", "income", "💵", "#FDCB6E"),
)


def upgrade() -> None:
    fin_categories = op.create_table(
        "fin_categories",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False, unique=True),
        sa.Column("kind", sa.String(), nullable=False),
        sa.Column("icon", sa.String(), nullable=True),
        sa.Column("color", sa.String(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("kind IN ('income', 'expense')", name="ck_fin_categories_kind"),
    )

    op.create_table(
        "fin_transactions",
        sa.Column(
            "id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            primary_key=True,
            autoincrement=True,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("merchant", sa.Text(), nullable=True),
        sa.Column(
            "category_id", sa.String(), sa.ForeignKey("fin_categories.id"), nullable=True
        ),
        sa.Column("subcategory", sa.String(), nullable=True),
        sa.Column("file_source", sa.String(), nullable=True),
        sa.Column("raw_data", sa.JSON(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_fin_transactions_date", "fin_transactions", ["date"])
    op.create_index("ix_fin_transactions_category_id", "fin_transactions", ["category_id"])

    op.bulk_insert(
        fin_categories,
        [
            {"id": code, "name": name, "kind": kind, "icon": icon, "color": color}
            for code, name, kind, icon, color in _SEED
        ],
    )


def downgrade() -> None:
    op.drop_index("ix_fin_transactions_category_id", table_name="fin_transactions")
    op.drop_index("ix_fin_transactions_date", table_name="fin_transactions")
    op.drop_table("fin_transactions")
    op.drop_table("fin_categories")
