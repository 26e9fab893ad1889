"""Add meter comments and the calculation parameters catalog.

Revision ID: 20251020_0002
Revises: 20251019_0001
Create Date: 2025-10-20 00:00:00.000000
"""

from __future__ import annotations

from typing import Sequence

import sqlalchemy as sa
from alembic import op


revision = "20251020_0002"
down_revision: str | None = "20251019_0001"
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


COMMENT_STATUS_ENUM = sa.Enum("pending", "approved", "rejected", name="comment_status_enum")
PARAM_TYPE_ENUM = sa.Enum(
    "number", "text", "formula", "boolean", name="calculation_param_type_enum"
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "comments",
        sa.Column("comment_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "meter_id",
            sa.String(40),
            sa.ForeignKey("meters.code_meter", onupdate="CASCADE", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("period", sa.String(40), nullable=True),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.Column("status", COMMENT_STATUS_ENUM, nullable=False, server_default="pending"),
        *_timestamps(),
    )
    op.create_index("comments_meter_period_idx", "comments", ["meter_id", "period"])

    op.create_table(
        "calculation_params",
        sa.Column("param_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("param_key", sa.String(80), nullable=False),
        sa.Column("param_name", sa.String(120), nullable=False),
        sa.Column("param_value", sa.String(255), nullable=False),
        sa.Column("param_type", PARAM_TYPE_ENUM, nullable=False, server_default="number"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(40), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.UniqueConstraint("param_key", name="calculation_params_param_key_key"),
    )
    op.create_index("ix_calculation_params_category", "calculation_params", ["category"])


def downgrade() -> None:
    op.drop_index("ix_calculation_params_category", table_name="calculation_params")
    op.drop_table("calculation_params")
    op.drop_index("comments_meter_period_idx", table_name="comments")
    op.drop_table("comments")

    bind = op.get_bind()
    for enum_type in (PARAM_TYPE_ENUM, COMMENT_STATUS_ENUM):
        enum_type.drop(bind, checkfirst=True)
