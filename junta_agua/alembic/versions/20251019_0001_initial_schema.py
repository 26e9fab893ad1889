"""Create meters, readings, tariff catalog, meter charges and bills.

Revision ID: 20251019_0001
Revises:
Create Date: 2025-10-19 00:00:00.000000
"""

from __future__ import annotations

from typing import Sequence

import sqlalchemy as sa
from alembic import op

from junta_agua.app.db_types import GUID


revision = "20251019_0001"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


METER_STATUS_ENUM = sa.Enum("active", "inactive", name="meter_status_enum")
TARIFF_STATUS_ENUM = sa.Enum("active", "inactive", name="tariff_status_enum")
PAYMENT_STATUS_ENUM = sa.Enum("PENDIENTE", "ACREDITADO", name="bill_payment_status_enum")


def _timestamps(*, with_update: bool = False) -> list[sa.Column]:
    columns = [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        )
    ]
    if with_update:
        columns.append(
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now(),
            )
        )
    return columns


def _meter_fk() -> sa.Column:
    return sa.Column(
        "meter_id",
        sa.String(40),
        sa.ForeignKey("meters.code_meter", onupdate="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "meters",
        sa.Column("code_meter", sa.String(40), primary_key=True),
        sa.Column("location", sa.String(200), nullable=False, server_default=""),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", METER_STATUS_ENUM, nullable=False, server_default="active"),
        *_timestamps(),
    )
    op.create_index("meters_status_idx", "meters", ["status"])

    op.create_table(
        "readings",
        sa.Column("reading_id", GUID(), primary_key=True, nullable=False),
        sa.Column(
            "meter_id",
            sa.String(40),
            sa.ForeignKey("meters.code_meter", onupdate="CASCADE", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("period", sa.String(40), nullable=False),
        sa.Column("value", sa.Numeric(12, 2), nullable=False),
        sa.Column("photo_url", sa.String(), nullable=True),
        *_timestamps(with_update=True),
        sa.UniqueConstraint("meter_id", "period", name="readings_meter_period_key"),
        sa.CheckConstraint("value >= 0", name="ck_readings_value_non_negative"),
    )
    op.create_index("ix_readings_meter_id", "readings", ["meter_id"])

    op.create_table(
        "tariffs",
        sa.Column("tariff_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("min_consumption", sa.Numeric(12, 2), nullable=False),
        sa.Column("max_consumption", sa.Numeric(12, 2), nullable=True),
        sa.Column("price_per_unit", sa.Numeric(10, 4), nullable=False, server_default="0"),
        sa.Column("max_units", sa.Numeric(12, 2), nullable=True),
        sa.Column("fixed_charge", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", TARIFF_STATUS_ENUM, nullable=False, server_default="active"),
        *_timestamps(with_update=True),
        sa.CheckConstraint("min_consumption >= 0", name="ck_tariffs_min_non_negative"),
        sa.CheckConstraint(
            "max_consumption IS NULL OR max_consumption > min_consumption",
            name="ck_tariffs_valid_range",
        ),
        sa.CheckConstraint("price_per_unit >= 0", name="ck_tariffs_price_non_negative"),
        sa.CheckConstraint("fixed_charge >= 0", name="ck_tariffs_fixed_non_negative"),
        sa.CheckConstraint(
            "max_units IS NULL OR max_units >= 0", name="ck_tariffs_max_units_non_negative"
        ),
    )

    op.create_table(
        "debts",
        sa.Column("debt_id", sa.Integer(), primary_key=True, autoincrement=True),
        _meter_fk(),
        sa.Column("period", sa.String(40), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("meter_id", "period", name="debts_meter_period_key"),
        sa.CheckConstraint("amount >= 0", name="ck_debts_amount_non_negative"),
    )

    op.create_table(
        "meter_fines",
        sa.Column("meter_fine_id", sa.Integer(), primary_key=True, autoincrement=True),
        _meter_fk(),
        sa.Column("period", sa.String(40), nullable=False),
        sa.Column("fines_reuniones", sa.Numeric(12, 2), nullable=False),
        sa.Column("fines_mingas", sa.Numeric(12, 2), nullable=False),
        sa.Column("mora_percentage", sa.Numeric(5, 2), nullable=False),
        sa.Column("mora_amount", sa.Numeric(12, 2), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("meter_id", "period", name="meter_fines_meter_period_key"),
        sa.CheckConstraint(
            "fines_reuniones >= 0 AND fines_mingas >= 0",
            name="ck_meter_fines_non_negative",
        ),
        sa.CheckConstraint(
            "mora_percentage >= 0 AND mora_amount >= 0",
            name="ck_meter_fines_mora_non_negative",
        ),
    )

    op.create_table(
        "garden_values",
        sa.Column("garden_value_id", sa.Integer(), primary_key=True, autoincrement=True),
        _meter_fk(),
        sa.Column("period", sa.String(40), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("meter_id", "period", name="garden_values_meter_period_key"),
        sa.CheckConstraint("amount >= 0", name="ck_garden_values_amount_non_negative"),
    )

    amount_columns = [
        sa.Column(name, sa.Numeric(12, 2), nullable=False, server_default="0")
        for name in (
            "consumption",
            "base_amount",
            "range_16_20_amount",
            "range_21_25_amount",
            "range_26_plus_amount",
            "tariff_total",
            "previous_debt",
            "fines_reuniones",
            "fines_mingas",
            "mora_amount",
            "garden_amount",
            "total_amount",
        )
    ]
    op.create_table(
        "bills",
        sa.Column("bill_id", GUID(), primary_key=True, nullable=False),
        _meter_fk(),
        sa.Column("period", sa.String(40), nullable=False),
        sa.Column("previous_reading", sa.Numeric(12, 2), nullable=True),
        sa.Column("current_reading", sa.Numeric(12, 2), nullable=False),
        *amount_columns,
        sa.Column(
            "payment_status",
            PAYMENT_STATUS_ENUM,
            nullable=False,
            server_default="PENDIENTE",
        ),
        sa.Column("payment_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("observations", sa.Text(), nullable=True),
        *_timestamps(with_update=True),
        sa.UniqueConstraint("meter_id", "period", name="bills_meter_period_key"),
    )
    op.create_index("bills_period_idx", "bills", ["period"])


def downgrade() -> None:
    op.drop_index("bills_period_idx", table_name="bills")
    op.drop_table("bills")
    op.drop_table("garden_values")
    op.drop_table("meter_fines")
    op.drop_table("debts")
    op.drop_table("tariffs")
    op.drop_index("ix_readings_meter_id", table_name="readings")
    op.drop_table("readings")
    op.drop_index("meters_status_idx", table_name="meters")
    op.drop_table("meters")

    bind = op.get_bind()
    for enum_type in (PAYMENT_STATUS_ENUM, TARIFF_STATUS_ENUM, METER_STATUS_ENUM):
        enum_type.drop(bind, checkfirst=True)
