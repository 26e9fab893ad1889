"""SQLAlchemy model for the progressive tariff catalog."""

from __future__ import annotations

import enum

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    Integer,
    Numeric,
    String,
    func,
)

from ..database import Base


class TariffStatus(str, enum.Enum):
    """Whether a band participates in billing runs."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class Tariff(Base):
    """One band of the progressive water tariff."""

    __tablename__ = "tariffs"
    __table_args__ = (
        CheckConstraint("min_consumption >= 0", name="ck_tariffs_min_non_negative"),
        CheckConstraint(
            "max_consumption IS NULL OR max_consumption > min_consumption",
            name="ck_tariffs_valid_range",
        ),
        CheckConstraint("price_per_unit >= 0", name="ck_tariffs_price_non_negative"),
        CheckConstraint("fixed_charge >= 0", name="ck_tariffs_fixed_non_negative"),
        CheckConstraint(
            "max_units IS NULL OR max_units >= 0", name="ck_tariffs_max_units_non_negative"
        ),
    )

    id = Column("tariff_id", Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    min_consumption = Column(Numeric(12, 2), nullable=False, default=0)
    max_consumption = Column(Numeric(12, 2), nullable=True)
    price_per_unit = Column(Numeric(10, 4), nullable=False, default=0, server_default="0")
    max_units = Column(Numeric(12, 2), nullable=True)
    fixed_charge = Column(Numeric(10, 2), nullable=False, default=0, server_default="0")
    order_index = Column(Integer, nullable=False, default=0, server_default="0")
    status = Column(
        Enum(
            TariffStatus,
            name="tariff_status_enum",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=TariffStatus.ACTIVE,
        server_default=TariffStatus.ACTIVE.value,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
