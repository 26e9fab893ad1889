"""Per-meter, per-period charges that are added on top of the tariff."""

from __future__ import annotations

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    func,
)

from ..database import Base


class Debt(Base):
    """Outstanding balance carried into a period."""

    __tablename__ = "debts"
    __table_args__ = (
        UniqueConstraint("meter_id", "period", name="debts_meter_period_key"),
        CheckConstraint("amount >= 0", name="ck_debts_amount_non_negative"),
    )

    id = Column("debt_id", Integer, primary_key=True, autoincrement=True)
    meter_id = Column(String(40), ForeignKey("meters.code_meter", onupdate="CASCADE"), nullable=False)
    period = Column(String(40), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class MeterFine(Base):
    """Community fines and late-payment settings for a meter in a period."""

    __tablename__ = "meter_fines"
    __table_args__ = (
        UniqueConstraint("meter_id", "period", name="meter_fines_meter_period_key"),
        CheckConstraint(
            "fines_reuniones >= 0 AND fines_mingas >= 0",
            name="ck_meter_fines_non_negative",
        ),
        CheckConstraint(
            "mora_percentage >= 0 AND mora_amount >= 0",
            name="ck_meter_fines_mora_non_negative",
        ),
    )

    id = Column("meter_fine_id", Integer, primary_key=True, autoincrement=True)
    meter_id = Column(String(40), ForeignKey("meters.code_meter", onupdate="CASCADE"), nullable=False)
    period = Column(String(40), nullable=False)
    fines_reuniones = Column(Numeric(12, 2), nullable=False, default=0)
    fines_mingas = Column(Numeric(12, 2), nullable=False, default=0)
    mora_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    # A positive value overrides the percentage-based mora.
    mora_amount = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class GardenValue(Base):
    """Garden fee charged to a meter in a period."""

    __tablename__ = "garden_values"
    __table_args__ = (
        UniqueConstraint("meter_id", "period", name="garden_values_meter_period_key"),
        CheckConstraint("amount >= 0", name="ck_garden_values_amount_non_negative"),
    )

    id = Column("garden_value_id", Integer, primary_key=True, autoincrement=True)
    meter_id = Column(String(40), ForeignKey("meters.code_meter", onupdate="CASCADE"), nullable=False)
    period = Column(String(40), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
