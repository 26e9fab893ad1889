"""SQLAlchemy model for monthly water bills."""

from __future__ import annotations

import enum
import uuid

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from ..database import Base
from ..db_types import GUID


class PaymentStatus(str, enum.Enum):
    """Collection state of a bill."""

    PENDIENTE = "PENDIENTE"
    ACREDITADO = "ACREDITADO"


class Bill(Base):
    """Composed bill for one meter and period.

    ``total_amount`` is always the sum of ``previous_debt``, ``tariff_total``,
    both fine columns, ``mora_amount`` and ``garden_amount``.
    """

    __tablename__ = "bills"
    __table_args__ = (UniqueConstraint("meter_id", "period", name="bills_meter_period_key"),)

    id = Column("bill_id", GUID(), primary_key=True, default=lambda: str(uuid.uuid4()))
    meter_id = Column(
        String(40),
        ForeignKey("meters.code_meter", onupdate="CASCADE"),
        nullable=False,
    )
    period = Column(String(40), nullable=False)
    previous_reading = Column(Numeric(12, 2), nullable=True)
    current_reading = Column(Numeric(12, 2), nullable=False)
    consumption = Column(Numeric(12, 2), nullable=False, default=0)
    base_amount = Column(Numeric(12, 2), nullable=False, default=0)
    range_16_20_amount = Column(Numeric(12, 2), nullable=False, default=0)
    range_21_25_amount = Column(Numeric(12, 2), nullable=False, default=0)
    range_26_plus_amount = Column(Numeric(12, 2), nullable=False, default=0)
    tariff_total = Column(Numeric(12, 2), nullable=False, default=0)
    previous_debt = Column(Numeric(12, 2), nullable=False, default=0)
    fines_reuniones = Column(Numeric(12, 2), nullable=False, default=0)
    fines_mingas = Column(Numeric(12, 2), nullable=False, default=0)
    mora_amount = Column(Numeric(12, 2), nullable=False, default=0)
    garden_amount = Column(Numeric(12, 2), nullable=False, default=0)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    payment_status = Column(
        Enum(
            PaymentStatus,
            name="bill_payment_status_enum",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=PaymentStatus.PENDIENTE,
        server_default=PaymentStatus.PENDIENTE.value,
    )
    payment_date = Column(DateTime(timezone=True), nullable=True)
    observations = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    meter = relationship("Meter", back_populates="bills")


Index("bills_period_idx", Bill.period)
