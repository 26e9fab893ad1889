"""SQLAlchemy model for monthly meter readings."""

from __future__ import annotations

import uuid

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from ..database import Base
from ..db_types import GUID


class Reading(Base):
    """Cumulative meter value captured for one billing period."""

    __tablename__ = "readings"
    __table_args__ = (
        UniqueConstraint("meter_id", "period", name="readings_meter_period_key"),
        CheckConstraint("value >= 0", name="ck_readings_value_non_negative"),
    )

    id = Column("reading_id", GUID(), primary_key=True, default=lambda: str(uuid.uuid4()))
    meter_id = Column(
        String(40),
        ForeignKey("meters.code_meter", onupdate="CASCADE", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    period = Column(String(40), nullable=False)
    value = Column(Numeric(12, 2), nullable=False)
    photo_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    meter = relationship("Meter", back_populates="readings")
