"""SQLAlchemy model for water meters."""

from __future__ import annotations

import enum

from sqlalchemy import Column, DateTime, Enum, Index, String, Text, func
from sqlalchemy.orm import relationship

from ..database import Base


class MeterStatus(str, enum.Enum):
    """Operational status of a meter."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class Meter(Base):
    """A water meter installed at a household, identified by its printed code."""

    __tablename__ = "meters"

    code_meter = Column(String(40), primary_key=True)
    location = Column(String(200), nullable=False, default="", server_default="")
    # Owner name ("Apellidos y Nombres") as written on the billing sheet.
    description = Column(Text, nullable=True)
    status = Column(
        Enum(
            MeterStatus,
            name="meter_status_enum",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=MeterStatus.ACTIVE,
        server_default=MeterStatus.ACTIVE.value,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    readings = relationship("Reading", back_populates="meter", cascade="all, delete-orphan")
    bills = relationship("Bill", back_populates="meter")


Index("meters_status_idx", Meter.status)
