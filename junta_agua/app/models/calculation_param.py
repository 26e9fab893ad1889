"""SQLAlchemy model for the named calculation parameters catalog."""

from __future__ import annotations

import enum

from sqlalchemy import Boolean, Column, DateTime, Enum, Integer, String, Text, func

from ..database import Base


class ParamType(str, enum.Enum):
    """How ``param_value`` should be interpreted."""

    NUMBER = "number"
    TEXT = "text"
    FORMULA = "formula"
    BOOLEAN = "boolean"


class CalculationParam(Base):
    """Key/value setting used when preparing bills (fine amounts, mora rate...)."""

    __tablename__ = "calculation_params"

    id = Column("param_id", Integer, primary_key=True, autoincrement=True)
    param_key = Column(String(80), nullable=False, unique=True)
    param_name = Column(String(120), nullable=False)
    param_value = Column(String(255), nullable=False)
    param_type = Column(
        Enum(
            ParamType,
            name="calculation_param_type_enum",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=ParamType.NUMBER,
        server_default=ParamType.NUMBER.value,
    )
    description = Column(Text, nullable=True)
    category = Column(String(40), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default="1")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
