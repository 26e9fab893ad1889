from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.calculation_param import ParamType


class CalculationParamBase(BaseModel):
    param_name: str = Field(..., min_length=1, max_length=120)
    param_value: str = Field(..., min_length=1, max_length=255)
    param_type: ParamType = ParamType.NUMBER
    description: Optional[str] = None
    category: Optional[str] = Field(default="general", max_length=40)
    is_active: bool = True


class CalculationParamCreate(CalculationParamBase):
    param_key: str = Field(..., min_length=1, max_length=80, description="e.g. 'mora_percentage'")


class CalculationParamUpdate(BaseModel):
    """The key is fixed once created."""

    param_name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    param_value: Optional[str] = Field(default=None, min_length=1, max_length=255)
    param_type: Optional[ParamType] = None
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=40)
    is_active: Optional[bool] = None


class CalculationParamRead(CalculationParamBase):
    id: int
    param_key: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
