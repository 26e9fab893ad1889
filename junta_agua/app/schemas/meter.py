from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.meter import MeterStatus
from .common import PaginatedResponse


class MeterBase(BaseModel):
    location: str = Field(default="", max_length=200, description="Sector or address of the meter")
    description: Optional[str] = Field(default=None, description="Owner full name")
    status: MeterStatus = MeterStatus.ACTIVE


class MeterCreate(MeterBase):
    code_meter: str = Field(..., min_length=1, max_length=40, description="Printed meter code")


class MeterUpdate(BaseModel):
    location: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None
    status: Optional[MeterStatus] = None


class MeterRead(MeterBase):
    code_meter: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MeterListResponse(PaginatedResponse[MeterRead]):
    pass
