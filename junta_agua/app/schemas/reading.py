from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .common import MeterPeriodKey, PaginatedResponse


class ReadingUpsert(MeterPeriodKey):
    value: Decimal = Field(..., ge=0, description="Cumulative value shown by the meter")
    photo_url: Optional[str] = None


class ReadingRead(BaseModel):
    """Stored reading with its previous value and derived consumption."""

    id: str
    meter_id: str
    period: str
    value: Decimal
    photo_url: Optional[str] = None
    created_at: datetime
    previous_reading: Optional[Decimal] = None
    consumption: Decimal = Decimal("0")

    model_config = ConfigDict(from_attributes=True)


class ReadingListResponse(PaginatedResponse[ReadingRead]):
    pass


class PreviousReadingResponse(BaseModel):
    meter_id: str
    period: str
    previous_reading: Optional[Decimal] = None
