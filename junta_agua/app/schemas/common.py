"""Shared schema definitions."""

from __future__ import annotations

from typing import Generic, Sequence, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """Standard shape for paginated listings."""

    items: Sequence[T]
    total: int = Field(..., ge=0)
    limit: int = Field(..., ge=1)
    skip: int = Field(..., ge=0)


class MeterPeriodKey(BaseModel):
    """Identifies the meter and billing period a record belongs to."""

    meter_id: str = Field(..., min_length=1, description="Code of the meter")
    period: str = Field(..., min_length=1, description="Billing period, e.g. 'MAYO 2025'")
