from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field


class DashboardSummary(BaseModel):
    """Counters shown on the landing page for one period."""

    period: str
    total_meters: int = Field(..., ge=0)
    active_meters: int = Field(..., ge=0)
    total_readings: int = Field(..., ge=0)
    total_comments: int = Field(..., ge=0)
    period_readings: int = Field(..., ge=0)
    period_consumption: Decimal = Field(..., ge=0)
    inactive_meters: list[str] = Field(default_factory=list)
