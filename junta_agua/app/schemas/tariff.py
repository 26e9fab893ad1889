from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.tariff import TariffStatus
from .common import PaginatedResponse


class TariffBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    min_consumption: Decimal = Field(default=Decimal("0"), ge=0)
    max_consumption: Optional[Decimal] = Field(
        default=None, description="Inclusive upper bound; empty for the open-ended band"
    )
    price_per_unit: Decimal = Field(default=Decimal("0"), ge=0)
    max_units: Optional[Decimal] = Field(default=None, ge=0)
    fixed_charge: Decimal = Field(default=Decimal("0"), ge=0)
    status: TariffStatus = TariffStatus.ACTIVE


class TariffCreate(TariffBase):
    order_index: Optional[int] = Field(default=None, ge=0)


class TariffUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    min_consumption: Optional[Decimal] = Field(default=None, ge=0)
    max_consumption: Optional[Decimal] = None
    price_per_unit: Optional[Decimal] = Field(default=None, ge=0)
    max_units: Optional[Decimal] = Field(default=None, ge=0)
    fixed_charge: Optional[Decimal] = Field(default=None, ge=0)
    order_index: Optional[int] = Field(default=None, ge=0)
    status: Optional[TariffStatus] = None


class TariffRead(TariffBase):
    id: int
    order_index: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TariffListResponse(PaginatedResponse[TariffRead]):
    pass


class TariffBreakdownLine(BaseModel):
    name: str
    min: Decimal
    max: Optional[Decimal] = None
    units: Decimal
    unit_price: Decimal
    amount: Decimal

    model_config = ConfigDict(from_attributes=True)


class BillingCalculationRead(BaseModel):
    consumption: Decimal
    base_amount: Decimal
    range_16_20_amount: Decimal
    range_21_25_amount: Decimal
    range_26_plus_amount: Decimal
    tariff_total: Decimal
    breakdown: list[TariffBreakdownLine] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
