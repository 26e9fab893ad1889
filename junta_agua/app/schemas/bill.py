from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.bill import PaymentStatus
from .common import MeterPeriodKey, PaginatedResponse
from .tariff import TariffBreakdownLine


class BillCharges(BaseModel):
    previous_reading: Optional[Decimal] = Field(default=None, ge=0)
    current_reading: Decimal = Field(..., ge=0)
    previous_debt: Decimal = Field(default=Decimal("0"), ge=0)
    fines_reuniones: Decimal = Field(default=Decimal("0"), ge=0)
    fines_mingas: Decimal = Field(default=Decimal("0"), ge=0)
    mora_amount: Decimal = Field(default=Decimal("0"), ge=0)
    garden_amount: Decimal = Field(default=Decimal("0"), ge=0)


class BillAmounts(BillCharges):
    consumption: Decimal = Field(default=Decimal("0"), ge=0)
    base_amount: Decimal = Field(default=Decimal("0"), ge=0)
    range_16_20_amount: Decimal = Field(default=Decimal("0"), ge=0)
    range_21_25_amount: Decimal = Field(default=Decimal("0"), ge=0)
    range_26_plus_amount: Decimal = Field(default=Decimal("0"), ge=0)
    tariff_total: Decimal = Field(default=Decimal("0"), ge=0)


class BillSave(MeterPeriodKey, BillCharges):
    """Bill sent back by the billing grid for an explicit save.

    Consumption, tariff buckets and totals sent by the client are ignored;
    they are priced again from the readings on save.
    """

    payment_status: PaymentStatus = PaymentStatus.PENDIENTE
    observations: Optional[str] = None


class BillEdit(BaseModel):
    """Fields an operator may change on a stored bill."""

    current_reading: Optional[Decimal] = None
    previous_reading: Optional[Decimal] = None
    previous_debt: Optional[Decimal] = None
    fines_reuniones: Optional[Decimal] = None
    fines_mingas: Optional[Decimal] = None
    mora_amount: Optional[Decimal] = None
    garden_amount: Optional[Decimal] = None
    observations: Optional[str] = None


class ComposedBillRead(BillAmounts):
    meter_id: str
    period: str
    total_amount: Decimal
    payment_status: PaymentStatus
    payment_date: Optional[datetime] = None
    observations: Optional[str] = None
    breakdown: list[TariffBreakdownLine] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class BillRead(BillAmounts):
    id: str
    meter_id: str
    period: str
    total_amount: Decimal
    payment_status: PaymentStatus
    payment_date: Optional[datetime] = None
    observations: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BillListResponse(PaginatedResponse[BillRead]):
    pass


class BillingFailureRead(BaseModel):
    meter_id: str
    message: str

    model_config = ConfigDict(from_attributes=True)


class BillingRunResponse(BaseModel):
    """Summary of a period-wide billing run or bulk save."""

    period: str
    succeeded: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    saved: int = Field(..., ge=0)
    bills: list[ComposedBillRead] = Field(default_factory=list)
    failures: list[BillingFailureRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
