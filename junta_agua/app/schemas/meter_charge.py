from __future__ import annotations

from decimal import Decimal

from pydantic import ConfigDict, Field

from .common import MeterPeriodKey


class DebtUpsert(MeterPeriodKey):
    amount: Decimal = Field(..., ge=0, description="Balance carried into the period")


class DebtRead(DebtUpsert):
    id: int

    model_config = ConfigDict(from_attributes=True)


class MeterFineUpsert(MeterPeriodKey):
    fines_reuniones: Decimal = Field(default=Decimal("0"), ge=0)
    fines_mingas: Decimal = Field(default=Decimal("0"), ge=0)
    mora_percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    mora_amount: Decimal = Field(
        default=Decimal("0"), ge=0, description="Fixed mora; overrides the percentage when positive"
    )


class MeterFineRead(MeterFineUpsert):
    id: int

    model_config = ConfigDict(from_attributes=True)


class GardenValueUpsert(MeterPeriodKey):
    amount: Decimal = Field(..., ge=0)


class GardenValueRead(GardenValueUpsert):
    id: int

    model_config = ConfigDict(from_attributes=True)
