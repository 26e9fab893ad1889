"""Upserts for debts, fines and garden values attached to a meter and period."""

from __future__ import annotations

from typing import Iterable, Type, TypeVar

from sqlalchemy.orm import Session

from .. import models, schemas
from .errors import ValidationError
from .periods import normalize_period

ChargeModel = TypeVar("ChargeModel", models.Debt, models.MeterFine, models.GardenValue)


class MeterChargeService:
    """Maintains the optional per-meter charges read by the bill composer."""

    @staticmethod
    def _upsert(db: Session, model: Type[ChargeModel], meter_id: str, period: str, values: dict) -> ChargeModel:
        if db.get(models.Meter, meter_id) is None:
            raise ValidationError(f"El medidor {meter_id} no existe")

        normalized = normalize_period(period)
        record = (
            db.query(model)
            .filter(model.meter_id == meter_id, model.period == normalized)
            .first()
        )
        if record is None:
            record = model(meter_id=meter_id, period=normalized)
        for field_name, value in values.items():
            setattr(record, field_name, value)
        db.add(record)
        db.commit()
        db.refresh(record)
        return record

    @staticmethod
    def upsert_debt(db: Session, data: schemas.DebtUpsert) -> models.Debt:
        return MeterChargeService._upsert(
            db, models.Debt, data.meter_id, data.period, {"amount": data.amount}
        )

    @staticmethod
    def upsert_fines(db: Session, data: schemas.MeterFineUpsert) -> models.MeterFine:
        values = data.model_dump(exclude={"meter_id", "period"})
        return MeterChargeService._upsert(db, models.MeterFine, data.meter_id, data.period, values)

    @staticmethod
    def upsert_garden_value(db: Session, data: schemas.GardenValueUpsert) -> models.GardenValue:
        return MeterChargeService._upsert(
            db, models.GardenValue, data.meter_id, data.period, {"amount": data.amount}
        )

    @staticmethod
    def list_for_period(db: Session, model: Type[ChargeModel], period: str) -> Iterable[ChargeModel]:
        return (
            db.query(model)
            .filter(model.period == normalize_period(period))
            .order_by(model.meter_id.asc())
            .all()
        )
