"""Business logic for the meter registry."""

from __future__ import annotations

from typing import Iterable, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models, schemas
from .errors import ValidationError


class MeterService:
    """CRUD operations for meters."""

    @staticmethod
    def list_meters(
        db: Session,
        *,
        status: Optional[models.MeterStatus] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> Tuple[Iterable[models.Meter], int]:
        query = db.query(models.Meter)
        if status is not None:
            query = query.filter(models.Meter.status == status)
        if search:
            pattern = f"%{search.strip().lower()}%"
            query = query.filter(
                or_(
                    func.lower(models.Meter.code_meter).like(pattern),
                    func.lower(models.Meter.description).like(pattern),
                    func.lower(models.Meter.location).like(pattern),
                )
            )

        total = query.count()
        items = (
            query.order_by(models.Meter.code_meter.asc())
            .offset(max(skip, 0))
            .limit(max(limit, 1))
            .all()
        )
        return items, total

    @staticmethod
    def get_meter(db: Session, code_meter: str) -> Optional[models.Meter]:
        return db.get(models.Meter, code_meter)

    @staticmethod
    def create_meter(db: Session, data: schemas.MeterCreate) -> models.Meter:
        payload = data.model_dump()
        payload["code_meter"] = payload["code_meter"].strip()
        if db.get(models.Meter, payload["code_meter"]) is not None:
            raise ValidationError(f"Ya existe un medidor con el código {payload['code_meter']}")
        meter = models.Meter(**payload)
        db.add(meter)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise ValidationError(f"Ya existe un medidor con el código {meter.code_meter}") from exc
        db.refresh(meter)
        return meter

    @staticmethod
    def update_meter(db: Session, meter: models.Meter, data: schemas.MeterUpdate) -> models.Meter:
        for field_name, value in data.model_dump(exclude_unset=True).items():
            setattr(meter, field_name, value)
        db.add(meter)
        db.commit()
        db.refresh(meter)
        return meter
