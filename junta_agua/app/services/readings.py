"""Business logic for meter readings."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from .. import models, schemas
from .billing_data import readings_as_points
from .errors import ValidationError
from .periods import normalize_period, period_sort_key
from .tariff_billing import calculate_consumption, resolve_previous_reading

LOGGER = logging.getLogger(__name__)


class ReadingService:
    """Stores one reading per meter and period and derives consumption from history."""

    @staticmethod
    def upsert_reading(db: Session, data: schemas.ReadingUpsert) -> Tuple[models.Reading, bool]:
        """Create or replace the reading for ``(meter_id, period)``.

        Returns the stored row and whether it was newly created.
        """

        if db.get(models.Meter, data.meter_id) is None:
            raise ValidationError(f"El medidor {data.meter_id} no existe")

        period = normalize_period(data.period)
        reading = (
            db.query(models.Reading)
            .filter(models.Reading.meter_id == data.meter_id, models.Reading.period == period)
            .first()
        )
        created = reading is None
        if created:
            reading = models.Reading(meter_id=data.meter_id, period=period)
        reading.value = data.value
        if data.photo_url is not None:
            reading.photo_url = data.photo_url

        db.add(reading)
        db.commit()
        db.refresh(reading)
        LOGGER.debug("%s reading for %s in %s", "Created" if created else "Updated", data.meter_id, period)
        return reading, created

    @staticmethod
    def previous_reading(db: Session, meter_id: str, period: str) -> Optional[Decimal]:
        rows = db.query(models.Reading).filter(models.Reading.meter_id == meter_id).all()
        return resolve_previous_reading(readings_as_points(rows), period)

    @staticmethod
    def list_readings(
        db: Session,
        *,
        period: Optional[str] = None,
        meter_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> Tuple[list[schemas.ReadingRead], int]:
        """List readings with the previous value and consumption of each one."""

        query = db.query(models.Reading)
        if meter_id:
            query = query.filter(models.Reading.meter_id == meter_id)
        rows = query.all()

        history: dict[str, list[models.Reading]] = {}
        for row in rows:
            history.setdefault(row.meter_id, []).append(row)

        wanted_period = normalize_period(period) if period else None
        selected = [row for row in rows if wanted_period is None or row.period == wanted_period]
        selected.sort(key=lambda row: (row.meter_id, period_sort_key(row.period)))
        total = len(selected)

        items = []
        for row in selected[max(skip, 0) : max(skip, 0) + max(limit, 1)]:
            previous = resolve_previous_reading(readings_as_points(history[row.meter_id]), row.period)
            items.append(
                schemas.ReadingRead(
                    id=row.id,
                    meter_id=row.meter_id,
                    period=row.period,
                    value=row.value,
                    photo_url=row.photo_url,
                    created_at=row.created_at,
                    previous_reading=previous,
                    consumption=calculate_consumption(row.value, previous),
                )
            )
        return items, total
