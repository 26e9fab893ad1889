"""Landing page counters."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from .. import models, schemas
from .billing_data import readings_as_points
from .periods import current_period, normalize_period
from .tariff_billing import ZERO, calculate_consumption, resolve_previous_reading


class DashboardService:
    @staticmethod
    def summary(db: Session, period: Optional[str] = None) -> schemas.DashboardSummary:
        """Registry counters plus reading activity for ``period``.

        ``period`` defaults to the current reading period. Consumption is the
        sum over meters read in that period of the delta against each meter's
        previous reading.
        """

        target = normalize_period(period) if period else current_period()

        history: dict[str, list[models.Reading]] = {}
        for reading in db.query(models.Reading).all():
            history.setdefault(reading.meter_id, []).append(reading)

        period_readings = 0
        consumption = ZERO
        for rows in history.values():
            current = next((row for row in rows if row.period == target), None)
            if current is None:
                continue
            period_readings += 1
            previous = resolve_previous_reading(readings_as_points(rows), target)
            consumption += calculate_consumption(current.value, previous)

        inactive = (
            db.query(models.Meter.code_meter)
            .filter(models.Meter.status != models.MeterStatus.ACTIVE)
            .order_by(models.Meter.code_meter.asc())
            .all()
        )
        return schemas.DashboardSummary(
            period=target,
            total_meters=db.query(models.Meter).count(),
            active_meters=db.query(models.Meter)
            .filter(models.Meter.status == models.MeterStatus.ACTIVE)
            .count(),
            total_readings=sum(len(rows) for rows in history.values()),
            total_comments=db.query(models.Comment).count(),
            period_readings=period_readings,
            period_consumption=Decimal(consumption),
            inactive_meters=[code for (code,) in inactive],
        )
