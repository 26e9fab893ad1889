"""Data-access contract consumed by the bill composer and its SQLAlchemy implementation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models
from .errors import DataAccessError, ValidationError
from .periods import normalize_period
from .tariff_billing import ZERO, BreakdownLine, ReadingPoint, TariffBand, to_decimal
from .tariff_catalog import TariffCatalogService

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class FineRecord:
    fines_reuniones: Decimal = ZERO
    fines_mingas: Decimal = ZERO
    mora_percentage: Decimal = ZERO
    mora_amount: Decimal = ZERO


@dataclass
class ComposedBill:
    """A bill as produced by the composer, independent of any storage row."""

    meter_id: str
    period: str
    previous_reading: Optional[Decimal]
    current_reading: Decimal
    consumption: Decimal = ZERO
    base_amount: Decimal = ZERO
    range_16_20_amount: Decimal = ZERO
    range_21_25_amount: Decimal = ZERO
    range_26_plus_amount: Decimal = ZERO
    tariff_total: Decimal = ZERO
    previous_debt: Decimal = ZERO
    fines_reuniones: Decimal = ZERO
    fines_mingas: Decimal = ZERO
    mora_amount: Decimal = ZERO
    garden_amount: Decimal = ZERO
    total_amount: Decimal = ZERO
    payment_status: models.PaymentStatus = models.PaymentStatus.PENDIENTE
    payment_date: Optional[datetime] = None
    observations: Optional[str] = None
    breakdown: list[BreakdownLine] = field(default_factory=list)


_BILL_COLUMNS = (
    "previous_reading",
    "current_reading",
    "consumption",
    "base_amount",
    "range_16_20_amount",
    "range_21_25_amount",
    "range_26_plus_amount",
    "tariff_total",
    "previous_debt",
    "fines_reuniones",
    "fines_mingas",
    "mora_amount",
    "garden_amount",
    "total_amount",
    "payment_status",
    "payment_date",
    "observations",
)


class BillingDataAccess(Protocol):
    """Reads and writes the billing engine needs from the record store."""

    def get_active_tariff_bands(self) -> list[TariffBand]: ...

    def get_readings_for_meter(self, meter_id: str) -> list[ReadingPoint]: ...

    def get_readings_for_period(self, period: str) -> list[ReadingPoint]: ...

    def get_debt(self, meter_id: str, period: str) -> Optional[Decimal]: ...

    def get_fines(self, meter_id: str, period: str) -> Optional[FineRecord]: ...

    def get_garden_value(self, meter_id: str, period: str) -> Optional[Decimal]: ...

    def get_bill(self, meter_id: str, period: str) -> Optional[ComposedBill]: ...

    def save_bill(self, bill: ComposedBill) -> models.Bill: ...


def bill_from_row(row: models.Bill) -> ComposedBill:
    """Copy a stored bill into a :class:`ComposedBill`."""

    return ComposedBill(
        meter_id=row.meter_id,
        period=row.period,
        previous_reading=None if row.previous_reading is None else to_decimal(row.previous_reading),
        current_reading=to_decimal(row.current_reading),
        consumption=to_decimal(row.consumption),
        base_amount=to_decimal(row.base_amount),
        range_16_20_amount=to_decimal(row.range_16_20_amount),
        range_21_25_amount=to_decimal(row.range_21_25_amount),
        range_26_plus_amount=to_decimal(row.range_26_plus_amount),
        tariff_total=to_decimal(row.tariff_total),
        previous_debt=to_decimal(row.previous_debt),
        fines_reuniones=to_decimal(row.fines_reuniones),
        fines_mingas=to_decimal(row.fines_mingas),
        mora_amount=to_decimal(row.mora_amount),
        garden_amount=to_decimal(row.garden_amount),
        total_amount=to_decimal(row.total_amount),
        payment_status=row.payment_status or models.PaymentStatus.PENDIENTE,
        payment_date=row.payment_date,
        observations=row.observations,
    )


class SqlBillingDataAccess:
    """:class:`BillingDataAccess` backed by a SQLAlchemy session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_active_tariff_bands(self) -> list[TariffBand]:
        return TariffCatalogService.load_active_bands(self.db)

    def get_readings_for_meter(self, meter_id: str) -> list[ReadingPoint]:
        rows = self._run(
            "readings",
            lambda: self.db.query(models.Reading.period, models.Reading.value)
            .filter(models.Reading.meter_id == meter_id)
            .all(),
        )
        return [
            ReadingPoint(period=period, value=to_decimal(value), meter_id=meter_id)
            for period, value in rows
        ]

    def get_readings_for_period(self, period: str) -> list[ReadingPoint]:
        rows = self._run(
            "readings",
            lambda: self.db.query(models.Reading.meter_id, models.Reading.value)
            .join(models.Meter, models.Meter.code_meter == models.Reading.meter_id)
            .filter(
                models.Reading.period == normalize_period(period),
                models.Meter.status == models.MeterStatus.ACTIVE,
            )
            .order_by(models.Reading.meter_id.asc())
            .all(),
        )
        return [
            ReadingPoint(period=normalize_period(period), value=to_decimal(value), meter_id=meter_id)
            for meter_id, value in rows
        ]

    def get_debt(self, meter_id: str, period: str) -> Optional[Decimal]:
        row = self._run(
            "debts",
            lambda: self._for_meter_period(models.Debt, meter_id, period).first(),
        )
        return None if row is None else to_decimal(row.amount)

    def get_fines(self, meter_id: str, period: str) -> Optional[FineRecord]:
        row = self._run(
            "meter_fines",
            lambda: self._for_meter_period(models.MeterFine, meter_id, period).first(),
        )
        if row is None:
            return None
        return FineRecord(
            fines_reuniones=to_decimal(row.fines_reuniones),
            fines_mingas=to_decimal(row.fines_mingas),
            mora_percentage=to_decimal(row.mora_percentage),
            mora_amount=to_decimal(row.mora_amount),
        )

    def get_garden_value(self, meter_id: str, period: str) -> Optional[Decimal]:
        row = self._run(
            "garden_values",
            lambda: self._for_meter_period(models.GardenValue, meter_id, period).first(),
        )
        return None if row is None else to_decimal(row.amount)

    def get_bill(self, meter_id: str, period: str) -> Optional[ComposedBill]:
        row = self._run("bills", lambda: self._bill_row(meter_id, period))
        return None if row is None else bill_from_row(row)

    def save_bill(self, bill: ComposedBill) -> models.Bill:
        """Insert or update the bill row for ``(meter_id, period)``."""

        try:
            meter = self.db.get(models.Meter, bill.meter_id)
            if meter is None:
                raise ValidationError(
                    f"El medidor {bill.meter_id} no existe en la tabla de medidores"
                )
            if meter.status != models.MeterStatus.ACTIVE:
                LOGGER.warning("Saving bill for inactive meter %s", bill.meter_id)

            row = self._bill_row(bill.meter_id, bill.period)
            if row is None:
                row = models.Bill(meter_id=bill.meter_id, period=normalize_period(bill.period))
                self.db.add(row)
            for column in _BILL_COLUMNS:
                setattr(row, column, getattr(bill, column))
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            LOGGER.exception("Unable to save bill for %s (%s)", bill.meter_id, bill.period)
            raise DataAccessError(
                f"No se pudo guardar la factura del medidor {bill.meter_id}"
            ) from exc
        self.db.refresh(row)
        return row

    def _bill_row(self, meter_id: str, period: str) -> Optional[models.Bill]:
        return self._for_meter_period(models.Bill, meter_id, period).first()

    def _for_meter_period(self, model, meter_id: str, period: str):
        return self.db.query(model).filter(
            model.meter_id == meter_id, model.period == normalize_period(period)
        )

    def _run(self, table: str, query):
        try:
            return query()
        except SQLAlchemyError as exc:
            LOGGER.exception("Query against %s failed", table)
            raise DataAccessError(f"No se pudo consultar {table}") from exc


def readings_as_points(rows: Sequence[models.Reading]) -> list[ReadingPoint]:
    return [
        ReadingPoint(period=row.period, value=to_decimal(row.value), meter_id=row.meter_id)
        for row in rows
    ]
