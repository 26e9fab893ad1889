"""Bill composition, period-wide billing runs and manual bill edits."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Tuple, TypeVar

from sqlalchemy.orm import Session

from .. import models
from .billing_data import BillingDataAccess, ComposedBill, FineRecord
from .errors import (
    BillingError,
    BillNotFoundError,
    CompositionError,
    DataAccessError,
    ValidationError,
)
from .periods import normalize_period, sort_periods
from .tariff_billing import (
    ZERO,
    ReadingPoint,
    TariffBand,
    allocate,
    calculate_consumption,
    resolve_previous_reading,
    to_decimal,
)

LOGGER = logging.getLogger(__name__)

CENTS = Decimal("0.01")
HUNDRED = Decimal("100")

T = TypeVar("T")

EDITABLE_AMOUNT_FIELDS = (
    "previous_debt",
    "fines_reuniones",
    "fines_mingas",
    "mora_amount",
    "garden_amount",
)
EDITABLE_READING_FIELDS = ("current_reading", "previous_reading")


def compute_total_amount(
    previous_debt: Decimal,
    tariff_total: Decimal,
    fines_reuniones: Decimal,
    fines_mingas: Decimal,
    mora_amount: Decimal,
    garden_amount: Decimal,
) -> Decimal:
    return (
        previous_debt
        + tariff_total
        + fines_reuniones
        + fines_mingas
        + mora_amount
        + garden_amount
    )


def recalculate_total(bill: ComposedBill) -> ComposedBill:
    """Reset ``total_amount`` from its six components."""

    bill.total_amount = compute_total_amount(
        bill.previous_debt,
        bill.tariff_total,
        bill.fines_reuniones,
        bill.fines_mingas,
        bill.mora_amount,
        bill.garden_amount,
    )
    return bill


def resolve_mora(previous_debt: Decimal, fines: Optional[FineRecord]) -> Decimal:
    """Mora is the fixed override when set, otherwise a percentage of the debt."""

    if fines is None:
        return ZERO
    if fines.mora_amount > ZERO:
        return fines.mora_amount
    mora = previous_debt * fines.mora_percentage / HUNDRED
    return mora.quantize(CENTS, rounding=ROUND_HALF_UP)


def _apply_tariff(bill: ComposedBill, bands: Sequence[TariffBand]) -> None:
    calculation = allocate(bill.consumption, bands)
    bill.base_amount = calculation.base_amount
    bill.range_16_20_amount = calculation.range_16_20_amount
    bill.range_21_25_amount = calculation.range_21_25_amount
    bill.range_26_plus_amount = calculation.range_26_plus_amount
    bill.tariff_total = calculation.tariff_total
    bill.breakdown = list(calculation.breakdown)


def compose(
    reading: ReadingPoint,
    previous_reading: Optional[Decimal],
    bands: Sequence[TariffBand],
    previous_debt: Decimal = ZERO,
    fines_reuniones: Decimal = ZERO,
    fines_mingas: Decimal = ZERO,
    mora_amount: Decimal = ZERO,
    garden_amount: Decimal = ZERO,
) -> ComposedBill:
    """Build a new bill for ``reading`` using the given catalog snapshot."""

    try:
        current = to_decimal(reading.value)
        previous = None if previous_reading is None else to_decimal(previous_reading)
        bill = ComposedBill(
            meter_id=reading.meter_id or "",
            period=normalize_period(reading.period),
            previous_reading=previous,
            current_reading=current,
            consumption=calculate_consumption(current, previous),
            previous_debt=to_decimal(previous_debt),
            fines_reuniones=to_decimal(fines_reuniones),
            fines_mingas=to_decimal(fines_mingas),
            mora_amount=to_decimal(mora_amount),
            garden_amount=to_decimal(garden_amount),
            payment_status=models.PaymentStatus.PENDIENTE,
        )
        _apply_tariff(bill, bands)
    except DataAccessError:
        raise
    except Exception as exc:
        raise CompositionError(
            f"No se pudo calcular la factura del medidor {reading.meter_id}: {exc}"
        ) from exc
    return recalculate_total(bill)


def apply_manual_edit(
    bill: ComposedBill,
    changes: Mapping[str, Any],
    bands: Optional[Sequence[TariffBand]] = None,
) -> ComposedBill:
    """Return a copy of ``bill`` with ``changes`` applied and totals recomputed.

    The input bill is left untouched, so a rejected edit never leaks into
    stored state. Changing a reading recomputes the consumption and, when
    ``bands`` are provided, re-prices the tariff buckets.
    """

    unknown = set(changes) - {*EDITABLE_AMOUNT_FIELDS, *EDITABLE_READING_FIELDS, "observations"}
    if unknown:
        raise ValidationError(f"Campos no editables: {', '.join(sorted(unknown))}")

    for field_name in (*EDITABLE_AMOUNT_FIELDS, *EDITABLE_READING_FIELDS):
        if field_name not in changes or changes[field_name] is None:
            continue
        if to_decimal(changes[field_name]) < ZERO:
            raise ValidationError(f"{field_name} no puede ser negativo")
    if "current_reading" in changes and changes["current_reading"] is None:
        raise ValidationError("current_reading es requerido")

    edited = replace(bill, breakdown=list(bill.breakdown))
    for field_name in EDITABLE_AMOUNT_FIELDS:
        if field_name in changes:
            setattr(edited, field_name, to_decimal(changes[field_name]))
    if "observations" in changes:
        edited.observations = changes["observations"] or None

    if any(field_name in changes for field_name in EDITABLE_READING_FIELDS):
        if "current_reading" in changes:
            edited.current_reading = to_decimal(changes["current_reading"])
        if "previous_reading" in changes:
            previous = changes["previous_reading"]
            edited.previous_reading = None if previous is None else to_decimal(previous)
        edited.consumption = calculate_consumption(edited.current_reading, edited.previous_reading)
        if bands is not None:
            _apply_tariff(edited, bands)

    return recalculate_total(edited)


@dataclass
class BillingFailure:
    meter_id: str
    message: str


@dataclass
class BillingRunResult:
    """Outcome of a period-wide billing run."""

    period: str
    bills: list[ComposedBill] = field(default_factory=list)
    failures: list[BillingFailure] = field(default_factory=list)
    saved: int = 0

    @property
    def succeeded(self) -> int:
        return len(self.bills)

    @property
    def failed(self) -> int:
        return len(self.failures)


def _optional_lookup(label: str, meter_id: str, lookup: Callable[[], Optional[T]]) -> Optional[T]:
    try:
        return lookup()
    except DataAccessError as exc:
        LOGGER.warning("Ignoring %s lookup failure for meter %s: %s", label, meter_id, exc)
        return None


class BillingService:
    """Runs the composer against a :class:`BillingDataAccess`."""

    @staticmethod
    def compose_for_meter(
        access: BillingDataAccess,
        reading: ReadingPoint,
        bands: Sequence[TariffBand],
    ) -> ComposedBill:
        """Compose the bill for one reading, pulling history and extra charges."""

        meter_id = reading.meter_id or ""
        period = reading.period
        history = access.get_readings_for_meter(meter_id)
        previous_reading = resolve_previous_reading(history, period)

        debt = _optional_lookup("debt", meter_id, lambda: access.get_debt(meter_id, period))
        fines = _optional_lookup("fines", meter_id, lambda: access.get_fines(meter_id, period))
        garden = _optional_lookup(
            "garden", meter_id, lambda: access.get_garden_value(meter_id, period)
        )

        previous_debt = debt if debt is not None else ZERO
        return compose(
            reading,
            previous_reading,
            bands,
            previous_debt=previous_debt,
            fines_reuniones=fines.fines_reuniones if fines else ZERO,
            fines_mingas=fines.fines_mingas if fines else ZERO,
            mora_amount=resolve_mora(previous_debt, fines),
            garden_amount=garden if garden is not None else ZERO,
        )

    @staticmethod
    def calculate_period(
        access: BillingDataAccess, period: str, *, persist: bool = False
    ) -> BillingRunResult:
        """Compose every bill of ``period`` one meter at a time.

        The catalog is loaded once and shared by all meters. A meter that fails
        is recorded in ``failures`` and the run moves on to the next one.
        """

        normalized = normalize_period(period)
        result = BillingRunResult(period=normalized)
        readings = access.get_readings_for_period(normalized)
        if not readings:
            LOGGER.info("No readings registered for %s", normalized)
            return result

        try:
            bands = access.get_active_tariff_bands()
        except DataAccessError as exc:
            LOGGER.error("Tariff catalog unavailable for %s: %s", normalized, exc)
            result.failures = [
                BillingFailure(meter_id=reading.meter_id or "", message=str(exc))
                for reading in readings
            ]
            return result

        for reading in readings:
            meter_id = reading.meter_id or ""
            try:
                bill = BillingService.compose_for_meter(access, reading, bands)
                existing = access.get_bill(meter_id, normalized)
                if existing is not None:
                    bill.payment_status = existing.payment_status
                    bill.payment_date = existing.payment_date
                    bill.observations = existing.observations
                if persist:
                    access.save_bill(bill)
                    result.saved += 1
            except BillingError as exc:
                LOGGER.warning("Billing failed for meter %s (%s): %s", meter_id, normalized, exc)
                result.failures.append(BillingFailure(meter_id=meter_id, message=str(exc)))
                continue
            result.bills.append(bill)

        LOGGER.info(
            "Billing run %s finished: %s calculated, %s failed, %s saved",
            normalized,
            result.succeeded,
            result.failed,
            result.saved,
        )
        return result

    @staticmethod
    def save_bills(access: BillingDataAccess, bills: Iterable[ComposedBill]) -> BillingRunResult:
        """Persist ``bills`` one by one, counting failures instead of stopping.

        Only the readings and the extra charges are taken from the caller.
        Consumption, tariff buckets and totals are priced again against the
        active catalog, which is loaded once for the whole batch.
        """

        bills = list(bills)
        period = normalize_period(bills[0].period) if bills else ""
        result = BillingRunResult(period=period)
        if not bills:
            return result

        bands = access.get_active_tariff_bands()
        for bill in bills:
            try:
                bill.period = normalize_period(bill.period)
                bill.consumption = calculate_consumption(bill.current_reading, bill.previous_reading)
                _apply_tariff(bill, bands)
                access.save_bill(recalculate_total(bill))
            except BillingError as exc:
                LOGGER.warning("Could not save bill for meter %s: %s", bill.meter_id, exc)
                result.failures.append(BillingFailure(meter_id=bill.meter_id, message=str(exc)))
                continue
            result.bills.append(bill)
            result.saved += 1
        return result

    @staticmethod
    def edit_bill(
        access: BillingDataAccess,
        meter_id: str,
        period: str,
        changes: Mapping[str, Any],
    ) -> models.Bill:
        """Apply a manual edit to a stored bill and save it."""

        stored = access.get_bill(meter_id, period)
        if stored is None:
            raise BillNotFoundError(f"No existe factura para {meter_id} en {normalize_period(period)}")

        bands = None
        if any(field_name in changes for field_name in EDITABLE_READING_FIELDS):
            bands = access.get_active_tariff_bands()
        edited = apply_manual_edit(stored, changes, bands)
        return access.save_bill(edited)

    @staticmethod
    def toggle_payment_status(
        access: BillingDataAccess,
        meter_id: str,
        period: str,
        *,
        now: Optional[datetime] = None,
    ) -> models.Bill:
        stored = access.get_bill(meter_id, period)
        if stored is None:
            raise BillNotFoundError(f"No existe factura para {meter_id} en {normalize_period(period)}")

        if stored.payment_status == models.PaymentStatus.ACREDITADO:
            stored.payment_status = models.PaymentStatus.PENDIENTE
            stored.payment_date = None
        else:
            stored.payment_status = models.PaymentStatus.ACREDITADO
            stored.payment_date = now or datetime.now(timezone.utc)
        return access.save_bill(stored)

    @staticmethod
    def list_bills(
        db: Session, period: str, *, skip: int = 0, limit: int = 500
    ) -> Tuple[list[models.Bill], int]:
        query = db.query(models.Bill).filter(models.Bill.period == normalize_period(period))
        total = query.count()
        items = (
            query.order_by(models.Bill.meter_id.asc())
            .offset(max(skip, 0))
            .limit(max(limit, 1))
            .all()
        )
        return items, total

    @staticmethod
    def list_periods(db: Session) -> list[str]:
        """Periods that have readings, newest first."""

        return sort_periods(period for (period,) in db.query(models.Reading.period).distinct().all())
