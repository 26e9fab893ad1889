"""Progressive tariff allocation and the reading arithmetic that feeds it.

Everything in this module is pure: callers hand in the tariff bands and the
readings, nothing here touches the database. Bands are applied in catalog
order (``order_index``) while the reporting bucket of each per-unit band is
decided by its numeric range, so reordering bands in the catalog never moves
money between the legacy ``16-20`` / ``21-25`` / ``26+`` columns.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence

from .errors import ValidationError
from .periods import normalize_period, period_sort_key

ZERO = Decimal("0")
ONE = Decimal("1")

RANGE_16_20 = (Decimal("16"), Decimal("20"))
RANGE_21_25 = (Decimal("21"), Decimal("25"))
RANGE_26_PLUS_FROM = Decimal("26")


def to_decimal(value: Any, *, default: Decimal = ZERO) -> Decimal:
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _optional_decimal(value: Any) -> Optional[Decimal]:
    return None if value is None else to_decimal(value)


class TariffBucket(str, enum.Enum):
    """Reporting columns of the billing sheet."""

    BASE = "base"
    RANGE_16_20 = "range_16_20"
    RANGE_21_25 = "range_21_25"
    RANGE_26_PLUS = "range_26_plus"


@dataclass(frozen=True)
class TariffBand:
    """Immutable snapshot of one tariff band used during a billing run."""

    name: str
    min_consumption: Decimal
    max_consumption: Optional[Decimal] = None
    price_per_unit: Decimal = ZERO
    max_units: Optional[Decimal] = None
    fixed_charge: Decimal = ZERO
    order_index: int = 0
    status: str = "active"

    @property
    def is_fixed_charge(self) -> bool:
        return self.fixed_charge > ZERO

    @property
    def is_per_unit(self) -> bool:
        return not self.is_fixed_charge and self.price_per_unit > ZERO

    @classmethod
    def from_record(cls, record: Any) -> "TariffBand":
        """Build a band from an ORM row or any object exposing the same attributes."""

        if isinstance(record, cls):
            return record
        status = getattr(record, "status", "active")
        return cls(
            name=record.name,
            min_consumption=to_decimal(record.min_consumption),
            max_consumption=_optional_decimal(record.max_consumption),
            price_per_unit=to_decimal(record.price_per_unit),
            max_units=_optional_decimal(getattr(record, "max_units", None)),
            fixed_charge=to_decimal(getattr(record, "fixed_charge", None)),
            order_index=int(getattr(record, "order_index", 0) or 0),
            status=getattr(status, "value", status),
        )


@dataclass(frozen=True)
class BreakdownLine:
    """Contribution of one band, kept for audit and display."""

    name: str
    min: Decimal
    max: Optional[Decimal]
    units: Decimal
    unit_price: Decimal
    amount: Decimal


@dataclass
class BillingCalculation:
    consumption: Decimal
    base_amount: Decimal = ZERO
    range_16_20_amount: Decimal = ZERO
    range_21_25_amount: Decimal = ZERO
    range_26_plus_amount: Decimal = ZERO
    breakdown: list[BreakdownLine] = field(default_factory=list)

    @property
    def tariff_total(self) -> Decimal:
        return (
            self.base_amount
            + self.range_16_20_amount
            + self.range_21_25_amount
            + self.range_26_plus_amount
        )

    def add_to_bucket(self, bucket: TariffBucket, amount: Decimal) -> None:
        attribute = f"{bucket.value}_amount"
        setattr(self, attribute, getattr(self, attribute) + amount)


@dataclass(frozen=True)
class ReadingPoint:
    """A meter value for a period, as returned by the record store."""

    period: str
    value: Decimal
    meter_id: Optional[str] = None


def _within(value: Decimal, bounds: tuple[Decimal, Decimal]) -> bool:
    return bounds[0] <= value <= bounds[1]


def bucket_for_band(band: TariffBand) -> Optional[TariffBucket]:
    """Return the reporting bucket of a per-unit band, ``None`` for the base range."""

    low, high = band.min_consumption, band.max_consumption
    if _within(low, RANGE_16_20) and (high is None or high <= RANGE_16_20[1]):
        return TariffBucket.RANGE_16_20
    if _within(low, RANGE_21_25) and (high is None or high <= RANGE_21_25[1]):
        return TariffBucket.RANGE_21_25
    if low >= RANGE_26_PLUS_FROM:
        return TariffBucket.RANGE_26_PLUS
    return None


def billable_units(band: TariffBand, consumption: Decimal) -> Decimal:
    """Units of ``consumption`` that fall inside ``band``, honouring ``max_units``."""

    if consumption < band.min_consumption:
        return ZERO

    previous_limit = band.min_consumption - ONE
    if band.max_consumption is None:
        units = max(ZERO, consumption - previous_limit)
    else:
        actual_max = min(consumption, band.max_consumption)
        units = actual_max - previous_limit if actual_max > previous_limit else ZERO

    if band.max_units is not None:
        units = min(units, band.max_units)
    return units


def allocate(consumption: Decimal | int | float | str, bands: Iterable[Any]) -> BillingCalculation:
    """Spread ``consumption`` over ``bands`` and return the bucket totals.

    ``bands`` must already be in catalog order. Overlapping bands are applied
    additively; the catalog is trusted as configured.
    """

    amount_consumed = to_decimal(consumption)
    if amount_consumed < ZERO:
        raise ValidationError("El consumo no puede ser negativo")

    calculation = BillingCalculation(consumption=amount_consumed)

    for band in (TariffBand.from_record(item) for item in bands):
        if band.is_fixed_charge:
            if amount_consumed >= band.min_consumption:
                calculation.add_to_bucket(TariffBucket.BASE, band.fixed_charge)
                calculation.breakdown.append(
                    BreakdownLine(
                        name=band.name,
                        min=band.min_consumption,
                        max=band.max_consumption,
                        units=ONE,
                        unit_price=band.fixed_charge,
                        amount=band.fixed_charge,
                    )
                )
            continue

        if not band.is_per_unit or amount_consumed < band.min_consumption:
            continue

        units = billable_units(band, amount_consumed)
        amount = units * band.price_per_unit
        bucket = bucket_for_band(band)
        if bucket is not None:
            calculation.add_to_bucket(bucket, amount)
        if units > ZERO:
            calculation.breakdown.append(
                BreakdownLine(
                    name=band.name,
                    min=band.min_consumption,
                    max=band.max_consumption,
                    units=units,
                    unit_price=band.price_per_unit,
                    amount=amount,
                )
            )

    return calculation


def calculate_consumption(current: Any, previous: Any) -> Decimal:
    """Consumption between two readings; rollbacks and missing history count as zero."""

    if previous is None:
        return ZERO
    return max(ZERO, to_decimal(current) - to_decimal(previous))


def resolve_previous_reading(
    readings: Sequence[ReadingPoint], current_period: str
) -> Optional[Decimal]:
    """Return the value read in the period before ``current_period``.

    When ``current_period`` has no reading yet the most recent reading is
    returned instead. Periods processed out of order can therefore pick up a
    reading that is not the immediately preceding one.
    """

    if not readings:
        return None

    ordered = sorted(readings, key=lambda reading: period_sort_key(reading.period), reverse=True)
    target = normalize_period(current_period)
    index = next(
        (
            position
            for position, reading in enumerate(ordered)
            if normalize_period(reading.period) == target
        ),
        None,
    )
    if index is None:
        return to_decimal(ordered[0].value)
    if index + 1 < len(ordered):
        return to_decimal(ordered[index + 1].value)
    return None
