from __future__ import annotations

from decimal import Decimal
from types import SimpleNamespace

import pytest

from junta_agua.app.services.errors import ValidationError
from junta_agua.app.services.tariff_billing import (
    ReadingPoint,
    TariffBand,
    TariffBucket,
    allocate,
    bucket_for_band,
    calculate_consumption,
    resolve_previous_reading,
)


def _band(name, min_consumption, max_consumption=None, **values) -> TariffBand:
    return TariffBand(
        name=name,
        min_consumption=Decimal(str(min_consumption)),
        max_consumption=None if max_consumption is None else Decimal(str(max_consumption)),
        price_per_unit=Decimal(values.get("price_per_unit", "0")),
        max_units=None if values.get("max_units") is None else Decimal(str(values["max_units"])),
        fixed_charge=Decimal(values.get("fixed_charge", "0")),
        order_index=values.get("order_index", 0),
    )


def _standard_bands(r3_max_units=None) -> list[TariffBand]:
    return [
        _band("BASE", 0, 15, fixed_charge="2.00", order_index=0),
        _band("R1", 16, 20, price_per_unit="0.20", order_index=1),
        _band("R2", 21, 25, price_per_unit="0.30", order_index=2),
        _band("R3", 26, None, price_per_unit="0.50", max_units=r3_max_units, order_index=3),
    ]


def test_allocate_spreads_consumption_over_every_band():
    calculation = allocate(Decimal("30"), _standard_bands())

    assert calculation.base_amount == Decimal("2.00")
    assert calculation.range_16_20_amount == Decimal("1.00")
    assert calculation.range_21_25_amount == Decimal("1.50")
    assert calculation.range_26_plus_amount == Decimal("2.50")
    assert calculation.tariff_total == Decimal("7.00")
    assert [line.name for line in calculation.breakdown] == ["BASE", "R1", "R2", "R3"]
    assert [line.units for line in calculation.breakdown] == [1, 5, 5, 5]


@pytest.mark.parametrize("consumption", [Decimal("10"), Decimal("0")])
def test_allocate_charges_only_the_fixed_charge_inside_the_base_range(consumption):
    calculation = allocate(consumption, _standard_bands())

    assert calculation.base_amount == Decimal("2.00")
    assert calculation.range_16_20_amount == 0
    assert calculation.range_21_25_amount == 0
    assert calculation.range_26_plus_amount == 0
    assert calculation.tariff_total == Decimal("2.00")
    assert len(calculation.breakdown) == 1


def test_allocate_caps_units_with_max_units():
    calculation = allocate(40, _standard_bands(r3_max_units=5))

    assert calculation.range_26_plus_amount == Decimal("2.50")
    r3_line = calculation.breakdown[-1]
    assert r3_line.units == Decimal("5")
    assert r3_line.amount == Decimal("2.50")


def test_allocate_returns_zero_below_every_band_minimum():
    bands = [
        _band("Inicial", 5, 15, fixed_charge="3.00"),
        _band("Exceso", 16, None, price_per_unit="0.40"),
    ]

    calculation = allocate(Decimal("4"), bands)

    assert calculation.tariff_total == 0
    assert calculation.breakdown == []


def test_fixed_charge_is_not_scaled_by_consumption():
    small = allocate(Decimal("15"), _standard_bands())
    large = allocate(Decimal("1000"), _standard_bands())

    assert small.base_amount == large.base_amount == Decimal("2.00")
    assert sum(1 for line in large.breakdown if line.name == "BASE") == 1


def test_bucket_routing_does_not_depend_on_catalog_order():
    ordered = allocate(Decimal("28"), _standard_bands())
    reversed_order = allocate(Decimal("28"), list(reversed(_standard_bands())))

    assert ordered.range_16_20_amount == reversed_order.range_16_20_amount
    assert ordered.range_21_25_amount == reversed_order.range_21_25_amount
    assert ordered.range_26_plus_amount == reversed_order.range_26_plus_amount
    assert ordered.tariff_total == reversed_order.tariff_total
    assert [line.name for line in reversed_order.breakdown] == ["R3", "R2", "R1", "BASE"]


def test_overlapping_bands_are_applied_additively():
    bands = _standard_bands() + [_band("R1 extra", 16, 20, price_per_unit="0.10")]

    calculation = allocate(Decimal("20"), bands)

    assert calculation.range_16_20_amount == Decimal("1.50")
    assert calculation.tariff_total == Decimal("3.50")


def test_per_unit_band_inside_the_base_range_is_not_bucketed():
    bands = [_band("Consumo base", 0, 15, price_per_unit="0.10")]

    calculation = allocate(Decimal("10"), bands)

    assert calculation.tariff_total == 0
    assert calculation.breakdown[0].units == Decimal("11")


def test_open_ended_band_from_26_routes_to_26_plus_bucket():
    assert bucket_for_band(_band("R3", 26)) is TariffBucket.RANGE_26_PLUS
    assert bucket_for_band(_band("R1", 16, 20)) is TariffBucket.RANGE_16_20
    assert bucket_for_band(_band("R2", 21, 25)) is TariffBucket.RANGE_21_25
    assert bucket_for_band(_band("Base", 0, 15)) is None


def test_allocate_accepts_orm_like_records():
    record = SimpleNamespace(
        name="R1",
        min_consumption=16,
        max_consumption=20,
        price_per_unit="0.20",
        max_units=None,
        fixed_charge=None,
        order_index=1,
        status="active",
    )

    calculation = allocate(18, [record])

    assert calculation.range_16_20_amount == Decimal("0.60")


def test_allocate_rejects_negative_consumption():
    with pytest.raises(ValidationError):
        allocate(Decimal("-1"), _standard_bands())


def test_calculate_consumption_clamps_and_handles_missing_previous():
    assert calculate_consumption(Decimal("130"), Decimal("100")) == Decimal("30")
    assert calculate_consumption(Decimal("10"), Decimal("15")) == 0
    assert calculate_consumption(Decimal("10"), None) == 0


def test_resolve_previous_reading_returns_the_prior_period():
    readings = [
        ReadingPoint(period="MAYO 2025", value=Decimal("130")),
        ReadingPoint(period="MARZO 2025", value=Decimal("80")),
        ReadingPoint(period="ABRIL 2025", value=Decimal("100")),
    ]

    assert resolve_previous_reading(readings, "MAYO 2025") == Decimal("100")
    assert resolve_previous_reading(readings, "abril  2025") == Decimal("80")
    assert resolve_previous_reading(readings, "MARZO 2025") is None


def test_resolve_previous_reading_falls_back_to_most_recent_reading():
    readings = [ReadingPoint(period="MAYO 2025", value=Decimal("100"))]

    assert resolve_previous_reading(readings, "JUNIO 2025") == Decimal("100")
    assert resolve_previous_reading([], "JUNIO 2025") is None


def test_resolve_previous_reading_orders_iso_and_spanish_labels_together():
    readings = [
        ReadingPoint(period="2025-04", value=Decimal("100")),
        ReadingPoint(period="MAYO 2025", value=Decimal("125")),
        ReadingPoint(period="2025-03", value=Decimal("90")),
    ]

    assert resolve_previous_reading(readings, "MAYO 2025") == Decimal("100")
    assert resolve_previous_reading(readings, "2025-04") == Decimal("90")
