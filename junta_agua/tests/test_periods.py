from datetime import date

import pytest

from junta_agua.app.services.periods import (
    current_period,
    normalize_period,
    parse_period,
    previous_period,
    sort_periods,
)


def test_parse_period_accepts_spanish_and_iso_labels():
    assert parse_period("MAYO 2025") == (2025, 5)
    assert parse_period("  septiembre   2024 ") == (2024, 9)
    assert parse_period("2025-01") == (2025, 1)
    assert parse_period("2025-13") is None
    assert parse_period("MAY") is None
    assert parse_period("") is None


def test_normalize_period_collapses_whitespace_and_case():
    assert normalize_period(" mayo   2025 ") == "MAYO 2025"


def test_sort_periods_orders_chronologically_and_deduplicates():
    labels = ["ENERO 2025", "DICIEMBRE 2024", "MAYO 2025", "ENERO 2025", "sin fecha"]

    assert sort_periods(labels) == ["MAYO 2025", "ENERO 2025", "DICIEMBRE 2024", "sin fecha"]
    assert sort_periods(labels, descending=False)[0] == "sin fecha"


@pytest.mark.parametrize(
    ("today", "expected"),
    [
        (date(2025, 5, 5), "MAYO 2025"),
        (date(2025, 5, 10), "MAYO 2025"),
        (date(2025, 5, 15), "ABRIL 2025"),
        (date(2025, 5, 20), "JUNIO 2025"),
        (date(2025, 12, 25), "ENERO 2026"),
        (date(2025, 1, 15), "DICIEMBRE 2024"),
    ],
)
def test_current_period_follows_reading_calendar(today, expected):
    assert current_period(today) == expected


def test_previous_period_keeps_label_format():
    assert previous_period("ENERO 2025") == "DICIEMBRE 2024"
    assert previous_period("2025-03") == "2025-02"
    assert previous_period("no es un periodo") is None
