"""Helpers to parse, order and derive billing period labels.

Periods are stored the way the water board writes them on the billing sheet
(``"MAYO 2025"``). ISO month keys (``"2025-05"``) are accepted as well so
periods produced by scripts or imports order correctly next to them.
"""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Iterable, Optional

LOGGER = logging.getLogger(__name__)

MONTH_NAMES = (
    "ENERO",
    "FEBRERO",
    "MARZO",
    "ABRIL",
    "MAYO",
    "JUNIO",
    "JULIO",
    "AGOSTO",
    "SEPTIEMBRE",
    "OCTUBRE",
    "NOVIEMBRE",
    "DICIEMBRE",
)
_MONTH_NUMBERS = {name: index for index, name in enumerate(MONTH_NAMES, start=1)}
_ISO_PERIOD = re.compile(r"^(\d{4})-(\d{1,2})$")

# Readings taken from the 20th onwards belong to the next month's bill, those
# up to the 10th to the current month and anything in between to the previous one.
NEXT_PERIOD_FROM_DAY = 20
CURRENT_PERIOD_UNTIL_DAY = 10


def normalize_period(label: str) -> str:
    """Collapse whitespace and upper-case a period label."""

    return " ".join((label or "").split()).upper()


def parse_period(label: str) -> Optional[tuple[int, int]]:
    """Return ``(year, month)`` for a period label or ``None`` when unparseable."""

    normalized = normalize_period(label)
    iso_match = _ISO_PERIOD.match(normalized)
    if iso_match:
        year, month = int(iso_match.group(1)), int(iso_match.group(2))
        return (year, month) if 1 <= month <= 12 else None

    parts = normalized.split(" ")
    if len(parts) != 2:
        return None
    month = _MONTH_NUMBERS.get(parts[0])
    if month is None or not parts[1].isdigit():
        return None
    return int(parts[1]), month


def period_sort_key(label: str) -> tuple[int, int]:
    """Chronological key for a period; unknown labels sort as ``(0, 0)``."""

    return parse_period(label) or (0, 0)


def sort_periods(labels: Iterable[str], *, descending: bool = True) -> list[str]:
    """Return unique period labels sorted chronologically (newest first by default)."""

    unique = list(dict.fromkeys(labels))
    return sorted(unique, key=period_sort_key, reverse=descending)


def format_period(year: int, month: int) -> str:
    return f"{MONTH_NAMES[month - 1]} {year:04d}"


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def period_for_date(day: date) -> str:
    """Return the billing period a reading captured on ``day`` belongs to."""

    if day.day >= NEXT_PERIOD_FROM_DAY:
        return format_period(*_shift_month(day.year, day.month, 1))
    if day.day <= CURRENT_PERIOD_UNTIL_DAY:
        return format_period(day.year, day.month)
    return format_period(*_shift_month(day.year, day.month, -1))


def current_period(today: Optional[date] = None) -> str:
    return period_for_date(today or date.today())


def previous_period(label: str) -> Optional[str]:
    """Return the label of the month before ``label`` keeping its format."""

    parsed = parse_period(label)
    if parsed is None:
        LOGGER.warning("Formato de período inválido: %s", label)
        return None
    year, month = _shift_month(*parsed, -1)
    if _ISO_PERIOD.match(normalize_period(label)):
        return f"{year:04d}-{month:02d}"
    return format_period(year, month)
