"""Command line entry-point to compose the bills of a billing period."""

from __future__ import annotations

import argparse
import logging
from typing import Optional

from ..database import session_scope
from ..services import BillingService, DataAccessError, SqlBillingDataAccess
from ..services.periods import current_period

LOGGER = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Calcula las facturas de agua de todos los medidores con lectura en un período."
    )
    parser.add_argument(
        "--period",
        default=None,
        help="Período a facturar, p. ej. 'MAYO 2025' (default: período vigente según la fecha).",
    )
    parser.add_argument(
        "--save",
        action="store_true",
        help="Guarda las facturas calculadas; sin esta opción solo se muestra el resultado.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Imprime información adicional para depuración.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = _parse_args(argv)
    _configure_logging(args.verbose)

    period = args.period or current_period()
    LOGGER.info("Calculando facturas del período %s", period)

    try:
        with session_scope() as session:
            result = BillingService.calculate_period(
                SqlBillingDataAccess(session), period, persist=args.save
            )
    except DataAccessError as exc:
        LOGGER.error("No se pudo leer la base de datos: %s", exc)
        return 2

    for bill in result.bills:
        LOGGER.debug(
            "%s consumo=%s tarifa=%s total=%s",
            bill.meter_id,
            bill.consumption,
            bill.tariff_total,
            bill.total_amount,
        )
    for failure in result.failures:
        LOGGER.warning("Medidor %s: %s", failure.meter_id, failure.message)

    LOGGER.info(
        "Resumen %s: %s calculadas, %s con error, %s guardadas",
        result.period,
        result.succeeded,
        result.failed,
        result.saved,
    )
    return 1 if result.failures else 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
