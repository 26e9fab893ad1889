"""Tariff catalog access and administration."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models, schemas
from .errors import DataAccessError, ValidationError
from .tariff_billing import BillingCalculation, TariffBand, allocate, to_decimal

LOGGER = logging.getLogger(__name__)

_MONEY_FIELDS = ("price_per_unit", "fixed_charge")


def validate_band(values: Mapping[str, Any]) -> None:
    """Reject band configurations that cannot be billed."""

    name = (values.get("name") or "").strip()
    if not name:
        raise ValidationError("El nombre de la tarifa es requerido")

    min_consumption = to_decimal(values.get("min_consumption"))
    if min_consumption < 0:
        raise ValidationError("El consumo mínimo no puede ser negativo")

    max_consumption = values.get("max_consumption")
    if max_consumption is not None and to_decimal(max_consumption) <= min_consumption:
        raise ValidationError("El consumo máximo debe ser mayor al mínimo")

    for field_name in _MONEY_FIELDS:
        if to_decimal(values.get(field_name)) < 0:
            raise ValidationError(f"{field_name} no puede ser negativo")

    max_units = values.get("max_units")
    if max_units is not None and to_decimal(max_units) < 0:
        raise ValidationError("max_units no puede ser negativo")

    if to_decimal(values.get("price_per_unit")) <= 0 and to_decimal(values.get("fixed_charge")) <= 0:
        raise ValidationError("Debe especificar precio por unidad o cargo fijo")


class TariffCatalogService:
    """Reads the active catalog for billing runs and manages its bands."""

    @staticmethod
    def load_active_bands(db: Session) -> list[TariffBand]:
        """Return active bands ordered by ``order_index`` then ``min_consumption``.

        The rows are copied into immutable :class:`TariffBand` snapshots so a
        billing run keeps using the same catalog even if it is edited meanwhile.
        """

        try:
            rows = (
                db.query(models.Tariff)
                .filter(models.Tariff.status == models.TariffStatus.ACTIVE)
                .order_by(models.Tariff.order_index.asc(), models.Tariff.min_consumption.asc())
                .all()
            )
        except SQLAlchemyError as exc:
            LOGGER.exception("Unable to load the tariff catalog")
            raise DataAccessError("No se pudo cargar el catálogo de tarifas") from exc
        return [TariffBand.from_record(row) for row in rows]

    @staticmethod
    def list_tariffs(
        db: Session,
        *,
        include_inactive: bool = True,
        skip: int = 0,
        limit: int = 100,
    ) -> Tuple[Iterable[models.Tariff], int]:
        query = db.query(models.Tariff)
        if not include_inactive:
            query = query.filter(models.Tariff.status == models.TariffStatus.ACTIVE)

        total = query.count()
        items = (
            query.order_by(models.Tariff.order_index.asc(), models.Tariff.min_consumption.asc())
            .offset(max(skip, 0))
            .limit(max(limit, 1))
            .all()
        )
        return items, total

    @staticmethod
    def get_tariff(db: Session, tariff_id: int) -> Optional[models.Tariff]:
        return db.query(models.Tariff).filter(models.Tariff.id == tariff_id).first()

    @staticmethod
    def create_tariff(db: Session, data: schemas.TariffCreate) -> models.Tariff:
        payload = data.model_dump()
        payload["name"] = payload["name"].strip()
        validate_band(payload)
        if payload.get("order_index") is None:
            payload["order_index"] = db.query(models.Tariff).count()

        tariff = models.Tariff(**payload)
        db.add(tariff)
        db.commit()
        db.refresh(tariff)
        LOGGER.info("Created tariff band %s (order %s)", tariff.name, tariff.order_index)
        return tariff

    @staticmethod
    def update_tariff(
        db: Session, tariff: models.Tariff, data: schemas.TariffUpdate
    ) -> models.Tariff:
        update_data = data.model_dump(exclude_unset=True)
        if update_data.get("name"):
            update_data["name"] = update_data["name"].strip()

        merged = {
            "name": tariff.name,
            "min_consumption": tariff.min_consumption,
            "max_consumption": tariff.max_consumption,
            "price_per_unit": tariff.price_per_unit,
            "max_units": tariff.max_units,
            "fixed_charge": tariff.fixed_charge,
            **update_data,
        }
        validate_band(merged)

        for field_name, value in update_data.items():
            setattr(tariff, field_name, value)
        db.add(tariff)
        db.commit()
        db.refresh(tariff)
        return tariff

    @staticmethod
    def delete_tariff(db: Session, tariff: models.Tariff) -> None:
        db.delete(tariff)
        db.commit()

    @staticmethod
    def preview(db: Session, consumption: Decimal) -> BillingCalculation:
        """Price ``consumption`` against the current active catalog."""

        return allocate(consumption, TariffCatalogService.load_active_bands(db))
