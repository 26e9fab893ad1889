"""Catalog of named calculation parameters."""

from __future__ import annotations

import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy.orm import Session

from .. import models, schemas
from .errors import ValidationError

LOGGER = logging.getLogger(__name__)

BOOLEAN_VALUES = {"true", "false", "1", "0"}


def normalize_param_key(key: str) -> str:
    """``"Mora Percentage"`` -> ``"mora_percentage"``."""

    return re.sub(r"\s+", "_", (key or "").strip().lower())


def validate_param_value(param_type: models.ParamType, value: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError("El valor del parámetro es requerido")
    if param_type == models.ParamType.NUMBER:
        try:
            number = Decimal(cleaned)
        except InvalidOperation as exc:
            raise ValidationError("El valor debe ser un número válido") from exc
        if not number.is_finite():
            raise ValidationError("El valor debe ser un número válido")
    elif param_type == models.ParamType.BOOLEAN and cleaned.lower() not in BOOLEAN_VALUES:
        raise ValidationError("El valor booleano debe ser true/false o 1/0")
    return cleaned


class CalculationParamService:
    """Maintains the parameters table edited from the admin screen."""

    @staticmethod
    def list_params(
        db: Session,
        *,
        category: Optional[str] = None,
        active_only: bool = False,
    ) -> Iterable[models.CalculationParam]:
        query = db.query(models.CalculationParam)
        if category:
            query = query.filter(models.CalculationParam.category == category)
        if active_only:
            query = query.filter(models.CalculationParam.is_active.is_(True))
        return query.order_by(
            models.CalculationParam.category.asc(), models.CalculationParam.param_name.asc()
        ).all()

    @staticmethod
    def get_param(db: Session, param_id: int) -> Optional[models.CalculationParam]:
        return db.get(models.CalculationParam, param_id)

    @staticmethod
    def get_by_key(db: Session, param_key: str) -> Optional[models.CalculationParam]:
        return (
            db.query(models.CalculationParam)
            .filter(models.CalculationParam.param_key == normalize_param_key(param_key))
            .first()
        )

    @staticmethod
    def _clean(values: Mapping[str, Any]) -> dict:
        cleaned = dict(values)
        if "param_name" in cleaned:
            cleaned["param_name"] = (cleaned["param_name"] or "").strip()
            if not cleaned["param_name"]:
                raise ValidationError("El nombre del parámetro es requerido")
        if "description" in cleaned:
            cleaned["description"] = (cleaned["description"] or "").strip() or None
        if "category" in cleaned:
            cleaned["category"] = cleaned["category"] or None
        return cleaned

    @staticmethod
    def create_param(
        db: Session, data: schemas.CalculationParamCreate
    ) -> models.CalculationParam:
        payload = CalculationParamService._clean(data.model_dump())
        payload["param_key"] = normalize_param_key(payload["param_key"])
        if not payload["param_key"]:
            raise ValidationError("La clave del parámetro es requerida")
        payload["param_value"] = validate_param_value(payload["param_type"], payload["param_value"])
        if CalculationParamService.get_by_key(db, payload["param_key"]) is not None:
            raise ValidationError("Ya existe un parámetro con esta clave")

        param = models.CalculationParam(**payload)
        db.add(param)
        db.commit()
        db.refresh(param)
        LOGGER.info("Created calculation parameter %s", param.param_key)
        return param

    @staticmethod
    def update_param(
        db: Session, param: models.CalculationParam, data: schemas.CalculationParamUpdate
    ) -> models.CalculationParam:
        update_data = CalculationParamService._clean(data.model_dump(exclude_unset=True))
        param_type = update_data.get("param_type") or param.param_type
        if "param_value" in update_data or "param_type" in update_data:
            update_data["param_value"] = validate_param_value(
                param_type, update_data.get("param_value", param.param_value)
            )

        for field_name, value in update_data.items():
            setattr(param, field_name, value)
        db.add(param)
        db.commit()
        db.refresh(param)
        return param

    @staticmethod
    def toggle_active(db: Session, param: models.CalculationParam) -> models.CalculationParam:
        param.is_active = not param.is_active
        db.add(param)
        db.commit()
        db.refresh(param)
        return param

    @staticmethod
    def delete_param(db: Session, param: models.CalculationParam) -> None:
        db.delete(param)
        db.commit()
