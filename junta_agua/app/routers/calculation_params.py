"""Router for the calculation parameters catalog."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..services import CalculationParamService, ValidationError

router = APIRouter()


def _get_or_404(db: Session, param_id: int) -> models.CalculationParam:
    param = CalculationParamService.get_param(db, param_id)
    if param is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Parameter not found")
    return param


@router.get("", response_model=list[schemas.CalculationParamRead])
def list_params(
    db: Session = Depends(get_db),
    category: Optional[str] = Query(None, description="Filter by category"),
    active_only: bool = Query(False, description="Only active parameters"),
) -> list[schemas.CalculationParamRead]:
    return list(CalculationParamService.list_params(db, category=category, active_only=active_only))


@router.post("", response_model=schemas.CalculationParamRead, status_code=status.HTTP_201_CREATED)
def create_param(
    payload: schemas.CalculationParamCreate, db: Session = Depends(get_db)
) -> schemas.CalculationParamRead:
    try:
        return CalculationParamService.create_param(db, payload)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.get("/by-key/{param_key}", response_model=schemas.CalculationParamRead)
def get_param_by_key(param_key: str, db: Session = Depends(get_db)) -> schemas.CalculationParamRead:
    param = CalculationParamService.get_by_key(db, param_key)
    if param is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Parameter not found")
    return param


@router.get("/{param_id}", response_model=schemas.CalculationParamRead)
def get_param(param_id: int, db: Session = Depends(get_db)) -> schemas.CalculationParamRead:
    return _get_or_404(db, param_id)


@router.put("/{param_id}", response_model=schemas.CalculationParamRead)
def update_param(
    param_id: int, payload: schemas.CalculationParamUpdate, db: Session = Depends(get_db)
) -> schemas.CalculationParamRead:
    param = _get_or_404(db, param_id)
    try:
        return CalculationParamService.update_param(db, param, payload)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.post("/{param_id}/toggle-active", response_model=schemas.CalculationParamRead)
def toggle_param(param_id: int, db: Session = Depends(get_db)) -> schemas.CalculationParamRead:
    return CalculationParamService.toggle_active(db, _get_or_404(db, param_id))


@router.delete("/{param_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_param(param_id: int, db: Session = Depends(get_db)) -> None:
    CalculationParamService.delete_param(db, _get_or_404(db, param_id))
