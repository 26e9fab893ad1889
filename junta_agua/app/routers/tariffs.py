"""API router for the tariff band catalog."""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..services import DataAccessError, TariffCatalogService, ValidationError

router = APIRouter()


@router.get("", response_model=schemas.TariffListResponse)
def list_tariffs(
    db: Session = Depends(get_db),
    include_inactive: bool = Query(True, description="Include inactive bands"),
    skip: int = Query(0, ge=0, description="Records to skip"),
    limit: int = Query(100, ge=1, le=200, description="Records to return"),
) -> schemas.TariffListResponse:
    items, total = TariffCatalogService.list_tariffs(
        db, include_inactive=include_inactive, skip=skip, limit=limit
    )
    return schemas.TariffListResponse(items=items, total=total, limit=limit, skip=skip)


@router.post("", response_model=schemas.TariffRead, status_code=status.HTTP_201_CREATED)
def create_tariff(payload: schemas.TariffCreate, db: Session = Depends(get_db)) -> schemas.TariffRead:
    try:
        return TariffCatalogService.create_tariff(db, payload)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.get("/preview", response_model=schemas.BillingCalculationRead)
def preview_tariff(
    consumption: Decimal = Query(..., ge=0, description="Cubic meters to price"),
    db: Session = Depends(get_db),
) -> schemas.BillingCalculationRead:
    """Price a consumption against the active catalog without storing anything."""

    try:
        calculation = TariffCatalogService.preview(db, consumption)
    except DataAccessError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return schemas.BillingCalculationRead.model_validate(calculation)


@router.get("/{tariff_id}", response_model=schemas.TariffRead)
def get_tariff(tariff_id: int, db: Session = Depends(get_db)) -> schemas.TariffRead:
    tariff = TariffCatalogService.get_tariff(db, tariff_id)
    if tariff is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tariff not found")
    return tariff


@router.put("/{tariff_id}", response_model=schemas.TariffRead)
def update_tariff(
    tariff_id: int,
    payload: schemas.TariffUpdate,
    db: Session = Depends(get_db),
) -> schemas.TariffRead:
    tariff = TariffCatalogService.get_tariff(db, tariff_id)
    if tariff is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tariff not found")
    try:
        return TariffCatalogService.update_tariff(db, tariff, payload)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.delete("/{tariff_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tariff(tariff_id: int, db: Session = Depends(get_db)) -> None:
    tariff = TariffCatalogService.get_tariff(db, tariff_id)
    if tariff is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tariff not found")
    TariffCatalogService.delete_tariff(db, tariff)
