"""Router for the debts, fines and garden values billed with each meter."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..services import MeterChargeService, ValidationError

router = APIRouter()


def _bad_request(exc: ValidationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.put("/debts", response_model=schemas.DebtRead)
def upsert_debt(payload: schemas.DebtUpsert, db: Session = Depends(get_db)) -> schemas.DebtRead:
    try:
        return MeterChargeService.upsert_debt(db, payload)
    except ValidationError as exc:
        raise _bad_request(exc) from exc


@router.get("/debts/{period}", response_model=list[schemas.DebtRead])
def list_debts(period: str, db: Session = Depends(get_db)) -> list[schemas.DebtRead]:
    return list(MeterChargeService.list_for_period(db, models.Debt, period))


@router.put("/fines", response_model=schemas.MeterFineRead)
def upsert_fines(
    payload: schemas.MeterFineUpsert, db: Session = Depends(get_db)
) -> schemas.MeterFineRead:
    try:
        return MeterChargeService.upsert_fines(db, payload)
    except ValidationError as exc:
        raise _bad_request(exc) from exc


@router.get("/fines/{period}", response_model=list[schemas.MeterFineRead])
def list_fines(period: str, db: Session = Depends(get_db)) -> list[schemas.MeterFineRead]:
    return list(MeterChargeService.list_for_period(db, models.MeterFine, period))


@router.put("/garden", response_model=schemas.GardenValueRead)
def upsert_garden_value(
    payload: schemas.GardenValueUpsert, db: Session = Depends(get_db)
) -> schemas.GardenValueRead:
    try:
        return MeterChargeService.upsert_garden_value(db, payload)
    except ValidationError as exc:
        raise _bad_request(exc) from exc


@router.get("/garden/{period}", response_model=list[schemas.GardenValueRead])
def list_garden_values(period: str, db: Session = Depends(get_db)) -> list[schemas.GardenValueRead]:
    return list(MeterChargeService.list_for_period(db, models.GardenValue, period))
