"""API router for billing runs and stored bills."""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..services import (
    BillingError,
    BillingService,
    BillNotFoundError,
    ComposedBill,
    CompositionError,
    DataAccessError,
    SqlBillingDataAccess,
    ValidationError,
)

router = APIRouter()

_STATUS_BY_ERROR = (
    (BillNotFoundError, status.HTTP_404_NOT_FOUND),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (DataAccessError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (CompositionError, status.HTTP_422_UNPROCESSABLE_ENTITY),
)


def _http_error(exc: BillingError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.get("/periods", response_model=list[str])
def list_periods(db: Session = Depends(get_db)) -> list[str]:
    """Periods with registered readings, newest first."""

    return BillingService.list_periods(db)


@router.post("/bills", response_model=schemas.BillingRunResponse)
def save_bills(
    payload: list[schemas.BillSave] = Body(...),
    db: Session = Depends(get_db),
) -> schemas.BillingRunResponse:
    """Store bills reviewed on the billing grid; tariff and totals are recomputed."""

    bills = [ComposedBill(**item.model_dump()) for item in payload]
    try:
        result = BillingService.save_bills(SqlBillingDataAccess(db), bills)
    except BillingError as exc:
        raise _http_error(exc) from exc
    return schemas.BillingRunResponse.model_validate(result)


@router.post("/{period}/calculate", response_model=schemas.BillingRunResponse)
def calculate_period(
    period: str,
    persist: bool = Query(False, description="Store the composed bills"),
    db: Session = Depends(get_db),
) -> schemas.BillingRunResponse:
    try:
        result = BillingService.calculate_period(SqlBillingDataAccess(db), period, persist=persist)
    except BillingError as exc:
        raise _http_error(exc) from exc
    return schemas.BillingRunResponse.model_validate(result)


@router.get("/{period}", response_model=schemas.BillListResponse)
def list_bills(
    period: str,
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(500, ge=1, le=1000),
) -> schemas.BillListResponse:
    items, total = BillingService.list_bills(db, period, skip=skip, limit=limit)
    return schemas.BillListResponse(items=items, total=total, limit=limit, skip=skip)


@router.patch("/{period}/{meter_id}", response_model=schemas.BillRead)
def edit_bill(
    period: str,
    meter_id: str,
    payload: schemas.BillEdit,
    db: Session = Depends(get_db),
) -> schemas.BillRead:
    changes = payload.model_dump(exclude_unset=True)
    try:
        return BillingService.edit_bill(SqlBillingDataAccess(db), meter_id, period, changes)
    except BillingError as exc:
        raise _http_error(exc) from exc


@router.post("/{period}/{meter_id}/toggle-payment", response_model=schemas.BillRead)
def toggle_payment(period: str, meter_id: str, db: Session = Depends(get_db)) -> schemas.BillRead:
    try:
        return BillingService.toggle_payment_status(SqlBillingDataAccess(db), meter_id, period)
    except BillingError as exc:
        raise _http_error(exc) from exc
