"""Router exposing the meter registry."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..models.meter import MeterStatus
from ..services import MeterService, ValidationError

router = APIRouter()


@router.get("", response_model=schemas.MeterListResponse)
def list_meters(
    db: Session = Depends(get_db),
    status_filter: Optional[MeterStatus] = Query(None, alias="status", description="Filter by status"),
    search: Optional[str] = Query(None, description="Search code, owner or location"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
) -> schemas.MeterListResponse:
    items, total = MeterService.list_meters(
        db, status=status_filter, search=search, skip=skip, limit=limit
    )
    return schemas.MeterListResponse(items=items, total=total, limit=limit, skip=skip)


@router.post("", response_model=schemas.MeterRead, status_code=status.HTTP_201_CREATED)
def create_meter(payload: schemas.MeterCreate, db: Session = Depends(get_db)) -> schemas.MeterRead:
    try:
        return MeterService.create_meter(db, payload)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.get("/{code_meter}", response_model=schemas.MeterRead)
def get_meter(code_meter: str, db: Session = Depends(get_db)) -> schemas.MeterRead:
    meter = MeterService.get_meter(db, code_meter)
    if meter is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Meter not found")
    return meter


@router.put("/{code_meter}", response_model=schemas.MeterRead)
def update_meter(
    code_meter: str, payload: schemas.MeterUpdate, db: Session = Depends(get_db)
) -> schemas.MeterRead:
    meter = MeterService.get_meter(db, code_meter)
    if meter is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Meter not found")
    return MeterService.update_meter(db, meter, payload)
