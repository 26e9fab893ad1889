"""Router exposing meter readings."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..services import ReadingService, ValidationError

router = APIRouter()


@router.get("", response_model=schemas.ReadingListResponse)
def list_readings(
    db: Session = Depends(get_db),
    period: Optional[str] = Query(None, description="Only readings of this period"),
    meter_id: Optional[str] = Query(None, description="Only readings of this meter"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
) -> schemas.ReadingListResponse:
    items, total = ReadingService.list_readings(
        db, period=period, meter_id=meter_id, skip=skip, limit=limit
    )
    return schemas.ReadingListResponse(items=items, total=total, limit=limit, skip=skip)


@router.put("", response_model=schemas.ReadingRead)
def upsert_reading(
    payload: schemas.ReadingUpsert, response: Response, db: Session = Depends(get_db)
) -> schemas.ReadingRead:
    """Create the reading for a meter and period, or replace its value."""

    try:
        reading, created = ReadingService.upsert_reading(db, payload)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    if created:
        response.status_code = status.HTTP_201_CREATED
    items, _ = ReadingService.list_readings(db, period=reading.period, meter_id=reading.meter_id)
    return items[0]


@router.get("/{meter_id}/previous", response_model=schemas.PreviousReadingResponse)
def get_previous_reading(
    meter_id: str,
    period: str = Query(..., min_length=1, description="Period being billed"),
    db: Session = Depends(get_db),
) -> schemas.PreviousReadingResponse:
    previous = ReadingService.previous_reading(db, meter_id, period)
    return schemas.PreviousReadingResponse(meter_id=meter_id, period=period, previous_reading=previous)
