"""Router for the landing page counters."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..services import DashboardService

router = APIRouter()


@router.get("", response_model=schemas.DashboardSummary)
def get_summary(
    period: Optional[str] = Query(None, description="Defaults to the current reading period"),
    db: Session = Depends(get_db),
) -> schemas.DashboardSummary:
    return DashboardService.summary(db, period)
