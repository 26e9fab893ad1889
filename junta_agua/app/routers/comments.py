"""Router for comments attached to meters."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..services import CommentService, ValidationError

router = APIRouter()


def _get_or_404(db: Session, comment_id: int) -> models.Comment:
    comment = CommentService.get_comment(db, comment_id)
    if comment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    return comment


@router.get("", response_model=schemas.CommentListResponse)
def list_comments(
    db: Session = Depends(get_db),
    meter_id: Optional[str] = Query(None, description="Filter by meter code"),
    period: Optional[str] = Query(None, description="Filter by billing period"),
    status_filter: Optional[models.CommentStatus] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
) -> schemas.CommentListResponse:
    items, total = CommentService.list_comments(
        db, meter_id=meter_id, period=period, status=status_filter, skip=skip, limit=limit
    )
    return schemas.CommentListResponse(items=items, total=total, limit=limit, skip=skip)


@router.post("", response_model=schemas.CommentRead, status_code=status.HTTP_201_CREATED)
def create_comment(payload: schemas.CommentCreate, db: Session = Depends(get_db)) -> schemas.CommentRead:
    try:
        return CommentService.create_comment(db, payload)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.get("/{comment_id}", response_model=schemas.CommentRead)
def get_comment(comment_id: int, db: Session = Depends(get_db)) -> schemas.CommentRead:
    return _get_or_404(db, comment_id)


@router.put("/{comment_id}", response_model=schemas.CommentRead)
def update_comment(
    comment_id: int, payload: schemas.CommentUpdate, db: Session = Depends(get_db)
) -> schemas.CommentRead:
    comment = _get_or_404(db, comment_id)
    try:
        return CommentService.update_comment(db, comment, payload)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(comment_id: int, db: Session = Depends(get_db)) -> None:
    CommentService.delete_comment(db, _get_or_404(db, comment_id))
