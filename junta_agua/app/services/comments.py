"""Business logic for meter comments."""

from __future__ import annotations

from typing import Iterable, Optional, Tuple

from sqlalchemy.orm import Session

from .. import models, schemas
from .errors import ValidationError
from .periods import normalize_period


def _normalize_optional_period(period: Optional[str]) -> Optional[str]:
    normalized = normalize_period(period) if period else ""
    return normalized or None


class CommentService:
    """CRUD operations for comments attached to a meter."""

    @staticmethod
    def _ensure_meter(db: Session, meter_id: str) -> None:
        if db.get(models.Meter, meter_id) is None:
            raise ValidationError(f"El medidor {meter_id} no existe")

    @staticmethod
    def list_comments(
        db: Session,
        *,
        meter_id: Optional[str] = None,
        period: Optional[str] = None,
        status: Optional[models.CommentStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> Tuple[Iterable[models.Comment], int]:
        query = db.query(models.Comment)
        if meter_id:
            query = query.filter(models.Comment.meter_id == meter_id)
        if period:
            query = query.filter(models.Comment.period == normalize_period(period))
        if status is not None:
            query = query.filter(models.Comment.status == status)

        total = query.count()
        items = (
            query.order_by(models.Comment.created_at.desc(), models.Comment.id.desc())
            .offset(max(skip, 0))
            .limit(max(limit, 1))
            .all()
        )
        return items, total

    @staticmethod
    def get_comment(db: Session, comment_id: int) -> Optional[models.Comment]:
        return db.get(models.Comment, comment_id)

    @staticmethod
    def create_comment(db: Session, data: schemas.CommentCreate) -> models.Comment:
        notes = data.notes.strip()
        if not notes:
            raise ValidationError("El comentario no puede estar vacío")
        CommentService._ensure_meter(db, data.meter_id)

        comment = models.Comment(
            meter_id=data.meter_id,
            period=_normalize_optional_period(data.period),
            notes=notes,
            status=data.status,
        )
        db.add(comment)
        db.commit()
        db.refresh(comment)
        return comment

    @staticmethod
    def update_comment(
        db: Session, comment: models.Comment, data: schemas.CommentUpdate
    ) -> models.Comment:
        update_data = data.model_dump(exclude_unset=True)
        if "notes" in update_data:
            update_data["notes"] = (update_data["notes"] or "").strip()
            if not update_data["notes"]:
                raise ValidationError("El comentario no puede estar vacío")
        if update_data.get("meter_id"):
            CommentService._ensure_meter(db, update_data["meter_id"])
        if "period" in update_data:
            update_data["period"] = _normalize_optional_period(update_data["period"])

        for field_name, value in update_data.items():
            setattr(comment, field_name, value)
        db.add(comment)
        db.commit()
        db.refresh(comment)
        return comment

    @staticmethod
    def delete_comment(db: Session, comment: models.Comment) -> None:
        db.delete(comment)
        db.commit()
