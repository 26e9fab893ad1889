from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.comment import CommentStatus
from .common import PaginatedResponse


class CommentBase(BaseModel):
    notes: str = Field(..., min_length=1)
    period: Optional[str] = Field(default=None, description="Billing period the note refers to")
    status: CommentStatus = CommentStatus.PENDING


class CommentCreate(CommentBase):
    meter_id: str = Field(..., min_length=1, description="Code of the meter")


class CommentUpdate(BaseModel):
    meter_id: Optional[str] = Field(default=None, min_length=1)
    notes: Optional[str] = Field(default=None, min_length=1)
    period: Optional[str] = None
    status: Optional[CommentStatus] = None


class CommentRead(CommentBase):
    id: int
    meter_id: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CommentListResponse(PaginatedResponse[CommentRead]):
    pass
