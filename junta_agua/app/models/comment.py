"""SQLAlchemy model for field notes left on a meter."""

from __future__ import annotations

import enum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, Integer, String, Text, func

from ..database import Base


class CommentStatus(str, enum.Enum):
    """Review state of a comment."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Comment(Base):
    """Observation recorded by a reader or operator about a meter."""

    __tablename__ = "comments"

    id = Column("comment_id", Integer, primary_key=True, autoincrement=True)
    meter_id = Column(
        String(40),
        ForeignKey("meters.code_meter", onupdate="CASCADE", ondelete="CASCADE"),
        nullable=False,
    )
    # Optional: notes taken outside a reading round have no period.
    period = Column(String(40), nullable=True)
    notes = Column(Text, nullable=False)
    status = Column(
        Enum(
            CommentStatus,
            name="comment_status_enum",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=CommentStatus.PENDING,
        server_default=CommentStatus.PENDING.value,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


Index("comments_meter_period_idx", Comment.meter_id, Comment.period)
