from datetime import datetime
from enum import Enum
from typing import List, Optional
import uuid
from sqlalchemy import Boolean, DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from askanai.db.base import Base, str_enum
from .mixins.timestamp import TimestampMixin


class PollStatus(str, Enum):
    DRAFT = "draft"
    OPEN = "open"
    CLOSED = "closed"


class VisibilityMode(str, Enum):
    PUBLIC = "public"
    UNLISTED = "unlisted"
    VOTERS = "voters"
    PRIVATE = "private"


class Poll(Base, TimestampMixin):
    """
      one poll, its questions are created together with it and never edited afterwards
    """
    __tablename__ = "polls"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    slug: Mapped[str] = mapped_column(String(16), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(140), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[PollStatus] = mapped_column(
        str_enum(PollStatus, "poll_status"), nullable=False, default=PollStatus.OPEN)
    visibility_mode: Mapped[VisibilityMode] = mapped_column(
        str_enum(VisibilityMode, "visibility_mode"), nullable=False, default=VisibilityMode.PUBLIC)
    allow_comments: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    preview_image_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    creator_key_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    created_by_user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)

    archived_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    archived_reason: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    archived_by_user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    questions: Mapped[List["Question"]] = relationship(
        back_populates="poll", cascade="all, delete-orphan", order_by="Question.position")

    @property
    def is_archived(self) -> bool:
        return self.archived_at is not None
