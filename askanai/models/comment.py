from enum import Enum
from typing import Optional
import uuid
from sqlalchemy import ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from askanai.db.base import Base, str_enum
from .mixins.timestamp import CreatedAtMixin


class CommentStatus(str, Enum):
    VISIBLE = "visible"
    HIDDEN = "hidden"
    FLAGGED = "flagged"


class Comment(Base, CreatedAtMixin):
    __tablename__ = "comments"
    __table_args__ = (
        UniqueConstraint("poll_id", "ip_hash", "text_hash", name="uix_comment_poll_ip_text"),
    )
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    poll_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("polls.id", ondelete="CASCADE"), nullable=False, index=True)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    display_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    status: Mapped[CommentStatus] = mapped_column(
        str_enum(CommentStatus, "comment_status"), nullable=False, default=CommentStatus.VISIBLE)
    user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    ip_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    user_agent_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    text_hash: Mapped[str] = mapped_column(String(64), nullable=False)
