from datetime import datetime
from enum import Enum
from typing import Optional
import uuid
from sqlalchemy import DateTime, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from askanai.db.base import Base, str_enum
from .mixins.timestamp import CreatedAtMixin


class TicketStatus(str, Enum):
    OPEN = "open"
    RESOLVED = "resolved"


class Ticket(Base, CreatedAtMixin):
    """
    A user report about a poll or one of its comments.
    """
    __tablename__ = "tickets"
    __table_args__ = (
        UniqueConstraint("poll_id", "ip_hash", "text_hash", name="uix_ticket_poll_ip_text"),
    )
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    poll_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("polls.id", ondelete="CASCADE"), nullable=True, index=True)
    comment_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("comments.id", ondelete="SET NULL"), nullable=True)
    type: Mapped[str] = mapped_column(String(64), nullable=False)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[TicketStatus] = mapped_column(
        str_enum(TicketStatus, "ticket_status"), nullable=False, default=TicketStatus.OPEN)
    admin_note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    ip_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    user_agent_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    text_hash: Mapped[str] = mapped_column(String(64), nullable=False)
