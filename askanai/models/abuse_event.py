from datetime import datetime
from typing import Optional
from sqlalchemy import BigInteger, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from askanai.db.base import Base
from .mixins.timestamp import utcnow


class AbuseEvent(Base):
    """
    Rate limit bookkeeping, one row per accepted sensitive action.
    """
    __tablename__ = "abuse_events"
    __table_args__ = (
        Index("ix_abuse_events_type_created", "event_type", "created_at"),
    )
    # BigInteger on postgres, INTEGER on sqlite so the rowid autoincrements
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer(), "sqlite"), primary_key=True, autoincrement=True)
    event_type: Mapped[str] = mapped_column(String(64), nullable=False)
    user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    ip_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
