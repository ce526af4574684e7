import uuid
from sqlalchemy import ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from askanai.db.base import Base
from .mixins.timestamp import CreatedAtMixin


class PollView(Base, CreatedAtMixin):
    __tablename__ = "poll_views"
    __table_args__ = (
        UniqueConstraint("poll_id", "ip_hash", "user_agent_hash", name="uix_poll_view_fingerprint"),
    )
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    poll_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("polls.id", ondelete="CASCADE"), nullable=False, index=True)
    ip_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    user_agent_hash: Mapped[str] = mapped_column(String(64), nullable=False)
