from typing import Any, List, Optional
import uuid
from sqlalchemy import Float, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from askanai.db.base import Base, JSONType
from .mixins.timestamp import CreatedAtMixin


class Response(Base, CreatedAtMixin):
    """
    One submission to a poll. A second submission from the same user or
    the same ip hash violates one of the unique constraints.
    """
    __tablename__ = "responses"
    __table_args__ = (
        UniqueConstraint("poll_id", "user_id", name="uix_response_poll_user"),
        UniqueConstraint("poll_id", "ip_hash", name="uix_response_poll_ip"),
    )
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    poll_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("polls.id", ondelete="CASCADE"), nullable=False, index=True)
    respondent_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    ip_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    user_agent_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    answers: Mapped[List["Answer"]] = relationship(
        back_populates="response", cascade="all, delete-orphan")


class Answer(Base, CreatedAtMixin):
    __tablename__ = "answers"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    response_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("responses.id", ondelete="CASCADE"), nullable=False, index=True)
    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    # exactly one of the three is set, depending on the question type
    value_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    value_number: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    value_json: Mapped[Optional[Any]] = mapped_column(JSONType, nullable=True)

    response: Mapped["Response"] = relationship(back_populates="answers")
