from enum import Enum
from typing import List, Optional
import uuid
from sqlalchemy import Boolean, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from askanai.db.base import Base, JSONType, str_enum
from .mixins.timestamp import CreatedAtMixin


class QuestionType(str, Enum):
    SINGLE_CHOICE = "single_choice"
    MULTIPLE_CHOICE = "multiple_choice"
    RATING = "rating"
    NPS = "nps"
    RANKING = "ranking"
    SHORT_TEXT = "short_text"
    EMOJI = "emoji"


# question types that own Option rows
CHOICE_TYPES = (QuestionType.SINGLE_CHOICE, QuestionType.MULTIPLE_CHOICE, QuestionType.RANKING)

DEFAULT_RATING_SCALE = 5
DEFAULT_EMOJIS = ["😍", "😊", "😐", "😕", "😢"]


class Question(Base, CreatedAtMixin):
    __tablename__ = "questions"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    poll_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("polls.id", ondelete="CASCADE"), nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    type: Mapped[QuestionType] = mapped_column(str_enum(QuestionType, "question_type"), nullable=False)
    prompt: Mapped[str] = mapped_column(String(500), nullable=False)
    is_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    settings_json: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)

    poll: Mapped["Poll"] = relationship(back_populates="questions")
    options: Mapped[List["Option"]] = relationship(
        back_populates="question", cascade="all, delete-orphan", order_by="Option.position")
