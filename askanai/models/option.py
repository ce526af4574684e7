import uuid
from sqlalchemy import ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from askanai.db.base import Base
from .mixins.timestamp import CreatedAtMixin


class Option(Base, CreatedAtMixin):
    __tablename__ = "options"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    label: Mapped[str] = mapped_column(String(140), nullable=False)
    question: Mapped["Question"] = relationship(back_populates="options")
