from enum import Enum
import uuid
from sqlalchemy import String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from askanai.db.base import Base, str_enum
from .mixins.timestamp import CreatedAtMixin


class AppRole(str, Enum):
    ADMIN = "admin"
    MODERATOR = "moderator"
    USER = "user"


class UserRole(Base, CreatedAtMixin):
    __tablename__ = "user_roles"
    __table_args__ = (
        UniqueConstraint("user_id", "role", name="uix_user_role"),
    )
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    role: Mapped[AppRole] = mapped_column(str_enum(AppRole, "app_role"), nullable=False)
