from sqlalchemy import JSON, Enum as SAEnum
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase

# JSONB on postgres, plain JSON elsewhere (the test suite runs on sqlite)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Base class for all models."""


def str_enum(enum_cls, name: str) -> SAEnum:
    """Enum column storing member values ("open"), not member names ("OPEN")."""
    return SAEnum(enum_cls, name=name, values_callable=lambda members: [m.value for m in members])
