from datetime import datetime
from typing import Annotated, List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from askanai.models.ticket import TicketStatus


class ReportCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)]
    message: Optional[str] = None
    comment_id: Optional[UUID] = Field(default=None, alias="commentId")

    @field_validator("message")
    @classmethod
    def clean_message(cls, v):
        if v is None:
            return None
        v = v.strip()
        if len(v) > 5000:
            raise ValueError("message too long")
        return v or None

    @field_validator("comment_id", mode="before")
    @classmethod
    def blank_comment_id(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v


class TicketUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: TicketStatus
    admin_note: Optional[str] = Field(default=None, alias="adminNote", max_length=5000)


class TicketOut(BaseModel):
    id: UUID
    poll_id: Optional[UUID]
    comment_id: Optional[UUID]
    type: str
    message: Optional[str]
    status: TicketStatus
    admin_note: Optional[str]
    created_at: datetime
    resolved_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)


class TicketEnvelope(BaseModel):
    ticket: TicketOut


class TicketPage(BaseModel):
    tickets: List[TicketOut]
    total: int
