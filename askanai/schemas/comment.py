from datetime import datetime
from typing import Annotated, List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from askanai.models.comment import CommentStatus


class CommentCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    body: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=2000)]
    display_name: Optional[str] = Field(default=None, alias="displayName")

    @field_validator("display_name")
    @classmethod
    def clean_display_name(cls, v):
        if v is None:
            return None
        v = v.strip()
        if len(v) > 100:
            raise ValueError("display name too long")
        return v or None


class CommentOut(BaseModel):
    id: UUID
    poll_id: UUID
    display_name: Optional[str]
    body: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CommentEnvelope(BaseModel):
    comment: CommentOut


class CommentList(BaseModel):
    comments: List[CommentOut]


class CommentModeration(BaseModel):
    status: CommentStatus


class AdminCommentOut(CommentOut):
    status: CommentStatus
    user_id: Optional[str]


class AdminCommentEnvelope(BaseModel):
    comment: AdminCommentOut


class AdminCommentPage(BaseModel):
    comments: List[AdminCommentOut]
    total: int
