from datetime import datetime
from typing import Dict, List, Optional, Union
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, field_validator

# strings land in value_text, numbers in value_number, lists in value_json
AnswerValue = Union[StrictStr, StrictInt, StrictFloat, List[StrictStr]]


class RespondRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    answers: Dict[str, AnswerValue]
    respondent_name: Optional[str] = Field(default=None, alias="respondentName")

    @field_validator("respondent_name", mode="before")
    @classmethod
    def truncate_name(cls, v):
        if not v:
            return None
        return str(v)[:100]


class ResponseOut(BaseModel):
    id: UUID
    poll_id: UUID
    respondent_name: Optional[str]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RespondResponse(BaseModel):
    success: bool = True
    response: ResponseOut


class HasVotedResponse(BaseModel):
    hasVoted: bool
