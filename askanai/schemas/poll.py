from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from askanai.models.poll import PollStatus, VisibilityMode
from askanai.models.question import DEFAULT_EMOJIS, DEFAULT_RATING_SCALE, QuestionType

Prompt = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=500)]


class QuestionBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prompt: Prompt
    is_required: bool = Field(default=False, alias="isRequired")


class ChoiceQuestionCreate(QuestionBase):
    type: Literal["single_choice", "multiple_choice", "ranking"]
    options: List[str]
    settings_json: Optional[dict] = Field(default=None, alias="settingsJson")

    @field_validator("options")
    @classmethod
    def clean_labels(cls, v):
        # blank and over-long labels are dropped rather than rejected
        labels = [str(label).strip() for label in v]
        labels = [label for label in labels if 0 < len(label) <= 140]
        # a repeated label would share one counter in the results
        labels = list(dict.fromkeys(labels))
        if not labels:
            raise ValueError("a choice question needs at least one option")
        return labels


class RatingSettings(BaseModel):
    scale: int = Field(default=DEFAULT_RATING_SCALE, ge=2, le=10)


class RatingQuestionCreate(QuestionBase):
    type: Literal["rating"]
    settings_json: RatingSettings = Field(default_factory=RatingSettings, alias="settingsJson")


class NpsQuestionCreate(QuestionBase):
    type: Literal["nps"]
    settings_json: Optional[dict] = Field(default=None, alias="settingsJson")


class EmojiSettings(BaseModel):
    emojis: List[Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=16)]] = Field(
        default_factory=lambda: list(DEFAULT_EMOJIS), min_length=1, max_length=10)


class EmojiQuestionCreate(QuestionBase):
    type: Literal["emoji"]
    settings_json: EmojiSettings = Field(default_factory=EmojiSettings, alias="settingsJson")


class ShortTextQuestionCreate(QuestionBase):
    type: Literal["short_text"]
    settings_json: Optional[dict] = Field(default=None, alias="settingsJson")


QuestionCreate = Annotated[
    Union[ChoiceQuestionCreate, RatingQuestionCreate, NpsQuestionCreate,
          EmojiQuestionCreate, ShortTextQuestionCreate],
    Field(discriminator="type"),
]


class PollSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    visibility: VisibilityMode = VisibilityMode.PUBLIC
    allow_comments: bool = Field(default=False, alias="allowComments")
    preview_image_url: Optional[str] = Field(default=None, alias="previewImageUrl", max_length=1024)
    status: Literal["draft", "open"] = "open"


class PollCreate(BaseModel):
    title: Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=140)]
    description: Optional[str] = None
    questions: List[QuestionCreate] = Field(min_length=1, max_length=25)
    settings: PollSettings = Field(default_factory=PollSettings)

    @field_validator("description")
    @classmethod
    def clean_description(cls, v):
        if v is None:
            return None
        v = v.strip()
        if len(v) > 5000:
            raise ValueError("description too long")
        return v or None


class PollUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: Optional[PollStatus] = None
    visibility: Optional[VisibilityMode] = None
    allow_comments: Optional[bool] = Field(default=None, alias="allowComments")


class PollOut(BaseModel):
    id: UUID
    slug: str
    title: str
    description: Optional[str]
    status: PollStatus
    visibility_mode: VisibilityMode
    allow_comments: bool
    preview_image_url: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OptionOut(BaseModel):
    id: UUID
    position: int
    label: str

    model_config = ConfigDict(from_attributes=True)


class QuestionOut(BaseModel):
    id: UUID
    position: int
    type: QuestionType
    prompt: str
    is_required: bool
    settings_json: Optional[dict]
    options: List[OptionOut]

    model_config = ConfigDict(from_attributes=True)


class PollDetail(PollOut):
    """A poll with everything a respondent needs to answer it, ordered by position."""
    questions: List[QuestionOut]


class PollDetailEnvelope(BaseModel):
    poll: PollDetail


class PollCreateResponse(BaseModel):
    poll: PollDetail
    # plaintext key, returned exactly once
    creatorKey: str


class PollEnvelope(BaseModel):
    poll: PollOut


class AdminPollOut(PollOut):
    created_by_user_id: Optional[str]
    archived_at: Optional[datetime]
    archived_reason: Optional[str]
    responseCount: int = 0


class AdminPollPage(BaseModel):
    polls: List[AdminPollOut]
    total: int


class AdminStats(BaseModel):
    polls: int
    responses: int
    comments: int
    openTickets: int
    latestPolls: List[PollOut]
