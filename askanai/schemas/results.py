from typing import Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


class ChoiceCount(BaseModel):
    label: str
    count: int
    percent: int


class EmojiCount(BaseModel):
    emoji: str
    count: int
    percent: int


class RatingSummary(BaseModel):
    # one decimal place, "0.0" when nobody answered
    average: str
    scale: int
    # percent of answers per bucket 1..scale
    distribution: List[int]


class NpsSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    nps_score: int = Field(alias="npsScore")
    detractors: int
    passives: int
    promoters: int


QuestionSummary = Optional[Union[List[ChoiceCount], List[EmojiCount], RatingSummary, NpsSummary]]


class PollResultsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    response_count: int = Field(alias="responseCount")
    results_by_question_id: Dict[str, QuestionSummary] = Field(alias="resultsByQuestionId")
