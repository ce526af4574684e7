"""Checks a submitted answer map against the poll's questions before anything is stored."""

from typing import Any, Dict, List, Sequence, Tuple
from askanai.core.exceptions import InvalidInputError
from askanai.models.question import Question, QuestionType
from askanai.services.results import emoji_set, option_labels, rating_scale

SHORT_TEXT_MAX = 2000


def _invalid():
    return InvalidInputError("INVALID_ANSWERS")


def _is_int(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def _check_value(question: Question, value: Any) -> None:
    question_type = question.type
    if question_type == QuestionType.SINGLE_CHOICE:
        if not isinstance(value, str) or value not in option_labels(question):
            raise _invalid()
    elif question_type == QuestionType.MULTIPLE_CHOICE:
        labels = option_labels(question)
        if (not isinstance(value, list) or not value or len(set(value)) != len(value)
                or any(v not in labels for v in value)):
            raise _invalid()
    elif question_type == QuestionType.RANKING:
        labels = option_labels(question)
        if (not isinstance(value, list) or len(set(value)) != len(value)
                or any(v not in labels for v in value)):
            raise _invalid()
    elif question_type == QuestionType.RATING:
        if not _is_int(value) or not 1 <= value <= rating_scale(question):
            raise _invalid()
    elif question_type == QuestionType.NPS:
        if not _is_int(value) or not 0 <= value <= 10:
            raise _invalid()
    elif question_type == QuestionType.EMOJI:
        if not isinstance(value, str) or value not in emoji_set(question):
            raise _invalid()
    elif question_type == QuestionType.SHORT_TEXT:
        if not isinstance(value, str) or not value.strip() or len(value) > SHORT_TEXT_MAX:
            raise _invalid()
    else:
        raise _invalid()


def validate_answers(questions: Sequence[Question], answers: Dict[str, Any]) -> List[Tuple[Question, Any]]:
    """
    Every key must name a question of the poll, every required question must
    be answered and every value must fit its question type.
    """
    by_id = {str(question.id): question for question in questions}
    accepted = []
    for question_id, value in answers.items():
        question = by_id.get(question_id)
        if question is None:
            raise _invalid()
        _check_value(question, value)
        accepted.append((question, value))

    answered = set(answers)
    if any(question.is_required and str(question.id) not in answered for question in questions):
        raise _invalid()
    return accepted


def answer_columns(value: Any) -> Dict[str, Any]:
    """Which of value_text / value_number / value_json holds the answer."""
    if isinstance(value, str):
        return {"value_text": value}
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return {"value_number": value}
    return {"value_json": value}
