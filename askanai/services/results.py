"""
Aggregation of raw answers into per-question summaries.

Every results request recomputes from scratch; nothing here touches the
database. Per-respondent rows never leave this module, only counts and
percentages do.
"""
import math
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Sequence
from askanai.models.question import DEFAULT_EMOJIS, DEFAULT_RATING_SCALE, QuestionType
from askanai.schemas.results import (
    ChoiceCount,
    EmojiCount,
    NpsSummary,
    QuestionSummary,
    RatingSummary,
)


def round_half_up(value: float) -> int:
    """Round .5 towards positive infinity (``round()`` would round half to even)."""
    return int(math.floor(value + 0.5))


def percent_of(count: int, total: int) -> int:
    # denominator floor of 1 keeps empty questions at 0% instead of dividing by zero
    return round_half_up(count / max(1, total) * 100)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_label(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


def _settings(question) -> Dict[str, Any]:
    return question.settings_json if isinstance(question.settings_json, dict) else {}


def rating_scale(question) -> int:
    scale = _settings(question).get("scale")
    if _is_number(scale) and int(scale) == scale and scale >= 1:
        return int(scale)
    return DEFAULT_RATING_SCALE


def emoji_set(question) -> List[str]:
    emojis = _settings(question).get("emojis")
    if isinstance(emojis, list) and emojis:
        return [_as_label(e) for e in emojis]
    return list(DEFAULT_EMOJIS)


def option_labels(question) -> List[str]:
    labels = [option.label for option in sorted(question.options, key=lambda o: o.position or 0)]
    # first occurrence wins, a repeated label never gets a second row
    return list(dict.fromkeys(labels))


def summarize_choice(labels: Sequence[str], answers: Iterable) -> List[ChoiceCount]:
    counts = {label: 0 for label in labels}
    for answer in answers:
        if answer.value_text and answer.value_text in counts:
            counts[answer.value_text] += 1
        # multi-select answers count once per selected label, so the total is
        # the number of selections rather than the number of respondents
        if isinstance(answer.value_json, list):
            for value in answer.value_json:
                label = _as_label(value)
                if label in counts:
                    counts[label] += 1

    total = sum(counts.values())
    return [ChoiceCount(label=label, count=counts[label], percent=percent_of(counts[label], total))
            for label in labels]


def summarize_rating(scale: int, answers: Iterable) -> RatingSummary:
    values = [answer.value_number for answer in answers if _is_number(answer.value_number)]
    average = sum(values) / len(values) if values else 0
    buckets = [0] * scale
    for value in values:
        # out of range or fractional values only count towards the average
        if 1 <= value <= scale and float(value).is_integer():
            buckets[int(value) - 1] += 1
    return RatingSummary(
        average=f"{average:.1f}",
        scale=scale,
        distribution=[percent_of(bucket, len(values)) for bucket in buckets],
    )


def summarize_nps(answers: Iterable) -> NpsSummary:
    values = [answer.value_number for answer in answers if _is_number(answer.value_number)]
    total = len(values)
    detractors = len([v for v in values if v <= 6])
    passives = len([v for v in values if 7 <= v <= 8])
    promoters = len([v for v in values if v >= 9])
    return NpsSummary(
        nps_score=round_half_up((promoters - detractors) / max(1, total) * 100),
        detractors=percent_of(detractors, total),
        passives=percent_of(passives, total),
        promoters=percent_of(promoters, total),
    )


def summarize_emoji(emojis: Sequence[str], answers: Iterable) -> List[EmojiCount]:
    counts = {emoji: 0 for emoji in emojis}
    for answer in answers:
        if answer.value_text and answer.value_text in counts:
            counts[answer.value_text] += 1
    total = sum(counts.values())
    return [EmojiCount(emoji=emoji, count=counts[emoji], percent=percent_of(counts[emoji], total))
            for emoji in emojis]


def summarize_question(question, answers: Sequence) -> QuestionSummary:
    question_type = question.type
    if question_type in (QuestionType.SINGLE_CHOICE, QuestionType.MULTIPLE_CHOICE):
        return summarize_choice(option_labels(question), answers)
    if question_type == QuestionType.RATING:
        return summarize_rating(rating_scale(question), answers)
    if question_type == QuestionType.NPS:
        return summarize_nps(answers)
    if question_type == QuestionType.EMOJI:
        return summarize_emoji(emoji_set(question), answers)
    # short_text and ranking have no aggregate
    return None


def aggregate(questions: Iterable, answers: Iterable) -> Dict[str, QuestionSummary]:
    """Summaries keyed by question id, one independent pass per question."""
    by_question = defaultdict(list)
    for answer in answers:
        by_question[str(answer.question_id)].append(answer)

    return {
        str(question.id): summarize_question(question, by_question.get(str(question.id), []))
        for question in questions
    }
