import uuid
import pytest
from types import SimpleNamespace
from askanai.models.question import DEFAULT_EMOJIS, QuestionType
from askanai.services.results import aggregate, percent_of, round_half_up


def make_question(question_type, labels=(), settings_json=None):
    return SimpleNamespace(
        id=uuid.uuid4(),
        type=question_type,
        settings_json=settings_json,
        options=[SimpleNamespace(label=label, position=i) for i, label in enumerate(labels)],
    )


def make_answer(question, value_text=None, value_number=None, value_json=None):
    return SimpleNamespace(question_id=question.id, value_text=value_text,
                           value_number=value_number, value_json=value_json)


def as_dicts(summary):
    return [item.model_dump() for item in summary]


def test_round_half_up():
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(66.666) == 67
    assert round_half_up(-0.5) == 0


def test_percent_of_empty_total_is_zero():
    assert percent_of(0, 0) == 0


def test_single_choice_scenario():
    question = make_question(QuestionType.SINGLE_CHOICE, ["A", "B"])
    answers = [make_answer(question, value_text=v) for v in ("A", "A", "B")]

    results = aggregate([question], answers)

    assert as_dicts(results[str(question.id)]) == [
        {"label": "A", "count": 2, "percent": 67},
        {"label": "B", "count": 1, "percent": 33},
    ]


def test_choice_keeps_declared_order_and_zero_counts():
    question = make_question(QuestionType.SINGLE_CHOICE, ["X", "Y", "Z"])
    results = aggregate([question], [make_answer(question, value_text="Z")])
    summary = as_dicts(results[str(question.id)])
    assert [item["label"] for item in summary] == ["X", "Y", "Z"]
    assert [item["count"] for item in summary] == [0, 0, 1]
    assert summary[2]["percent"] == 100


def test_multiple_choice_counts_every_selection():
    question = make_question(QuestionType.MULTIPLE_CHOICE, ["A", "B", "C"])
    answers = [
        make_answer(question, value_json=["A", "B"]),
        make_answer(question, value_json=["A"]),
        make_answer(question, value_json=["unknown"]),
    ]
    summary = as_dicts(aggregate([question], answers)[str(question.id)])
    # denominator is the 3 matching selections, not the 3 respondents
    assert summary == [
        {"label": "A", "count": 2, "percent": 67},
        {"label": "B", "count": 1, "percent": 33},
        {"label": "C", "count": 0, "percent": 0},
    ]


def test_choice_without_answers():
    question = make_question(QuestionType.SINGLE_CHOICE, ["A", "B"])
    summary = as_dicts(aggregate([question], [])[str(question.id)])
    assert all(item["count"] == 0 and item["percent"] == 0 for item in summary)


def test_rating_average_and_distribution():
    question = make_question(QuestionType.RATING, settings_json={"scale": 5})
    answers = [make_answer(question, value_number=v) for v in (5, 4, 4, 3)]

    summary = aggregate([question], answers)[str(question.id)]

    assert summary.average == "4.0"
    assert summary.scale == 5
    assert summary.distribution == [0, 0, 25, 50, 25]


def test_rating_out_of_range_counts_only_towards_average():
    question = make_question(QuestionType.RATING, settings_json={"scale": 3})
    answers = [make_answer(question, value_number=v) for v in (3, 9)]
    summary = aggregate([question], answers)[str(question.id)]
    assert summary.average == "6.0"
    assert summary.distribution == [0, 0, 50]


def test_rating_defaults_to_five_point_scale():
    question = make_question(QuestionType.RATING)
    summary = aggregate([question], [])[str(question.id)]
    assert summary.scale == 5
    assert summary.average == "0.0"
    assert summary.distribution == [0, 0, 0, 0, 0]


def test_nps_buckets_and_score():
    question = make_question(QuestionType.NPS)
    answers = [make_answer(question, value_number=v) for v in (10, 9, 8, 0)]

    summary = aggregate([question], answers)[str(question.id)]

    assert summary.nps_score == 25
    assert summary.promoters == 50
    assert summary.passives == 25
    assert summary.detractors == 25
    assert summary.model_dump(by_alias=True)["npsScore"] == 25


def test_nps_without_answers():
    question = make_question(QuestionType.NPS)
    summary = aggregate([question], [])[str(question.id)]
    assert (summary.nps_score, summary.detractors, summary.passives, summary.promoters) == (0, 0, 0, 0)


def test_emoji_uses_default_set():
    question = make_question(QuestionType.EMOJI)
    answers = [make_answer(question, value_text=DEFAULT_EMOJIS[0]), make_answer(question, value_text="🦄")]
    summary = as_dicts(aggregate([question], answers)[str(question.id)])
    assert [item["emoji"] for item in summary] == DEFAULT_EMOJIS
    assert summary[0] == {"emoji": DEFAULT_EMOJIS[0], "count": 1, "percent": 100}


def test_text_and_ranking_have_no_summary():
    short_text = make_question(QuestionType.SHORT_TEXT)
    ranking = make_question(QuestionType.RANKING, ["A", "B"])
    answers = [make_answer(short_text, value_text="hello"), make_answer(ranking, value_json=["B", "A"])]

    results = aggregate([short_text, ranking], answers)

    assert results == {str(short_text.id): None, str(ranking.id): None}


def test_answers_only_reach_their_own_question():
    first = make_question(QuestionType.SINGLE_CHOICE, ["A"])
    second = make_question(QuestionType.SINGLE_CHOICE, ["A"])
    results = aggregate([first, second], [make_answer(first, value_text="A")])
    assert results[str(first.id)][0].count == 1
    assert results[str(second.id)][0].count == 0


@pytest.mark.parametrize("scores", [
    [0, 0, 0],
    [10, 10, 9],
    [0, 7, 9],
    [1, 2, 3, 7, 8, 9, 10],
    [6, 7, 9, 9, 10, 3, 8],
])
def test_nps_score_bounds_and_bucket_total(scores):
    question = make_question(QuestionType.NPS)
    summary = aggregate([question], [make_answer(question, value_number=v) for v in scores])[str(question.id)]

    assert -100 <= summary.nps_score <= 100
    # three rounded buckets drift at most 1.5 points from 100
    assert abs(summary.detractors + summary.passives + summary.promoters - 100) <= 2


@pytest.mark.parametrize("selections", [
    [["A"], ["B"], ["C"]],
    [["A", "B"], ["A", "C"], ["B"], ["A", "B", "C"]],
    [["A"], ["A"], ["B", "C"], ["unknown"], ["C"]],
    [["B", "C"], ["A", "C"], ["C"], ["A"], ["B", "A"], ["C", "B"], ["A"]],
])
def test_multiple_choice_totals(selections):
    labels = ["A", "B", "C"]
    question = make_question(QuestionType.MULTIPLE_CHOICE, labels)
    summary = aggregate([question], [make_answer(question, value_json=s) for s in selections])[str(question.id)]

    matching = sum(1 for s in selections for label in s if label in labels)
    assert sum(item.count for item in summary) == matching
    assert abs(sum(item.percent for item in summary) - 100) <= len(labels) // 2 + 1


def test_repeated_option_labels_share_one_row():
    question = make_question(QuestionType.SINGLE_CHOICE, ["A", "A", "B"])
    answers = [make_answer(question, value_text=v) for v in ("A", "B", "A")]

    summary = as_dicts(aggregate([question], answers)[str(question.id)])

    assert summary == [
        {"label": "A", "count": 2, "percent": 67},
        {"label": "B", "count": 1, "percent": 33},
    ]
    assert sum(item["count"] for item in summary) == len(answers)
