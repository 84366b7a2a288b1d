import pytest

from restobid.core.errors import ValidationError
from restobid.engine.answer_collector import (
    AnswerCollector,
    AnsweringQuestion,
    Complete,
    SelectingDamageType,
)


@pytest.fixture
def collector(dataset):
    return AnswerCollector(dataset)


def _answer_all(collector, selections):
    for i, option in enumerate(selections):
        collector.submit_answer(i, option)


def test_starts_in_selection(collector):
    assert isinstance(collector.state, SelectingDamageType)
    assert collector.current_question is None
    assert collector.script == ()


def test_select_opens_first_question(collector):
    state = collector.select_damage_type("fire")
    assert state == AnsweringQuestion(0)
    assert collector.current_question.prompt == "What was the fire source?"


def test_unknown_damage_type(collector):
    with pytest.raises(ValidationError) as exc:
        collector.select_damage_type("hail")
    assert exc.value.code == "UNKNOWN_DAMAGE_TYPE"
    assert isinstance(collector.state, SelectingDamageType)


def test_full_walk_completes_with_classification(collector):
    collector.select_damage_type("water")
    _answer_all(collector, [3, 0, 1, 1, 0])

    assert collector.is_complete
    assert isinstance(collector.state, Complete)
    c = collector.classification
    assert (c.category, c.water_class, c.has_mold) == (3, 2, False)
    assert len(collector.answers) == 5


def test_answer_snapshots_prompt_and_label(collector):
    collector.select_damage_type("mold")
    collector.submit_answer(0, 2)
    a = collector.answers[0]
    assert a.prompt == "What is the size of visible mold growth?"
    assert a.label == "30-100 square feet"
    assert a.data.level == 3


def test_back_keeps_answer_and_overwrite_replaces(collector):
    collector.select_damage_type("water")
    collector.submit_answer(0, 0)
    collector.submit_answer(1, 2)

    assert collector.go_back() == AnsweringQuestion(1)
    assert collector.selected_option == "More than 48 hours"

    collector.submit_answer(1, 0)
    assert collector.answers[1].label == "Less than 24 hours"
    assert collector.state == AnsweringQuestion(2)


def test_back_from_first_question_discards_answers(collector):
    collector.select_damage_type("fire")
    collector.submit_answer(0, 1)
    collector.go_back()
    collector.go_back()

    assert isinstance(collector.state, SelectingDamageType)
    assert collector.answers == {}
    assert collector.damage_type is None


def test_back_from_selection_rejected(collector):
    with pytest.raises(ValidationError) as exc:
        collector.go_back()
    assert exc.value.code == "INVALID_TRANSITION"


def test_complete_is_terminal(collector):
    collector.select_damage_type("mold")
    _answer_all(collector, [0, 0, 0, 0])

    with pytest.raises(ValidationError):
        collector.go_back()
    with pytest.raises(ValidationError):
        collector.submit_answer(0, 0)
    with pytest.raises(ValidationError):
        collector.select_damage_type("water")


def test_start_over_resets(collector):
    collector.select_damage_type("mold")
    _answer_all(collector, [0, 0, 0, 0])

    assert isinstance(collector.start_over(), SelectingDamageType)
    assert collector.answers == {}
    assert collector.classification is None
    collector.select_damage_type("water")
    assert collector.state == AnsweringQuestion(0)


def test_wrong_question_rejected(collector):
    collector.select_damage_type("water")
    with pytest.raises(ValidationError) as exc:
        collector.submit_answer(2, 0)
    assert exc.value.code == "WRONG_QUESTION"


def test_unknown_option_rejected(collector):
    collector.select_damage_type("water")
    with pytest.raises(ValidationError) as exc:
        collector.submit_answer(0, 42)
    assert exc.value.code == "UNKNOWN_OPTION"
    assert collector.answers == {}


def test_select_while_answering_rejected(collector):
    collector.select_damage_type("water")
    with pytest.raises(ValidationError) as exc:
        collector.select_damage_type("fire")
    assert exc.value.code == "INVALID_TRANSITION"
