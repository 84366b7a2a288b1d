from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple, Union

from ..core.errors import ValidationError
from ..core.logging_config import logger
from ..domain.classification import (
    Classification,
    FireClassification,
    MoldClassification,
    WaterClassification,
)
from ..domain.dataset import ReferenceDataset
from ..schemas.options import Answer, Question
from .classifier import classify


# -----------------------
# States
# -----------------------


@dataclass(frozen=True)
class SelectingDamageType:
    name: str = "selecting_damage_type"


@dataclass(frozen=True)
class AnsweringQuestion:
    index: int
    name: str = "answering_question"


@dataclass(frozen=True)
class Complete:
    classification: Union[WaterClassification, FireClassification, MoldClassification]
    name: str = "complete"


State = Union[SelectingDamageType, AnsweringQuestion, Complete]


class AnswerCollector:
    """
    Walks one damage type's question script:

        SelectingDamageType -> AnsweringQuestion(0..n-1) -> Complete

    - submit_answer(i, option) records/overwrites answer i and advances
    - go_back() keeps the answer of the question it returns to
    - back from question 0 discards the answers and returns to selection
    - Complete runs the classifier and is terminal; use start_over()
    """

    def __init__(self, dataset: ReferenceDataset):
        self.dataset = dataset
        self.state: State = SelectingDamageType()
        self.damage_type: Optional[str] = None
        self._answers: Dict[int, Answer] = {}

    # -----------------
    # read side
    # -----------------

    @property
    def answers(self) -> Dict[int, Answer]:
        return dict(self._answers)

    @property
    def script(self) -> Tuple[Question, ...]:
        if self.damage_type is None:
            return ()
        return self.dataset.script(self.damage_type)

    @property
    def current_question(self) -> Optional[Question]:
        if isinstance(self.state, AnsweringQuestion):
            return self.script[self.state.index]
        return None

    @property
    def selected_option(self) -> Optional[str]:
        """Label of the stored answer for the current question, if revisiting it."""
        if isinstance(self.state, AnsweringQuestion):
            a = self._answers.get(self.state.index)
            return a.label if a else None
        return None

    @property
    def is_complete(self) -> bool:
        return isinstance(self.state, Complete)

    @property
    def classification(self):
        return self.state.classification if isinstance(self.state, Complete) else None

    # -----------------
    # transitions
    # -----------------

    def select_damage_type(self, damage_type: str) -> State:
        if not isinstance(self.state, SelectingDamageType):
            raise ValidationError(
                "INVALID_TRANSITION",
                f"Cannot select a damage type while in state {self.state.name}.",
            )
        if damage_type not in self.dataset.question_scripts:
            raise ValidationError(
                "UNKNOWN_DAMAGE_TYPE",
                f"No question script for damage type '{damage_type}'.",
                damage_type=damage_type,
            )
        self.damage_type = damage_type
        self._answers = {}
        self.state = AnsweringQuestion(0)
        return self.state

    def submit_answer(self, index: int, option_index: int) -> State:
        if not isinstance(self.state, AnsweringQuestion):
            raise ValidationError(
                "INVALID_TRANSITION",
                f"Cannot submit an answer while in state {self.state.name}.",
            )
        if index != self.state.index:
            raise ValidationError(
                "WRONG_QUESTION",
                f"Answer for question {index} submitted while question {self.state.index} is open.",
                index=index,
                current=self.state.index,
            )

        question = self.script[index]
        if not 0 <= option_index < len(question.options):
            raise ValidationError(
                "UNKNOWN_OPTION",
                f"Question {index} has no option {option_index}.",
                index=index,
                option_index=option_index,
            )

        self._answers[index] = Answer.from_option(question, question.options[option_index])

        nxt = index + 1
        if nxt < len(self.script):
            self.state = AnsweringQuestion(nxt)
            return self.state

        # answers beyond the last question cannot exist; classify the full set
        result = classify(self.dataset, self.damage_type, self._answers)
        self.state = Complete(result)
        logger.bind(damage_type=self.damage_type).info(
            "classification_completed", answers=len(self._answers)
        )
        return self.state

    def go_back(self) -> State:
        if isinstance(self.state, AnsweringQuestion):
            if self.state.index == 0:
                self.damage_type = None
                self._answers = {}
                self.state = SelectingDamageType()
            else:
                self.state = AnsweringQuestion(self.state.index - 1)
            return self.state

        raise ValidationError(
            "INVALID_TRANSITION", f"Cannot go back from state {self.state.name}."
        )

    def start_over(self) -> State:
        self.damage_type = None
        self._answers = {}
        self.state = SelectingDamageType()
        return self.state


def replay_selections(
    dataset: ReferenceDataset, damage_type: str, selections: Sequence[int]
) -> Classification:
    """Run option indices through the question flow in script order.

    Raises INCOMPLETE_ANSWERS when the selections stop short of the last question.
    """
    flow = AnswerCollector(dataset)
    flow.select_damage_type(damage_type)
    for index, option_index in enumerate(selections):
        flow.submit_answer(index, option_index)

    if not flow.is_complete:
        raise ValidationError(
            "INCOMPLETE_ANSWERS",
            f"{len(selections)} of {len(flow.script)} questions answered.",
            damage_type=damage_type,
        )
    return flow.classification
