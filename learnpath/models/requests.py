"""
Caller requests for the two pipeline operations.

Text fields are trimmed before their lengths are checked. Validation reports
every violated constraint at once via InputValidationFailed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..errors import InputValidationFailed
from ..utils.validation import (
    EVALUATION_REQUEST_SCHEMA,
    LEARNING_REQUEST_SCHEMA,
    RequestValidator,
)
from .quiz import AnswerSet, QuizSet, quiz_from_dicts


def _trim(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


@dataclass
class LearningRequest:
    """
    A learner's topic and reason for learning it.

    Attributes:
        topic: What to learn (2-100 chars)
        purpose: Why the learner wants it (5-500 chars)
    """
    topic: str
    purpose: str

    def __post_init__(self):
        self.topic = _trim(self.topic)
        self.purpose = _trim(self.purpose)

    def validate(self) -> "LearningRequest":
        """
        Check field constraints.

        Raises:
            InputValidationFailed: If any constraint is violated
        """
        result = RequestValidator(LEARNING_REQUEST_SCHEMA).validate(
            {"topic": self.topic, "purpose": self.purpose}
        )
        if not result:
            raise InputValidationFailed(result.errors)
        return self


@dataclass
class EvaluationRequest:
    """
    A completed quiz to score and build a learning path from.

    Attributes:
        quiz: Questions as wire dictionaries ({"question", "options", "correct"})
        answers: Submitted answers, index-aligned with quiz
        topic: Learning topic
        purpose: Learning purpose
    """
    quiz: List[Dict[str, Any]]
    answers: List[str]
    topic: str
    purpose: str
    questions: QuizSet = field(init=False, default_factory=list)

    def __post_init__(self):
        self.topic = _trim(self.topic)
        self.purpose = _trim(self.purpose)

    def validate(self) -> "EvaluationRequest":
        """
        Check field constraints and build the typed quiz.

        Raises:
            InputValidationFailed: If any constraint is violated
        """
        payload = {
            "quiz": self.quiz,
            "answers": self.answers,
            "topic": self.topic,
            "purpose": self.purpose,
        }
        result = RequestValidator(EVALUATION_REQUEST_SCHEMA).validate(payload)
        errors = list(result.errors)

        if (
            isinstance(self.quiz, (list, tuple))
            and isinstance(self.answers, (list, tuple))
            and len(self.quiz) != len(self.answers)
        ):
            errors.append(
                f"Answers must match questions one-to-one: got {len(self.answers)} "
                f"answers for {len(self.quiz)} questions"
            )

        if errors:
            raise InputValidationFailed(errors)

        self.questions = quiz_from_dicts(self.quiz)
        return self

    @property
    def answer_set(self) -> AnswerSet:
        return list(self.answers)
