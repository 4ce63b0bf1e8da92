"""
Quiz data model - multiple-choice questions produced by the model.

Questions are validated for shape only; whether ``correct_option`` is one of
``options`` is not checked.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence


@dataclass
class Question:
    """
    A single multiple-choice question.

    Attributes:
        text: The question text
        options: The four answer choices, in display order
        correct_option: The choice the model labeled correct
    """
    text: str
    options: List[str]
    correct_option: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Question":
        """Build from the wire shape ``{"question", "options", "correct"}``."""
        return cls(
            text=data["question"],
            options=list(data["options"]),
            correct_option=data["correct"],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire shape."""
        return {
            "question": self.text,
            "options": list(self.options),
            "correct": self.correct_option,
        }


# Ordered sequence of questions; answers align with it by position
QuizSet = List[Question]
AnswerSet = List[str]


def quiz_from_dicts(items: Sequence[Dict[str, Any]]) -> QuizSet:
    """Build a QuizSet from already shape-validated dictionaries."""
    return [Question.from_dict(item) for item in items]


def quiz_to_dicts(quiz: Sequence[Question]) -> List[Dict[str, Any]]:
    return [question.to_dict() for question in quiz]
