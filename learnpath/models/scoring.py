"""
Scoring engine - grades a quiz and classifies the learner's knowledge level.

Pure functions, no I/O. Answers are compared to the correct option by exact
string equality (no case or whitespace normalization).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Sequence

from ..errors import InputValidationFailed
from .quiz import Question


# Lower bounds (inclusive) on percentage, checked high-to-low
EXPERT_THRESHOLD = 80.0
INTERMEDIATE_THRESHOLD = 50.0


class KnowledgeLevel(str, Enum):
    """Three-tier knowledge classification."""

    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    EXPERT = "Expert"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ScoreResult:
    """
    Outcome of scoring one quiz.

    Attributes:
        correct_count: Number of index-aligned exact matches
        total: Number of questions (always > 0)
        percentage: 100 * correct_count / total
        level: Knowledge level derived from percentage
    """
    correct_count: int
    total: int
    percentage: float
    level: KnowledgeLevel

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire shape."""
        return {
            "score": self.correct_count,
            "total": self.total,
            "percentage": self.percentage,
            "level": self.level.value,
        }


def classify(percentage: float) -> KnowledgeLevel:
    """Map a score percentage to a knowledge level."""
    if percentage >= EXPERT_THRESHOLD:
        return KnowledgeLevel.EXPERT
    if percentage >= INTERMEDIATE_THRESHOLD:
        return KnowledgeLevel.INTERMEDIATE
    return KnowledgeLevel.BEGINNER


def score(quiz: Sequence[Question], answers: Sequence[str]) -> ScoreResult:
    """
    Score answers against a quiz.

    Args:
        quiz: Ordered questions
        answers: Submitted answers, answers[i] answers quiz[i]

    Returns:
        ScoreResult

    Raises:
        InputValidationFailed: If the quiz is empty or lengths differ
    """
    total = len(quiz)
    if total == 0:
        raise InputValidationFailed("Quiz must contain at least one question")
    if len(answers) != total:
        raise InputValidationFailed(
            f"Answers must match questions one-to-one: got {len(answers)} answers "
            f"for {total} questions"
        )

    correct_count = sum(
        1 for question, answer in zip(quiz, answers) if answer == question.correct_option
    )
    percentage = 100 * correct_count / total

    return ScoreResult(
        correct_count=correct_count,
        total=total,
        percentage=percentage,
        level=classify(percentage),
    )
