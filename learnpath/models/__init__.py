"""
Data models for the learning pipeline.

This module contains core data models:
- Question / QuizSet: multiple-choice quiz produced by the model
- LearningPath: recommended modules
- ScoreResult / KnowledgeLevel: scoring and classification
- LearningRequest / EvaluationRequest: validated caller input
"""

from .quiz import Question, QuizSet, AnswerSet
from .learning_path import LearningPath
from .scoring import KnowledgeLevel, ScoreResult, classify, score
from .requests import LearningRequest, EvaluationRequest

__all__ = [
    "Question",
    "QuizSet",
    "AnswerSet",
    "LearningPath",
    "KnowledgeLevel",
    "ScoreResult",
    "classify",
    "score",
    "LearningRequest",
    "EvaluationRequest",
]
