"""
Prompt Builder - renders the overview, quiz and learning-path prompts.

Pure and deterministic. Topic and purpose are embedded verbatim as plain
text. The JSON shapes spelled out in the quiz and learning-path prompts are
the shapes the sanitizer and schema validation expect back.
"""

from __future__ import annotations

from typing import Dict, List, Sequence

from langchain_core.prompts import PromptTemplate

from ..models.quiz import Question


Message = Dict[str, str]

OVERVIEW_SYSTEM_PROMPT = "You are a helpful assistant."
QUIZ_SYSTEM_PROMPT = (
    "You are a helpful assistant and an expert learning path planner. "
    "Respond only in JSON format."
)
LEARNING_PATH_SYSTEM_PROMPT = (
    "You are an expert learning path planner. Create a detailed, personalized "
    "learning path based on the user's input. Respond in JSON format."
)

QUIZ_QUESTION_COUNT = 3
OVERVIEW_WORD_LIMIT = 200


_overview_prompt = PromptTemplate(
    input_variables=["topic", "purpose", "word_limit"],
    template=(
        "Explain briefly what {topic} is and why it is useful. "
        "Consider the user wants to learn for {purpose}. "
        "Limit the response to {word_limit} words."
    ),
)

_quiz_prompt = PromptTemplate(
    input_variables=["topic", "count"],
    template="""Generate {count} beginner-level multiple-choice questions about {topic}.
Each question should include 4 choices, with the correct choice explicitly labeled in the response. Format it as JSON:
[
  {{
    "question": "Question text",
    "options": ["choice1", "choice2", "choice3", "choice4"],
    "correct": "choiceX"
  }}
]
The "correct" value must repeat the text of the correct choice exactly. Return ONLY the JSON array.""",
)

_learning_path_prompt = PromptTemplate(
    input_variables=["topic", "purpose", "question_summary", "knowledge_level"],
    template="""The user is learning about {topic} with the objective: {purpose}.
The user answered the following questions:
{question_summary}
The user's knowledge level is determined to be: {knowledge_level}.
Please provide a detailed, actionable learning path for achieving the objective.

Respond in JSON format:
{{
  "learningPath": {{
    "objective": "Learn {topic}",
    "knowledgeLevel": "{knowledge_level}",
    "modules": [
      {{"title": "Module Title", "description": "Module description", "estimatedTime": "X hours"}}
    ]
  }}
}}""",
)


def build_overview_prompt(topic: str, purpose: str) -> str:
    """Instruction for a short prose overview of the topic."""
    return _overview_prompt.format(
        topic=topic, purpose=purpose, word_limit=OVERVIEW_WORD_LIMIT
    )


def build_quiz_prompt(topic: str) -> str:
    """Instruction for a beginner quiz as a JSON array."""
    return _quiz_prompt.format(topic=topic, count=QUIZ_QUESTION_COUNT)


def format_question_summary(
    quiz: Sequence[Question], answers: Sequence[str]
) -> str:
    """
    One block per question, in quiz order.

    Each block lists the question text, the submitted answer and the correct
    answer, so the model can see exactly which items were missed.
    """
    blocks = []
    for index, (question, answer) in enumerate(zip(quiz, answers), start=1):
        blocks.append(
            f"Q{index}: {question.text}\n"
            f"Answer: {answer}\n"
            f"Correct Answer: {question.correct_option}\n"
        )
    return "\n".join(blocks)


def build_learning_path_prompt(
    topic: str,
    purpose: str,
    quiz: Sequence[Question],
    answers: Sequence[str],
    level: str,
) -> str:
    """Instruction for a learning path grounded in the learner's answers."""
    return _learning_path_prompt.format(
        topic=topic,
        purpose=purpose,
        question_summary=format_question_summary(quiz, answers),
        knowledge_level=str(level),
    )


def overview_messages(topic: str, purpose: str) -> List[Message]:
    return [
        {"role": "system", "content": OVERVIEW_SYSTEM_PROMPT},
        {"role": "user", "content": build_overview_prompt(topic, purpose)},
    ]


def quiz_messages(topic: str) -> List[Message]:
    return [
        {"role": "system", "content": QUIZ_SYSTEM_PROMPT},
        {"role": "user", "content": build_quiz_prompt(topic)},
    ]


def learning_path_messages(
    topic: str,
    purpose: str,
    quiz: Sequence[Question],
    answers: Sequence[str],
    level: str,
) -> List[Message]:
    return [
        {"role": "system", "content": LEARNING_PATH_SYSTEM_PROMPT},
        {
            "role": "user",
            "content": build_learning_path_prompt(topic, purpose, quiz, answers, level),
        },
    ]
