"""
LLM-facing components.

- prompt_builder: renders the overview, quiz and learning-path prompts
- model_client: calls the Azure OpenAI chat-completion endpoint

Note: scoring lives in learnpath.models (pure logic, no model calls)
"""

from .prompt_builder import (
    build_overview_prompt,
    build_quiz_prompt,
    build_learning_path_prompt,
    overview_messages,
    quiz_messages,
    learning_path_messages,
)
from .model_client import ModelClient

__all__ = [
    # Prompts
    "build_overview_prompt",
    "build_quiz_prompt",
    "build_learning_path_prompt",
    "overview_messages",
    "quiz_messages",
    "learning_path_messages",
    # Model access
    "ModelClient",
]
