"""
Shared pytest fixtures and configuration for LearnPath tests.

This file is automatically discovered by pytest and provides
fixtures available to all tests. The model endpoint is never called:
tests inject a mocked chat model into ModelClient.
"""

import json
from unittest.mock import MagicMock

import httpx
import pytest
from langchain_core.messages import AIMessage

from learnpath.agents.model_client import ModelClient
from learnpath.config import AzureModelConfig, Config, PathConfig, TokenBudgetConfig

AZURE_URL = (
    "https://example.openai.azure.com/openai/deployments/gpt-4o/chat/completions"
)


@pytest.fixture
def quiz_items():
    """
    Fixture providing a three-question quiz in wire shape.

    Returns:
        list: Question dicts with question/options/correct keys
    """
    return [
        {
            "question": "What is JSX?",
            "options": [
                "A database",
                "A syntax extension for JavaScript",
                "A CSS framework",
                "A build tool",
            ],
            "correct": "A syntax extension for JavaScript",
        },
        {
            "question": "Which hook manages local state?",
            "options": ["useEffect", "useState", "useMemo", "useRef"],
            "correct": "useState",
        },
        {
            "question": "What does a component return?",
            "options": ["A promise", "A class", "UI elements", "A number"],
            "correct": "UI elements",
        },
    ]


@pytest.fixture
def learning_path_envelope():
    """
    Fixture providing a valid learning-path envelope.

    Returns:
        dict: {"learningPath": {...}} as the model is asked to produce
    """
    return {
        "learningPath": {
            "objective": "Learn React",
            "knowledgeLevel": "Intermediate",
            "modules": [
                {
                    "title": "Components and Props",
                    "description": "Build reusable components",
                    "estimatedTime": "4 hours",
                },
                {
                    "title": "State Management",
                    "description": "useState, useReducer and context",
                    "resources": ["https://react.dev/learn/managing-state"],
                },
            ],
        }
    }


@pytest.fixture
def config(tmp_path):
    """Config with test credentials, default budgets and a temp logs dir."""
    return Config(
        model=AzureModelConfig(
            endpoint="https://example.openai.azure.com",
            api_key="test-key",
            deployment="gpt-4o",
            api_version="2024-12-01-preview",
            request_timeout=30.0,
        ),
        tokens=TokenBudgetConfig(overview=200, quiz=500, learning_path=1000),
        paths=PathConfig(project_root=tmp_path, logs_dir=tmp_path / "logs"),
        environment="production",
    )


@pytest.fixture
def mock_llm():
    """Chat model stand-in; set ``invoke.side_effect`` in the test."""
    return MagicMock()


@pytest.fixture
def model_client(config, mock_llm):
    return ModelClient(config.model, llm=mock_llm)


def _ai_reply(content, usage=None):
    if usage is None:
        return AIMessage(content=content)
    return AIMessage(content=content, usage_metadata=usage)


def _fenced(data):
    return f"```json\n{json.dumps(data, indent=2)}\n```"


def _azure_request():
    return httpx.Request("POST", AZURE_URL)


def _azure_response(status_code, body=None):
    return httpx.Response(status_code, request=_azure_request(), json=body or {})


@pytest.fixture
def ai_reply():
    """Builder for the message a chat model returns: ai_reply(content, usage=None)."""
    return _ai_reply


@pytest.fixture
def fenced():
    """Serializer that wraps data the way models often answer: inside a json fence."""
    return _fenced


@pytest.fixture
def azure_request():
    """Builder for the httpx request openai timeout/connection errors carry."""
    return _azure_request


@pytest.fixture
def azure_response():
    """Builder for the httpx response openai status errors carry."""
    return _azure_response


# Pytest hooks for better test output


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark tests in unit/ directory as unit tests
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)

        # Mark tests in integration/ directory as integration tests
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
