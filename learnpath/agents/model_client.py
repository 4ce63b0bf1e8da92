"""
Model Client - the single caller of the Azure OpenAI chat-completion endpoint.

One ``complete`` call issues exactly one request and returns the trimmed text
of the first choice. Every failure (timeout, transport error, non-2xx status,
malformed envelope) surfaces as ModelRequestFailed. Nothing is retried here;
the SDK's own retries are disabled too.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence, Union

import openai
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_openai import AzureChatOpenAI

from ..config import AzureModelConfig, TokenTracker
from ..errors import ModelRequestFailed

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.7

MessageLike = Union[BaseMessage, Dict[str, str]]

_ROLE_TO_MESSAGE = {
    "system": SystemMessage,
    "user": HumanMessage,
}


def to_langchain_messages(messages: Sequence[MessageLike]) -> list[BaseMessage]:
    """Convert role-tagged dicts to LangChain messages, keeping order."""
    converted = []
    for message in messages:
        if isinstance(message, BaseMessage):
            converted.append(message)
            continue
        role = message.get("role")
        message_cls = _ROLE_TO_MESSAGE.get(role)
        if message_cls is None:
            raise ValueError(f"Unsupported message role: {role!r}")
        converted.append(message_cls(content=message["content"]))
    return converted


class ModelClient:
    """
    Chat-completion client with a bounded timeout and normalized errors.

    The underlying LangChain chat model is built from config unless one is
    injected (tests pass a mock).
    """

    def __init__(
        self,
        model_config: Optional[AzureModelConfig] = None,
        llm: Optional[BaseChatModel] = None,
        token_tracker: Optional[TokenTracker] = None,
    ):
        """
        Initialize the client.

        Args:
            model_config: Azure endpoint, credential, deployment and timeout
            llm: Pre-built chat model to use instead of AzureChatOpenAI
            token_tracker: Optional usage accumulator
        """
        self.model_config = model_config or AzureModelConfig()
        self.token_tracker = token_tracker

        self.llm = llm or AzureChatOpenAI(
            azure_endpoint=self.model_config.endpoint,
            api_key=self.model_config.api_key,
            azure_deployment=self.model_config.deployment,
            api_version=self.model_config.api_version,
            temperature=self.model_config.temperature,
            timeout=self.model_config.request_timeout,
            max_retries=0,
        )

    def complete(
        self,
        messages: Sequence[MessageLike],
        max_tokens: int,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> str:
        """
        Send one chat-completion request.

        Args:
            messages: Ordered system/user messages
            max_tokens: Output token budget for this call
            temperature: Sampling temperature

        Returns:
            Trimmed text of the first choice

        Raises:
            ModelRequestFailed: On any transport, HTTP or envelope failure
        """
        lc_messages = to_langchain_messages(messages)

        try:
            response = self.llm.invoke(
                lc_messages,
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except openai.APITimeoutError as e:
            self._log_failure("timeout", None, e)
            raise ModelRequestFailed(
                f"Request timed out after {self.model_config.request_timeout:g}s"
            ) from e
        except openai.APIStatusError as e:
            self._log_failure(e.message, e.status_code, e)
            raise ModelRequestFailed(e.message, status_code=e.status_code) from e
        except openai.APIConnectionError as e:
            self._log_failure(str(e), None, e)
            raise ModelRequestFailed(f"Connection error: {e}") from e
        except openai.OpenAIError as e:
            self._log_failure(str(e), None, e)
            raise ModelRequestFailed(str(e)) from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            # Raised while unpacking a response without the expected choice
            self._log_failure(f"malformed response: {e}", None, e)
            raise ModelRequestFailed(f"Malformed response envelope: {e}") from e

        content = getattr(response, "content", None)
        if not isinstance(content, str):
            self._log_failure("response has no text content", None, None)
            raise ModelRequestFailed("Malformed response envelope: no text content")

        self._record_usage(response)
        text = content.strip()
        if not text:
            self._log_failure("response content is empty", None, None)
            raise ModelRequestFailed("Malformed response envelope: empty content")
        return text

    def _record_usage(self, response: Any) -> None:
        if self.token_tracker is None:
            return
        usage = getattr(response, "usage_metadata", None)
        if not usage:
            return
        self.token_tracker.add_tokens(
            input_tokens=usage.get("input_tokens", 0),
            output_tokens=usage.get("output_tokens", 0),
        )

    def _log_failure(
        self, reason: str, status_code: Optional[int], error: Optional[Exception]
    ) -> None:
        logger.error(
            "Azure OpenAI API request failed: %s",
            reason,
            extra={
                "status": status_code,
                "deployment": self.model_config.deployment,
                "error_type": type(error).__name__ if error else None,
            },
        )
