"""
Response sanitizer - turns raw model text into decoded JSON.

Models often wrap JSON in Markdown code fences. Every opening (```json) and
closing (```) fence marker is removed, surrounding whitespace is trimmed,
and the remainder is decoded strictly. There is no looser second attempt:
anything that is not valid JSON after stripping is a ResponseParseFailed.
"""

import json
import logging
from typing import Any

from ..errors import ResponseParseFailed

logger = logging.getLogger(__name__)

OPENING_FENCE = "```json"
CLOSING_FENCE = "```"


def strip_fences(text: str) -> str:
    """
    Remove all code-fence markers and trim whitespace.

    Idempotent: stripping already-stripped text returns it unchanged.
    """
    return text.replace(OPENING_FENCE, "").replace(CLOSING_FENCE, "").strip()


def parse_json(text: str) -> Any:
    """
    Sanitize and decode model output.

    Args:
        text: Raw model response text

    Returns:
        Decoded JSON value

    Raises:
        ResponseParseFailed: If the sanitized text is not valid JSON
    """
    if not isinstance(text, str):
        raise ResponseParseFailed(
            f"Expected text from model, got {type(text).__name__}", raw_text=repr(text)
        )

    cleaned = strip_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(
            "JSON parsing failed: %s",
            e,
            extra={"raw_length": len(text)},
        )
        logger.debug("Unparseable model output", extra={"raw_text": text})
        raise ResponseParseFailed(
            f"Failed to parse JSON response: {e.msg} (line {e.lineno}, column {e.colno})",
            raw_text=text,
        ) from e
