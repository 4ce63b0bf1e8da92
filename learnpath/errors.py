"""
Error types raised by the learning pipeline.

Three failure kinds stop an operation:
- InputValidationFailed: caller-supplied data violates a constraint
- ModelRequestFailed: the completion endpoint call did not produce text
- ResponseParseFailed: model output was not decodable (or not the expected shape)

``public_error`` turns any of them into the payload shown to end users.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class LearnPathError(Exception):
    """Base class for pipeline errors."""


class InputValidationFailed(LearnPathError, ValueError):
    """
    Caller-supplied input violated one or more constraints.

    Attributes:
        errors: One message per violated constraint
    """

    def __init__(self, errors: List[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Validation failed")


class ModelRequestFailed(LearnPathError):
    """
    The completion endpoint call failed.

    Attributes:
        status_code: Upstream HTTP status, if the endpoint answered
        reason: Short failure reason (upstream message, "timeout", ...)
    """

    def __init__(self, reason: str, status_code: Optional[int] = None):
        self.reason = reason
        self.status_code = status_code
        if status_code is not None:
            message = f"Model request failed ({status_code}): {reason}"
        else:
            message = f"Model request failed: {reason}"
        super().__init__(message)


class ResponseParseFailed(LearnPathError):
    """
    Model output could not be decoded as JSON after sanitization.

    The raw text is kept for diagnostics only; never show it to end users.
    """

    def __init__(self, message: str, raw_text: str):
        self.raw_text = raw_text
        super().__init__(message)


class ResponseShapeInvalid(ResponseParseFailed):
    """Model output decoded as JSON but does not match the expected schema."""

    def __init__(self, errors: List[str], raw_text: str, what: str = "response"):
        self.errors = list(errors)
        super().__init__(
            f"Model {what} does not match the expected shape: {'; '.join(self.errors)}",
            raw_text=raw_text,
        )


GENERATION_FAILED_MESSAGE = "Content generation failed"


def public_error(exc: BaseException, development: bool = False) -> Dict[str, Any]:
    """
    Build the external error payload for an exception.

    Validation errors always list the violated constraints. Model and parse
    errors collapse to a generic message; their detail is included only in
    development mode, and raw model text is never included.

    Args:
        exc: The exception that stopped the operation
        development: Whether to expose diagnostic detail

    Returns:
        Error payload dictionary
    """
    if isinstance(exc, InputValidationFailed):
        return {
            "success": False,
            "message": "Validation failed",
            "errors": list(exc.errors),
        }

    if isinstance(exc, (ModelRequestFailed, ResponseParseFailed)):
        return {
            "success": False,
            "message": GENERATION_FAILED_MESSAGE,
            "error": str(exc) if development else "Internal server error",
        }

    return {
        "success": False,
        "message": "Internal server error",
        "error": str(exc) if development else "Something went wrong",
    }
