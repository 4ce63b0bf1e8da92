"""
Utility modules for LearnPath.

This module contains utility functions:
- sanitizer: strip code fences from model output and decode JSON
- validation: JSON Schema validation for requests and model output
- logging_setup: handler configuration for the package logger
"""

from .sanitizer import strip_fences, parse_json
from .validation import (
    SchemaValidator,
    RequestValidator,
    ValidationResult,
    validate_quiz,
    validate_learning_path,
)
from .logging_setup import configure_logging

__all__ = [
    # Sanitization
    "strip_fences",
    "parse_json",
    # Validation
    "SchemaValidator",
    "RequestValidator",
    "ValidationResult",
    "validate_quiz",
    "validate_learning_path",
    # Logging
    "configure_logging",
]
