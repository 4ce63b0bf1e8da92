"""
Schema validation utilities for LearnPath.

JSON Schema validation with clear error messages, used at both ends of the
pipeline:
- Caller input (learning requests, knowledge evaluations)
- Decoded model output (quiz arrays, learning-path envelopes)

Schemas live in this module as dictionaries. Request schemas attach a
human-readable ``description`` to each constrained field; when a field fails,
that description is reported instead of the raw jsonschema message.
"""

from typing import Any

from jsonschema import Draft7Validator, FormatChecker, ValidationError


MAX_QUESTIONS = 10
OPTIONS_PER_QUESTION = 4


QUESTION_SCHEMA = {
    "type": "object",
    "required": ["question", "options", "correct"],
    "properties": {
        "question": {"type": "string", "minLength": 1},
        "options": {
            "type": "array",
            "minItems": OPTIONS_PER_QUESTION,
            "maxItems": OPTIONS_PER_QUESTION,
            "items": {"type": "string"},
        },
        "correct": {"type": "string"},
    },
}

QUIZ_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Quiz",
    "type": "array",
    "minItems": 1,
    "maxItems": MAX_QUESTIONS,
    "items": QUESTION_SCHEMA,
}

LEARNING_MODULE_SCHEMA = {
    "type": "object",
    "required": ["title", "description"],
    "properties": {
        "title": {"type": "string", "minLength": 1},
        "description": {"type": "string"},
        "estimatedTime": {"type": ["string", "number"]},
        "resources": {"type": "array"},
    },
    "anyOf": [
        {"required": ["estimatedTime"]},
        {"required": ["resources"]},
    ],
}

LEARNING_PATH_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "LearningPathEnvelope",
    "type": "object",
    "required": ["learningPath"],
    "properties": {
        "learningPath": {
            "type": "object",
            "required": ["objective", "knowledgeLevel", "modules"],
            "properties": {
                "objective": {"type": "string"},
                "knowledgeLevel": {"type": "string"},
                "modules": {
                    "type": "array",
                    "minItems": 1,
                    "items": LEARNING_MODULE_SCHEMA,
                },
            },
        },
    },
}

_TOPIC_FIELD = {
    "type": "string",
    "minLength": 2,
    "maxLength": 100,
    "description": "Topic must be between 2 and 100 characters",
}

_PURPOSE_FIELD = {
    "type": "string",
    "minLength": 5,
    "maxLength": 500,
    "description": "Purpose must be between 5 and 500 characters",
}

LEARNING_REQUEST_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "LearningRequest",
    "type": "object",
    "required": ["topic", "purpose"],
    "properties": {
        "topic": _TOPIC_FIELD,
        "purpose": _PURPOSE_FIELD,
    },
}

EVALUATION_REQUEST_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "EvaluationRequest",
    "type": "object",
    "required": ["quiz", "answers", "topic", "purpose"],
    "properties": {
        "quiz": {
            "type": "array",
            "minItems": 1,
            "maxItems": MAX_QUESTIONS,
            "items": QUESTION_SCHEMA,
            "description": f"Questions must be an array with 1-{MAX_QUESTIONS} elements",
        },
        "answers": {
            "type": "array",
            "minItems": 1,
            "maxItems": MAX_QUESTIONS,
            "items": {"type": "string"},
            "description": f"Answers must be an array with 1-{MAX_QUESTIONS} elements",
        },
        "topic": _TOPIC_FIELD,
        "purpose": _PURPOSE_FIELD,
    },
}


class ValidationResult:
    """
    Result of a validation attempt.

    Attributes:
        valid: Whether data passed validation
        errors: List of error messages
    """

    def __init__(self, valid: bool, errors: list[str]):
        self.valid = valid
        self.errors = errors

    def __bool__(self) -> bool:
        """Allow using result in boolean context."""
        return self.valid

    def __str__(self) -> str:
        """Human-readable representation."""
        if self.valid:
            return "✓ Validation passed"
        return f"✗ Validation failed with {len(self.errors)} error(s):\n" + "\n".join(
            f"  - {error}" for error in self.errors
        )


class SchemaValidator:
    """
    JSON Schema validator.

    Usage:
        validator = SchemaValidator(QUIZ_SCHEMA)
        result = validator.validate(data)
        if not result:
            print(result.errors)
    """

    def __init__(self, schema: dict):
        """
        Initialize validator with a schema dictionary.

        Raises:
            jsonschema.SchemaError: If the schema itself is invalid
        """
        self.schema = schema
        Draft7Validator.check_schema(self.schema)
        self.validator = Draft7Validator(self.schema, format_checker=FormatChecker())

    def validate(self, data: Any) -> ValidationResult:
        """
        Validate data against schema.

        Args:
            data: Data to validate

        Returns:
            ValidationResult with validation status and any errors
        """
        errors = []
        seen = set()

        # Collect all validation errors
        for error in self.validator.iter_errors(data):
            message = self._format_error(error)
            if message not in seen:
                seen.add(message)
                errors.append(message)

        return ValidationResult(valid=not errors, errors=errors)

    def _format_error(self, error: ValidationError) -> str:
        """
        Convert ValidationError to human-readable message with details.

        Args:
            error: jsonschema ValidationError

        Returns:
            Formatted error message with validator and schema path
        """
        path = " -> ".join(str(p) for p in error.path) if error.path else "root"
        validator_name = getattr(error, "validator", "unknown")
        schema_path = "/".join(str(p) for p in error.schema_path)
        return (
            f"At '{path}': {error.message} "
            f"[validator={validator_name}, schema_path=/{schema_path}]"
        )


class RequestValidator(SchemaValidator):
    """
    Validator for caller-supplied requests.

    Reports each violated constraint by the field description, e.g.
    "Topic must be between 2 and 100 characters", so messages can be shown
    to end users as-is.
    """

    def _format_error(self, error: ValidationError) -> str:
        if error.validator == "required":
            return error.message

        description = error.schema.get("description") if isinstance(error.schema, dict) else None
        if description:
            return description

        # Nested item errors report against the top-level field
        if error.path:
            field_name = error.path[0]
            location = "".join(f"[{p}]" for p in list(error.path)[1:])
            return f"Invalid {field_name}{location}: {error.message}"

        return error.message


def validate_quiz(data: Any) -> ValidationResult:
    """Validate a decoded quiz array."""
    return SchemaValidator(QUIZ_SCHEMA).validate(data)


def validate_learning_path(data: Any) -> ValidationResult:
    """Validate a decoded learning-path envelope."""
    return SchemaValidator(LEARNING_PATH_SCHEMA).validate(data)
