"""
Learning Orchestrator

Composes the pipeline into the two operations callers use:
1. submit_learning_request: overview + beginner quiz for a topic
2. evaluate_knowledge: score a completed quiz + personalized learning path

Stages run strictly in sequence because later prompts embed earlier results.
Any failure aborts the whole operation; no partial result is ever returned.
The service keeps no state between requests.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
import json
import logging
import time
import uuid

from .agents import prompt_builder
from .agents.model_client import ModelClient
from .config import Config
from .errors import LearnPathError, ResponseParseFailed, ResponseShapeInvalid
from .models.learning_path import LearningPath
from .models.quiz import QuizSet, quiz_from_dicts, quiz_to_dicts
from .models.requests import EvaluationRequest, LearningRequest
from .models.scoring import ScoreResult, score
from .utils.sanitizer import parse_json
from .utils.validation import ValidationResult, validate_learning_path, validate_quiz

logger = logging.getLogger(__name__)


# ==================== Result Models ====================

@dataclass
class LearningSession:
    """
    Result of a learning request.

    Attributes:
        overview: Prose explanation of the topic
        questions: Beginner quiz for the topic
        request_id: Correlation token for logs
    """
    overview: str
    questions: QuizSet
    request_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overview": self.overview,
            "questions": quiz_to_dicts(self.questions),
            "requestId": self.request_id,
        }


@dataclass
class KnowledgeEvaluation:
    """
    Result of evaluating a completed quiz.

    Attributes:
        score: Correct count, total, percentage and level
        learning_path: Recommended modules
        request_id: Correlation token for logs
    """
    score: ScoreResult
    learning_path: LearningPath
    request_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.score.to_dict(),
            "learningPath": self.learning_path.to_dict(),
            "requestId": self.request_id,
        }


def new_request_id() -> str:
    """Opaque per-request token, used only for log correlation."""
    return f"req-{uuid.uuid4().hex}"


class OrchestrationService:
    """
    Main orchestrator for the learning pipeline.

    The model client and config are injected; the service itself holds no
    mutable state, so one instance can serve concurrent requests.
    """

    def __init__(
        self,
        model_client: ModelClient,
        config: Optional[Config] = None,
        request_id_factory: Callable[[], str] = new_request_id,
    ):
        """
        Initialize the orchestrator.

        Args:
            model_client: Client for the completion endpoint
            config: Token budgets, paths and environment (from env if None)
            request_id_factory: Produces a fresh request id per operation
        """
        self.model_client = model_client
        self.config = config or Config.from_env()
        self.request_id_factory = request_id_factory
        self._started_at = time.monotonic()

    # ==================== Public Operations ====================

    def submit_learning_request(self, topic: str, purpose: str) -> LearningSession:
        """
        Generate an overview and a beginner quiz for a topic.

        Args:
            topic: What the learner wants to learn
            purpose: Why they want to learn it

        Returns:
            LearningSession

        Raises:
            InputValidationFailed: If topic or purpose violate length limits
            ModelRequestFailed: If either model call fails
            ResponseParseFailed: If the quiz is not valid JSON of the expected shape
        """
        request = LearningRequest(topic=topic, purpose=purpose).validate()
        request_id = self.request_id_factory()
        log_extra = {"request_id": request_id, "topic": request.topic}

        logger.info(
            "Processing learning request",
            extra={**log_extra, "purpose": request.purpose},
        )

        try:
            overview = self.model_client.complete(
                prompt_builder.overview_messages(request.topic, request.purpose),
                max_tokens=self.config.tokens.overview,
                temperature=self.config.model.temperature,
            )
            questions = self._generate_quiz(request.topic, request_id)
        except LearnPathError:
            logger.error("Error processing learning request", extra=log_extra, exc_info=True)
            raise

        logger.info(
            "Learning request processed successfully",
            extra={**log_extra, "question_count": len(questions)},
        )
        self._log_token_usage(log_extra)
        return LearningSession(overview=overview, questions=questions, request_id=request_id)

    def evaluate_knowledge(
        self,
        quiz: List[Dict[str, Any]],
        answers: List[str],
        topic: str,
        purpose: str,
    ) -> KnowledgeEvaluation:
        """
        Score a completed quiz and build a learning path from the result.

        The score is not returned on its own: if learning-path generation
        fails, the whole operation fails.

        Args:
            quiz: Questions as returned by submit_learning_request
            answers: Submitted answers, answers[i] answers quiz[i]
            topic: Learning topic
            purpose: Learning purpose

        Returns:
            KnowledgeEvaluation

        Raises:
            InputValidationFailed: If the request is malformed or lengths differ
            ModelRequestFailed: If the learning-path call fails
            ResponseParseFailed: If the learning path is not valid JSON of the expected shape
        """
        request = EvaluationRequest(
            quiz=quiz, answers=answers, topic=topic, purpose=purpose
        ).validate()
        request_id = self.request_id_factory()
        log_extra = {"request_id": request_id, "topic": request.topic}

        logger.info(
            "Processing knowledge evaluation",
            extra={**log_extra, "purpose": request.purpose},
        )

        result = score(request.questions, request.answer_set)

        try:
            learning_path = self._generate_learning_path(request, result, request_id)
        except LearnPathError:
            logger.error(
                "Error processing knowledge evaluation", extra=log_extra, exc_info=True
            )
            raise

        logger.info(
            "Knowledge evaluation completed",
            extra={
                **log_extra,
                "score": result.correct_count,
                "knowledge_level": result.level.value,
                "score_percentage": result.percentage,
            },
        )
        self._log_token_usage(log_extra)
        return KnowledgeEvaluation(
            score=result, learning_path=learning_path, request_id=request_id
        )

    def health(self) -> Dict[str, Any]:
        """Liveness snapshot for the hosting layer."""
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": time.monotonic() - self._started_at,
        }

    # ==================== Stages ====================

    def _generate_quiz(self, topic: str, request_id: str) -> QuizSet:
        raw = self.model_client.complete(
            prompt_builder.quiz_messages(topic),
            max_tokens=self.config.tokens.quiz,
            temperature=self.config.model.temperature,
        )
        decoded = self._decode(raw, validate_quiz, "quiz", "questions", request_id)
        return quiz_from_dicts(decoded)

    def _generate_learning_path(
        self,
        request: EvaluationRequest,
        result: ScoreResult,
        request_id: str,
    ) -> LearningPath:
        raw = self.model_client.complete(
            prompt_builder.learning_path_messages(
                request.topic,
                request.purpose,
                request.questions,
                request.answer_set,
                result.level.value,
            ),
            max_tokens=self.config.tokens.learning_path,
            temperature=self.config.model.temperature,
        )
        decoded = self._decode(
            raw, validate_learning_path, "learning path", "learning_path", request_id
        )
        return LearningPath.from_envelope(decoded)

    def _decode(
        self,
        raw: str,
        validator: Callable[[Any], ValidationResult],
        what: str,
        artifact_stem: str,
        request_id: str,
    ) -> Any:
        """
        Parse and shape-check model output.

        In development the decoded value is saved as <stem>_<id>.json, or the
        raw text as <stem>_raw_<id>.txt when it could not be used.
        """
        try:
            decoded = parse_json(raw)
            validation = validator(decoded)
            if not validation:
                raise ResponseShapeInvalid(validation.errors, raw_text=raw, what=what)
        except ResponseParseFailed as e:
            if self.config.is_development:
                self._write_debug_artifact(f"{artifact_stem}_raw_{request_id}.txt", e.raw_text)
            raise

        if self.config.is_development:
            self._write_debug_artifact(f"{artifact_stem}_{request_id}.json", decoded)
        return decoded

    def _log_token_usage(self, log_extra: Dict[str, Any]) -> None:
        """Log cumulative token usage and estimated cost, when tracking is on."""
        tracker = self.model_client.token_tracker
        if tracker is None or not self.config.logging.log_tokens:
            return
        logger.info("Token usage", extra={**log_extra, **tracker.get_stats()})

    def _write_debug_artifact(self, filename: str, data: Any) -> None:
        """Save model output under the logs directory (development only)."""
        logs_dir = self.config.paths.logs_dir
        try:
            logs_dir.mkdir(parents=True, exist_ok=True)
            with open(logs_dir / filename, "w") as f:
                if isinstance(data, str):
                    f.write(data)
                else:
                    json.dump(data, f, indent=2)
        except OSError as e:
            logger.warning("Could not write debug artifact %s: %s", filename, e)
