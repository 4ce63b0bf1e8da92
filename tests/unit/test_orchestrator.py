"""
Unit tests for the orchestration service.

Tests:
- submit_learning_request: overview then quiz, all-or-nothing
- evaluate_knowledge: scoring then learning path, all-or-nothing
- Input validation before any model call
- Development-mode debug artifacts
- Token usage logging
"""

import json

import openai
import pytest

from learnpath.agents.model_client import ModelClient
from learnpath.config import Config, TokenTracker
from learnpath.errors import (
    InputValidationFailed,
    ModelRequestFailed,
    ResponseParseFailed,
    ResponseShapeInvalid,
)
from learnpath.models.scoring import KnowledgeLevel
from learnpath.orchestrator import OrchestrationService, new_request_id

TOPIC = "React.js"
PURPOSE = "Build a portfolio site for job applications"
OVERVIEW = "React is a JavaScript library for building user interfaces."


@pytest.fixture
def service(model_client, config):
    return OrchestrationService(
        model_client, config, request_id_factory=lambda: "req-test"
    )


@pytest.fixture
def dev_service(model_client, config):
    dev_config = Config(
        model=config.model,
        tokens=config.tokens,
        paths=config.paths,
        logging=config.logging,
        environment="development",
    )
    return OrchestrationService(
        model_client, dev_config, request_id_factory=lambda: "req-dev"
    )


class TestSubmitLearningRequest:
    """Test overview and quiz generation."""

    def test_success(self, service, mock_llm, quiz_items, ai_reply, fenced):
        mock_llm.invoke.side_effect = [ai_reply(OVERVIEW), ai_reply(fenced(quiz_items))]

        session = service.submit_learning_request(TOPIC, PURPOSE)

        assert session.overview == OVERVIEW
        assert len(session.questions) == 3
        assert session.questions[1].correct_option == "useState"
        assert session.request_id == "req-test"

    def test_stages_run_in_order_with_budgets(self, service, mock_llm, quiz_items, ai_reply):
        mock_llm.invoke.side_effect = [ai_reply(OVERVIEW), ai_reply(json.dumps(quiz_items))]

        service.submit_learning_request(TOPIC, PURPOSE)

        first, second = mock_llm.invoke.call_args_list
        assert first.kwargs["max_tokens"] == 200
        assert second.kwargs["max_tokens"] == 500
        assert "Explain briefly what React.js is" in first.args[0][1].content
        assert "multiple-choice questions about React.js" in second.args[0][1].content

    def test_to_dict(self, service, mock_llm, quiz_items, ai_reply, fenced):
        mock_llm.invoke.side_effect = [ai_reply(OVERVIEW), ai_reply(fenced(quiz_items))]

        payload = service.submit_learning_request(TOPIC, PURPOSE).to_dict()

        assert payload == {
            "overview": OVERVIEW,
            "questions": quiz_items,
            "requestId": "req-test",
        }

    def test_inputs_trimmed(self, service, mock_llm, quiz_items, ai_reply, fenced):
        mock_llm.invoke.side_effect = [ai_reply(OVERVIEW), ai_reply(fenced(quiz_items))]

        service.submit_learning_request("  React.js  ", f"\n{PURPOSE}\t")

        prompt = mock_llm.invoke.call_args_list[0].args[0][1].content
        assert "what React.js is" in prompt

    def test_invalid_input_makes_no_model_call(self, service, mock_llm):
        with pytest.raises(InputValidationFailed) as exc_info:
            service.submit_learning_request("R", "abc")

        assert exc_info.value.errors == [
            "Topic must be between 2 and 100 characters",
            "Purpose must be between 5 and 500 characters",
        ]
        mock_llm.invoke.assert_not_called()

    def test_whitespace_only_topic_rejected(self, service, mock_llm):
        with pytest.raises(InputValidationFailed):
            service.submit_learning_request("     ", PURPOSE)
        mock_llm.invoke.assert_not_called()

    def test_quiz_timeout_discards_overview(self, service, mock_llm, ai_reply, azure_request):
        mock_llm.invoke.side_effect = [
            ai_reply(OVERVIEW),
            openai.APITimeoutError(request=azure_request()),
        ]

        with pytest.raises(ModelRequestFailed):
            service.submit_learning_request(TOPIC, PURPOSE)

        assert mock_llm.invoke.call_count == 2

    def test_overview_failure_skips_quiz(self, service, mock_llm, azure_response):
        mock_llm.invoke.side_effect = openai.APIStatusError(
            "Service unavailable", response=azure_response(503), body=None
        )

        with pytest.raises(ModelRequestFailed) as exc_info:
            service.submit_learning_request(TOPIC, PURPOSE)

        assert exc_info.value.status_code == 503
        assert mock_llm.invoke.call_count == 1

    def test_unparseable_quiz(self, service, mock_llm, ai_reply):
        raw = "Sure! Here are three questions about React..."
        mock_llm.invoke.side_effect = [ai_reply(OVERVIEW), ai_reply(raw)]

        with pytest.raises(ResponseParseFailed) as exc_info:
            service.submit_learning_request(TOPIC, PURPOSE)

        assert exc_info.value.raw_text == raw

    def test_quiz_missing_options(self, service, mock_llm, ai_reply, fenced):
        broken = [{"question": "What is JSX?", "correct": "A syntax extension"}]
        mock_llm.invoke.side_effect = [ai_reply(OVERVIEW), ai_reply(fenced(broken))]

        with pytest.raises(ResponseShapeInvalid) as exc_info:
            service.submit_learning_request(TOPIC, PURPOSE)

        assert any("options" in error for error in exc_info.value.errors)

    def test_quiz_wrong_option_count(self, service, mock_llm, quiz_items, ai_reply, fenced):
        quiz_items[0]["options"] = quiz_items[0]["options"][:3]
        mock_llm.invoke.side_effect = [ai_reply(OVERVIEW), ai_reply(fenced(quiz_items))]

        with pytest.raises(ResponseShapeInvalid):
            service.submit_learning_request(TOPIC, PURPOSE)

    def test_quiz_object_instead_of_array(
        self, service, mock_llm, quiz_items, ai_reply, fenced
    ):
        mock_llm.invoke.side_effect = [
            ai_reply(OVERVIEW),
            ai_reply(fenced({"questions": quiz_items})),
        ]

        with pytest.raises(ResponseShapeInvalid):
            service.submit_learning_request(TOPIC, PURPOSE)

    def test_no_debug_artifact_in_production(
        self, service, mock_llm, quiz_items, config, ai_reply, fenced
    ):
        mock_llm.invoke.side_effect = [ai_reply(OVERVIEW), ai_reply(fenced(quiz_items))]

        service.submit_learning_request(TOPIC, PURPOSE)

        assert not (config.paths.logs_dir / "questions_req-test.json").exists()

    def test_debug_artifact_in_development(
        self, dev_service, mock_llm, quiz_items, config, ai_reply, fenced
    ):
        mock_llm.invoke.side_effect = [ai_reply(OVERVIEW), ai_reply(fenced(quiz_items))]

        dev_service.submit_learning_request(TOPIC, PURPOSE)

        artifact = config.paths.logs_dir / "questions_req-dev.json"
        assert json.loads(artifact.read_text()) == quiz_items

    def test_raw_text_kept_for_unparseable_quiz_in_development(
        self, dev_service, mock_llm, config, ai_reply
    ):
        raw = "Sure! Here are three questions about React..."
        mock_llm.invoke.side_effect = [ai_reply(OVERVIEW), ai_reply(raw)]

        with pytest.raises(ResponseParseFailed):
            dev_service.submit_learning_request(TOPIC, PURPOSE)

        assert (config.paths.logs_dir / "questions_raw_req-dev.txt").read_text() == raw
        assert not (config.paths.logs_dir / "questions_req-dev.json").exists()

    def test_no_raw_text_written_in_production(self, service, mock_llm, config, ai_reply):
        mock_llm.invoke.side_effect = [ai_reply(OVERVIEW), ai_reply("not json")]

        with pytest.raises(ResponseParseFailed):
            service.submit_learning_request(TOPIC, PURPOSE)

        assert not (config.paths.logs_dir / "questions_raw_req-test.txt").exists()


class TestEvaluateKnowledge:
    """Test scoring and learning-path generation."""

    def test_success(
        self, service, mock_llm, quiz_items, learning_path_envelope, ai_reply, fenced
    ):
        mock_llm.invoke.return_value = ai_reply(fenced(learning_path_envelope))
        answers = ["A syntax extension for JavaScript", "useState", "A number"]

        evaluation = service.evaluate_knowledge(quiz_items, answers, TOPIC, PURPOSE)

        assert evaluation.score.correct_count == 2
        assert evaluation.score.total == 3
        assert evaluation.score.level == KnowledgeLevel.INTERMEDIATE
        assert evaluation.learning_path.module_titles == [
            "Components and Props",
            "State Management",
        ]
        assert mock_llm.invoke.call_count == 1

    def test_to_dict(
        self, service, mock_llm, quiz_items, learning_path_envelope, ai_reply, fenced
    ):
        mock_llm.invoke.return_value = ai_reply(fenced(learning_path_envelope))
        answers = [q["correct"] for q in quiz_items]

        payload = service.evaluate_knowledge(quiz_items, answers, TOPIC, PURPOSE).to_dict()

        assert payload["score"] == 3
        assert payload["total"] == 3
        assert payload["percentage"] == 100.0
        assert payload["level"] == "Expert"
        assert payload["learningPath"] == learning_path_envelope["learningPath"]
        assert payload["requestId"] == "req-test"

    def test_prompt_carries_answers_and_level(
        self, service, mock_llm, quiz_items, learning_path_envelope, ai_reply, fenced
    ):
        mock_llm.invoke.return_value = ai_reply(fenced(learning_path_envelope))
        answers = ["A database", "useEffect", "A class"]

        service.evaluate_knowledge(quiz_items, answers, TOPIC, PURPOSE)

        call = mock_llm.invoke.call_args
        prompt = call.args[0][1].content
        assert "Q1: What is JSX?\nAnswer: A database\nCorrect Answer: A syntax extension for JavaScript" in prompt
        assert "knowledge level is determined to be: Beginner" in prompt
        assert call.kwargs["max_tokens"] == 1000

    def test_length_mismatch_rejected(self, service, mock_llm, quiz_items):
        with pytest.raises(InputValidationFailed) as exc_info:
            service.evaluate_knowledge(quiz_items, ["useState"], TOPIC, PURPOSE)

        assert "one-to-one" in str(exc_info.value)
        mock_llm.invoke.assert_not_called()

    def test_empty_quiz_rejected(self, service, mock_llm):
        with pytest.raises(InputValidationFailed) as exc_info:
            service.evaluate_knowledge([], [], TOPIC, PURPOSE)

        assert "Questions must be an array with 1-10 elements" in exc_info.value.errors
        mock_llm.invoke.assert_not_called()

    def test_too_many_questions_rejected(self, service, mock_llm, quiz_items):
        quiz = (quiz_items * 4)[:11]
        answers = [q["correct"] for q in quiz]

        with pytest.raises(InputValidationFailed):
            service.evaluate_knowledge(quiz, answers, TOPIC, PURPOSE)
        mock_llm.invoke.assert_not_called()

    def test_non_string_answer_rejected(self, service, mock_llm, quiz_items):
        with pytest.raises(InputValidationFailed):
            service.evaluate_knowledge(quiz_items, ["useState", 2, None], TOPIC, PURPOSE)
        mock_llm.invoke.assert_not_called()

    def test_learning_path_failure_discards_score(
        self, service, mock_llm, quiz_items, azure_request
    ):
        mock_llm.invoke.side_effect = openai.APITimeoutError(request=azure_request())
        answers = [q["correct"] for q in quiz_items]

        with pytest.raises(ModelRequestFailed):
            service.evaluate_knowledge(quiz_items, answers, TOPIC, PURPOSE)

    def test_unparseable_learning_path(self, service, mock_llm, quiz_items, ai_reply):
        mock_llm.invoke.return_value = ai_reply('```json\n{"learningPath": {\n```')
        answers = [q["correct"] for q in quiz_items]

        with pytest.raises(ResponseParseFailed):
            service.evaluate_knowledge(quiz_items, answers, TOPIC, PURPOSE)

    def test_learning_path_without_modules(
        self, service, mock_llm, quiz_items, ai_reply, fenced
    ):
        envelope = {"learningPath": {"objective": "Learn React", "knowledgeLevel": "Expert"}}
        mock_llm.invoke.return_value = ai_reply(fenced(envelope))
        answers = [q["correct"] for q in quiz_items]

        with pytest.raises(ResponseShapeInvalid):
            service.evaluate_knowledge(quiz_items, answers, TOPIC, PURPOSE)

    def test_debug_artifact_in_development(
        self, dev_service, mock_llm, quiz_items, learning_path_envelope, config, ai_reply, fenced
    ):
        mock_llm.invoke.return_value = ai_reply(fenced(learning_path_envelope))
        answers = [q["correct"] for q in quiz_items]

        dev_service.evaluate_knowledge(quiz_items, answers, TOPIC, PURPOSE)

        artifact = config.paths.logs_dir / "learning_path_req-dev.json"
        assert json.loads(artifact.read_text()) == learning_path_envelope

    def test_raw_text_kept_for_bad_shape_in_development(
        self, dev_service, mock_llm, quiz_items, config, ai_reply, fenced
    ):
        envelope = {"learningPath": {"objective": "Learn React", "knowledgeLevel": "Expert"}}
        raw = fenced(envelope)
        mock_llm.invoke.return_value = ai_reply(raw)
        answers = [q["correct"] for q in quiz_items]

        with pytest.raises(ResponseShapeInvalid):
            dev_service.evaluate_knowledge(quiz_items, answers, TOPIC, PURPOSE)

        artifact = config.paths.logs_dir / "learning_path_raw_req-dev.txt"
        assert artifact.read_text() == raw


class TestServiceMisc:

    def test_request_ids_are_fresh(self):
        assert new_request_id() != new_request_id()
        assert new_request_id().startswith("req-")

    def test_default_factory_used(
        self, model_client, config, mock_llm, quiz_items, ai_reply, fenced
    ):
        service = OrchestrationService(model_client, config)
        mock_llm.invoke.side_effect = [ai_reply(OVERVIEW), ai_reply(fenced(quiz_items))]

        session = service.submit_learning_request(TOPIC, PURPOSE)

        assert session.request_id.startswith("req-")

    def test_health(self, service):
        health = service.health()
        assert health["status"] == "healthy"
        assert health["uptime"] >= 0
        assert "timestamp" in health


class TestTokenUsageLogging:
    """Token usage is logged after each completed operation."""

    def _service(self, config, mock_llm):
        tracker = TokenTracker(config.logging)
        client = ModelClient(config.model, llm=mock_llm, token_tracker=tracker)
        return OrchestrationService(client, config, request_id_factory=lambda: "req-tok")

    def _usage_records(self, caplog):
        return [r for r in caplog.records if r.getMessage() == "Token usage"]

    def test_usage_logged_after_learning_request(
        self, config, mock_llm, quiz_items, ai_reply, fenced, caplog
    ):
        usage = {"input_tokens": 100, "output_tokens": 40, "total_tokens": 140}
        mock_llm.invoke.side_effect = [
            ai_reply(OVERVIEW, usage=usage),
            ai_reply(fenced(quiz_items), usage=usage),
        ]
        service = self._service(config, mock_llm)

        with caplog.at_level("INFO", logger="learnpath.orchestrator"):
            service.submit_learning_request(TOPIC, PURPOSE)

        (record,) = self._usage_records(caplog)
        assert record.calls == 2
        assert record.input_tokens == 200
        assert record.output_tokens == 80
        assert record.request_id == "req-tok"

    def test_usage_not_logged_when_disabled(
        self, config, mock_llm, quiz_items, learning_path_envelope, ai_reply, fenced, caplog
    ):
        config.logging.log_tokens = False
        mock_llm.invoke.return_value = ai_reply(fenced(learning_path_envelope))
        service = self._service(config, mock_llm)
        answers = [q["correct"] for q in quiz_items]

        with caplog.at_level("INFO", logger="learnpath.orchestrator"):
            service.evaluate_knowledge(quiz_items, answers, TOPIC, PURPOSE)

        assert self._usage_records(caplog) == []

    def test_usage_not_logged_without_tracker(
        self, service, mock_llm, quiz_items, ai_reply, fenced, caplog
    ):
        mock_llm.invoke.side_effect = [ai_reply(OVERVIEW), ai_reply(fenced(quiz_items))]

        with caplog.at_level("INFO", logger="learnpath.orchestrator"):
            service.submit_learning_request(TOPIC, PURPOSE)

        assert self._usage_records(caplog) == []
