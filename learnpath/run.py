"""
LearnPath: Gradio interface for the learning pipeline.

Step 1: enter a topic and purpose, get an overview and a short quiz.
Step 2: answer the quiz, get a score, knowledge level and learning path.

Run with:  python -m learnpath.run
"""

import logging
import os
import sys
from typing import Any, Dict, List, Optional

import gradio as gr

from .agents.model_client import ModelClient
from .config import Config, TokenTracker
from .errors import LearnPathError, public_error
from .orchestrator import KnowledgeEvaluation, LearningSession, OrchestrationService
from .utils.logging_setup import configure_logging
from .utils.validation import MAX_QUESTIONS

logger = logging.getLogger(__name__)


# ==================== UI Helper Functions ====================

def _format_error(exc: BaseException, development: bool) -> str:
    """Render the external error payload as Markdown."""
    payload = public_error(exc, development=development)
    lines = [f"❌ **{payload['message']}**"]
    for error in payload.get("errors", []):
        lines.append(f"- {error}")
    if "error" in payload:
        lines.append(f"\n*{payload['error']}*")
    return "\n".join(lines)


def _format_overview(session: LearningSession) -> str:
    return f"""
## 📖 Overview

{session.overview}

---

### 📝 Test your knowledge
Answer the {len(session.questions)} questions below, then submit.
"""


def _format_results(evaluation: KnowledgeEvaluation) -> str:
    result = evaluation.score
    path = evaluation.learning_path

    output = f"""
## 🎯 Your Results

- **Score**: {result.correct_count}/{result.total} ({result.percentage:.1f}%)
- **Knowledge Level**: {result.level.value}

---

## 🗺️ Learning Path

**Objective**: {path.objective}

"""
    for index, module in enumerate(path.modules, start=1):
        output += f"### {index}. {module.get('title', 'Untitled module')}\n"
        output += f"{module.get('description', '')}\n\n"
        if module.get("estimatedTime"):
            output += f"⏱️ *Estimated time: {module['estimatedTime']}*\n\n"
        resources = module.get("resources") or []
        if resources:
            output += "**Resources**:\n"
            for resource in resources:
                output += f"- {resource}\n"
            output += "\n"
    return output


def _hidden_radios() -> List[Dict[str, Any]]:
    return [gr.update(visible=False, value=None, choices=[]) for _ in range(MAX_QUESTIONS)]


# ==================== Event Handlers ====================

def make_handlers(service: OrchestrationService, development: bool = False):
    """Bind UI callbacks to an orchestration service."""

    def submit_request_ui(topic: str, purpose: str):
        """Generate overview and quiz for the learner's topic."""
        try:
            session = service.submit_learning_request(topic or "", purpose or "")
        except LearnPathError as e:
            return (
                _format_error(e, development),
                None,
                *_hidden_radios(),
                gr.update(visible=False),
            )

        radios = []
        for index in range(MAX_QUESTIONS):
            if index < len(session.questions):
                question = session.questions[index]
                radios.append(
                    gr.update(
                        visible=True,
                        value=None,
                        choices=list(question.options),
                        label=f"Q{index + 1}. {question.text}",
                    )
                )
            else:
                radios.append(gr.update(visible=False, value=None, choices=[]))

        return (
            _format_overview(session),
            session.to_dict()["questions"],
            *radios,
            gr.update(visible=True),
        )

    def submit_answers_ui(quiz: Optional[List[Dict[str, Any]]], topic: str, purpose: str, *selected):
        """Score the answers and build the learning path."""
        if not quiz:
            return "❌ Please generate a quiz first"

        # Unanswered questions count as wrong
        answers = ["" if value is None else value for value in selected[: len(quiz)]]
        try:
            evaluation = service.evaluate_knowledge(quiz, answers, topic or "", purpose or "")
        except LearnPathError as e:
            return _format_error(e, development)
        return _format_results(evaluation)

    return submit_request_ui, submit_answers_ui


# ==================== Gradio UI ====================

def create_interface(service: OrchestrationService, development: bool = False):
    """Create the two-step learning interface."""
    submit_request_ui, submit_answers_ui = make_handlers(service, development)

    with gr.Blocks(
        title="LearnPath - Personalised Learning",
        theme=gr.themes.Soft(primary_hue="purple", secondary_hue="blue"),
    ) as demo:
        gr.HTML("""
        <div style="text-align: center; padding: 20px; background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; border-radius: 10px; margin-bottom: 20px;">
            <h1 style="margin: 0;">🎓 Personalized Learning Portal</h1>
            <p style="margin: 5px 0 0 0;">Tell us what you want to learn and why</p>
        </div>
        """)

        quiz_state = gr.State(None)

        with gr.Row():
            topic_input = gr.Textbox(label="Topic", placeholder="React.js")
            purpose_input = gr.Textbox(
                label="Purpose of Learning",
                placeholder="Build a portfolio site for job applications",
            )
        request_btn = gr.Button("Submit Request", variant="primary")
        overview_output = gr.Markdown()

        with gr.Column(visible=False) as quiz_section:
            radios = [gr.Radio(choices=[], visible=False) for _ in range(MAX_QUESTIONS)]
            answers_btn = gr.Button("Submit Answers", variant="primary")

        results_output = gr.Markdown()

        request_btn.click(
            submit_request_ui,
            inputs=[topic_input, purpose_input],
            outputs=[overview_output, quiz_state, *radios, quiz_section],
        )
        answers_btn.click(
            submit_answers_ui,
            inputs=[quiz_state, topic_input, purpose_input, *radios],
            outputs=[results_output],
        )

    return demo


def main():
    config = Config.from_env()
    configure_logging(
        level=config.logging.log_level,
        logs_dir=config.paths.logs_dir,
        json_logs=config.logging.json_logs,
    )

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error("Invalid configuration: %s", error)
        sys.exit(1)

    config.prepare_fs()
    client = ModelClient(config.model, token_tracker=TokenTracker(config.logging))
    service = OrchestrationService(client, config)

    demo = create_interface(service, development=config.is_development)
    demo.queue()  # Enable queue for loading states

    port = int(os.getenv("PORT", "7860"))
    logger.info(
        "Server running on port %s",
        port,
        extra={"environment": config.environment, "port": port},
    )
    demo.launch(
        server_name=os.getenv("HOST", "0.0.0.0"),
        server_port=port,
        share=False,
        show_error=config.is_development,
    )


if __name__ == "__main__":
    main()
