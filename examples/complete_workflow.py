"""
Complete workflow example: Topic → Overview + Quiz → Score → Learning Path

Runs both pipeline operations from the console against the configured
Azure OpenAI deployment:
1. Submit a learning request (overview + beginner quiz)
2. Answer the quiz interactively
3. Evaluate knowledge (score, level, learning path)

Usage:
    python examples/complete_workflow.py "React.js" "Build a portfolio site"
"""

import sys

from learnpath.agents.model_client import ModelClient
from learnpath.config import Config, TokenTracker
from learnpath.errors import LearnPathError, public_error
from learnpath.orchestrator import OrchestrationService
from learnpath.utils.logging_setup import configure_logging


def ask(question, number):
    print(f"\nQ{number}. {question.text}")
    for index, option in enumerate(question.options, start=1):
        print(f"  {index}) {option}")
    choice = input("Your answer (1-4, blank to skip): ").strip()
    if choice.isdigit() and 1 <= int(choice) <= len(question.options):
        return question.options[int(choice) - 1]
    return ""


def main():
    topic = sys.argv[1] if len(sys.argv) > 1 else "React.js"
    purpose = sys.argv[2] if len(sys.argv) > 2 else "Build a portfolio site for job applications"

    config = Config.from_env()
    configure_logging(level="WARNING")
    errors = config.validate()
    if errors:
        for error in errors:
            print(f"✗ {error}")
        sys.exit(1)

    tracker = TokenTracker(config.logging)
    service = OrchestrationService(
        ModelClient(config.model, token_tracker=tracker), config
    )

    # ==================== Step 1: Overview and Quiz ====================
    print("=" * 60)
    print("STEP 1: Overview and Placement Quiz")
    print("=" * 60)

    try:
        session = service.submit_learning_request(topic, purpose)
    except LearnPathError as e:
        print(public_error(e, development=config.is_development))
        sys.exit(1)

    print(f"\n{session.overview}")

    # ==================== Step 2: Answer ====================
    print("\n" + "=" * 60)
    print("STEP 2: Answer the Quiz")
    print("=" * 60)

    answers = [ask(q, n) for n, q in enumerate(session.questions, start=1)]

    # ==================== Step 3: Evaluate ====================
    print("\n" + "=" * 60)
    print("STEP 3: Score and Learning Path")
    print("=" * 60)

    try:
        evaluation = service.evaluate_knowledge(
            session.to_dict()["questions"], answers, topic, purpose
        )
    except LearnPathError as e:
        print(public_error(e, development=config.is_development))
        sys.exit(1)

    result = evaluation.score
    print(f"\n✓ Score: {result.correct_count}/{result.total} ({result.percentage:.1f}%)")
    print(f"  Knowledge level: {result.level}")
    print(f"\n🗺️  {evaluation.learning_path.objective}")
    for index, module in enumerate(evaluation.learning_path.modules, start=1):
        print(f"  {index}. {module.get('title')}: {module.get('description', '')}")

    print("\n" + tracker.summary())


if __name__ == "__main__":
    main()
