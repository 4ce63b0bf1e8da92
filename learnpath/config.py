"""
Configuration management for LearnPath.

Settings are read from environment variables (optionally via a .env file):
- Azure OpenAI credentials and deployment
- Per-stage max-token budgets
- Filesystem paths for logs and debug artifacts
- Logging level and cost estimation

There is no module-level config instance. Build one with ``Config.from_env()``
at the entry point and pass it to the components that need it.
"""

import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

# Load environment variables from .env file
from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    """Read an integer from the environment, falling back on bad values."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass
class AzureModelConfig:
    """Azure OpenAI chat-completion settings."""

    endpoint: str = field(
        default_factory=lambda: os.getenv("AZURE_OPENAI_ENDPOINT", "")
    )
    api_key: str = field(default_factory=lambda: os.getenv("AZURE_OPENAI_API_KEY", ""))
    deployment: str = field(
        default_factory=lambda: os.getenv("AZURE_OPENAI_DEPLOYMENT", "gpt-4o")
    )
    api_version: str = field(
        default_factory=lambda: os.getenv(
            "AZURE_OPENAI_API_VERSION", "2024-12-01-preview"
        )
    )

    temperature: float = 0.7

    # Upper bound on a single completion call, in seconds
    request_timeout: float = field(
        default_factory=lambda: _env_float("REQUEST_TIMEOUT", 30.0)
    )


@dataclass
class TokenBudgetConfig:
    """Max output tokens for each generation stage."""

    overview: int = field(default_factory=lambda: _env_int("MAX_TOKENS_OVERVIEW", 200))
    quiz: int = field(default_factory=lambda: _env_int("MAX_TOKENS_QUESTIONS", 500))
    learning_path: int = field(
        default_factory=lambda: _env_int("MAX_TOKENS_LEARNING_PATH", 1000)
    )


@dataclass
class PathConfig:
    """File system paths - single source of truth for all directories."""

    project_root: Path = field(default_factory=lambda: Path(__file__).parent.parent)
    logs_dir: Optional[Path] = field(
        default_factory=lambda: Path(os.environ["LOGS_DIR"]) if os.getenv("LOGS_DIR") else None
    )

    def __post_init__(self):
        """Initialize computed paths."""
        if self.logs_dir is None:
            self.logs_dir = self.project_root / "logs"
        self.logs_dir = Path(self.logs_dir)

    def prepare_filesystem(self):
        """
        Create directories if they don't exist.

        Separated from __post_init__ to avoid side-effects on import.
        Call this explicitly from your app entrypoint.
        """
        self.logs_dir.mkdir(parents=True, exist_ok=True)


@dataclass
class LoggingConfig:
    """Logging and metrics configuration with env-driven pricing."""

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    json_logs: bool = field(
        default_factory=lambda: os.getenv("LOG_FORMAT", "text").lower() == "json"
    )
    log_tokens: bool = field(
        default_factory=lambda: os.getenv("LOG_TOKENS", "true").lower() != "false"
    )

    # Cost estimation (env-driven for easy model switching)
    cost_per_1k_input: float = field(
        default_factory=lambda: _env_float("COST_PER_1K_INPUT", 0.0025)
    )
    cost_per_1k_output: float = field(
        default_factory=lambda: _env_float("COST_PER_1K_OUTPUT", 0.0100)
    )


class Config:
    """
    Main configuration object.

    Usage:
        from learnpath.config import Config

        config = Config.from_env()
        errors = config.validate()
        config.prepare_fs()

        budget = config.tokens.quiz
    """

    def __init__(
        self,
        model: Optional[AzureModelConfig] = None,
        tokens: Optional[TokenBudgetConfig] = None,
        paths: Optional[PathConfig] = None,
        logging: Optional[LoggingConfig] = None,
        environment: Optional[str] = None,
    ):
        self.model = model or AzureModelConfig()
        self.tokens = tokens or TokenBudgetConfig()
        self.paths = paths or PathConfig()
        self.logging = logging or LoggingConfig()
        self.environment = (
            environment or os.getenv("APP_ENV", "production")
        ).lower()

    @classmethod
    def from_env(cls) -> "Config":
        """Build a config from the current process environment."""
        return cls()

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    def prepare_fs(self):
        """Prepare filesystem (create directories). Call once at startup."""
        self.paths.prepare_filesystem()

    def validate(self) -> list[str]:
        """
        Validate configuration and return list of errors.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        # Required environment
        if not self.model.endpoint:
            errors.append("AZURE_OPENAI_ENDPOINT not set in environment")

        if not self.model.api_key:
            errors.append("AZURE_OPENAI_API_KEY not set in environment")

        if not (0 <= self.model.temperature <= 2):
            errors.append(f"temperature must be in [0, 2], got {self.model.temperature}")

        if self.model.request_timeout <= 0:
            errors.append(
                f"request_timeout must be > 0, got {self.model.request_timeout}"
            )

        # Token budgets
        for stage in ("overview", "quiz", "learning_path"):
            budget = getattr(self.tokens, stage)
            if budget <= 0:
                errors.append(f"max tokens for {stage} must be > 0, got {budget}")

        return errors


class TokenTracker:
    """
    Thread-safe tracker for token usage and estimated costs.

    Usage:
        tracker = TokenTracker(config.logging)

        tracker.add_tokens(input_tokens=100, output_tokens=50)
        print(tracker.summary())
    """

    def __init__(self, pricing: Optional[LoggingConfig] = None):
        self._lock = threading.Lock()
        self.pricing = pricing or LoggingConfig()
        self.input_tokens = 0
        self.output_tokens = 0
        self.total_calls = 0

    def add_tokens(self, input_tokens: int, output_tokens: int):
        """Add tokens from an API call (thread-safe)."""
        with self._lock:
            self.input_tokens += input_tokens
            self.output_tokens += output_tokens
            self.total_calls += 1

    def total_tokens(self) -> int:
        """Get total tokens used (thread-safe)."""
        with self._lock:
            return self.input_tokens + self.output_tokens

    def _cost(self, input_tokens: int, output_tokens: int) -> float:
        input_cost = (input_tokens / 1000) * self.pricing.cost_per_1k_input
        output_cost = (output_tokens / 1000) * self.pricing.cost_per_1k_output
        return input_cost + output_cost

    def estimated_cost(self) -> float:
        """
        Calculate estimated cost in USD (thread-safe).

        Returns:
            Estimated cost based on current token counts
        """
        with self._lock:
            return self._cost(self.input_tokens, self.output_tokens)

    def summary(self) -> str:
        """Get formatted summary of usage (thread-safe, no deadlock)."""
        stats = self.get_stats()

        # Build string outside lock
        return (
            "Token Usage Summary:\n"
            f"  API Calls: {stats['calls']}\n"
            f"  Input Tokens: {stats['input_tokens']:,}\n"
            f"  Output Tokens: {stats['output_tokens']:,}\n"
            f"  Total Tokens: {stats['total_tokens']:,}\n"
            f"  Estimated Cost: ${stats['estimated_cost']:.4f}"
        )

    def reset(self):
        """Reset counters (thread-safe)."""
        with self._lock:
            self.input_tokens = 0
            self.output_tokens = 0
            self.total_calls = 0

    def get_stats(self) -> dict:
        """Get current stats as dict (thread-safe, no deadlock)."""
        # Acquire lock once, compute everything inline
        with self._lock:
            input_tokens = self.input_tokens
            output_tokens = self.output_tokens
            total_calls = self.total_calls
            est_cost = self._cost(input_tokens, output_tokens)

        return {
            "calls": total_calls,
            "input_tokens": input_tokens,
            "output_tokens": output_tokens,
            "total_tokens": input_tokens + output_tokens,
            "estimated_cost": est_cost,
        }
