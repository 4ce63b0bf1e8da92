"""
Logging configuration for LearnPath.

Modules log through ``logging.getLogger(__name__)``; only the entry point
calls ``configure_logging``. Handlers attach to the ``learnpath`` logger:
- console (always)
- <logs_dir>/error.log (ERROR and above) and <logs_dir>/combined.log, when
  the directory can be created
Records are rendered by a structlog processor pipeline, so ``extra`` fields
(request id, topic, ...) appear as key/value pairs. Set LOG_FORMAT=json for
one JSON object per line.
"""

import logging
from pathlib import Path
from typing import Optional

import structlog

SERVICE_NAME = "learnpath"
ROOT_LOGGER_NAME = "learnpath"

_HANDLER_MARKER = "_learnpath_handler"


def _add_service(logger, method_name, event_dict):
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _shared_processors() -> list:
    """Processors applied to every stdlib record before rendering."""
    return [
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.ExtraAdder(),
        _add_service,
        structlog.processors.StackInfoRenderer(),
    ]


def build_formatter(json_logs: bool = False) -> logging.Formatter:
    """
    Build a stdlib formatter backed by structlog renderers.

    Args:
        json_logs: Render JSON lines instead of key/value console text

    Returns:
        structlog ProcessorFormatter usable on any logging handler
    """
    processors = [structlog.stdlib.ProcessorFormatter.remove_processors_meta]
    if json_logs:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.EventRenamer("message"),
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_processors(),
        processors=processors,
    )


def configure_logging(
    level: str = "INFO",
    logs_dir: Optional[Path] = None,
    json_logs: bool = False,
) -> logging.Logger:
    """
    Install handlers on the package logger.

    Calling it again replaces the handlers it installed before, so it is
    safe to call from tests or on reload.

    Args:
        level: Log level name
        logs_dir: Directory for error.log and combined.log (None = console only)
        json_logs: Emit JSON lines instead of plain text

    Returns:
        The configured package logger
    """
    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    package_logger.propagate = False

    for handler in list(package_logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            package_logger.removeHandler(handler)
            handler.close()

    formatter = build_formatter(json_logs)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    handlers = [console]

    if logs_dir is not None:
        logs_dir = Path(logs_dir)
        try:
            logs_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            package_logger.warning("Log directory %s unavailable, logging to console only: %s", logs_dir, e)
        else:
            error_file = logging.FileHandler(logs_dir / "error.log", encoding="utf-8")
            error_file.setLevel(logging.ERROR)
            combined_file = logging.FileHandler(logs_dir / "combined.log", encoding="utf-8")
            for file_handler in (error_file, combined_file):
                file_handler.setFormatter(formatter)
                handlers.append(file_handler)

    for handler in handlers:
        setattr(handler, _HANDLER_MARKER, True)
        package_logger.addHandler(handler)

    return package_logger
