# src/caserun/telemetry/logger/base.py

"""
structlog setup for caserun.

Events are rendered by stdlib handlers: a console handler on stderr (the
run summary owns stdout) and, optionally, a JSON file handler. Values that
belong to one engine run, such as the engine id and a short run id, live
in contextvars and are merged into every event logged during that run.
"""

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from rich.console import Console
from structlog.typing import FilteringBoundLogger, Processor

from caserun.telemetry.logger.processors import (
    add_emoji_processor,
    remove_extra_keys_processor,
)

StructLogger = FilteringBoundLogger

_EVENT_PROCESSORS: tuple[Processor, ...] = (
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    add_emoji_processor,
    remove_extra_keys_processor,
)


def _json_renderer() -> Processor:
    return structlog.processors.JSONRenderer(sort_keys=True)


def _console_handler(json_logs: bool) -> logging.Handler:
    if json_logs:
        renderer = _json_renderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=Console(stderr=True).is_terminal)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(processor=renderer))
    return handler


def _file_handler(log_file: str) -> logging.Handler:
    # Files are always JSON lines, whatever the console shows.
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(processor=_json_renderer()))
    return handler


def setup_logging(
    level: int = logging.INFO,
    json_logs: bool = False,
    log_file: str | None = None,
    console: bool = True,
) -> None:
    """
    Routes structlog through the root logger and replaces its handlers.

    A log file that cannot be opened is reported and skipped; console
    logging still works.
    """
    structlog.configure(
        processors=[*_EVENT_PROCESSORS, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        handler.close()
        root_logger.removeHandler(handler)
    root_logger.setLevel(level)

    if console:
        root_logger.addHandler(_console_handler(json_logs))

    slog = structlog.get_logger("telemetry")
    if log_file:
        try:
            root_logger.addHandler(_file_handler(log_file))
        except OSError as e:
            slog.error("Cannot open log file", log_file=log_file, error=str(e))

    slog.debug(
        "Logging configured",
        level=logging.getLevelName(level),
        json_logs=json_logs,
        console=console,
        log_file=log_file,
    )


@contextmanager
def run_context(engine_id: str) -> Iterator[str]:
    """Tags every event logged inside the block with ``engine_id`` and a fresh run id."""
    run_id = uuid.uuid4().hex[:8]
    with structlog.contextvars.bound_contextvars(engine_id=engine_id, run_id=run_id):
        yield run_id


# 🔼⚙️
