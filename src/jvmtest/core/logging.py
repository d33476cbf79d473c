"""Structured logging for test runs.

structlog events are rendered by stdlib handlers, one per configured output,
each with its own level and renderer. While a test run is active its run id
is attached to every event as ``request_id``, so a run log written to a file
can be filtered back down to one run. Console handlers go quiet while a Rich
spinner owns the terminal; file handlers keep receiving everything.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import structlog

if TYPE_CHECKING:
    from jvmtest.config.models import LoggingConfig, LogOutputConfig

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)

# First file output of the active configuration
_run_log_path: Path | None = None

# Third-party loggers that only add per-request chatter to a run log
_QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")

_CONSOLE_DESTINATIONS = ("stderr", "stdout")


def get_request_id() -> str | None:
    return _request_id.get()


def set_request_id(request_id: str | None = None) -> str:
    """Bind a correlation id (normally the run id); generate one if omitted."""
    rid = request_id or uuid4().hex[:12]
    _request_id.set(rid)
    return rid


def clear_request_id() -> None:
    _request_id.set(None)


def get_log_file_path() -> Path | None:
    """Path of the file the current run is logged to, if any."""
    return _run_log_path


def _attach_request_id(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    if rid := get_request_id():
        event_dict["request_id"] = rid
    return event_dict


def _parse_level(name: str | None, fallback: int = logging.INFO) -> int:
    if not name:
        return fallback
    name = name.upper()
    if name == "WARN":
        return logging.WARNING
    return logging.getLevelNamesMapping().get(name, fallback)


class ConsoleSuppressingFilter(logging.Filter):
    """Drops console records while a spinner is on screen."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: ARG002
        # progress imports this module
        from jvmtest.core.progress import is_console_suppressed

        return not is_console_suppressed()


def _handler_for(output: LogOutputConfig) -> logging.Handler:
    if output.destination in _CONSOLE_DESTINATIONS:
        handler: logging.Handler = logging.StreamHandler(getattr(sys, output.destination))
        handler.addFilter(ConsoleSuppressingFilter())
        return handler

    path = Path(output.destination)
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, mode="a", encoding="utf-8")


def _formatter_for(
    output: LogOutputConfig,
    pre_chain: list[structlog.types.Processor],
) -> logging.Formatter:
    renderer: structlog.types.Processor
    if output.format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        is_console = output.destination in _CONSOLE_DESTINATIONS
        renderer = structlog.dev.ConsoleRenderer(
            colors=is_console and getattr(sys, output.destination).isatty(),
            pad_event_to=0,
            pad_level=False,
        )
    return structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=pre_chain)


def configure_logging(
    *,
    config: LoggingConfig | None = None,
    json_format: bool = False,
    level: str = "INFO",
) -> None:
    """Install structlog + stdlib handlers.

    Args:
        config: Logging section of the loaded config. When given, it wins over
            ``json_format`` and ``level``.
        json_format: Single stderr output rendered as JSON lines.
        level: Level for the single stderr output.
    """
    global _run_log_path
    from jvmtest.config.models import LoggingConfig, LogOutputConfig

    if config is None:
        config = LoggingConfig(
            level=level,
            outputs=[LogOutputConfig(format="json" if json_format else "console")],
        )

    root_level = _parse_level(config.level)
    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
        _attach_request_id,  # type: ignore[list-item]
    ]

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # The CLI reconfigures after loading the workspace config
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()
    root.setLevel(root_level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _run_log_path = None
    for output in config.outputs:
        if output.destination not in _CONSOLE_DESTINATIONS and _run_log_path is None:
            _run_log_path = Path(output.destination)

        handler = _handler_for(output)
        handler.setLevel(_parse_level(output.level, root_level))
        handler.setFormatter(_formatter_for(output, pre_chain))
        root.addHandler(handler)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger=name)
    return logger  # type: ignore[no-any-return]
