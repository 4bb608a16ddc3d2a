"""Logging for agentic-approvals.

Every component logs through structlog. Importing the package configures
nothing; an embedding application either calls configure_logging() once
or keeps its own structlog setup.

While a tool call is reviewed its identifiers are bound with
log_context(), so an evaluator event such as a rejected segment can be
traced back to the call_id that proposed it.
"""

import logging
import sys
from typing import TYPE_CHECKING, ContextManager

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from agentic_approvals.config import ApprovalSettings

DEFAULT_LOG_LEVEL = "warning"
DEFAULT_LOG_FORMAT = "console"


def _render_processors(log_format: str) -> list[Processor]:
    if log_format == "json":
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def configure_logging(settings: "ApprovalSettings | None" = None) -> None:
    """Send structlog events to stderr with the level and format from settings.

    Args:
        settings: Source of log_level and log_format. Defaults to warning
            level, console format.
    """
    level_name = settings.log_level if settings is not None else DEFAULT_LOG_LEVEL
    log_format = settings.log_format if settings is not None else DEFAULT_LOG_FORMAT

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            *_render_processors(log_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level_name.upper())
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        # Module-level loggers must pick up later reconfiguration
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name) if name else structlog.get_logger()


def log_context(**values: object) -> ContextManager[None]:
    """Bind values to every event logged until the with-block exits.

    None values are skipped.

    Example:
        with log_context(call_id="call_123"):
            evaluator.review(cmd)  # events carry call_id
    """
    bound = {key: value for key, value in values.items() if value is not None}
    return structlog.contextvars.bound_contextvars(**bound)


class Loggers:
    """Component loggers."""

    @staticmethod
    def parsers() -> structlog.stdlib.BoundLogger:
        """Tool-call argument extraction and result decoding."""
        return get_logger("agentic_approvals.parsers")

    @staticmethod
    def approvals() -> structlog.stdlib.BoundLogger:
        """Auto-approval evaluation."""
        return get_logger("agentic_approvals.approvals")

    @staticmethod
    def config() -> structlog.stdlib.BoundLogger:
        """Policy file loading."""
        return get_logger("agentic_approvals.config")
