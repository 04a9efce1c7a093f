"""structlog configuration for appvalidator.

Records from the ``appvalidator`` logger tree, whether emitted through
structlog or stdlib ``logging``, are rendered by one stderr handler: console
output by default, JSON lines with ``--log-json``. The handler hangs off the
``appvalidator`` logger, so the root logger of a host application is left
alone.
"""

from __future__ import annotations

import logging
import sys

import structlog

LOGGER_NAME = "appvalidator"
HANDLER_NAME = "appvalidator-stderr"

# Third-party loggers that are too chatty at DEBUG
QUIET_LOGGERS = ("pluggy",)


def shared_processors() -> list[structlog.types.Processor]:
    """Processors applied to structlog events and stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def build_formatter(*, log_json: bool) -> structlog.stdlib.ProcessorFormatter:
    renderer: structlog.types.Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors(),
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> logging.Handler:
    """Route appvalidator logs to stderr and return the installed handler.

    Calling it again replaces the previous handler instead of adding one.

    Args:
        verbose: DEBUG level for appvalidator loggers; WARNING otherwise.
        log_json: Render JSON lines instead of console output.
    """
    structlog.configure(
        processors=[
            *shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(build_formatter(log_json=log_json))

    app_logger = logging.getLogger(LOGGER_NAME)
    for existing in app_logger.handlers[:]:
        if existing.get_name() == HANDLER_NAME:
            app_logger.removeHandler(existing)
    app_logger.addHandler(handler)
    app_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    app_logger.propagate = False

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return handler
