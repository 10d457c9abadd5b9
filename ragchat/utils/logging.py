"""structlog configuration for ragchat.

Every event passes through one processor chain and ends in a single
renderer: readable console lines while developing, one JSON object per
line in production (``APP_ENV=production`` or ``json_output=True``).

The stdlib root logger is given a ``ProcessorFormatter`` built from the
same chain, so uvicorn access lines and library warnings share the
format.  The HTTP client libraries are capped at WARNING because they log
every request at INFO.
"""

import logging
import os
import sys

import structlog

_CHATTY_LIBRARIES = ("httpx", "httpcore", "openai", "sentence_transformers")


def _processor_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
    ]


def _renderer(as_json: bool) -> structlog.types.Processor:
    if as_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> structlog.BoundLogger:
    """Install the ragchat logging setup and return the root structlog logger.

    Args:
        log_level: Minimum level name, e.g. ``"DEBUG"`` or ``"WARNING"``.
        json_output: Always emit JSON.  Otherwise JSON is chosen only when
            ``APP_ENV`` is ``production``.
    """
    level = logging.getLevelName(log_level.upper())
    as_json = json_output or os.environ.get("APP_ENV", "development") == "production"
    chain = _processor_chain()
    renderer = _renderer(as_json)

    structlog.configure(
        processors=[*chain, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    stdlib_handler = logging.StreamHandler(sys.stdout)
    stdlib_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    root = logging.getLogger()
    root.handlers[:] = [stdlib_handler]
    root.setLevel(level)
    for name in _CHATTY_LIBRARIES:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a logger tagged with *name*; applies default config if none exists yet."""
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(logger_name=name)
