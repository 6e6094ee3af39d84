# src/chainverify/core/logging.py
"""Logging setup shared by the CLI and library callers of chainverify.

Run progress (nodes read, partitions reduced, truncated referrer lists,
keys defined more than once) is logged through structlog. Every record,
whether it comes from structlog or from a plain ``logging.getLogger``
logger such as dynaconf's, ends up on a single stdout handler, rendered
either as one JSON object per line or as console text.

configure_logging() can be called again at any time: the CLI calls it once
from its callback, and again after reading the settings file's ``logging``
block.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import ProcessorFormatter

# Kept at WARNING or above even under --verbose
_NOISY_LOGGERS: tuple[str, ...] = (
    "dynaconf",
    "markdown_it",
)


def _remove_internal_fields(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Drop the ``_record``/``_from_structlog`` keys ProcessorFormatter injects."""
    del event_dict["_record"]
    del event_dict["_from_structlog"]
    return event_dict


def configure_logging(
    *,
    json_output: bool = False,
    level: str = "INFO",
) -> None:
    """Route structlog and stdlib records to one stdout handler.

    Replaces any handler installed by a previous call.

    Args:
        json_output: One JSON object per line (for log shippers) instead of
            console text.
        level: Root level name: DEBUG shows per-partition detail, INFO shows
            run start and completion, WARNING shows anomalies only.
    """
    log_level = getattr(logging, level.upper())

    pre_chain: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        renderers: list[Any] = [
            _remove_internal_fields,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [
            _remove_internal_fields,
            structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
        ]

    structlog.configure(
        processors=[*pre_chain, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Module-level loggers must pick up a later reconfiguration
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ProcessorFormatter(processors=renderers, foreign_pre_chain=pre_chain))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    for logger_name in _NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(max(log_level, logging.WARNING))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Module logger; safe to create at import time, before configure_logging()."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
