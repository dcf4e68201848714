"""Logging setup for applications embedding the callback receiver.

Library modules only call ``structlog.get_logger(__name__)``; this module
configures where those events go. Call it once at application startup.
"""

import logging
import sys

import structlog

_CONFIGURED = False


def configure_logging(level: str = "INFO", *, json_output: bool = True) -> None:
    """Configure structlog and stdlib logging.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR).
        json_output: If True, output JSON; if False, console format.
    """
    global _CONFIGURED

    if _CONFIGURED:
        return

    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        stream=sys.stdout,
    )

    # Request-level chatter from the HTTP client
    for noisy in ["httpx", "httpcore"]:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    if json_output:
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )

    _CONFIGURED = True


def reset_logging() -> None:
    """Reset structlog to its defaults (for testing)."""
    global _CONFIGURED

    structlog.reset_defaults()
    _CONFIGURED = False
