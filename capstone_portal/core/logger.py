"""
Structured Logger Module

Configures structlog on top of the standard library logging module.
Every service logs through get_logger() so request handling, admission
decisions and store failures share one format.

Usage:
    from capstone_portal.core.logger import get_logger

    logger = get_logger("admission_service")
    logger.info("Application submitted", student_id="s1", faculty_id="f1")
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.types import BindableLogger, EventDict, WrappedLogger


SENSITIVE_FIELDS = {"password", "secret", "token", "credential", "authorization"}


def mask_credentials(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Processor that masks sensitive values before rendering.

    A key is sensitive when it equals one of SENSITIVE_FIELDS or carries one
    as an underscore/hyphen separated part (e.g. "access_token", "jwt-secret").
    """
    for key in list(event_dict.keys()):
        key_lower = key.lower()
        for sensitive in SENSITIVE_FIELDS:
            if (
                key_lower == sensitive
                or key_lower.endswith(f"_{sensitive}")
                or key_lower.endswith(f"-{sensitive}")
                or key_lower.startswith(f"{sensitive}_")
                or key_lower.startswith(f"{sensitive}-")
            ):
                event_dict[key] = "***MASKED***"
                break

    return event_dict


def configure_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """
    Configure stdlib logging and structlog.

    Args:
        log_level: Logging level name (e.g. "INFO", "DEBUG")
        json_output: Render JSON lines when True, human-readable console output otherwise
    """
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper(), logging.INFO),
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            mask_credentials,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(component: Optional[str] = None, **context) -> BindableLogger:
    """
    Get a structlog logger bound to a component name and extra context.

    Example:
        logger = get_logger("faculty_routes", faculty_id="f1")
        logger.warning("Accept denied", reason="limit_reached")
    """
    logger = structlog.get_logger()
    if component:
        logger = logger.bind(component=component)
    if context:
        logger = logger.bind(**context)
    return logger
