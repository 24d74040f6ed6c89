"""Structlog configuration and logger setup.

This module provides the core logging configuration for the application.
It configures structlog with processors for callsite context, exception
formatting, secret masking and environment-aware rendering.

Usage:
    from infrastructure.logging import configure_logging, get_module_logger

    # Configure logging at app startup
    configure_logging()

    # Get a logger for your module
    logger = get_module_logger()
    logger.info("event_name", key="value")

Dependencies:
    - infrastructure.services.providers.get_settings
"""

import logging
import sys
import inspect
import structlog
from structlog.stdlib import BoundLogger
from typing import Optional

from infrastructure.logging.formatters import (
    add_app_info,
    mask_sensitive_data,
    truncate_large_values,
)

APP_NAME = "club-notifications"

# Push credentials and addresses must never reach the logs verbatim
PUSH_SENSITIVE_PATTERNS = frozenset({"p256dh", "vapid", "player_id", "endpoint"})


def _is_test_environment() -> bool:
    """Detect if running in a test environment.

    Returns:
        True if pytest is in sys.modules, False otherwise
    """
    return "pytest" in sys.modules


def configure_logging(
    log_level: Optional[str] = None,
    is_production: Optional[bool] = None,
) -> BoundLogger:
    """Configure structured logging with enhanced processors.

    Configures structlog with:
    - Context variable merging for correlation IDs
    - File/line/function context
    - Exception formatting with stack traces
    - Masking of credentials and push addresses
    - Test environment detection for log suppression

    Args:
        log_level: Optional override for log level (DEBUG, INFO, WARNING, etc).
            Defaults to settings.LOG_LEVEL if not provided.
        is_production: Optional override for production mode. Defaults to
            settings.is_production if not provided. Controls JSON vs console output.

    Returns:
        Configured logger instance

    Example:
        # At application startup
        logger = configure_logging()

        # With overrides
        logger = configure_logging(log_level="DEBUG", is_production=False)
    """
    # Suppress all logging during tests
    if _is_test_environment():
        logging.root.setLevel(logging.CRITICAL + 1)

        # Minimal processors; nothing is emitted because of the root level
        structlog.configure(
            processors=[
                structlog.stdlib.add_log_level,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

        logging.basicConfig(
            format="%(message)s",
            level=logging.CRITICAL + 1,
            force=True,
        )
        return structlog.stdlib.get_logger()

    # Imported here: the providers module pulls in the notification service,
    # which itself needs a configured logger.
    from infrastructure.services.providers import get_settings

    settings = get_settings()
    prod_mode = is_production if is_production is not None else settings.is_production

    processors = [
        # Add context variables (correlation IDs, dispatch ids, etc)
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
                structlog.processors.CallsiteParameter.FUNC_NAME,
            ]
        ),
        add_app_info(APP_NAME, settings.GIT_SHA),
        mask_sensitive_data(additional_patterns=PUSH_SENSITIVE_PATTERNS),
        truncate_large_values(max_length=1000),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if not prod_mode:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    effective_log_level = log_level or settings.LOG_LEVEL
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, effective_log_level.upper(), logging.INFO),
    )

    return structlog.stdlib.get_logger()


def get_logger(name: Optional[str] = None) -> BoundLogger:
    """Get a logger instance with automatic context detection.

    If name is provided, binds the logger to that name for context.
    Otherwise, uses the calling module name for context.

    Args:
        name: Optional logger name (typically __name__ in calling module)

    Returns:
        Logger instance with context

    Example:
        logger = get_logger("notifications.dispatcher")
    """
    if name:
        return structlog.stdlib.get_logger(logger_name=name)

    current_frame = inspect.currentframe()
    frame = current_frame.f_back if current_frame is not None else None
    module = inspect.getmodule(frame) if frame is not None else None
    if module:
        return structlog.stdlib.get_logger(logger_name=module.__name__)

    return structlog.stdlib.get_logger(logger_name="unknown")


def get_module_logger() -> BoundLogger:
    """Get a logger for the calling module with full path context.

    Automatically detects the calling module and binds component
    and module_path context for structured logging.

    Returns:
        Logger instance with module context

    Example:
        # In infrastructure/notifications/dispatcher.py
        logger = get_module_logger()
        # context: {"component": "dispatcher",
        #           "module_path": "infrastructure.notifications.dispatcher"}

        logger.info("notification_dispatched", attempted=3)
    """
    current_frame = inspect.currentframe()
    frame = current_frame.f_back if current_frame is not None else None
    module = inspect.getmodule(frame) if frame is not None else None
    if module:
        module_name = module.__name__
        return structlog.stdlib.get_logger(
            component=module_name.split(".")[-1],
            module_path=module_name,
        )

    return structlog.stdlib.get_logger(component="unknown")
