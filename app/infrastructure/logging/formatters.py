"""Custom log processors for structured logging.

Processors follow the structlog signature ``(logger, method_name, event_dict)``
and are wired into the pipeline by ``configure_logging``.
"""

from typing import Any


def add_app_info(app_name: str, app_version: str = "unknown"):
    """Create a processor that adds application info to log entries.

    Args:
        app_name: Name of the application.
        app_version: Version string for the application.

    Returns:
        A structlog processor function.
    """

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        event_dict["app_name"] = app_name
        event_dict["app_version"] = app_version
        return event_dict

    return processor


# Sensitive field patterns that should be masked in logs
SENSITIVE_PATTERNS = frozenset(
    {
        "password",
        "secret",
        "token",
        "api_key",
        "apikey",
        "authorization",
        "auth_key",
        "credential",
        "private_key",
        "access_token",
        "refresh_token",
        "cookie",
        "jwt",
        "bearer",
    }
)


def mask_sensitive_data(
    mask_value: str = "***REDACTED***",
    additional_patterns: frozenset[str] | None = None,
):
    """Create a processor that masks sensitive data in log entries.

    Values are masked when their key contains one of the sensitive
    patterns (case-insensitive).

    Args:
        mask_value: The string to replace sensitive values with.
        additional_patterns: Extra patterns to consider sensitive.

    Returns:
        A structlog processor function.

    Example:
        mask_sensitive_data(additional_patterns=frozenset({"p256dh", "endpoint"}))
    """
    patterns = SENSITIVE_PATTERNS
    if additional_patterns:
        patterns = patterns | additional_patterns

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        masked_dict = {}
        for key, value in event_dict.items():
            key_lower = key.lower()
            is_sensitive = any(pattern in key_lower for pattern in patterns)
            if is_sensitive and value is not None:
                masked_dict[key] = mask_value
            else:
                masked_dict[key] = value
        return masked_dict

    return processor


def truncate_large_values(max_length: int = 500):
    """Create a processor that truncates overly large string values.

    Args:
        max_length: Maximum string length before truncation.

    Returns:
        A structlog processor function.
    """

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        for key, value in event_dict.items():
            if isinstance(value, str) and len(value) > max_length:
                event_dict[key] = (
                    value[:max_length] + f"...[truncated, {len(value)} chars total]"
                )
        return event_dict

    return processor
