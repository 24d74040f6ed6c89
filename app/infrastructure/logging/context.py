"""Request context binding for structured logging.

Binds request-scoped metadata (correlation id, subscriber, request path)
to every log entry emitted while handling an HTTP request or a dispatch,
so that all delivery attempts of one notification can be correlated.

Usage:
    from infrastructure.logging import bind_request_context

    with bind_request_context(correlation_id="req-123", request_path="/api/v1/notifications"):
        logger.info("processing_request")
"""

import uuid
from contextlib import contextmanager
from typing import Optional, Any, Generator
import structlog


@contextmanager
def bind_request_context(
    correlation_id: Optional[str] = None,
    user_id: Optional[str] = None,
    request_path: Optional[str] = None,
    request_method: Optional[str] = None,
    **extra_context: Any,
) -> Generator[None, None, None]:
    """Bind request-scoped context to all logs within the context manager.

    Args:
        correlation_id: Unique request identifier. Auto-generated if not provided.
        user_id: Subscriber the request acts on (if any).
        request_path: HTTP request path (e.g., "/api/v1/notifications").
        request_method: HTTP method (e.g., "GET", "POST").
        **extra_context: Additional key-value pairs to include in logs.

    Yields:
        None - context is bound to structlog's context vars.

    Example:
        @app.middleware("http")
        async def logging_middleware(request: Request, call_next):
            with bind_request_context(
                correlation_id=request.headers.get("X-Correlation-ID"),
                request_path=request.url.path,
                request_method=request.method,
            ):
                return await call_next(request)
    """
    context: dict[str, Any] = {}
    context["correlation_id"] = correlation_id or str(uuid.uuid4())

    if user_id is not None:
        context["user_id"] = user_id

    if request_path is not None:
        context["request_path"] = request_path

    if request_method is not None:
        context["request_method"] = request_method

    context.update(extra_context)

    structlog.contextvars.bind_contextvars(**context)
    try:
        yield
    finally:
        structlog.contextvars.unbind_contextvars(*context.keys())


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from the logging context.

    Returns:
        The correlation ID if set, None otherwise.
    """
    ctx = structlog.contextvars.get_contextvars()
    return ctx.get("correlation_id")
