"""Error classifiers for push provider responses and exceptions.

Converts provider-specific responses and exceptions (Web Push services,
OneSignal REST API, Firebase Admin SDK, requests) into standardized
OperationResult objects. Delivery adapters rely on these to decide whether a
failure is transient or means the address is dead.

Key Functions:
- classify_http_status(): raw HTTP status code → OperationResult
- classify_request_exception(): requests/network exceptions → OperationResult
- classify_webpush_error(): pywebpush WebPushException → OperationResult
- classify_onesignal_response(): OneSignal notification response → OperationResult
- classify_firebase_error(): firebase_admin exceptions → OperationResult

Usage:
    from infrastructure.operations.classifiers import classify_webpush_error

    try:
        webpush(subscription_info=info, data=payload, ...)
    except WebPushException as exc:
        return classify_webpush_error(exc)
"""

from typing import Any, Mapping, Optional

import requests
from firebase_admin import exceptions as firebase_exceptions
from firebase_admin import messaging
from pywebpush import WebPushException

from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

DEFAULT_RETRY_AFTER_SECONDS = 60

ONESIGNAL_NOT_SUBSCRIBED_MARKER = "not subscribed"


def _parse_retry_after(value: Any) -> int:
    if value is None:
        return DEFAULT_RETRY_AFTER_SECONDS
    try:
        return int(value)
    except (ValueError, TypeError):
        return DEFAULT_RETRY_AFTER_SECONDS


def classify_http_status(
    status_code: int,
    service: str,
    retry_after: Any = None,
    bad_request_is_permanent: bool = True,
) -> OperationResult:
    """Classify a push service HTTP status code into OperationResult.

    Status Code Mapping:
    - 2xx: SUCCESS
    - 404: Subscription not found → NOT_FOUND
    - 410: Subscription expired/unsubscribed → NOT_FOUND (GONE)
    - 400: Malformed address → PERMANENT_ERROR (or TRANSIENT_ERROR when the
      provider uses 400 for request-level problems)
    - 401/403: Credentials rejected → UNAUTHORIZED
    - 429: Rate limiting → TRANSIENT_ERROR with retry_after
    - 5xx: Provider outage → TRANSIENT_ERROR
    - Other: TRANSIENT_ERROR (the address is not known to be at fault)

    Args:
        status_code: HTTP status code returned by the provider
        service: Provider name used in messages
        retry_after: Raw Retry-After header value, if any
        bad_request_is_permanent: Whether HTTP 400 means the address is invalid

    Returns:
        OperationResult with appropriate status and error_code
    """
    if 200 <= status_code < 300:
        return OperationResult.success(message=f"{service} accepted the message")

    if status_code == 410:
        return OperationResult.error(
            OperationStatus.NOT_FOUND,
            f"{service} subscription is gone (410)",
            error_code="GONE",
        )

    if status_code == 404:
        return OperationResult.error(
            OperationStatus.NOT_FOUND,
            f"{service} subscription not found (404)",
            error_code="NOT_FOUND",
        )

    if status_code == 429:
        return OperationResult.error(
            OperationStatus.TRANSIENT_ERROR,
            f"{service} rate limited (429)",
            error_code="RATE_LIMITED",
            retry_after=_parse_retry_after(retry_after),
        )

    if status_code in (401, 403):
        return OperationResult.error(
            OperationStatus.UNAUTHORIZED,
            f"{service} rejected credentials ({status_code})",
            error_code="UNAUTHORIZED",
        )

    if status_code == 400 and bad_request_is_permanent:
        return OperationResult.permanent_error(
            f"{service} rejected the address (400)",
            error_code="BAD_REQUEST",
        )

    if 500 <= status_code < 600:
        return OperationResult.transient_error(
            f"{service} server error ({status_code})",
            error_code="SERVER_ERROR",
        )

    return OperationResult.transient_error(
        f"{service} HTTP error ({status_code})",
        error_code="HTTP_ERROR",
    )


def classify_request_exception(exc: Exception, service: str) -> OperationResult:
    """Classify network-level exceptions into transient OperationResults.

    Args:
        exc: Exception raised while talking to the provider
        service: Provider name used in messages

    Returns:
        OperationResult with TRANSIENT_ERROR status
    """
    if isinstance(exc, requests.exceptions.Timeout):
        return OperationResult.transient_error(
            f"{service} request timed out",
            error_code="TIMEOUT",
        )

    if isinstance(exc, requests.exceptions.ConnectionError):
        return OperationResult.transient_error(
            f"{service} connection error: {str(exc)}",
            error_code="CONNECTION_ERROR",
        )

    if isinstance(exc, requests.exceptions.RequestException):
        return OperationResult.transient_error(
            f"{service} request error: {type(exc).__name__}: {str(exc)}",
            error_code="REQUEST_ERROR",
        )

    return OperationResult.transient_error(
        f"{service} unexpected error: {type(exc).__name__}: {str(exc)}",
        error_code="UNEXPECTED_ERROR",
    )


def classify_webpush_error(exc: Exception) -> OperationResult:
    """Classify pywebpush errors into OperationResult.

    A WebPushException carrying a response is classified by HTTP status.
    Without a response, pywebpush rejected the subscription info itself
    (missing endpoint or keys), which is an address problem.

    Args:
        exc: Exception raised by pywebpush.webpush

    Returns:
        OperationResult with appropriate status
    """
    if not isinstance(exc, WebPushException):
        return classify_request_exception(exc, "web push")

    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if not isinstance(status_code, int):
        return OperationResult.permanent_error(
            f"Invalid web push subscription: {exc.message if hasattr(exc, 'message') else str(exc)}",
            error_code="INVALID_SUBSCRIPTION",
        )

    headers = getattr(response, "headers", None) or {}
    return classify_http_status(
        status_code,
        "web push",
        retry_after=headers.get("Retry-After"),
    )


def _onesignal_errors_mark_address_invalid(
    errors: Any, player_id: Optional[str]
) -> bool:
    if isinstance(errors, Mapping):
        invalid_ids = errors.get("invalid_player_ids") or errors.get(
            "invalid_external_user_ids"
        )
        if invalid_ids:
            return player_id is None or player_id in invalid_ids
        return False
    if isinstance(errors, list):
        return any(
            isinstance(error, str) and ONESIGNAL_NOT_SUBSCRIBED_MARKER in error.lower()
            for error in errors
        )
    return False


def classify_onesignal_response(
    status_code: int,
    body: Optional[Mapping[str, Any]],
    player_id: Optional[str] = None,
    retry_after: Any = None,
) -> OperationResult:
    """Classify a OneSignal create-notification response.

    OneSignal reports dead players inside the body, sometimes with HTTP 200:
    - ``{"errors": {"invalid_player_ids": [...]}}``
    - ``{"errors": ["All included players are not subscribed"]}``

    Args:
        status_code: HTTP status code
        body: Decoded JSON body (None if not JSON)
        player_id: Player the request targeted
        retry_after: Raw Retry-After header value, if any

    Returns:
        OperationResult with the OneSignal notification id in data on success
    """
    body = body or {}
    errors = body.get("errors")

    if errors and _onesignal_errors_mark_address_invalid(errors, player_id):
        return OperationResult.error(
            OperationStatus.NOT_FOUND,
            "OneSignal player is not subscribed",
            error_code="INVALID_PLAYER_ID",
        )

    if 200 <= status_code < 300:
        if errors:
            return OperationResult.transient_error(
                f"OneSignal API error: {errors}",
                error_code="PROVIDER_ERROR",
            )
        return OperationResult.success(
            data={"notification_id": body.get("id")},
            message="OneSignal accepted the message",
        )

    if status_code == 400:
        return OperationResult.transient_error(
            f"OneSignal rejected the request: {errors}",
            error_code="PROVIDER_REJECTED",
        )

    return classify_http_status(
        status_code,
        "OneSignal",
        retry_after=retry_after,
        bad_request_is_permanent=False,
    )


def classify_firebase_error(exc: Exception) -> OperationResult:
    """Classify Firebase Admin SDK messaging errors into OperationResult.

    Error Mapping:
    - UnregisteredError: token no longer valid → NOT_FOUND
    - SenderIdMismatchError: token belongs to another project → PERMANENT_ERROR
    - InvalidArgumentError mentioning the token → PERMANENT_ERROR
    - NotFoundError: → NOT_FOUND
    - QuotaExceededError/ResourceExhaustedError → TRANSIENT_ERROR (rate limited)
    - UnauthenticatedError/PermissionDeniedError → UNAUTHORIZED
    - DeadlineExceededError → TRANSIENT_ERROR (timeout)
    - Other FirebaseError / exceptions → TRANSIENT_ERROR

    Args:
        exc: Exception raised by firebase_admin.messaging

    Returns:
        OperationResult with appropriate status
    """
    if isinstance(exc, messaging.UnregisteredError):
        return OperationResult.error(
            OperationStatus.NOT_FOUND,
            "FCM token is unregistered",
            error_code="UNREGISTERED",
        )

    if isinstance(exc, messaging.SenderIdMismatchError):
        return OperationResult.permanent_error(
            "FCM token belongs to a different sender",
            error_code="SENDER_ID_MISMATCH",
        )

    if isinstance(exc, firebase_exceptions.InvalidArgumentError):
        if "token" in str(exc).lower():
            return OperationResult.permanent_error(
                f"FCM token is invalid: {str(exc)}",
                error_code="INVALID_TOKEN",
            )
        return OperationResult.transient_error(
            f"FCM rejected the message: {str(exc)}",
            error_code="INVALID_ARGUMENT",
        )

    if isinstance(exc, firebase_exceptions.NotFoundError):
        return OperationResult.error(
            OperationStatus.NOT_FOUND,
            "FCM token not found",
            error_code="NOT_FOUND",
        )

    if isinstance(exc, firebase_exceptions.ResourceExhaustedError):
        return OperationResult.error(
            OperationStatus.TRANSIENT_ERROR,
            "FCM quota exceeded",
            error_code="RATE_LIMITED",
            retry_after=DEFAULT_RETRY_AFTER_SECONDS,
        )

    if isinstance(
        exc,
        (
            firebase_exceptions.UnauthenticatedError,
            firebase_exceptions.PermissionDeniedError,
        ),
    ):
        return OperationResult.error(
            OperationStatus.UNAUTHORIZED,
            f"FCM rejected credentials: {str(exc)}",
            error_code="UNAUTHORIZED",
        )

    if isinstance(exc, firebase_exceptions.DeadlineExceededError):
        return OperationResult.transient_error(
            "FCM request timed out",
            error_code="TIMEOUT",
        )

    if isinstance(exc, firebase_exceptions.FirebaseError):
        return OperationResult.transient_error(
            f"FCM error: {str(exc)}",
            error_code="PROVIDER_ERROR",
        )

    return classify_request_exception(exc, "FCM")
