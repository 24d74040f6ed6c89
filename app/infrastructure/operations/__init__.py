"""Operation result types and status enums.

This module contains the standardized result type for provider calls,
status enums, and classifiers turning push provider responses and
exceptions into results.
"""

from infrastructure.operations.classifiers import (
    classify_firebase_error,
    classify_http_status,
    classify_onesignal_response,
    classify_request_exception,
    classify_webpush_error,
)
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

__all__ = [
    "OperationResult",
    "OperationStatus",
    "classify_http_status",
    "classify_request_exception",
    "classify_webpush_error",
    "classify_onesignal_response",
    "classify_firebase_error",
]
