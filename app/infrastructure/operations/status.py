"""Operation status enumeration.

Status codes for provider call outcomes, used to decide whether a failed
delivery is worth attempting again later or whether the address is dead.
"""

from enum import Enum


class OperationStatus(Enum):
    """Status codes for operation results.

    Attributes:
        SUCCESS: Operation completed successfully
        TRANSIENT_ERROR: Retryable error (network, timeout, rate limit, 5xx)
        PERMANENT_ERROR: Non-retryable error (invalid token, malformed address)
        UNAUTHORIZED: Provider rejected our credentials
        NOT_FOUND: Address no longer exists at the provider (404/410)
    """

    SUCCESS = "success"
    TRANSIENT_ERROR = "transient_error"
    PERMANENT_ERROR = "permanent_error"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
