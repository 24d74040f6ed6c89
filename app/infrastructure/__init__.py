"""Infrastructure modules for the club notification service.

Centralized infrastructure components:
- configuration: Settings management (Settings and per-concern settings)
- logging: Structured logging setup and request context (get_module_logger)
- notifications: Subscription registry, push adapters and dispatcher
- operations: Operation results and provider error classification
- services: Dependency injection services (SettingsDep, NotificationServiceDep, get_settings)
"""

# Observability
from infrastructure.logging import get_module_logger

# Operations
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

__all__ = [
    # Observability
    "get_module_logger",
    # Operations
    "OperationResult",
    "OperationStatus",
]
