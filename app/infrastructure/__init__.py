"""Infrastructure modules for the group hierarchy service.

Centralized infrastructure components:
- configuration: Settings management (Settings, HierarchyFeatureSettings, EventBusSettings)
- logging: Structured logging (get_module_logger, bind_request_context)
- events: In-process event dispatcher
- operations: Operation results returned at the service boundary
- services: Application-scoped providers (get_settings)
"""

# Operations
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

# Dependency Injection Services
from infrastructure.services import get_settings

__all__ = [
    # Operations
    "OperationResult",
    "OperationStatus",
    # Dependency Injection Services
    "get_settings",
]
