"""Request context binding for structured logging.

This module provides utilities for binding request-scoped context
to logs, so correlation, actor and audit ids flow through every log
entry written while a hierarchy change is processed.

Usage:
    from infrastructure.logging import bind_request_context

    with bind_request_context(actor_id="user-1", audit_id="audit-9"):
        logger.info("processing_hierarchy_change")

Dependencies:
    - structlog.contextvars
"""

import uuid
from contextlib import contextmanager
from typing import Optional, Any, Generator
import structlog


@contextmanager
def bind_request_context(
    correlation_id: Optional[str] = None,
    actor_id: Optional[str] = None,
    audit_id: Optional[str] = None,
    **extra_context: Any,
) -> Generator[None, None, None]:
    """Bind request-scoped context to all logs within the context manager.

    Args:
        correlation_id: Unique request identifier. Auto-generated if not provided.
        actor_id: ID of the user performing the change (if available).
        audit_id: ID of the audit record tied to the change (if available).
        **extra_context: Additional key-value pairs to include in logs.

    Yields:
        None - context is automatically bound to structlog's context vars.

    Example:
        with bind_request_context(
            actor_id=request.actor_id,
            operation="hierarchy.insert",
        ):
            service.apply_hierarchy_change(request)
    """
    context: dict[str, Any] = {}

    context["correlation_id"] = correlation_id or str(uuid.uuid4())

    if actor_id is not None:
        context["actor_id"] = actor_id

    if audit_id is not None:
        context["audit_id"] = audit_id

    context.update(extra_context)

    # Restores the previously bound values on exit so nested contexts unwind
    with structlog.contextvars.bound_contextvars(**context):
        yield


def clear_request_context() -> None:
    """Clear all request-scoped context from the logging context.

    Should be called at the end of request processing to prevent
    context leakage between requests.
    """
    structlog.contextvars.clear_contextvars()
