"""
Correlation ID generation and context management.

Every request-scoped worker (follow, report, post, visit) runs with its own
correlation ID so log lines and domain exceptions can be traced together.
"""

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

# Context variable for request-scoped correlation ID
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")


def generate_correlation_id() -> str:
    """
    Generate a short, unique correlation ID.

    Format: 8 hex characters (e.g., "abc123de")

    Returns:
        8-character hexadecimal string.
    """
    return uuid.uuid4().hex[:8]


def get_correlation_id() -> str:
    """
    Get current worker's correlation ID.

    Returns:
        The correlation ID for the current context, or empty string if not set.
    """
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """
    Set correlation ID for current context.

    Args:
        correlation_id: The correlation ID to set.
    """
    correlation_id_var.set(correlation_id)


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """
    Run a block of work under its own correlation ID.

    The previous ID is restored on exit, so scopes can be nested.

    Args:
        correlation_id: ID to use; a fresh one is generated when omitted.

    Yields:
        The correlation ID active inside the block.
    """
    active_id = correlation_id or generate_correlation_id()
    token = correlation_id_var.set(active_id)
    try:
        yield active_id
    finally:
        correlation_id_var.reset(token)
