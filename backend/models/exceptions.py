"""
Custom domain exceptions for the application.

These exceptions are raised by the service layer. Callers (web handlers, CLI
tools, background workers) translate them into their own error surface.

Expected outcomes are not exceptions: a refused follow returns False, and a
best-effort side effect that fails is logged by the code that attempted it.
"""

from core.correlation import generate_correlation_id, get_correlation_id


class DomainException(Exception):
    """
    Base class for all domain exceptions.

    Attributes:
        message: Human-readable error message.
        correlation_id: Unique ID for error tracking (auto-generated if not provided).
    """

    def __init__(self, message: str, correlation_id: str | None = None):
        self.message = message
        # Use worker correlation ID if available, otherwise generate new one
        self.correlation_id = (
            correlation_id or get_correlation_id() or generate_correlation_id()
        )
        super().__init__(self.message)


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    pass


class ConflictException(DomainException):
    """Raised when operation conflicts with existing data."""

    pass


class AlreadyExistsException(DomainException):
    """Raised when trying to create a resource that already exists."""

    pass


class SideEffectFailure(DomainException):
    """
    A best-effort external action failed.

    Never propagated out of a service operation; the code attempting the side
    effect logs it and carries on.
    """

    pass


# Specific exceptions for domain entities


class UserNotFoundException(NotFoundException):
    """User not found."""

    def __init__(self, user_id: int):
        super().__init__(f"User with ID {user_id} not found")


class UserAlreadyExistsException(AlreadyExistsException):
    """Login or e-mail already taken."""

    pass


class ConversationNotFoundException(NotFoundException):
    """Conversation not found."""

    def __init__(self, conversation_id: int):
        super().__init__(f"Conversation with ID {conversation_id} not found")


class MessageNotFoundException(NotFoundException):
    """Message not found."""

    def __init__(self, message_id: int):
        super().__init__(f"Message with ID {message_id} not found")


class SubscriptionConflictException(ConflictException):
    """Concurrent subscription creation could not be reconciled."""

    def __init__(self, user_id: int, conversation_id: int):
        super().__init__(
            f"Subscription for user {user_id} to conversation "
            f"{conversation_id} could not be created or found"
        )


class AbuseReportConflictException(ConflictException):
    """Concurrent abuse report creation could not be reconciled."""

    def __init__(self, user_id: int, message_id: int):
        super().__init__(
            f"Abuse report by user {user_id} on message {message_id} "
            "could not be created or found"
        )


class AttachmentLockdownFailure(SideEffectFailure):
    """Restricting access to a message's attachment files failed."""

    def __init__(self, message_id: int, error: str):
        super().__init__(
            f"Could not restrict attachments of message {message_id}: {error}"
        )
