"""Tests for exception correlation ID behavior."""

import pytest

from core.correlation import correlation_scope, set_correlation_id
from models.exceptions import (
    AbuseReportConflictException,
    AlreadyExistsException,
    AttachmentLockdownFailure,
    ConflictException,
    ConversationNotFoundException,
    DomainException,
    MessageNotFoundException,
    NotFoundException,
    SideEffectFailure,
    SubscriptionConflictException,
    UserNotFoundException,
)


class TestDomainExceptionCorrelationId:
    """Tests for correlation ID in DomainException."""

    def setup_method(self) -> None:
        """Reset correlation context before each test."""
        set_correlation_id("")

    def test_uses_context_correlation_id(self) -> None:
        """Exception should use correlation ID from context if available."""
        set_correlation_id("context1")

        exc = DomainException("Test error")
        assert exc.correlation_id == "context1"

    def test_generates_id_when_no_context(self) -> None:
        """Exception should generate new ID if no context available."""
        exc = DomainException("Test error")
        assert len(exc.correlation_id) == 8
        assert all(c in "0123456789abcdef" for c in exc.correlation_id)

    def test_explicit_overrides_context(self) -> None:
        """Explicit correlation ID should override context."""
        set_correlation_id("context_id")

        exc = DomainException("Test error", correlation_id="override")
        assert exc.correlation_id == "override"

    def test_scope_id_carried_by_exception(self) -> None:
        with correlation_scope("worker01"):
            exc = ConversationNotFoundException(3)
        assert exc.correlation_id == "worker01"


class TestExceptionInheritance:
    """Tests for the exception hierarchy."""

    def setup_method(self) -> None:
        """Reset correlation context before each test."""
        set_correlation_id("")

    @pytest.mark.parametrize(
        "exception_class",
        [
            NotFoundException,
            ConflictException,
            AlreadyExistsException,
            SideEffectFailure,
        ],
    )
    def test_child_exceptions_use_context_id(
        self, exception_class: type[DomainException]
    ) -> None:
        """All child exceptions should use context correlation ID."""
        set_correlation_id("inherited")

        exc = exception_class("Test error")
        assert exc.correlation_id == "inherited"

    @pytest.mark.parametrize(
        "exc, parent",
        [
            (UserNotFoundException(1), NotFoundException),
            (ConversationNotFoundException(2), NotFoundException),
            (MessageNotFoundException(3), NotFoundException),
            (SubscriptionConflictException(1, 2), ConflictException),
            (AbuseReportConflictException(1, 3), ConflictException),
            (AttachmentLockdownFailure(3, "EPERM"), SideEffectFailure),
        ],
    )
    def test_concrete_exceptions(self, exc: DomainException, parent: type) -> None:
        assert isinstance(exc, parent)
        assert exc.message

    def test_message_preserved(self) -> None:
        """Exception message should be preserved."""
        exc = MessageNotFoundException(42)
        assert "42" in exc.message
        assert str(exc) == exc.message
