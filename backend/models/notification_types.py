"""Conversation event type definitions for the pub/sub channel."""

from enum import Enum
from typing import NamedTuple


class NotificationConfig(NamedTuple):
    """Configuration for a conversation event type."""

    event_name: str
    priority: str  # low, default, high


class NotificationType(Enum):
    """
    Events published on a conversation's channel.

    Every event is routed to the topic of the conversation it concerns, so a
    client following a conversation only listens to one topic.
    """

    MESSAGE_CREATED = NotificationConfig("message_created", "default")
    MESSAGE_DEACTIVATED = NotificationConfig("message_deactivated", "high")

    @property
    def event_name(self) -> str:
        """Get the wire name of this event."""
        return self.value.event_name

    @property
    def priority(self) -> str:
        """Get the priority for this event."""
        return self.value.priority
