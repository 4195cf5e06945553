"""
Conversation event publisher.

Pushes events to a per-conversation pub/sub channel over HTTP so connected
clients can refresh. Uses fire-and-forget pattern - failures are logged but
don't block the caller.
"""

import asyncio
from typing import Any

import httpx
from loguru import logger

from core.correlation import get_correlation_id
from models.config import settings
from models.notification_types import NotificationType
from repositories.db_models import Message


class NotificationService:
    """
    Event publisher for conversation channels.

    All methods are fire-and-forget: they log failures but never raise
    exceptions or block the calling code.
    """

    @classmethod
    def _get_topic(cls, conversation_id: int) -> str:
        """Build the channel topic of a conversation."""
        prefix = settings.PUBSUB_TOPIC_PREFIX or "parley"
        return f"{prefix}-conversation-{conversation_id}"

    @classmethod
    def _build_payload(
        cls, notification_type: NotificationType, message: Message
    ) -> dict[str, Any]:
        return {
            "event": notification_type.event_name,
            "conversation_id": message.conversation_id,
            "message_id": message.id,
            "user_id": message.user_id,
            "system_message": message.system_message,
            "created_at": message.created_at.isoformat()
            if message.created_at
            else None,
        }

    @classmethod
    async def _send_async(
        cls,
        notification_type: NotificationType,
        conversation_id: int,
        payload: dict[str, Any],
    ) -> bool:
        """
        Internal async send method.

        Args:
            notification_type: Determines event name and priority
            conversation_id: Conversation whose channel receives the event
            payload: JSON body

        Returns:
            True if sent successfully, False otherwise
        """
        pubsub_url = settings.PUBSUB_URL
        if not pubsub_url or not settings.PUBSUB_ENABLED:
            logger.debug("Pub/sub not configured or disabled, skipping event")
            return False

        topic = cls._get_topic(conversation_id)

        headers: dict[str, str] = {
            "X-Event": notification_type.event_name,
            "Priority": notification_type.priority,
        }

        correlation_id = get_correlation_id()
        if correlation_id:
            headers["X-Correlation-ID"] = correlation_id

        if settings.PUBSUB_AUTH_TOKEN:
            headers["Authorization"] = f"Bearer {settings.PUBSUB_AUTH_TOKEN}"

        try:
            async with httpx.AsyncClient(
                timeout=settings.PUBSUB_TIMEOUT_SECONDS
            ) as client:
                response = await client.post(
                    f"{pubsub_url}/{topic}",
                    headers=headers,
                    json=payload,
                )
                response.raise_for_status()
                logger.info(f"Event {notification_type.event_name} sent to {topic}")
                return True
        except httpx.TimeoutException:
            logger.warning(
                f"Pub/sub timeout sending {notification_type.event_name} to {topic}"
            )
            return False
        except httpx.HTTPStatusError as e:
            logger.warning(
                f"Pub/sub HTTP error {e.response.status_code} for {topic}: "
                f"{notification_type.event_name}"
            )
            return False
        except Exception as e:
            logger.warning(f"Pub/sub error sending to {topic}: {e}")
            return False

    @classmethod
    def send_fire_and_forget(
        cls,
        notification_type: NotificationType,
        conversation_id: int,
        payload: dict[str, Any],
    ) -> None:
        """
        Publish an event without blocking (fire-and-forget).

        Creates a background task when called from a running event loop,
        otherwise sends synchronously.

        Args:
            notification_type: Determines event name and priority
            conversation_id: Conversation whose channel receives the event
            payload: JSON body
        """
        if not settings.PUBSUB_URL or not settings.PUBSUB_ENABLED:
            return

        try:
            loop = asyncio.get_running_loop()
            loop.create_task(
                cls._send_async(notification_type, conversation_id, payload)
            )
        except RuntimeError:
            logger.debug("No event loop, publishing event sync")
            asyncio.run(cls._send_async(notification_type, conversation_id, payload))

    # =========================================================================
    # Convenience Methods
    # =========================================================================

    @classmethod
    def notify_message_created(cls, message: Message) -> None:
        """
        Tell the conversation's channel that a message was posted.

        Args:
            message: The new message
        """
        cls.send_fire_and_forget(
            NotificationType.MESSAGE_CREATED,
            message.conversation_id,
            cls._build_payload(NotificationType.MESSAGE_CREATED, message),
        )

    @classmethod
    def notify_message_deactivated(cls, message: Message) -> None:
        """
        Tell the conversation's channel that a message was taken down.

        Args:
            message: The deactivated message
        """
        payload = cls._build_payload(NotificationType.MESSAGE_DEACTIVATED, message)
        payload["abuse_report_id"] = message.abuse_report_id
        cls.send_fire_and_forget(
            NotificationType.MESSAGE_DEACTIVATED, message.conversation_id, payload
        )
