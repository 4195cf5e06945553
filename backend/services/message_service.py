"""
Service for posting and reading messages.
"""

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
from models.exceptions import MessageNotFoundException, UserNotFoundException
from repositories.db_models import Message
from repositories.message_repository import MessageRepository
from repositories.user_repository import UserRepository
from services.conversation_service import ConversationService
from services.notification_service import NotificationService
from services.subscription_service import SubscriptionService


class MessageService:
    """Service for message operations."""

    @staticmethod
    def post_message(
        db: Session,
        user_id: int,
        conversation_id: int,
        data: schemas.MessageCreate,
    ) -> Message:
        """
        Post a message into a conversation.

        The poster ends up subscribed to the conversation with its read
        marker at the new message, so their own message never counts as
        unread for them. Subscribers are then told through the
        conversation's channel.

        Args:
            db: Database session
            user_id: Author ID
            conversation_id: Conversation ID
            data: Validated message data

        Returns:
            Created message

        Raises:
            UserNotFoundException: If author not found
            ConversationNotFoundException: If conversation not found
        """
        if not UserRepository(db).get_by_id(user_id):
            raise UserNotFoundException(user_id)
        ConversationService.get_conversation(db, conversation_id)

        message = MessageRepository(db).create(
            Message(
                user_id=user_id,
                conversation_id=conversation_id,
                message=data.message,
                system_message=data.system_message,
                attachment_file_name=data.attachment_file_name,
                attachment_content_type=data.attachment_content_type,
                attachment_size=data.attachment_size,
            )
        )

        subscription = SubscriptionService.ensure_subscribed(
            db, user_id, conversation_id
        )
        SubscriptionService.mark_read(db, subscription, read_at=message.created_at)

        logger.info(
            f"Message {message.id} posted by user {user_id} "
            f"in conversation {conversation_id}"
        )
        NotificationService.notify_message_created(message)
        return message

    @staticmethod
    def get_message(db: Session, message_id: int) -> Message:
        """
        Get a message by ID.

        Raises:
            MessageNotFoundException: If message not found
        """
        message = MessageRepository(db).get_by_id(message_id)
        if not message:
            raise MessageNotFoundException(message_id)
        return message

    @staticmethod
    def list_published(
        db: Session, conversation_id: int, skip: int = 0, limit: int = 100
    ) -> list[Message]:
        """Published messages of a conversation, oldest first."""
        return MessageRepository(db).get_published_for_conversation(
            conversation_id, skip, limit
        )
