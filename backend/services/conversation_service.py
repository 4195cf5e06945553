"""
Service for conversation business logic.

Implements the conversation side of membership: visits, subscriptions,
tags, and creation of general, personal and spawned conversations.
"""

from datetime import datetime, timezone

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
from models.exceptions import ConversationNotFoundException, MessageNotFoundException
from repositories.conversation_repository import ConversationRepository
from repositories.db_models import (
    Conversation,
    ConversationTagging,
    ConversationVisit,
    Subscription,
    Tag,
    User,
)
from repositories.message_repository import MessageRepository
from repositories.subscription_repository import SubscriptionRepository
from repositories.tag_repository import ConversationTaggingRepository, TagRepository
from repositories.visit_repository import ConversationVisitRepository
from services.subscription_service import SubscriptionService


class ConversationService:
    """Service for conversation operations."""

    @staticmethod
    def get_conversation(db: Session, conversation_id: int) -> Conversation:
        """
        Get a conversation by ID.

        Raises:
            ConversationNotFoundException: If conversation not found
        """
        conversation = ConversationRepository(db).get_by_id(conversation_id)
        if not conversation:
            raise ConversationNotFoundException(conversation_id)
        return conversation

    @staticmethod
    def create_conversation(
        db: Session,
        owner_id: int,
        data: schemas.ConversationCreate,
        parent_message_id: int | None = None,
        personal: bool = False,
    ) -> Conversation:
        """
        Create a conversation; its owner follows it right away.

        Args:
            db: Database session
            owner_id: ID of the creating user
            data: Conversation data
            parent_message_id: Message the conversation is spawned from
            personal: Whether this is the owner's personal conversation

        Returns:
            Created conversation
        """
        conversation_repo = ConversationRepository(db)
        conversation = conversation_repo.create(
            Conversation(
                name=data.name,
                user_id=owner_id,
                private=data.private,
                personal=personal,
                parent_message_id=parent_message_id,
            )
        )

        subscription = ConversationService.add_subscription(
            db, owner_id, conversation.id
        )
        SubscriptionService.mark_read(db, subscription)

        logger.info(
            f"Conversation {conversation.id} created by user {owner_id} "
            f"(private={data.private}, personal={personal})"
        )
        return conversation

    @staticmethod
    def add_personal(db: Session, user: User) -> Conversation:
        """
        Create the personal conversation of a user.

        Returns the existing one when the user already has it.

        Args:
            db: Database session
            user: Owner of the personal conversation

        Returns:
            The user's personal conversation
        """
        existing = ConversationRepository(db).get_personal_for_user(user.id)
        if existing:
            return existing
        return ConversationService.create_conversation(
            db,
            user.id,
            schemas.ConversationCreate(name=user.login),
            personal=True,
        )

    @staticmethod
    def spawn_from_message(
        db: Session,
        user_id: int,
        message_id: int,
        data: schemas.ConversationCreate,
    ) -> Conversation:
        """
        Start a new conversation from an existing message.

        Raises:
            MessageNotFoundException: If the parent message does not exist
        """
        message = MessageRepository(db).get_by_id(message_id)
        if not message:
            raise MessageNotFoundException(message_id)
        return ConversationService.create_conversation(
            db, user_id, data, parent_message_id=message.id
        )

    @staticmethod
    def add_visit(db: Session, user_id: int, conversation_id: int) -> None:
        """
        Record that a user looked at a conversation.

        Args:
            db: Database session
            user_id: Visitor ID
            conversation_id: Conversation ID
        """
        visit_repo = ConversationVisitRepository(db)
        now = datetime.now(timezone.utc)

        if visit_repo.increment(user_id, conversation_id, now):
            return

        created = visit_repo.create_unique(
            ConversationVisit(
                user_id=user_id,
                conversation_id=conversation_id,
                visits_count=1,
                updated_at=now,
            )
        )
        if created is None:
            # First visit recorded concurrently by another worker
            visit_repo.increment(user_id, conversation_id, now)

    @staticmethod
    def add_subscription(db: Session, user_id: int, conversation_id: int) -> Subscription:
        """Subscribe a user to the conversation (idempotent)."""
        return SubscriptionService.ensure_subscribed(db, user_id, conversation_id)

    @staticmethod
    def remove_subscription(db: Session, user_id: int, conversation_id: int) -> bool:
        """
        Unsubscribe a user from the conversation.

        Returns:
            True if a subscription was removed, False if there was none
        """
        removed = SubscriptionRepository(db).delete_for_user_and_conversation(
            user_id, conversation_id
        )
        return removed > 0

    @staticmethod
    def tag_conversation(
        db: Session,
        conversation_id: int,
        tag_name: str,
        tagger_id: int | None = None,
    ) -> ConversationTagging:
        """
        Apply a tag to a conversation.

        Args:
            db: Database session
            conversation_id: Conversation ID
            tag_name: Tag name, normalized to lowercase
            tagger_id: User applying the tag

        Returns:
            The tagging (existing when this tagger already applied the tag)
        """
        ConversationService.get_conversation(db, conversation_id)
        tag = TagRepository(db).create_or_get_tag(tag_name)
        return ConversationTaggingRepository(db).add_tagging(
            conversation_id, tag.id, tagger_id
        )

    @staticmethod
    def tags(db: Session, conversation_id: int) -> list[Tag]:
        """Distinct tags applied to a conversation."""
        return TagRepository(db).get_tags_for_conversation(conversation_id)

    @staticmethod
    def tag_counts(db: Session, conversation_id: int) -> dict[str, int]:
        """Number of times each tag was applied to a conversation."""
        return {
            tag.name: count
            for tag, count in TagRepository(db).get_tag_counts_for_conversation(
                conversation_id
            )
        }
