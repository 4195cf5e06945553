"""
Tag repository for database operations.
"""

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.db_models import Conversation, ConversationTagging, Subscription, Tag


class TagRepository(BaseRepository[Tag]):
    """
    Repository for Tag entity operations.
    """

    def __init__(self, db: Session):
        """
        Initialize TagRepository.

        Args:
            db: Database session
        """
        super().__init__(Tag, db)

    def get_by_name(self, name: str) -> Optional[Tag]:
        """
        Get tag by normalized name.

        Args:
            name: Tag name (will be normalized to lowercase)

        Returns:
            Tag if found, None otherwise
        """
        normalized_name = name.lower().strip()
        return self.db.query(Tag).filter(Tag.name == normalized_name).first()

    def create_or_get_tag(self, tag_name: str) -> Tag:
        """
        Create a new tag or get existing one by name.

        Args:
            tag_name: Tag name (original case)

        Returns:
            Tag entity (existing or newly created)
        """
        existing_tag = self.get_by_name(tag_name)
        if existing_tag:
            return existing_tag

        created = self.create_unique(Tag(name=tag_name.lower().strip()))
        if created is None:
            # Another writer created it first
            return self.get_by_name(tag_name)  # type: ignore[return-value]
        return created

    def get_tags_for_conversation(self, conversation_id: int) -> List[Tag]:
        """
        Get the distinct tags applied to a conversation.

        Args:
            conversation_id: Conversation ID

        Returns:
            List of tags ordered by name
        """
        return (
            self.db.query(Tag)
            .join(ConversationTagging, ConversationTagging.tag_id == Tag.id)
            .filter(ConversationTagging.conversation_id == conversation_id)
            .distinct()
            .order_by(Tag.name)
            .all()
        )

    def get_tag_counts_for_conversation(
        self, conversation_id: int
    ) -> List[tuple[Tag, int]]:
        """
        Get tags of a conversation with the number of times each was applied.

        Args:
            conversation_id: Conversation ID

        Returns:
            List of tuples (tag, count) ordered by tag name
        """
        results = (
            self.db.query(Tag, func.count(ConversationTagging.id).label("tag_count"))
            .join(ConversationTagging, ConversationTagging.tag_id == Tag.id)
            .filter(ConversationTagging.conversation_id == conversation_id)
            .group_by(Tag.id)
            .order_by(Tag.name)
            .all()
        )
        return results  # type: ignore[return-value]

    def get_tags_for_subscriber(self, user_id: int) -> List[Tag]:
        """
        Get the distinct tags across every conversation a user follows.

        Args:
            user_id: Subscriber ID

        Returns:
            List of tags ordered by name
        """
        return (
            self.db.query(Tag)
            .join(ConversationTagging, ConversationTagging.tag_id == Tag.id)
            .join(
                Subscription,
                Subscription.conversation_id == ConversationTagging.conversation_id,
            )
            .filter(Subscription.user_id == user_id)
            .distinct()
            .order_by(Tag.name)
            .all()
        )

    def get_tag_counts_by_subscription(
        self, user_id: int
    ) -> List[tuple[int, Tag, int]]:
        """
        Get per-conversation tag counts for every conversation a user follows.

        Args:
            user_id: Subscriber ID

        Returns:
            List of tuples (conversation_id, tag, count); conversations of
            the most recently activated subscriptions come first
        """
        results = (
            self.db.query(
                Subscription.conversation_id,
                Tag,
                func.count(ConversationTagging.id).label("tag_count"),
            )
            .join(
                ConversationTagging,
                ConversationTagging.conversation_id == Subscription.conversation_id,
            )
            .join(Tag, Tag.id == ConversationTagging.tag_id)
            .filter(Subscription.user_id == user_id)
            .group_by(
                Subscription.id,
                Subscription.conversation_id,
                Subscription.activated_at,
                Tag.id,
            )
            .order_by(
                Subscription.activated_at.desc(), Subscription.id.desc(), Tag.name
            )
            .all()
        )
        return results  # type: ignore[return-value]

    def get_subscribed_conversations_with_tag(
        self, user_id: int, tag_name: str
    ) -> List[Conversation]:
        """
        Get conversations a user follows that carry a given tag.

        Args:
            user_id: Subscriber ID
            tag_name: Exact tag name

        Returns:
            List of distinct conversations
        """
        return (
            self.db.query(Conversation)
            .join(Subscription, Subscription.conversation_id == Conversation.id)
            .join(
                ConversationTagging,
                ConversationTagging.conversation_id == Conversation.id,
            )
            .join(Tag, Tag.id == ConversationTagging.tag_id)
            .filter(Subscription.user_id == user_id, Tag.name == tag_name)
            .distinct()
            .all()
        )


class ConversationTaggingRepository(BaseRepository[ConversationTagging]):
    """
    Repository for ConversationTagging (association) operations.
    """

    def __init__(self, db: Session):
        """
        Initialize ConversationTaggingRepository.

        Args:
            db: Database session
        """
        super().__init__(ConversationTagging, db)

    def get_tagging(
        self, conversation_id: int, tag_id: int, user_id: int | None
    ) -> Optional[ConversationTagging]:
        """Get the tagging of a conversation by one tagger (or by nobody)."""
        query = self.db.query(ConversationTagging).filter(
            ConversationTagging.conversation_id == conversation_id,
            ConversationTagging.tag_id == tag_id,
        )
        if user_id is None:
            query = query.filter(ConversationTagging.user_id.is_(None))
        else:
            query = query.filter(ConversationTagging.user_id == user_id)
        return query.first()

    def add_tagging(
        self, conversation_id: int, tag_id: int, user_id: int | None
    ) -> ConversationTagging:
        """
        Apply a tag to a conversation, once per tagger.

        Args:
            conversation_id: Conversation ID
            tag_id: Tag ID
            user_id: Tagging user ID, None for untracked taggings

        Returns:
            Existing or created tagging
        """
        existing = self.get_tagging(conversation_id, tag_id, user_id)
        if existing:
            return existing

        created = self.create_unique(
            ConversationTagging(
                conversation_id=conversation_id, tag_id=tag_id, user_id=user_id
            )
        )
        if created is None:
            return self.get_tagging(conversation_id, tag_id, user_id)  # type: ignore[return-value]
        return created
