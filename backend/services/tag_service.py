"""
Service aggregating tags across the conversations a user follows.
"""

from sqlalchemy.orm import Session

from repositories.db_models import Conversation, Tag
from repositories.tag_repository import TagRepository


class TagService:
    """Service for per-user tag aggregation."""

    @staticmethod
    def all_tags(db: Session, user_id: int) -> set[Tag]:
        """
        Every tag applied to a conversation the user follows.

        Args:
            db: Database session
            user_id: Subscriber ID

        Returns:
            Deduplicated set of tags
        """
        return set(TagRepository(db).get_tags_for_subscriber(user_id))

    @staticmethod
    def all_tag_counts(db: Session, user_id: int) -> dict[str, int]:
        """
        Tag counts across the conversations the user follows.

        Counts are not summed across conversations. A tag present on several
        conversations keeps the count it has on the conversation of the most
        recently activated subscription.

        Args:
            db: Database session
            user_id: Subscriber ID

        Returns:
            Mapping of tag name to count
        """
        counts: dict[str, int] = {}
        for _conversation_id, tag, count in TagRepository(
            db
        ).get_tag_counts_by_subscription(user_id):
            counts.setdefault(tag.name, count)
        return counts

    @staticmethod
    def conversations_by_tag(db: Session, user_id: int, tag_name: str) -> set[Conversation]:
        """Followed conversations carrying exactly the given tag name."""
        return set(
            TagRepository(db).get_subscribed_conversations_with_tag(user_id, tag_name)
        )
