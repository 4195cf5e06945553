"""
Subscription repository for database operations.

Read markers and activation timestamps are written with single conditional
UPDATE statements rather than read-modify-write on loaded rows.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.db_models import Message, Subscription


class SubscriptionRepository(BaseRepository[Subscription]):
    """Repository for Subscription entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize subscription repository.

        Args:
            db: Database session
        """
        super().__init__(Subscription, db)

    def get_by_user_and_conversation(
        self, user_id: int, conversation_id: int
    ) -> Optional[Subscription]:
        """
        Get the subscription of a user to a conversation.

        Args:
            user_id: Subscriber ID
            conversation_id: Conversation ID

        Returns:
            Subscription if found, None otherwise
        """
        return (
            self.db.query(Subscription)
            .filter(
                Subscription.user_id == user_id,
                Subscription.conversation_id == conversation_id,
            )
            .first()
        )

    def get_most_recent_for_user(self, user_id: int) -> Optional[Subscription]:
        """
        Get the user's most recently activated subscription.

        Args:
            user_id: Subscriber ID

        Returns:
            Subscription if the user has any, None otherwise
        """
        return (
            self.db.query(Subscription)
            .filter(Subscription.user_id == user_id)
            .order_by(Subscription.activated_at.desc(), Subscription.id.desc())
            .first()
        )

    def get_for_user(self, user_id: int) -> List[Subscription]:
        """All subscriptions of a user, most recently activated first."""
        return (
            self.db.query(Subscription)
            .filter(Subscription.user_id == user_id)
            .order_by(Subscription.activated_at.desc(), Subscription.id.desc())
            .all()
        )

    def set_last_read(self, subscription_id: int, read_at: datetime) -> bool:
        """
        Move the read marker of a subscription.

        Args:
            subscription_id: Subscription ID
            read_at: New read marker

        Returns:
            True if the subscription existed
        """
        updated = (
            self.db.query(Subscription)
            .filter(Subscription.id == subscription_id)
            .update({Subscription.last_read_at: read_at}, synchronize_session=False)
        )
        self.db.commit()
        return updated > 0

    def set_activated(
        self, user_id: int, conversation_id: int, activated_at: datetime
    ) -> bool:
        """
        Bump the activation timestamp of a (user, conversation) subscription.

        Args:
            user_id: Subscriber ID
            conversation_id: Conversation ID
            activated_at: New activation timestamp

        Returns:
            True if a subscription was updated
        """
        updated = (
            self.db.query(Subscription)
            .filter(
                Subscription.user_id == user_id,
                Subscription.conversation_id == conversation_id,
            )
            .update(
                {Subscription.activated_at: activated_at}, synchronize_session=False
            )
        )
        self.db.commit()
        return updated > 0

    def delete_for_user_and_conversation(
        self, user_id: int, conversation_id: int
    ) -> int:
        """
        Remove a user's subscription to a conversation.

        Returns:
            Number of deleted subscriptions (0 or 1)
        """
        deleted = (
            self.db.query(Subscription)
            .filter(
                Subscription.user_id == user_id,
                Subscription.conversation_id == conversation_id,
            )
            .delete()
        )
        self.db.commit()
        return deleted

    def count_new_messages(self, subscription: Subscription) -> int:
        """
        Count published messages newer than the subscription's read marker.

        Args:
            subscription: Subscription to inspect

        Returns:
            Number of unread messages
        """
        query = self.db.query(Message).filter(
            Message.conversation_id == subscription.conversation_id,
            Message.abuse_report_id.is_(None),
        )
        if subscription.last_read_at is not None:
            query = query.filter(Message.created_at > subscription.last_read_at)
        return query.count()

    def get_with_new_messages(self, user_id: int) -> List[tuple[Subscription, int]]:
        """
        Get the user's subscriptions that have unread messages.

        Args:
            user_id: Subscriber ID

        Returns:
            List of (subscription, new_messages_count), most recently
            activated first
        """
        results = (
            self.db.query(Subscription, func.count(Message.id).label("new_count"))
            .join(
                Message,
                and_(
                    Message.conversation_id == Subscription.conversation_id,
                    Message.abuse_report_id.is_(None),
                    or_(
                        Subscription.last_read_at.is_(None),
                        Message.created_at > Subscription.last_read_at,
                    ),
                ),
            )
            .filter(Subscription.user_id == user_id)
            .group_by(Subscription.id)
            .order_by(Subscription.activated_at.desc(), Subscription.id.desc())
            .all()
        )
        return results  # type: ignore[return-value]

    def count_for_user(self, user_id: int) -> int:
        """Number of conversations the user follows."""
        return (
            self.db.query(Subscription).filter(Subscription.user_id == user_id).count()
        )

    def count_for_conversation(
        self, conversation_id: int, exclude_user_id: int | None = None
    ) -> int:
        """Number of subscribers of a conversation."""
        query = self.db.query(Subscription).filter(
            Subscription.conversation_id == conversation_id
        )
        if exclude_user_id is not None:
            query = query.filter(Subscription.user_id != exclude_user_id)
        return query.count()
