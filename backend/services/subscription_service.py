"""
Service for subscription (membership and read state) business logic.
"""

from datetime import datetime, timezone

from loguru import logger
from sqlalchemy.orm import Session

from models.exceptions import SubscriptionConflictException
from repositories.db_models import Subscription
from repositories.subscription_repository import SubscriptionRepository


class SubscriptionService:
    """Service for subscription operations."""

    @staticmethod
    def ensure_subscribed(db: Session, user_id: int, conversation_id: int) -> Subscription:
        """
        Get the user's subscription to a conversation, creating it if needed.

        Two workers racing on the same pair converge on a single row: the
        loser's insert hits the unique constraint, is rolled back, and the
        winner's row is returned.

        Args:
            db: Database session
            user_id: Subscriber ID
            conversation_id: Conversation ID

        Returns:
            The single subscription for (user, conversation)

        Raises:
            SubscriptionConflictException: If the row can neither be created
                nor found
        """
        subscription_repo = SubscriptionRepository(db)

        existing = subscription_repo.get_by_user_and_conversation(
            user_id, conversation_id
        )
        if existing:
            return existing

        created = subscription_repo.create_unique(
            Subscription(
                user_id=user_id,
                conversation_id=conversation_id,
                activated_at=datetime.now(timezone.utc),
            )
        )
        if created is not None:
            logger.debug(
                f"User {user_id} subscribed to conversation {conversation_id}"
            )
            return created

        winner = subscription_repo.get_by_user_and_conversation(
            user_id, conversation_id
        )
        if winner is None:
            raise SubscriptionConflictException(user_id, conversation_id)
        logger.debug(
            f"Concurrent subscription of user {user_id} to conversation "
            f"{conversation_id} resolved to existing row {winner.id}"
        )
        return winner

    @staticmethod
    def mark_read(
        db: Session, subscription: Subscription, read_at: datetime | None = None
    ) -> None:
        """
        Move the subscription's read marker.

        A subscription removed in the meantime is silently ignored.

        Args:
            db: Database session
            subscription: Subscription to mark
            read_at: Read marker, defaults to now
        """
        subscription_repo = SubscriptionRepository(db)
        if not subscription_repo.set_last_read(
            subscription.id, read_at or datetime.now(timezone.utc)
        ):
            logger.debug(f"Subscription {subscription.id} vanished before mark_read")

    @staticmethod
    def mark_last_viewed_as_read(db: Session, user_id: int) -> Subscription | None:
        """
        Mark the user's most recently activated subscription as read.

        Args:
            db: Database session
            user_id: Subscriber ID

        Returns:
            The subscription marked read, None if the user has none
        """
        subscription_repo = SubscriptionRepository(db)
        subscription = subscription_repo.get_most_recent_for_user(user_id)
        if subscription is None:
            return None
        SubscriptionService.mark_read(db, subscription)
        return subscription

    @staticmethod
    def activate(db: Session, user_id: int, conversation_id: int) -> bool:
        """
        Make a subscription the user's most recently active one.

        Args:
            db: Database session
            user_id: Subscriber ID
            conversation_id: Conversation ID

        Returns:
            True if a subscription existed and was bumped
        """
        subscription_repo = SubscriptionRepository(db)
        return subscription_repo.set_activated(
            user_id, conversation_id, datetime.now(timezone.utc)
        )

    @staticmethod
    def get_subscription(
        db: Session, user_id: int, conversation_id: int
    ) -> Subscription | None:
        """Get a subscription without creating it."""
        return SubscriptionRepository(db).get_by_user_and_conversation(
            user_id, conversation_id
        )

    @staticmethod
    def get_user_subscriptions(db: Session, user_id: int) -> list[Subscription]:
        """All subscriptions of a user, most recently activated first."""
        return SubscriptionRepository(db).get_for_user(user_id)

    @staticmethod
    def new_messages_count(db: Session, subscription: Subscription) -> int:
        """
        Number of published messages the subscriber has not read yet.

        Args:
            db: Database session
            subscription: Subscription to inspect

        Returns:
            Unread message count
        """
        return SubscriptionRepository(db).count_new_messages(subscription)
