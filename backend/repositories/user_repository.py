"""
User repository for database operations.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

import repositories.db_models as db_models
from .base import BaseRepository


class UserRepository(BaseRepository[db_models.User]):
    """Repository for User entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize user repository.

        Args:
            db: Database session
        """
        super().__init__(db_models.User, db)

    def get_by_login(self, login: str) -> Optional[db_models.User]:
        """
        Get user by login.

        Args:
            login: User login (case-insensitive)

        Returns:
            User if found, None otherwise
        """
        return (
            self.db.query(db_models.User)
            .filter(db_models.User.login == login.strip().lower())
            .first()
        )

    def get_by_email(self, email: str) -> Optional[db_models.User]:
        """
        Get user by email.

        Args:
            email: User email (case-insensitive)

        Returns:
            User if found, None otherwise
        """
        return (
            self.db.query(db_models.User)
            .filter(db_models.User.email == email.strip().lower())
            .first()
        )

    def get_active_users(self) -> List[db_models.User]:
        """Users who completed activation."""
        return (
            self.db.query(db_models.User)
            .filter(db_models.User.activated_at.isnot(None))
            .order_by(db_models.User.login)
            .all()
        )

    def set_activation(
        self, user: db_models.User, personal_conversation_id: int, activated_at: datetime
    ) -> db_models.User:
        """
        Store activation timestamp and the personal conversation link.

        Args:
            user: User to activate
            personal_conversation_id: ID of the user's personal conversation
            activated_at: Activation timestamp

        Returns:
            Updated user
        """
        user.personal_conversation_id = personal_conversation_id
        user.activated_at = activated_at
        self.db.commit()
        self.db.refresh(user)
        return user

    def get_subscribers_of(
        self, conversation_id: int, exclude_user_id: int | None = None
    ) -> List[db_models.User]:
        """
        Get users subscribed to a conversation.

        Args:
            conversation_id: Conversation ID
            exclude_user_id: User to leave out of the result (usually the owner)

        Returns:
            List of subscribed users ordered by login
        """
        query = (
            self.db.query(db_models.User)
            .join(
                db_models.Subscription,
                db_models.Subscription.user_id == db_models.User.id,
            )
            .filter(db_models.Subscription.conversation_id == conversation_id)
        )
        if exclude_user_id is not None:
            query = query.filter(db_models.User.id != exclude_user_id)
        return query.order_by(db_models.User.login).all()

    def count_conversations_started(self, user_id: int) -> int:
        """Count conversations owned by the user, personal one excluded."""
        return (
            self.db.query(db_models.Conversation)
            .filter(
                db_models.Conversation.user_id == user_id,
                db_models.Conversation.personal == False,  # noqa: E712
            )
            .count()
        )

    def count_messages_posted(self, user_id: int) -> int:
        """Count every message authored by the user, unpublished ones included."""
        return (
            self.db.query(db_models.Message)
            .filter(db_models.Message.user_id == user_id)
            .count()
        )
