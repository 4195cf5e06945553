"""
User Service

Handles user registration and activation and the social graph read off
subscriptions to personal conversations.
"""

from datetime import datetime, timezone
from typing import List, Optional

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from models.config import settings
from models.exceptions import UserAlreadyExistsException, UserNotFoundException
from repositories.conversation_repository import ConversationRepository
from repositories.subscription_repository import SubscriptionRepository
from repositories.user_repository import UserRepository
from services.conversation_service import ConversationService


class UserService:
    """Service for managing users and their relationships."""

    @staticmethod
    def get_user(db: Session, user_id: int) -> db_models.User:
        """
        Get a user by ID.

        Raises:
            UserNotFoundException: If user not found
        """
        user = UserRepository(db).get_by_id(user_id)
        if not user:
            raise UserNotFoundException(user_id)
        return user

    @staticmethod
    def get_by_login(db: Session, login: str) -> Optional[db_models.User]:
        """Get a user by login, case-insensitively."""
        return UserRepository(db).get_by_login(login)

    @staticmethod
    def create_user(db: Session, data: schemas.UserCreate) -> db_models.User:
        """
        Register a new, not yet activated user.

        Args:
            db: Database session
            data: Validated user data (login and email already lowercase)

        Returns:
            Created user

        Raises:
            UserAlreadyExistsException: If login or email is taken
        """
        user_repo = UserRepository(db)

        if user_repo.get_by_login(data.login):
            raise UserAlreadyExistsException(f"Login '{data.login}' is already taken")
        if user_repo.get_by_email(data.email):
            raise UserAlreadyExistsException(
                f"Email '{data.email}' is already registered"
            )

        user = user_repo.create_unique(
            db_models.User(
                login=data.login,
                email=data.email,
                name=data.name,
                receive_email_notifications=data.receive_email_notifications,
            )
        )
        if user is None:
            raise UserAlreadyExistsException(
                f"User '{data.login}' was registered concurrently"
            )

        logger.info(f"User {user.id} registered as '{user.login}'")
        return user

    @staticmethod
    def activate_user(db: Session, user_id: int) -> db_models.User:
        """
        Activate a user and give them their personal conversation.

        Activating twice leaves the first activation in place.

        Args:
            db: Database session
            user_id: User ID

        Returns:
            Activated user

        Raises:
            UserNotFoundException: If user not found
        """
        user = UserService.get_user(db, user_id)
        if user.is_active and user.personal_conversation_id is not None:
            return user

        personal = ConversationService.add_personal(db, user)
        user = UserRepository(db).set_activation(
            user,
            personal_conversation_id=personal.id,
            activated_at=user.activated_at or datetime.now(timezone.utc),
        )
        logger.info(f"User {user.id} activated with personal conversation {personal.id}")
        return user

    @staticmethod
    def friends_convos(db: Session, user_id: int) -> List[db_models.Conversation]:
        """
        Personal conversations of other users that this user follows.

        Args:
            db: Database session
            user_id: User ID

        Returns:
            Personal conversations ordered by name
        """
        user = UserService.get_user(db, user_id)
        return ConversationRepository(db).get_subscribed_personal(
            user.id, exclude_conversation_id=user.personal_conversation_id
        )

    @staticmethod
    def friends(db: Session, user_id: int) -> List[db_models.User]:
        """Users whose personal conversation this user follows."""
        return [
            conversation.owner
            for conversation in UserService.friends_convos(db, user_id)
        ]

    @staticmethod
    def followers(db: Session, user_id: int) -> List[db_models.User]:
        """
        Users following this user's personal conversation.

        Args:
            db: Database session
            user_id: User ID

        Returns:
            Followers ordered by login, the user excluded
        """
        user = UserService.get_user(db, user_id)
        if user.personal_conversation_id is None:
            return []
        return UserRepository(db).get_subscribers_of(
            user.personal_conversation_id, exclude_user_id=user.id
        )

    @staticmethod
    def followers_convos(db: Session, user_id: int) -> List[db_models.Conversation]:
        """Personal conversations of this user's followers."""
        return [
            follower.personal_conversation
            for follower in UserService.followers(db, user_id)
            if follower.personal_conversation is not None
        ]

    @staticmethod
    def news(db: Session, user_id: int) -> List[schemas.SubscriptionNews]:
        """
        Subscriptions with unread messages, most recently active first.

        Args:
            db: Database session
            user_id: User ID

        Returns:
            One entry per subscription that has unread messages
        """
        rows = SubscriptionRepository(db).get_with_new_messages(user_id)
        return [
            schemas.SubscriptionNews(
                subscription_id=subscription.id,
                conversation_id=subscription.conversation_id,
                new_messages_count=count,
            )
            for subscription, count in rows
        ]

    @staticmethod
    def recent_conversations(
        db: Session, user_id: int, limit: int | None = None
    ) -> List[db_models.Conversation]:
        """Conversations the user visited, most recent visit first."""
        return ConversationRepository(db).get_recent_for_user(
            user_id, limit or settings.RECENT_CONVERSATIONS_LIMIT
        )

    @staticmethod
    def get_activity_counts(db: Session, user_id: int) -> schemas.UserActivityCounts:
        """
        Activity counters of a user, computed at read time.

        Raises:
            UserNotFoundException: If user not found
        """
        user = UserService.get_user(db, user_id)
        user_repo = UserRepository(db)

        followers = 0
        if user.personal_conversation_id is not None:
            followers = SubscriptionRepository(db).count_for_conversation(
                user.personal_conversation_id, exclude_user_id=user.id
            )

        return schemas.UserActivityCounts(
            conversations_started=user_repo.count_conversations_started(user.id),
            messages_posted=user_repo.count_messages_posted(user.id),
            following=SubscriptionRepository(db).count_for_user(user.id),
            followers=followers,
        )
