"""
Conversation repository for database operations.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

import repositories.db_models as db_models
from .base import BaseRepository


class ConversationRepository(BaseRepository[db_models.Conversation]):
    """Repository for Conversation entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize conversation repository.

        Args:
            db: Database session
        """
        super().__init__(db_models.Conversation, db)

    def get_personal_for_user(self, user_id: int) -> Optional[db_models.Conversation]:
        """
        Get the personal conversation owned by a user.

        Args:
            user_id: Owner ID

        Returns:
            Personal conversation if it exists, None otherwise
        """
        return (
            self.db.query(db_models.Conversation)
            .filter(
                db_models.Conversation.user_id == user_id,
                db_models.Conversation.personal == True,  # noqa: E712
            )
            .first()
        )

    def get_subscribed_personal(
        self, user_id: int, exclude_conversation_id: int | None = None
    ) -> List[db_models.Conversation]:
        """
        Get personal conversations the user is subscribed to.

        Args:
            user_id: Subscriber ID
            exclude_conversation_id: Conversation to leave out (the user's own)

        Returns:
            Personal conversations ordered by name
        """
        query = (
            self.db.query(db_models.Conversation)
            .join(
                db_models.Subscription,
                db_models.Subscription.conversation_id == db_models.Conversation.id,
            )
            .filter(
                db_models.Subscription.user_id == user_id,
                db_models.Conversation.personal == True,  # noqa: E712
            )
        )
        if exclude_conversation_id is not None:
            query = query.filter(db_models.Conversation.id != exclude_conversation_id)
        return query.order_by(db_models.Conversation.name).all()

    def get_recent_for_user(
        self, user_id: int, limit: int = 10
    ) -> List[db_models.Conversation]:
        """
        Get conversations the user visited, most recent visit first.

        Args:
            user_id: Visitor ID
            limit: Maximum number of conversations

        Returns:
            List of conversations
        """
        return (
            self.db.query(db_models.Conversation)
            .join(
                db_models.ConversationVisit,
                db_models.ConversationVisit.conversation_id
                == db_models.Conversation.id,
            )
            .filter(db_models.ConversationVisit.user_id == user_id)
            .order_by(
                db_models.ConversationVisit.updated_at.desc(),
                db_models.ConversationVisit.id.desc(),
            )
            .limit(limit)
            .all()
        )
