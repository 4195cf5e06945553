"""
Invite repository for database operations.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.db_models import Invite


class InviteRepository(BaseRepository[Invite]):
    """Repository for Invite entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize invite repository.

        Args:
            db: Database session
        """
        super().__init__(Invite, db)

    def get_latest(self, user_id: int, conversation_id: int) -> Optional[Invite]:
        """
        Get the most recent invite of a user to a conversation.

        Args:
            user_id: Invited user ID
            conversation_id: Conversation ID

        Returns:
            Invite if found, None otherwise
        """
        return (
            self.db.query(Invite)
            .filter(
                Invite.user_id == user_id,
                Invite.conversation_id == conversation_id,
            )
            .order_by(Invite.created_at.desc(), Invite.id.desc())
            .first()
        )

    def consume_token(self, invite_id: int, token: str, consumed_at: datetime) -> bool:
        """
        Check and invalidate an invite token in one statement.

        Args:
            invite_id: Invite ID
            token: Token presented by the follower
            consumed_at: Consumption timestamp

        Returns:
            True if the token matched and was still unused
        """
        updated = (
            self.db.query(Invite)
            .filter(Invite.id == invite_id, Invite.token == token)
            .update(
                {Invite.token: None, Invite.consumed_at: consumed_at},
                synchronize_session=False,
            )
        )
        self.db.commit()
        return updated > 0

    def clear_token(self, invite_id: int, consumed_at: datetime) -> None:
        """
        Invalidate an invite token unconditionally.

        Args:
            invite_id: Invite ID
            consumed_at: Consumption timestamp
        """
        self.db.query(Invite).filter(Invite.id == invite_id).update(
            {Invite.token: None, Invite.consumed_at: consumed_at},
            synchronize_session=False,
        )
        self.db.commit()

    def replace_token(self, invite: Invite, token: str) -> Invite:
        """Give an existing invite a fresh token."""
        invite.token = token
        invite.consumed_at = None
        self.db.commit()
        self.db.refresh(invite)
        return invite

    def delete_for_user_and_conversation(
        self, user_id: int, conversation_id: int
    ) -> int:
        """
        Remove every invite of a user to a conversation.

        Returns:
            Number of deleted invites
        """
        deleted = (
            self.db.query(Invite)
            .filter(
                Invite.user_id == user_id,
                Invite.conversation_id == conversation_id,
            )
            .delete()
        )
        self.db.commit()
        return deleted
