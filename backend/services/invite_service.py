"""
Service for invite registry business logic.

Invites gate following of private conversations. Each token is single use.
"""

import hmac
import secrets
from datetime import datetime, timezone

from loguru import logger
from sqlalchemy.orm import Session

from repositories.db_models import Invite
from repositories.invite_repository import InviteRepository

# 32 url-safe characters
INVITE_TOKEN_BYTES = 24


class InviteService:
    """Service for invite operations."""

    @staticmethod
    def generate_token() -> str:
        """Generate an opaque, url-safe invite token."""
        return secrets.token_urlsafe(INVITE_TOKEN_BYTES)

    @staticmethod
    def issue_invite(
        db: Session,
        user_id: int,
        conversation_id: int,
        requestor_id: int | None = None,
    ) -> Invite:
        """
        Invite a user to a conversation.

        Re-inviting a user whose latest invite is still pending gives that
        invite a fresh token instead of stacking a new one.

        Args:
            db: Database session
            user_id: Invited user ID
            conversation_id: Conversation ID
            requestor_id: Inviting user ID

        Returns:
            Invite carrying an unused token
        """
        invite_repo = InviteRepository(db)
        token = InviteService.generate_token()

        latest = invite_repo.get_latest(user_id, conversation_id)
        if latest is not None and latest.is_active:
            return invite_repo.replace_token(latest, token)

        invite = invite_repo.create(
            Invite(
                user_id=user_id,
                conversation_id=conversation_id,
                requestor_id=requestor_id,
                token=token,
            )
        )
        logger.info(
            f"User {user_id} invited to conversation {conversation_id} "
            f"by {requestor_id}"
        )
        return invite

    @staticmethod
    def find_active(db: Session, user_id: int, conversation_id: int) -> Invite | None:
        """
        Get the most recent invite of a user to a conversation, if unused.

        Args:
            db: Database session
            user_id: Invited user ID
            conversation_id: Conversation ID

        Returns:
            The latest invite when its token is still set, None otherwise
        """
        invite = InviteRepository(db).get_latest(user_id, conversation_id)
        if invite is None or not invite.is_active:
            return None
        return invite

    @staticmethod
    def consume(db: Session, invite: Invite, token: str) -> bool:
        """
        Spend an invite token.

        The comparison and the invalidation happen in one conditional
        UPDATE, so two followers presenting the same token cannot both win.

        Args:
            db: Database session
            invite: Invite the token should belong to
            token: Token presented by the follower

        Returns:
            True if the token matched and has now been invalidated
        """
        if invite.token is None or not hmac.compare_digest(
            invite.token.encode(), token.encode()
        ):
            return False
        return InviteRepository(db).consume_token(
            invite.id, token, datetime.now(timezone.utc)
        )

    @staticmethod
    def reset_token(db: Session, invite: Invite) -> None:
        """Invalidate an invite's token without a follower presenting it."""
        InviteRepository(db).clear_token(invite.id, datetime.now(timezone.utc))

    @staticmethod
    def destroy(db: Session, invite: Invite) -> None:
        """Delete an invite."""
        InviteRepository(db).delete(invite)

    @staticmethod
    def destroy_for(db: Session, user_id: int, conversation_id: int) -> int:
        """
        Delete every invite of a user to a conversation.

        Returns:
            Number of deleted invites
        """
        return InviteRepository(db).delete_for_user_and_conversation(
            user_id, conversation_id
        )
