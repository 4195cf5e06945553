"""
Service deciding who may follow a conversation.
"""

from loguru import logger
from sqlalchemy.orm import Session

from models.exceptions import UserNotFoundException
from repositories.user_repository import UserRepository
from services.conversation_service import ConversationService
from services.invite_service import InviteService
from services.subscription_service import SubscriptionService


class FollowService:
    """Service for follow/unfollow operations."""

    @staticmethod
    def follow(
        db: Session,
        user_id: int,
        conversation_id: int,
        token: str | None = None,
    ) -> bool:
        """
        Subscribe a user to a conversation if allowed.

        Public conversations and the owner's own conversations are always
        open. A private conversation additionally needs the user's pending
        invite and its matching token; the token is spent on success.

        Args:
            db: Database session
            user_id: ID of the user asking to follow
            conversation_id: Conversation ID
            token: Invite token, required for private conversations

        Returns:
            True if the user now follows the conversation, False if refused
            (no subscription is created in that case)

        Raises:
            ConversationNotFoundException: If conversation not found
            UserNotFoundException: If user not found
        """
        conversation = ConversationService.get_conversation(db, conversation_id)
        if not UserRepository(db).get_by_id(user_id):
            raise UserNotFoundException(user_id)

        authorized = not conversation.is_private or conversation.is_owned_by(user_id)
        if not authorized and token is not None:
            invite = InviteService.find_active(db, user_id, conversation_id)
            authorized = invite is not None and InviteService.consume(
                db, invite, token
            )
            if authorized:
                logger.info(
                    f"Invite {invite.id} spent by user {user_id} "
                    f"on conversation {conversation_id}"
                )

        if not authorized:
            logger.info(
                f"Follow refused: user {user_id} on private conversation "
                f"{conversation_id}"
            )
            return False

        subscription = ConversationService.add_subscription(
            db, user_id, conversation_id
        )
        SubscriptionService.mark_read(db, subscription)
        return True

    @staticmethod
    def unfollow(db: Session, user_id: int, conversation_id: int) -> None:
        """
        Stop following a conversation.

        Any invite of the user to the conversation is destroyed too, so the
        user can be invited again. Unfollowing something not followed is a
        no-op.

        Args:
            db: Database session
            user_id: ID of the user
            conversation_id: Conversation ID
        """
        removed = ConversationService.remove_subscription(db, user_id, conversation_id)
        destroyed = InviteService.destroy_for(db, user_id, conversation_id)
        if removed or destroyed:
            logger.info(
                f"User {user_id} unfollowed conversation {conversation_id} "
                f"({destroyed} invite(s) removed)"
            )
