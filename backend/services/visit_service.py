"""
Service tracking conversation views.
"""

from sqlalchemy.orm import Session

from models.exceptions import UserNotFoundException
from repositories.user_repository import UserRepository
from services.conversation_service import ConversationService
from services.subscription_service import SubscriptionService


class VisitService:
    """Service for conversation visit bookkeeping."""

    @staticmethod
    def record_visit(db: Session, user_id: int, conversation_id: int) -> None:
        """
        Record that a user opened a conversation.

        The steps run in a fixed order: the visit is counted, then the
        subscription that was most recently active *before* this visit is
        marked read, and only then is this conversation's subscription
        re-activated. Reordering the last two would mark the wrong
        subscription read.

        Args:
            db: Database session
            user_id: Visitor ID
            conversation_id: Conversation ID

        Raises:
            ConversationNotFoundException: If conversation not found
            UserNotFoundException: If user not found
        """
        ConversationService.get_conversation(db, conversation_id)
        if not UserRepository(db).get_by_id(user_id):
            raise UserNotFoundException(user_id)

        ConversationService.add_visit(db, user_id, conversation_id)
        SubscriptionService.mark_last_viewed_as_read(db, user_id)
        SubscriptionService.activate(db, user_id, conversation_id)
