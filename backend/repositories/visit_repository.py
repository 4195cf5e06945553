"""
Repository for conversation visit bookkeeping.
"""

from datetime import datetime

from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.db_models import ConversationVisit


class ConversationVisitRepository(BaseRepository[ConversationVisit]):
    """Repository for ConversationVisit entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize visit repository.

        Args:
            db: Database session
        """
        super().__init__(ConversationVisit, db)

    def increment(self, user_id: int, conversation_id: int, visited_at: datetime) -> bool:
        """
        Count one more visit and move the last-visit timestamp.

        Args:
            user_id: Visitor ID
            conversation_id: Conversation ID
            visited_at: Visit timestamp

        Returns:
            True if a visit record existed and was updated
        """
        updated = (
            self.db.query(ConversationVisit)
            .filter(
                ConversationVisit.user_id == user_id,
                ConversationVisit.conversation_id == conversation_id,
            )
            .update(
                {
                    ConversationVisit.visits_count: ConversationVisit.visits_count + 1,
                    ConversationVisit.updated_at: visited_at,
                },
                synchronize_session=False,
            )
        )
        self.db.commit()
        return updated > 0
