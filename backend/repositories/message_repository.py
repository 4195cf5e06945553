"""
Message repository for database operations.
"""

from typing import List

from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.db_models import Message


class MessageRepository(BaseRepository[Message]):
    """Repository for Message entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize message repository.

        Args:
            db: Database session
        """
        super().__init__(Message, db)

    def get_published_for_conversation(
        self, conversation_id: int, skip: int = 0, limit: int = 100
    ) -> List[Message]:
        """
        Get published messages of a conversation, oldest first.

        Args:
            conversation_id: Conversation ID
            skip: Pagination offset
            limit: Pagination limit

        Returns:
            List of messages without a defining abuse report
        """
        return (
            self.db.query(Message)
            .filter(
                Message.conversation_id == conversation_id,
                Message.abuse_report_id.is_(None),
            )
            .order_by(Message.created_at, Message.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def attach_abuse_report(self, message_id: int, abuse_report_id: int) -> bool:
        """
        Deactivate a message by attaching its defining abuse report.

        Only a still-published message is updated, so the first deactivating
        report stays the defining one.

        Args:
            message_id: Message ID
            abuse_report_id: Report that deactivates the message

        Returns:
            True if this call deactivated the message
        """
        updated = (
            self.db.query(Message)
            .filter(Message.id == message_id, Message.abuse_report_id.is_(None))
            .update(
                {Message.abuse_report_id: abuse_report_id}, synchronize_session=False
            )
        )
        self.db.commit()
        return updated > 0
