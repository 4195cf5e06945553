"""
Abuse report repository for database operations.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.db_models import AbuseReport


class AbuseReportRepository(BaseRepository[AbuseReport]):
    """Repository for AbuseReport entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize abuse report repository.

        Args:
            db: Database session
        """
        super().__init__(AbuseReport, db)

    def get_by_user_and_message(
        self, user_id: int, message_id: int
    ) -> Optional[AbuseReport]:
        """
        Get the report a user filed against a message.

        Args:
            user_id: Reporting user ID
            message_id: Reported message ID

        Returns:
            AbuseReport if found, None otherwise
        """
        return (
            self.db.query(AbuseReport)
            .filter(
                AbuseReport.user_id == user_id,
                AbuseReport.message_id == message_id,
            )
            .first()
        )

    def count_for_message(self, message_id: int) -> int:
        """
        Count reports filed against a message.

        Args:
            message_id: Message ID

        Returns:
            Number of distinct reporters
        """
        return (
            self.db.query(AbuseReport)
            .filter(AbuseReport.message_id == message_id)
            .count()
        )

    def get_for_message(self, message_id: int) -> List[AbuseReport]:
        """All reports filed against a message, oldest first."""
        return (
            self.db.query(AbuseReport)
            .filter(AbuseReport.message_id == message_id)
            .order_by(AbuseReport.id)
            .all()
        )
