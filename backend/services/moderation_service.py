"""
Service for abuse reporting and message deactivation.

A message stays published until it collects more distinct reports than
MESSAGE_ABUSE_THRESHOLD, or until the owner of its conversation reports it.
"""

from loguru import logger
from sqlalchemy.orm import Session

from models.config import settings
from models.exceptions import (
    AbuseReportConflictException,
    MessageNotFoundException,
    UserNotFoundException,
)
from repositories.abuse_report_repository import AbuseReportRepository
from repositories.db_models import AbuseReport, Message
from repositories.message_repository import MessageRepository
from repositories.user_repository import UserRepository
from services.attachment_store import AttachmentStore
from services.notification_service import NotificationService


class ModerationService:
    """Service for moderation operations."""

    @staticmethod
    def report_abuse(db: Session, message_id: int, user_id: int) -> AbuseReport:
        """
        Flag a message as abusive on behalf of a user.

        Reporting twice is harmless: the first report is returned and nothing
        is re-evaluated.

        Args:
            db: Database session
            message_id: Reported message ID
            user_id: Reporting user ID

        Returns:
            The user's report on the message

        Raises:
            MessageNotFoundException: If message not found
            UserNotFoundException: If user not found
            AbuseReportConflictException: If the report can neither be
                created nor found
        """
        message = MessageRepository(db).get_by_id(message_id)
        if not message:
            raise MessageNotFoundException(message_id)
        if not UserRepository(db).get_by_id(user_id):
            raise UserNotFoundException(user_id)

        report_repo = AbuseReportRepository(db)

        existing = report_repo.get_by_user_and_message(user_id, message_id)
        if existing:
            return existing

        report = report_repo.create_unique(
            AbuseReport(user_id=user_id, message_id=message_id)
        )
        if report is None:
            winner = report_repo.get_by_user_and_message(user_id, message_id)
            if winner is None:
                raise AbuseReportConflictException(user_id, message_id)
            return winner

        logger.info(f"Message {message_id} reported by user {user_id}")

        reporter_owns_conversation = message.conversation.is_owned_by(user_id)
        if reporter_owns_conversation or ModerationService.is_over_abuse_threshold(
            db, message
        ):
            ModerationService._deactivate(db, message, report)

        return report

    @staticmethod
    def is_over_abuse_threshold(db: Session, message: Message) -> bool:
        """Whether the message has strictly more reports than tolerated."""
        count = AbuseReportRepository(db).count_for_message(message.id)
        return count > settings.MESSAGE_ABUSE_THRESHOLD

    @staticmethod
    def _deactivate(db: Session, message: Message, report: AbuseReport) -> None:
        """
        Unpublish a message and lock down its attachments.

        A message already deactivated keeps its original defining report and
        no side effect runs again.
        """
        if not MessageRepository(db).attach_abuse_report(message.id, report.id):
            logger.debug(
                f"Message {message.id} already deactivated, keeping defining report"
            )
            return
        db.refresh(message)

        logger.warning(
            f"Message {message.id} deactivated by abuse report {report.id}"
        )

        try:
            AttachmentStore.restrict_access(message.id)
        except Exception as e:
            logger.warning(
                f"Attachment lockdown failed for message {message.id}: {e}"
            )

        NotificationService.notify_message_deactivated(message)

    @staticmethod
    def list_reports(db: Session, message_id: int) -> list[AbuseReport]:
        """All abuse reports of a message, oldest first."""
        return AbuseReportRepository(db).get_for_message(message_id)

    @staticmethod
    def is_published(db: Session, message_id: int) -> bool:
        """
        Whether a message is visible (carries no defining report).

        Raises:
            MessageNotFoundException: If message not found
        """
        message = MessageRepository(db).get_by_id(message_id)
        if not message:
            raise MessageNotFoundException(message_id)
        return message.published
