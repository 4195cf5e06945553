"""
Repository pattern implementation for data access layer.
"""

from .abuse_report_repository import AbuseReportRepository
from .base import BaseRepository
from .conversation_repository import ConversationRepository
from .invite_repository import InviteRepository
from .message_repository import MessageRepository
from .subscription_repository import SubscriptionRepository
from .tag_repository import ConversationTaggingRepository, TagRepository
from .user_repository import UserRepository
from .visit_repository import ConversationVisitRepository

__all__ = [
    "AbuseReportRepository",
    "BaseRepository",
    "ConversationRepository",
    "ConversationTaggingRepository",
    "ConversationVisitRepository",
    "InviteRepository",
    "MessageRepository",
    "SubscriptionRepository",
    "TagRepository",
    "UserRepository",
]
