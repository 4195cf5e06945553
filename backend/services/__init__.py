"""
Services layer for business logic.

This package contains service modules that encapsulate business rules on
top of the repositories.
"""

from .attachment_store import AttachmentStore
from .subscription_service import SubscriptionService
from .conversation_service import ConversationService
from .invite_service import InviteService
from .follow_service import FollowService
from .visit_service import VisitService
from .notification_service import NotificationService
from .moderation_service import ModerationService
from .tag_service import TagService
from .message_service import MessageService
from .user_service import UserService

__all__ = [
    "AttachmentStore",
    "SubscriptionService",
    "ConversationService",
    "InviteService",
    "FollowService",
    "VisitService",
    "NotificationService",
    "ModerationService",
    "TagService",
    "MessageService",
    "UserService",
]
