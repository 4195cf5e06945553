"""
Database models using SQLAlchemy 2.0 style with Mapped type hints.

Counters (unread messages, reports per message, followers...) are never
cached on rows; repositories derive them with COUNT queries at read time.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from repositories.database import Base


def _utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    # Stored lowercase; normalization happens in UserCreate and UserRepository
    login: Mapped[str] = mapped_column(
        String(40), unique=True, index=True, nullable=False
    )
    email: Mapped[str] = mapped_column(
        String(100), unique=True, index=True, nullable=False
    )
    name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    personal_conversation_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("conversations.id", use_alter=True, name="fk_users_personal_convo"),
        unique=True,
        nullable=True,
    )
    receive_email_notifications: Mapped[bool] = mapped_column(Boolean, default=True)
    activated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    # Relationships
    personal_conversation: Mapped[Optional["Conversation"]] = relationship(
        "Conversation", foreign_keys=[personal_conversation_id], post_update=True
    )
    conversations: Mapped[List["Conversation"]] = relationship(
        "Conversation", back_populates="owner", foreign_keys="[Conversation.user_id]"
    )
    messages: Mapped[List["Message"]] = relationship("Message", back_populates="user")
    subscriptions: Mapped[List["Subscription"]] = relationship(
        "Subscription",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="Subscription.activated_at.desc()",
    )

    @property
    def is_active(self) -> bool:
        return self.activated_at is not None


class Conversation(Base):
    __tablename__ = "conversations"
    __table_args__ = (
        Index("ix_conversations_owner", "user_id"),
        Index("ix_conversations_personal", "personal"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    private: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    personal: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # Set when the conversation was spawned from a message
    parent_message_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("messages.id", use_alter=True, name="fk_conversations_parent"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    # Relationships
    owner: Mapped["User"] = relationship(
        "User", back_populates="conversations", foreign_keys=[user_id]
    )
    parent_message: Mapped[Optional["Message"]] = relationship(
        "Message",
        back_populates="spawned_conversations",
        foreign_keys=[parent_message_id],
    )
    messages: Mapped[List["Message"]] = relationship(
        "Message",
        back_populates="conversation",
        foreign_keys="[Message.conversation_id]",
        order_by="Message.id",
        cascade="all, delete-orphan",
    )
    subscriptions: Mapped[List["Subscription"]] = relationship(
        "Subscription", back_populates="conversation", cascade="all, delete-orphan"
    )
    taggings: Mapped[List["ConversationTagging"]] = relationship(
        "ConversationTagging",
        back_populates="conversation",
        cascade="all, delete-orphan",
    )
    tags: Mapped[List["Tag"]] = relationship(
        "Tag", secondary="conversation_taggings", viewonly=True
    )

    @property
    def is_private(self) -> bool:
        return self.private

    def is_owned_by(self, user_id: int) -> bool:
        return self.user_id == user_id


class Message(Base):
    """
    A message posted into a conversation.

    Two separate relations point at AbuseReport: ``abuse_reports`` holds
    every report filed against the message, ``abuse_report`` is the single
    report that deactivated it. Only the latter affects publication.
    """

    __tablename__ = "messages"
    __table_args__ = (
        Index("ix_messages_conversation_created", "conversation_id", "created_at"),
        Index("ix_messages_user", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    conversation_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("conversations.id"), nullable=False
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    system_message: Mapped[bool] = mapped_column(Boolean, default=False)
    attachment_file_name: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True
    )
    attachment_content_type: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True
    )
    attachment_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    abuse_report_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("abuse_reports.id", use_alter=True, name="fk_messages_abuse_report"),
        nullable=True,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="messages")
    conversation: Mapped["Conversation"] = relationship(
        "Conversation", back_populates="messages", foreign_keys=[conversation_id]
    )
    abuse_reports: Mapped[List["AbuseReport"]] = relationship(
        "AbuseReport",
        back_populates="message",
        foreign_keys="[AbuseReport.message_id]",
        order_by="AbuseReport.id",
        cascade="all, delete-orphan",
    )
    abuse_report: Mapped[Optional["AbuseReport"]] = relationship(
        "AbuseReport", foreign_keys=[abuse_report_id], post_update=True
    )
    spawned_conversations: Mapped[List["Conversation"]] = relationship(
        "Conversation",
        back_populates="parent_message",
        foreign_keys="[Conversation.parent_message_id]",
    )

    @property
    def published(self) -> bool:
        return self.abuse_report_id is None

    @property
    def has_attachment(self) -> bool:
        return bool(self.attachment_file_name)

    def _attachment_type_contains(self, fragment: str) -> bool:
        return self.has_attachment and fragment in (self.attachment_content_type or "")

    @property
    def has_pdf(self) -> bool:
        return self._attachment_type_contains("pdf")

    @property
    def has_image(self) -> bool:
        return self._attachment_type_contains("image")

    @property
    def has_zip(self) -> bool:
        return self._attachment_type_contains("zip")


class Subscription(Base):
    """
    A user's membership of a conversation, carrying its read state.

    ``activated_at`` orders a user's subscriptions (most recently active
    first); ``last_read_at`` is the read marker unread counts derive from.
    """

    __tablename__ = "subscriptions"
    __table_args__ = (
        UniqueConstraint("user_id", "conversation_id", name="uq_subscription_user_convo"),
        Index("ix_subscriptions_user_activated", "user_id", "activated_at"),
        Index("ix_subscriptions_conversation", "conversation_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    conversation_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("conversations.id"), nullable=False
    )
    activated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, nullable=False
    )
    last_read_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="subscriptions")
    conversation: Mapped["Conversation"] = relationship(
        "Conversation", back_populates="subscriptions"
    )


class Invite(Base):
    """
    Invitation of a user to a conversation.

    The token is single use: consuming it clears it, and an invite without a
    token no longer authorizes anything.
    """

    __tablename__ = "invites"
    __table_args__ = (
        Index("ix_invites_user_conversation", "user_id", "conversation_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    requestor_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    conversation_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("conversations.id"), nullable=False
    )
    token: Mapped[Optional[str]] = mapped_column(
        String(64), unique=True, nullable=True
    )
    consumed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    # Relationships
    user: Mapped["User"] = relationship("User", foreign_keys=[user_id])
    requestor: Mapped[Optional["User"]] = relationship(
        "User", foreign_keys=[requestor_id]
    )
    conversation: Mapped["Conversation"] = relationship("Conversation")

    @property
    def is_active(self) -> bool:
        return self.token is not None


class AbuseReport(Base):
    __tablename__ = "abuse_reports"
    __table_args__ = (
        UniqueConstraint("user_id", "message_id", name="uq_abuse_report_user_message"),
        Index("ix_abuse_reports_message", "message_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    message_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("messages.id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    # Relationships
    user: Mapped["User"] = relationship("User")
    message: Mapped["Message"] = relationship(
        "Message", back_populates="abuse_reports", foreign_keys=[message_id]
    )


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(
        String(50), unique=True, index=True, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    # Relationships
    taggings: Mapped[List["ConversationTagging"]] = relationship(
        "ConversationTagging", back_populates="tag"
    )

    def __str__(self) -> str:
        return self.name


class ConversationTagging(Base):
    """A tag applied to a conversation, optionally by a specific user."""

    __tablename__ = "conversation_taggings"
    __table_args__ = (
        UniqueConstraint(
            "conversation_id", "tag_id", "user_id", name="uq_conversation_tagging"
        ),
        Index("ix_conversation_taggings_tag", "tag_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    conversation_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("conversations.id"), nullable=False
    )
    tag_id: Mapped[int] = mapped_column(Integer, ForeignKey("tags.id"), nullable=False)
    user_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    # Relationships
    conversation: Mapped["Conversation"] = relationship(
        "Conversation", back_populates="taggings"
    )
    tag: Mapped["Tag"] = relationship("Tag", back_populates="taggings")


class ConversationVisit(Base):
    __tablename__ = "conversation_visits"
    __table_args__ = (
        UniqueConstraint("user_id", "conversation_id", name="uq_visit_user_convo"),
        Index("ix_conversation_visits_user_updated", "user_id", "updated_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    conversation_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("conversations.id"), nullable=False
    )
    visits_count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, nullable=False
    )

    # Relationships
    user: Mapped["User"] = relationship("User")
    conversation: Mapped["Conversation"] = relationship("Conversation")
