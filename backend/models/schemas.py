import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from models.config import settings

LOGIN_REGEX = re.compile(r"^[a-z0-9.\-_@]+$")

ALLOWED_ATTACHMENT_TYPES = frozenset(
    {
        "application/msword",
        "application/pdf",
        "application/x-pdf",
        "application/x-download",
        "application/rtf",
        "image/gif",
        "image/jpeg",
        "image/png",
        "image/tiff",
        "image/rgb",
        "application/zip",
        "application/x-gzip",
    }
)


class HoneypotMixin(BaseModel):
    """Anti-spam field rendered hidden in forms; bots fill it, humans don't."""

    something: str = ""

    @field_validator("something")
    @classmethod
    def honeypot_must_be_blank(cls, v: str) -> str:
        if v:
            raise ValueError("must be blank")
        return v


# User Schemas
class UserCreate(HoneypotMixin):
    login: str = Field(..., min_length=3, max_length=40)
    email: EmailStr
    name: Optional[str] = Field(default=None, max_length=100)
    receive_email_notifications: bool = True

    @field_validator("login", mode="before")
    @classmethod
    def normalize_login(cls, v: str) -> str:
        """Logins are case-insensitive and stored lowercase."""
        if isinstance(v, str):
            v = v.strip().lower()
        return v

    @field_validator("login")
    @classmethod
    def validate_login_format(cls, v: str) -> str:
        if not LOGIN_REGEX.match(v):
            raise ValueError("use only letters, numbers, and .-_@ please.")
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class UserActivityCounts(BaseModel):
    conversations_started: int
    messages_posted: int
    following: int
    followers: int


# Conversation Schemas
class ConversationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    private: bool = False

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be blank")
        return v


# Message Schemas
class MessageCreate(HoneypotMixin):
    message: str = Field(..., min_length=1)
    system_message: bool = False
    attachment_file_name: Optional[str] = None
    attachment_content_type: Optional[str] = None
    attachment_size: Optional[int] = Field(default=None, ge=0)

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("message cannot be blank")
        return v

    @field_validator("attachment_content_type")
    @classmethod
    def validate_content_type(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in ALLOWED_ATTACHMENT_TYPES:
            raise ValueError(f"attachment type '{v}' is not allowed")
        return v

    @field_validator("attachment_size")
    @classmethod
    def validate_size(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v >= settings.ATTACHMENT_MAX_BYTES:
            raise ValueError(
                f"attachment must be smaller than {settings.ATTACHMENT_MAX_BYTES} bytes"
            )
        return v


class SubscriptionNews(BaseModel):
    subscription_id: int
    conversation_id: int
    new_messages_count: int

    model_config = ConfigDict(from_attributes=True)
