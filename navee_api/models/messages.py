"""Messaging DTOs: conversations, messages, attachments and user cards."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import Field, model_validator

from navee_api.models.base import Dto, drop_nulls, with_fallback_keys
from navee_api.models.page import Page


class MessageType(str, Enum):
    """Kind of content a message carries."""

    TEXT = "text"
    IMAGE = "image"
    FILE = "file"
    MIXED = "mixed"


class UserCard(Dto):
    """Compact participant profile."""

    id: str
    name: str
    username: str | None = None
    avatar_url: str | None = None
    verified: bool = False

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        return drop_nulls(data, ("verified",))


class Attachment(Dto):
    """File attached to a message, as stored by the backend."""

    url: str
    filename: str
    bytes: int = Field(default=0, ge=0)
    mime: str = "application/octet-stream"
    width: int | None = None
    height: int | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        data = drop_nulls(data, ("bytes",))
        return with_fallback_keys(data, {"mime": ("mimeType", "contentType")})

    @property
    def is_image(self) -> bool:
        return self.mime.startswith("image/")


class Message(Dto):
    """A single message in a conversation."""

    id: str
    conversation_id: str
    sender_id: str
    sent_at: datetime
    type: MessageType = MessageType.TEXT
    text: str | None = None
    attachments: list[Attachment] = Field(default_factory=list)
    edited_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        data = drop_nulls(data, ("type", "attachments"))
        return with_fallback_keys(data, {"sentAt": ("createdAt",)})


class Conversation(Dto):
    """A conversation thread with its participants and latest message."""

    id: str
    created_at: datetime
    title: str | None = None
    last_message: Message | None = None
    unread_count: int = Field(default=0, ge=0)
    participants: list[UserCard] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _null_defaults(cls, data: Any) -> Any:
        return drop_nulls(data, ("unreadCount", "participants"))


ConversationPage = Page[Conversation]
MessagePage = Page[Message]
