"""Public DTOs and parsing helpers."""

from navee_api.models.base import Dto, drop_nulls, pick, with_fallback_keys
from navee_api.models.messages import (
    Attachment,
    Conversation,
    ConversationPage,
    Message,
    MessagePage,
    MessageType,
    UserCard,
)
from navee_api.models.page import Page
from navee_api.models.uploads import FilePart

__all__ = [
    "Attachment",
    "Conversation",
    "ConversationPage",
    "Dto",
    "drop_nulls",
    "FilePart",
    "Message",
    "MessagePage",
    "MessageType",
    "Page",
    "UserCard",
    "pick",
    "with_fallback_keys",
]
