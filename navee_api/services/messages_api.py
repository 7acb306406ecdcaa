"""Messaging endpoints: conversations, messages, read receipts and typing.

Reads retry on transient failures; writes are never retried automatically.
``client_id`` on send operations is forwarded as the Idempotency-Key so the
backend can deduplicate a message the user re-sends after a network error.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from navee_api.client import ApiClient
from navee_api.models.messages import (
    Conversation,
    ConversationPage,
    Message,
    MessagePage,
    MessageType,
)
from navee_api.models.uploads import FilePart
from navee_api.resilience.cancellation import CancelToken
from navee_api.result import Result

_BASE = "/v1/messages/conversations"


def _ignore(_data: Any) -> None:
    return None


class MessagesApi:
    """Typed wrapper over the messaging REST resource."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    # ------------------------------------------------------------------
    # Conversations
    # ------------------------------------------------------------------

    async def list_conversations(
        self,
        page: int = 1,
        limit: int = 30,
        q: str | None = None,
        cancel_token: CancelToken | None = None,
    ) -> Result[ConversationPage]:
        query: dict[str, Any] = {"page": page, "limit": limit}
        if q is not None and q.strip():
            query["q"] = q.strip()
        return await self._client.get(
            _BASE,
            query=query,
            parse=ConversationPage.from_json,
            cancel_token=cancel_token,
            retries=2,
        )

    async def get_conversation(
        self,
        conversation_id: str,
        cancel_token: CancelToken | None = None,
    ) -> Result[Conversation]:
        return await self._client.get(
            f"{_BASE}/{conversation_id}",
            parse=Conversation.from_json,
            cancel_token=cancel_token,
            retries=1,
        )

    async def create_conversation(
        self,
        participant_ids: Sequence[str],
        title: str | None = None,
        cancel_token: CancelToken | None = None,
    ) -> Result[Conversation]:
        body: dict[str, Any] = {"participants": list(participant_ids)}
        if title is not None and title.strip():
            body["title"] = title.strip()
        return await self._client.post(
            _BASE,
            body=body,
            parse=Conversation.from_json,
            cancel_token=cancel_token,
        )

    async def delete_conversation(
        self,
        conversation_id: str,
        cancel_token: CancelToken | None = None,
    ) -> Result[None]:
        return await self._client.delete(
            f"{_BASE}/{conversation_id}",
            parse=_ignore,
            cancel_token=cancel_token,
        )

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    async def list_messages(
        self,
        conversation_id: str,
        page: int = 1,
        limit: int = 50,
        before_id: str | None = None,
        after_id: str | None = None,
        cancel_token: CancelToken | None = None,
    ) -> Result[MessagePage]:
        query: dict[str, Any] = {"page": page, "limit": limit}
        if before_id is not None:
            query["beforeId"] = before_id
        if after_id is not None:
            query["afterId"] = after_id
        return await self._client.get(
            f"{_BASE}/{conversation_id}/messages",
            query=query,
            parse=MessagePage.from_json,
            cancel_token=cancel_token,
            retries=2,
        )

    async def send_message_text(
        self,
        conversation_id: str,
        text: str,
        client_id: str | None = None,
        cancel_token: CancelToken | None = None,
    ) -> Result[Message]:
        headers = {"Idempotency-Key": client_id} if client_id else None
        return await self._client.post(
            f"{_BASE}/{conversation_id}/messages",
            body={"type": MessageType.TEXT.value, "text": text},
            extra_headers=headers,
            parse=Message.from_json,
            cancel_token=cancel_token,
        )

    async def send_message_with_attachments(
        self,
        conversation_id: str,
        attachments: Sequence[FilePart],
        text: str | None = None,
        client_id: str | None = None,
        cancel_token: CancelToken | None = None,
    ) -> Result[Message]:
        fields: dict[str, str] = {"type": MessageType.MIXED.value}
        if text is not None and text.strip():
            fields["text"] = text.strip()
        return await self._client.post_multipart(
            f"{_BASE}/{conversation_id}/messages",
            fields=fields,
            files=attachments,
            idempotency_key=client_id,
            parse=Message.from_json,
            cancel_token=cancel_token,
        )

    async def mark_read(
        self,
        conversation_id: str,
        message_id: str,
        at: datetime | None = None,
        cancel_token: CancelToken | None = None,
    ) -> Result[None]:
        read_at = at or datetime.now(timezone.utc)
        return await self._client.post(
            f"{_BASE}/{conversation_id}/read",
            body={"messageId": message_id, "at": read_at.isoformat()},
            parse=_ignore,
            cancel_token=cancel_token,
        )

    async def typing(
        self,
        conversation_id: str,
        is_typing: bool,
        cancel_token: CancelToken | None = None,
    ) -> Result[None]:
        return await self._client.post(
            f"{_BASE}/{conversation_id}/typing",
            body={"typing": is_typing},
            parse=_ignore,
            cancel_token=cancel_token,
        )

    async def delete_message(
        self,
        conversation_id: str,
        message_id: str,
        cancel_token: CancelToken | None = None,
    ) -> Result[None]:
        return await self._client.delete(
            f"{_BASE}/{conversation_id}/messages/{message_id}",
            parse=_ignore,
            cancel_token=cancel_token,
        )
