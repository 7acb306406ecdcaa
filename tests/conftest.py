"""Shared test fixtures for the client test suite."""

from __future__ import annotations

import random
from collections.abc import Callable

import httpx
import pytest

from navee_api.client import ApiClient
from navee_api.config.settings import ClientConfig
from navee_api.resilience.retry import BackoffPolicy

BASE_URL = "https://api.navee.test"


# ---------------------------------------------------------------------------
# Ensure required env vars are set for ApiSettings in tests
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _set_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set minimal env vars so ApiSettings can be instantiated in tests."""
    monkeypatch.setenv("NAVEE_API_BASE_URL", BASE_URL)


# ---------------------------------------------------------------------------
# Client fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(base_url=BASE_URL)


@pytest.fixture
def make_client(config: ClientConfig) -> Callable[..., ApiClient]:
    """Factory building an ApiClient over an httpx.MockTransport handler."""

    def _make(handler: Callable, **kwargs: object) -> ApiClient:
        kwargs.setdefault("backoff", BackoffPolicy(rng=random.Random(0)))
        return ApiClient(config, transport=httpx.MockTransport(handler), **kwargs)

    return _make


# ---------------------------------------------------------------------------
# Payload fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def message_json() -> dict:
    return {
        "id": "msg-1",
        "conversationId": "conv-1",
        "senderId": "user-1",
        "sentAt": "2024-05-01T10:00:00Z",
        "type": "text",
        "text": "Landed in Lisbon",
    }


@pytest.fixture
def conversation_json(message_json: dict) -> dict:
    return {
        "id": "conv-1",
        "createdAt": "2024-04-30T08:00:00Z",
        "title": "Lisbon trip",
        "lastMessage": message_json,
        "unreadCount": 2,
        "participants": [
            {"id": "user-1", "name": "Ana", "username": "ana", "verified": True},
            {"id": "user-2", "name": "Ravi"},
        ],
    }
