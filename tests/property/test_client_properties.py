"""Property tests for ApiClient request handling.

Each example runs its own event loop through ``asyncio.run`` because
hypothesis cannot drive async test functions directly. Backoff sleeps are
patched out so retries complete instantly.
"""

from __future__ import annotations

import asyncio
import random
from unittest.mock import AsyncMock, Mock, patch

import httpx
from hypothesis import given, settings, strategies as st

from navee_api.client import ApiClient
from navee_api.config.settings import ClientConfig
from navee_api.models.uploads import FilePart
from navee_api.resilience.retry import BackoffPolicy
from navee_api.result import Failure, Success

_BASE_URL = "https://api.navee.test"


# --- Strategies ---

retry_counts = st.integers(min_value=0, max_value=3)
failure_counts = st.integers(min_value=0, max_value=5)
error_statuses = st.integers(min_value=400, max_value=599)
success_statuses = st.sampled_from([200, 201, 202, 203, 206])
tokens = st.text(
    min_size=1,
    max_size=64,
    alphabet="abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-._~",
)
json_values = st.recursive(
    st.none() | st.booleans() | st.integers() | st.text(max_size=20),
    lambda children: st.lists(children, max_size=4)
    | st.dictionaries(st.text(max_size=8), children, max_size=4),
    max_leaves=10,
)
filenames = st.from_regex(r"[a-z]{1,12}\.(png|jpg|pdf|txt)", fullmatch=True)
file_parts = st.builds(
    FilePart,
    content=st.binary(min_size=0, max_size=256),
    filename=filenames,
    content_type=st.sampled_from(["image/png", "image/jpeg", "application/pdf", None]),
)


def _client(handler, **kwargs) -> ApiClient:
    kwargs.setdefault("backoff", BackoffPolicy(rng=random.Random(0)))
    return ApiClient(
        ClientConfig(base_url=_BASE_URL),
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def _run(coro_fn):
    with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
        result = asyncio.run(coro_fn())
    return result, mock_sleep


# --- Retry attempt counts ---

@settings(max_examples=100)
@given(retries=retry_counts, failures=failure_counts)
def test_attempts_bounded_by_retries(retries: int, failures: int) -> None:
    """A call is attempted until it succeeds or retries are exhausted."""
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        if calls <= failures:
            return httpx.Response(503)
        return httpx.Response(200, json={"ok": True})

    async def scenario():
        async with _client(handler) as client:
            return await client.get("/v1/ping", parse=lambda d: d, retries=retries)

    result, mock_sleep = _run(scenario)

    assert calls == min(failures, retries) + 1
    assert mock_sleep.await_count == min(failures, retries)
    if failures <= retries:
        assert result == Success({"ok": True})
    else:
        assert result.error.code == 503


@settings(max_examples=100)
@given(retries=retry_counts, status=st.integers(min_value=400, max_value=499))
def test_client_errors_never_retry(retries: int, status: int) -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(status)

    async def scenario():
        async with _client(handler) as client:
            return await client.get("/v1/ping", parse=lambda d: d, retries=retries)

    result, mock_sleep = _run(scenario)

    assert calls == 1
    assert mock_sleep.await_count == 0
    assert result.error.code == status


# --- Success and failure mapping ---

@settings(max_examples=100)
@given(status=success_statuses, payload=json_values)
def test_success_parses_once(status: int, payload) -> None:
    parse = Mock(side_effect=lambda data: ("parsed", data))

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json=payload)

    async def scenario():
        async with _client(handler) as client:
            return await client.get("/v1/thing", parse=parse)

    result, _ = _run(scenario)

    assert result == Success(("parsed", payload))
    parse.assert_called_once_with(payload)


@settings(max_examples=100)
@given(status=error_statuses, details=st.dictionaries(st.text(max_size=8), json_values, max_size=4))
def test_error_status_becomes_failure_code(status: int, details: dict) -> None:
    parse = Mock()

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json=details)

    async def scenario():
        async with _client(handler) as client:
            return await client.get("/v1/thing", parse=parse)

    result, _ = _run(scenario)

    assert isinstance(result, Failure)
    assert result.error.code == status
    assert result.error.details == details
    assert result.error.safe_message
    parse.assert_not_called()


# --- Auth token header ---

@settings(max_examples=100)
@given(token=tokens)
def test_auth_token_sets_and_clears_bearer_header(token: str) -> None:
    seen: list[str | None] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers.get("authorization"))
        return httpx.Response(200, json={})

    async def scenario():
        async with _client(handler) as client:
            client.set_auth_token(token)
            await client.get("/v1/me", parse=lambda d: d)
            client.set_auth_token(None)
            await client.get("/v1/me", parse=lambda d: d)

    _run(scenario)

    assert seen == [f"Bearer {token}", None]


# --- Multipart uploads ---

@settings(max_examples=100)
@given(parts=st.lists(file_parts, min_size=0, max_size=5), key=tokens)
def test_multipart_has_one_part_per_file(parts: list[FilePart], key: str) -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(201, json={"id": "up-1"})

    async def scenario():
        async with _client(handler) as client:
            return await client.post_multipart(
                "/v1/uploads",
                fields={"kind": "mixed"},
                files=parts,
                idempotency_key=key,
                parse=lambda d: d,
            )

    result, _ = _run(scenario)

    assert result == Success({"id": "up-1"})
    assert len(captured) == 1
    request = captured[0]
    assert request.headers["content-type"].startswith("multipart/form-data; boundary=")
    assert request.headers.get_list("idempotency-key") == [key]
    assert request.content.count(b'name="files"') == len(parts)
    assert request.content.count(b'name="kind"') == 1
