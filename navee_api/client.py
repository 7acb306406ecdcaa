"""Typed HTTP API client built on httpx.

Every public method returns a ``Result``: ``Success(parse(body))`` for a 2xx
response, ``Failure(ApiError)`` for anything else. No exception crosses the
public boundary except ``asyncio.CancelledError`` of the calling task itself.

Retry policy:
- Only transient failures are retried: timeouts, connection errors, 5xx.
- ``retries`` bounds the number of retries; the last error is returned once
  the budget is exhausted.
- Each retry is preceded by an exponential backoff delay with jitter
  (see ``BackoffPolicy``).
- Multipart uploads are never retried. Other writes default to 0 retries.

SECURITY: Never logs header values, request bodies or auth tokens.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
import time
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, TypeVar, Union

import httpx

from navee_api.config.settings import ApiSettings, ClientConfig
from navee_api.errors import ApiError, RequestCancelledError, map_exception
from navee_api.models.uploads import FilePart
from navee_api.resilience.cancellation import CancelToken, run_cancellable
from navee_api.resilience.retry import BackoffPolicy, is_transient
from navee_api.result import Failure, Result, Success

logger = logging.getLogger(__name__)

T = TypeVar("T")

QueryValue = Union[str, int, float, bool]

AUTHORIZATION_HEADER = "Authorization"
IDEMPOTENCY_HEADER = "Idempotency-Key"

# 401s on these paths are expected and must not trigger the unauthorized hook
_AUTH_PATH_MARKERS = ("/auth", "/login", "/logout", "/refresh")


class ApiClient:
    """Asynchronous API client with typed results, retries and cancellation.

    Parameters
    ----------
    config:
        Immutable transport configuration (base URL, timeouts, headers).
    auth_token:
        Optional bearer token applied at construction.
    transport:
        Optional httpx transport (e.g. ``httpx.MockTransport`` in tests).
    http_client:
        Optional prebuilt ``httpx.AsyncClient``. When given, the caller owns
        it and ``aclose()`` leaves it open.
    backoff:
        Retry delay schedule. Defaults to the config's base and jitter.
    on_unauthorized:
        Async callback run once per burst of 401 responses on non-auth paths.

    The default header set is a plain dict on the instance. ``set_auth_token``
    mutates it without a lock; requests capture a copy when they are built,
    so an in-flight request keeps the headers it was dispatched with.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        auth_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        http_client: httpx.AsyncClient | None = None,
        backoff: BackoffPolicy | None = None,
        on_unauthorized: Callable[[], Awaitable[None]] | None = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._headers: dict[str, str] = dict(self._config.default_headers)
        self.set_auth_token(auth_token)

        self._backoff = backoff or BackoffPolicy(
            base_ms=self._config.backoff_base_ms,
            jitter_ratio=self._config.jitter_ratio,
        )

        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=httpx.Timeout(
                connect=self._config.connect_timeout,
                read=self._config.receive_timeout,
                write=self._config.send_timeout,
                pool=self._config.connect_timeout,
            ),
            transport=transport,
        )

        self._on_unauthorized = on_unauthorized
        self._unauthorized_task: asyncio.Future[None] | None = None

    @classmethod
    def from_settings(cls, settings: ApiSettings, **kwargs: Any) -> ApiClient:
        """Build a client from environment-driven settings."""
        return cls(
            settings.to_client_config(),
            auth_token=settings.auth_token,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Headers
    # ------------------------------------------------------------------

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def headers(self) -> dict[str, str]:
        """Copy of the headers sent with every request."""
        return dict(self._headers)

    def set_auth_token(self, token: str | None) -> None:
        """Set ``Authorization: Bearer <token>``, or remove it for None/empty."""
        if not token:
            self._headers.pop(AUTHORIZATION_HEADER, None)
        else:
            self._headers[AUTHORIZATION_HEADER] = f"Bearer {token}"

    # ------------------------------------------------------------------
    # Request methods
    # ------------------------------------------------------------------

    async def get(
        self,
        path: str,
        *,
        parse: Callable[[Any], T],
        query: Mapping[str, QueryValue] | None = None,
        cancel_token: CancelToken | None = None,
        retries: int = 0,
    ) -> Result[T]:
        return await self._execute(
            "GET",
            path,
            parse,
            params=query,
            cancel_token=cancel_token,
            retries=retries,
        )

    async def post(
        self,
        path: str,
        *,
        parse: Callable[[Any], T],
        body: Any = None,
        extra_headers: Mapping[str, str] | None = None,
        cancel_token: CancelToken | None = None,
        retries: int = 0,
    ) -> Result[T]:
        """POST a JSON body.

        Retrying a write is only safe when the server can deduplicate it, so
        ``retries > 0`` without an Idempotency-Key header logs a warning.
        """
        if retries > 0 and not _has_header(extra_headers, IDEMPOTENCY_HEADER):
            logger.warning(
                "POST %s will be retried without an Idempotency-Key",
                path,
                extra={"method": "POST", "path": path},
            )
        return await self._execute(
            "POST",
            path,
            parse,
            json_body=body,
            extra_headers=extra_headers,
            cancel_token=cancel_token,
            retries=retries,
        )

    async def post_multipart(
        self,
        path: str,
        *,
        parse: Callable[[Any], T],
        fields: Mapping[str, Any] | None = None,
        files: Sequence[FilePart] = (),
        idempotency_key: str | None = None,
        cancel_token: CancelToken | None = None,
    ) -> Result[T]:
        """POST a multipart/form-data body. Never retried.

        Text ``fields`` become plain parts (``None`` values are skipped) and
        each file becomes one part named ``files``. The body is multipart even
        when both are empty.
        """
        extra_headers = {IDEMPOTENCY_HEADER: idempotency_key} if idempotency_key else None
        parts: list[tuple[str, Any]] = [
            (key, (None, str(value)))
            for key, value in (fields or {}).items()
            if value is not None
        ]
        parts.extend(("files", part.as_httpx()) for part in files)
        return await self._execute(
            "POST",
            path,
            parse,
            multipart=parts,
            extra_headers=extra_headers,
            cancel_token=cancel_token,
            retries=0,
        )

    async def delete(
        self,
        path: str,
        *,
        parse: Callable[[Any], T],
        cancel_token: CancelToken | None = None,
        retries: int = 0,
    ) -> Result[T]:
        return await self._execute(
            "DELETE",
            path,
            parse,
            cancel_token=cancel_token,
            retries=retries,
        )

    async def health(self, cancel_token: CancelToken | None = None) -> Result[dict]:
        """Ping ``GET /health`` for connectivity diagnostics."""
        return await self.get(
            "/health",
            parse=lambda data: data if isinstance(data, dict) else {"status": data},
            cancel_token=cancel_token,
        )

    # ------------------------------------------------------------------
    # Retry engine
    # ------------------------------------------------------------------

    async def _execute(
        self,
        method: str,
        path: str,
        parse: Callable[[Any], T],
        *,
        params: Mapping[str, QueryValue] | None = None,
        json_body: Any = None,
        multipart: list[tuple[str, Any]] | None = None,
        extra_headers: Mapping[str, str] | None = None,
        cancel_token: CancelToken | None = None,
        retries: int = 0,
    ) -> Result[T]:
        attempt = 0
        try:
            if not path:
                raise ValueError("path must be a non-empty string")

            while True:
                request = self._build_request(
                    method,
                    path,
                    params=params,
                    json_body=json_body,
                    multipart=multipart,
                    extra_headers=extra_headers,
                )
                try:
                    return await self._send(request, path, parse, cancel_token, attempt + 1)
                except httpx.HTTPError as exc:
                    attempt += 1
                    if not is_transient(exc) or attempt > retries:
                        error = map_exception(exc)
                        # transient here means the retry budget is spent
                        logger.log(
                            logging.ERROR if is_transient(exc) else logging.WARNING,
                            "%s %s failed after %d attempt(s)",
                            method,
                            path,
                            attempt,
                            extra={
                                "method": method,
                                "path": path,
                                "attempt": attempt,
                                "status_code": error.code,
                                "error_reason": error.message,
                            },
                        )
                        if error.code == 401:
                            await self._notify_unauthorized(path)
                        return Failure(error)

                    delay_ms = self._backoff.delay_ms(attempt)
                    logger.warning(
                        "%s %s transient failure (attempt %d/%d), retrying in %dms",
                        method,
                        path,
                        attempt,
                        retries + 1,
                        delay_ms,
                        extra={
                            "method": method,
                            "path": path,
                            "attempt": attempt,
                            "delay_ms": delay_ms,
                            "error_reason": exc,
                        },
                    )
                    await run_cancellable(
                        lambda: asyncio.sleep(delay_ms / 1000), cancel_token
                    )

        except RequestCancelledError:
            logger.info(
                "%s %s cancelled",
                method,
                path,
                extra={"method": method, "path": path, "attempt": attempt},
            )
            return Failure(ApiError.cancelled())

        except Exception as exc:
            logger.exception(
                "Unexpected error during %s %s",
                method,
                path,
                extra={"method": method, "path": path, "error_reason": exc},
            )
            return Failure(map_exception(exc))

    async def _send(
        self,
        request: httpx.Request,
        path: str,
        parse: Callable[[Any], T],
        cancel_token: CancelToken | None,
        attempt: int,
    ) -> Result[T]:
        """Dispatch one attempt; raise httpx errors for non-2xx responses."""
        started = time.monotonic()
        response = await run_cancellable(lambda: self._http.send(request), cancel_token)
        duration_ms = round((time.monotonic() - started) * 1000)

        if not 200 <= response.status_code < 300:
            raise httpx.HTTPStatusError(
                f"{request.method} {path} returned {response.status_code}",
                request=request,
                response=response,
            )

        logger.debug(
            "%s %s -> %d",
            request.method,
            path,
            response.status_code,
            extra={
                "method": request.method,
                "path": path,
                "attempt": attempt,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return Success(parse(_decode_body(response)))

    def _build_request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, QueryValue] | None,
        json_body: Any,
        multipart: list[tuple[str, Any]] | None,
        extra_headers: Mapping[str, str] | None,
    ) -> httpx.Request:
        headers = dict(self._headers)
        content: bytes | None = None
        if multipart is not None:
            # httpx sets the multipart boundary itself
            headers = {k: v for k, v in headers.items() if k.lower() != "content-type"}
            if not multipart:
                # httpx only encodes multipart when there is at least one part
                boundary = secrets.token_hex(16)
                content = f"--{boundary}--\r\n".encode()
                headers["Content-Type"] = f"multipart/form-data; boundary={boundary}"
        if extra_headers:
            headers.update(extra_headers)

        return self._http.build_request(
            method,
            path,
            params=dict(params) if params else None,
            json=json_body,
            content=content,
            files=multipart or None,
            headers=headers,
        )

    async def _notify_unauthorized(self, path: str) -> None:
        """Run the unauthorized hook, sharing one invocation across callers."""
        if self._on_unauthorized is None:
            return
        lowered = path.lower()
        if any(marker in lowered for marker in _AUTH_PATH_MARKERS):
            return

        if self._unauthorized_task is None or self._unauthorized_task.done():
            self._unauthorized_task = asyncio.ensure_future(self._on_unauthorized())
        try:
            await asyncio.shield(self._unauthorized_task)
        except Exception:
            logger.exception("Unauthorized hook failed for %s", path)


def _has_header(headers: Mapping[str, str] | None, name: str) -> bool:
    if not headers:
        return False
    return any(key.lower() == name.lower() and value for key, value in headers.items())


def _decode_body(response: httpx.Response) -> Any:
    """Decode a success body: JSON when declared, None when empty, else text."""
    if not response.content:
        return None
    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        return response.json()
    return response.text
