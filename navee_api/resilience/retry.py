"""Transient-failure classification and exponential backoff schedule.

Retry schedule for attempt n (1-indexed): base * 2^(n-1) ms plus a uniform
jitter in [0, round(delay * jitter_ratio)] ms. With the defaults (base 250ms,
ratio 0.2) that is 250-300ms, 500-600ms, 1000-1200ms, ...
"""

from __future__ import annotations

import random

import httpx

# Transport exceptions that are worth retrying
_TRANSIENT_TRANSPORT_ERRORS: tuple[type[Exception], ...] = (
    httpx.TimeoutException,  # connect / read / write / pool
    httpx.NetworkError,  # connect, read, write, close errors
    httpx.RemoteProtocolError,  # peer dropped the connection mid-exchange
)


def is_transient(exc: BaseException) -> bool:
    """Return True if ``exc`` belongs to a retry-eligible failure class.

    Timeouts, connection errors and 5xx responses are transient. Everything
    else (4xx, parse errors, cancellation) is terminal.
    """
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return isinstance(exc, _TRANSIENT_TRANSPORT_ERRORS)


class BackoffPolicy:
    """Exponential backoff with bounded random jitter.

    Args:
        base_ms: Delay before the first retry, without jitter.
        jitter_ratio: Upper bound of the jitter as a fraction of the delay.
        rng: Random source; inject a seeded ``random.Random`` for
            deterministic schedules.
    """

    def __init__(
        self,
        base_ms: int = 250,
        jitter_ratio: float = 0.2,
        rng: random.Random | None = None,
    ) -> None:
        if base_ms < 0:
            raise ValueError("base_ms must be >= 0")
        if not 0.0 <= jitter_ratio <= 1.0:
            raise ValueError("jitter_ratio must be within [0, 1]")
        self._base_ms = base_ms
        self._jitter_ratio = jitter_ratio
        self._rng = rng or random.Random()

    @property
    def base_ms(self) -> int:
        return self._base_ms

    @property
    def jitter_ratio(self) -> float:
        return self._jitter_ratio

    def base_delay_ms(self, attempt: int) -> int:
        """Delay before retry ``attempt`` without jitter."""
        if attempt < 1:
            raise ValueError("attempt is 1-indexed")
        return self._base_ms * (2 ** (attempt - 1))

    def delay_ms(self, attempt: int) -> int:
        """Delay before retry ``attempt`` including jitter."""
        delay = self.base_delay_ms(attempt)
        max_jitter = round(delay * self._jitter_ratio)
        return delay + self._rng.randint(0, max_jitter)
