"""Resilience components for the API client."""

from navee_api.resilience.cancellation import CancelToken, run_cancellable
from navee_api.resilience.retry import BackoffPolicy, is_transient

__all__ = [
    "BackoffPolicy",
    "CancelToken",
    "is_transient",
    "run_cancellable",
]
