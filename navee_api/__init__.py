"""Typed asynchronous client for the Navee travel API."""

from navee_api.client import ApiClient
from navee_api.config import ApiSettings, ClientConfig
from navee_api.errors import CANCELLED_CODE, ApiError, map_exception
from navee_api.models import FilePart, Page
from navee_api.resilience import BackoffPolicy, CancelToken
from navee_api.result import Failure, Result, Success, guard, guard_async
from navee_api.services import MessagesApi

__all__ = [
    "ApiClient",
    "ApiError",
    "ApiSettings",
    "BackoffPolicy",
    "CANCELLED_CODE",
    "CancelToken",
    "ClientConfig",
    "Failure",
    "FilePart",
    "MessagesApi",
    "Page",
    "Result",
    "Success",
    "guard",
    "guard_async",
    "map_exception",
]
