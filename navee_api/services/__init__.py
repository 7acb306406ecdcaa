"""Feature clients built on ApiClient."""

from navee_api.services.messages_api import MessagesApi

__all__ = ["MessagesApi"]
