"""Handlers that answer routed questions."""

from .base import Handler
from .generic import GenericConversationHandler
from .registry import build_default_handlers
from .search import CollectionSearchHandler, SearchHit

__all__ = [
    "CollectionSearchHandler",
    "GenericConversationHandler",
    "Handler",
    "SearchHit",
    "build_default_handlers",
]
