"""Dispatch classified questions to their handlers."""

import logging
from collections.abc import Mapping

from twin.handlers.base import Handler
from twin.intent.models import ClassificationResult
from twin.intent.taxonomy import Intent

logger = logging.getLogger(__name__)

MAX_ERROR_DETAIL = 200


class Router:
    """Total mapping from intent to handler.

    The table is checked when the router is built, so a missing handler is a
    startup error rather than a lookup failure at request time.
    """

    def __init__(self, handlers: Mapping[Intent, Handler]) -> None:
        missing = [intent.value for intent in Intent if intent not in handlers]
        if missing:
            raise ValueError(f"No handler registered for intent(s): {', '.join(missing)}")
        self._handlers = dict(handlers)

    def handler_for(self, intent: Intent) -> Handler:
        """Get the handler registered for an intent."""
        return self._handlers[intent]

    async def dispatch(self, classification: ClassificationResult) -> str:
        """Run the handler for a classification and return its text.

        Handler failures are reported to the user as a short apology instead of
        propagating. Cancellation is not intercepted.
        """
        handler = self.handler_for(classification.intent)
        logger.info(f"Routing to {handler.name} ({classification.intent.value})")

        try:
            return await handler.handle(
                classification.original_question,
                classification.session_id,
                classification,
            )
        except Exception as e:
            logger.error(f"Handler {handler.name} failed: {e}")
            detail = str(e)[:MAX_ERROR_DETAIL]
            return f"❌ Sorry, something went wrong while processing your question: {detail}"
