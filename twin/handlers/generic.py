"""General conversation handler."""

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from twin.handlers.base import Handler
from twin.intent.models import ClassificationResult
from twin.llm.base import LLMProvider

logger = logging.getLogger(__name__)

PERSONA = (
    "You are the user's Digital Twin, a friendly personal assistant. "
    "Answer general questions briefly and warmly, in the language of the question. "
    "You do not have access to the user's invoices, documents, contacts or photos in this mode."
)


class GenericConversationHandler(Handler):
    """Small talk and general questions, answered by the LLM with the local time."""

    name = "general conversation"

    def __init__(
        self,
        llm_provider: LLMProvider,
        timezone_name: str = "America/Chicago",
        location: str = "Austin, Texas",
        temperature: float = 0.7,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.llm_provider = llm_provider
        self.tz = ZoneInfo(timezone_name)
        self.location = location
        self.temperature = temperature
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def local_time(self) -> str:
        """Format the twin's current local date and time."""
        now = self.clock().astimezone(self.tz)
        return f"{now:%A, %B %d, %Y} - {now:%H:%M:%S} {now.tzname()}"

    async def handle(
        self,
        question: str,
        session_id: str,
        classification: ClassificationResult,
    ) -> str:
        logger.info("Processing general conversation request")
        local_time = self.local_time()
        time_line = f"🕐 Local time in {self.location}: {local_time}"

        try:
            result = await self.llm_provider.generate_response(
                prompt=question,
                system=f"{PERSONA}\nCurrent local time in {self.location}: {local_time}.",
                temperature=self.temperature,
            )
        except Exception as e:
            logger.error(f"Error processing general conversation request: {e}")
            return (
                f"❌ Sorry, I had a technical problem answering that: {e}\n\n"
                f"{time_line}"
            )

        answer = result.content.strip() or (
            f'Hi! I am your Digital Twin. Your question "{question}" was received.'
        )
        return f"{answer}\n\n{time_line}"
