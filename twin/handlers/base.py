"""Handler contract for routed questions."""

from abc import ABC, abstractmethod

from twin.intent.models import ClassificationResult


class Handler(ABC):
    """Answers questions of one intent.

    Handlers are expected to turn their own failures into a textual answer;
    the router only provides a last-resort net.
    """

    name: str = "handler"

    @abstractmethod
    async def handle(
        self,
        question: str,
        session_id: str,
        classification: ClassificationResult,
    ) -> str:
        """Answer a question.

        Args:
            question: Original user question
            session_id: Twin/user identifier
            classification: Classification that selected this handler

        Returns:
            Response text for the user
        """
        pass
