"""Question pipeline: classify, then route, under one deadline."""

import asyncio
import logging

from twin.config import Settings
from twin.intent.classifier import IntentClassifier
from twin.intent.fallback import KeywordClassifier
from twin.intent.models import ClassificationResult
from twin.intent.service import IntentService
from twin.intent.taxonomy import DocumentSubType, Intent
from twin.llm.base import LLMProvider
from twin.routing.router import Router

logger = logging.getLogger(__name__)

EMPTY_QUESTION_MESSAGE = "Please ask me a question and I'll be happy to help."


class TwinOrchestrator:
    """Entry point that turns a question into the twin's answer."""

    def __init__(
        self,
        intent_service: IntentService,
        router: Router,
        request_timeout: float = 120,
        min_routing_confidence: float = 0.0,
    ) -> None:
        self.intent_service = intent_service
        self.router = router
        self.request_timeout = request_timeout
        self.min_routing_confidence = min_routing_confidence

    @classmethod
    def from_settings(
        cls,
        llm_provider: LLMProvider,
        router: Router,
        settings: Settings,
    ) -> "TwinOrchestrator":
        """Build an orchestrator with the classifier configured from settings."""
        classifier = IntentClassifier(
            llm_provider,
            temperature=settings.classifier_temperature,
            max_tokens=settings.classifier_max_tokens,
        )
        intent_service = IntentService(
            classifier,
            fallback=KeywordClassifier(settings.fallback_confidence),
            fallback_on_parse_error=settings.fallback_on_parse_error,
        )
        return cls(
            intent_service,
            router,
            request_timeout=settings.request_timeout_seconds,
            min_routing_confidence=settings.min_routing_confidence,
        )

    async def classify_question(self, question: str, session_id: str) -> ClassificationResult:
        """Classify a question without routing it."""
        return await self.intent_service.classify(question, session_id)

    def _routable(self, classification: ClassificationResult) -> ClassificationResult:
        if (
            classification.success
            and classification.intent != Intent.GENERIC
            and classification.confidence < self.min_routing_confidence
        ):
            logger.info(
                f"Confidence {classification.confidence:.2f} below "
                f"{self.min_routing_confidence:.2f}, routing {classification.intent.value} to Generic"
            )
            return classification.model_copy(
                update={"intent": Intent.GENERIC, "sub_type": DocumentSubType.NOT_APPLICABLE}
            )
        return classification

    async def _process(self, question: str, session_id: str) -> str:
        classification = await self.classify_question(question, session_id)
        return await self.router.dispatch(self._routable(classification))

    async def route_question(
        self,
        question: str,
        session_id: str,
        timeout: float | None = None,
    ) -> str:
        """Classify and answer a question.

        Args:
            question: Raw question text
            session_id: Twin/user identifier
            timeout: Deadline in seconds (defaults to request_timeout)

        Returns:
            Response text; failures and timeouts are reported as text
        """
        if not question or not question.strip():
            return EMPTY_QUESTION_MESSAGE

        logger.info(f"Processing question for twin {session_id}: {question[:100]}")
        deadline = timeout if timeout is not None else self.request_timeout

        try:
            return await asyncio.wait_for(self._process(question, session_id), timeout=deadline)
        except asyncio.TimeoutError:
            logger.error(f"Question processing timed out after {deadline}s")
            return (
                "⏱️ Sorry, answering your question took too long. "
                "Please try again in a moment."
            )
        except Exception as e:
            logger.error(f"Error processing question: {e}")
            return f"❌ Sorry, I encountered an error processing your question: {e}"
