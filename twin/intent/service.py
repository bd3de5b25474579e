"""Intent classification with model-first, keyword-fallback policy."""

import logging

from twin.intent.classifier import IntentClassifier
from twin.intent.fallback import KeywordClassifier
from twin.intent.models import ClassificationResult
from twin.intent.protocol import decode_protocol
from twin.intent.taxonomy import ErrorKind

logger = logging.getLogger(__name__)


class IntentService:
    """Classify questions with the model classifier, falling back to keywords.

    Fallback policy:

    - ``ContentPolicyBlocked``: keyword classification.
    - ``TransportError``: unsuccessful ``Generic`` result, no fallback.
    - Answer without a usable INTENT line: reported as ``ParseError`` and, when
      ``fallback_on_parse_error`` is set, classified by keywords; otherwise the
      parser defaults stand.

    The keyword classifier only ever runs after the model call has finished.
    """

    def __init__(
        self,
        classifier: IntentClassifier,
        fallback: KeywordClassifier | None = None,
        fallback_on_parse_error: bool = True,
    ) -> None:
        self.classifier = classifier
        self.fallback = fallback or KeywordClassifier()
        self.fallback_on_parse_error = fallback_on_parse_error

    async def classify(self, question: str, session_id: str) -> ClassificationResult:
        """Classify a question.

        Args:
            question: Raw question text
            session_id: Twin/user identifier

        Returns:
            ClassificationResult, never raises for backend or parse failures
        """
        reply = await self.classifier.classify(question, session_id)

        if reply.error_kind == ErrorKind.CONTENT_POLICY_BLOCKED:
            logger.warning("Content filter triggered, using keyword-based classification")
            return self.fallback.classify(
                question, session_id, trigger=ErrorKind.CONTENT_POLICY_BLOCKED
            )

        if not reply.ok:
            return ClassificationResult(
                success=False,
                error_kind=reply.error_kind,
                error_message=reply.error,
                reason="Classification failed",
                original_question=question,
                session_id=session_id,
            )

        fields = decode_protocol(reply.text)
        if not fields.has_intent:
            logger.warning(f"Classifier answer had no usable INTENT line: {reply.text!r}")
            if self.fallback_on_parse_error:
                return self.fallback.classify(question, session_id, trigger=ErrorKind.PARSE_ERROR)
            return fields.to_result(question, session_id, error_kind=ErrorKind.PARSE_ERROR)

        result = fields.to_result(question, session_id)
        logger.info(
            f"Intention determined: {result.intent.value} (confidence {result.confidence:.2f})"
        )
        logger.debug(f"Reason: {result.reason}")
        return result
