"""Deterministic keyword classifier used when the model classifier cannot be trusted."""

import logging
from datetime import datetime, timezone

from twin.config import FallbackConfidence
from twin.intent.filters import extract_filter_criteria
from twin.intent.models import ClassificationResult
from twin.intent.taxonomy import (
    INTENT_RULES,
    PHOTO_SEARCH_VERBS,
    PRECEDENCE,
    ClassificationSource,
    DocumentSubType,
    ErrorKind,
    Intent,
    document_sub_type,
    find_keyword,
    mentions_named_contact,
    normalize_text,
)

logger = logging.getLogger(__name__)

INVOICE_CALCULATION_KEYWORDS = (
    "total", "suma", "sumar", "cuanto", "cuanta", "cuantos", "cuantas", "promedio",
    "how much", "how many", "sum", "average",
)
INVOICE_FILTER_KEYWORDS = (
    "proveedor", "vendor", "mes", "ano", "trimestre", "desde", "hasta", "entre",
    "mas de", "menos de", "month", "year", "quarter", "since", "until", "between",
    "more than", "less than",
)
CONTACT_FILTER_KEYWORDS = (
    "familia", "trabajo", "empresa", "compania", "amigos", "colegas", "family",
    "work", "company", "friends", "colleagues", "coworkers",
)
CONTACT_ANALYSIS_KEYWORDS = (
    "analiza", "compara", "estadisticas", "resumen", "cuantos", "cuantas",
    "lista todos", "muestrame todos", "todos los contactos", "how many", "list all",
    "all contacts", "summary", "compare",
)
PHOTO_FILTER_KEYWORDS = (
    "de", "del", "con", "en", "desde", "hasta", "ano", "mes", "fecha", "lugar",
    "with", "from", "of", "in", "at", "during",
)
PHOTO_ANALYSIS_KEYWORDS = (
    "analiza", "compara", "estadisticas", "resumen", "patrones", "tendencias",
    "cuantas", "cuantos", "how many", "summary", "compare",
)
DOCUMENT_ANALYSIS_KEYWORDS = (
    "cuantos", "cuantas", "resumen", "compara", "vence", "vencen", "caduca",
    "how many", "summary", "compare", "expire", "expires",
)


class KeywordClassifier:
    """Keyword-table classifier with the same precedence as the model classifier.

    Pure and synchronous: the same question always yields the same intent,
    hints and confidence. Confidence values are the calibrated constants in
    ``FallbackConfidence``, not computed scores.
    """

    def __init__(self, confidence: FallbackConfidence | None = None) -> None:
        self.confidence = confidence or FallbackConfidence()

    def classify(
        self,
        question: str,
        session_id: str,
        trigger: ErrorKind = ErrorKind.NONE,
        processed_at: datetime | None = None,
    ) -> ClassificationResult:
        """Classify a question by keyword tables.

        Args:
            question: Raw question text
            session_id: Twin/user identifier
            trigger: Why the keyword classifier is used, recorded on the result
            processed_at: Timestamp to stamp on the result, now when omitted

        Returns:
            Successful ClassificationResult from the fallback source
        """
        processed_at = processed_at or datetime.now(timezone.utc)
        text = normalize_text(question)

        result = None
        for intent in PRECEDENCE[:-1]:
            hit = self._match(intent, question, text)
            if hit is not None:
                result = self._build(intent, hit, question, text, processed_at)
                break

        if result is None:
            result = {
                "intent": Intent.GENERIC,
                "confidence": self.confidence.generic_default,
                "reason": "No specific keywords detected, classified as general conversation",
            }

        logger.info(
            f"Keyword classification for twin {session_id}: {result['intent'].value} "
            f"(confidence {result['confidence']:.2f})"
        )
        return ClassificationResult(
            **result,
            original_question=question,
            session_id=session_id,
            processed_at=processed_at,
            success=True,
            error_kind=trigger,
            source=ClassificationSource.FALLBACK,
        )

    def _match(self, intent: Intent, question: str, text: str) -> str | None:
        hit = INTENT_RULES[intent].match(text)
        if hit:
            return hit
        if intent == Intent.CONTACT_SEARCH and mentions_named_contact(question):
            return "named contact"
        if intent == Intent.PHOTO_SEARCH:
            return find_keyword(text, PHOTO_SEARCH_VERBS)
        return None

    def _build(
        self,
        intent: Intent,
        hit: str,
        question: str,
        text: str,
        processed_at: datetime,
    ) -> dict:
        calculation = False
        filtered = False
        sub_type = DocumentSubType.NOT_APPLICABLE

        if intent == Intent.INVOICE_SEARCH:
            confidence = self.confidence.invoice
            calculation = find_keyword(text, INVOICE_CALCULATION_KEYWORDS) is not None
            filtered = bool(
                extract_filter_criteria(question, reference=processed_at)
                or find_keyword(text, INVOICE_FILTER_KEYWORDS)
            )
        elif intent == Intent.DOCUMENT_SEARCH:
            confidence = self.confidence.document
            sub_type = document_sub_type(text)
            calculation = find_keyword(text, DOCUMENT_ANALYSIS_KEYWORDS) is not None
            filtered = True
        elif intent == Intent.PROFILE_SEARCH:
            confidence = self.confidence.profile
        elif intent == Intent.CONTACT_SEARCH:
            confidence = self.confidence.contact
            calculation = find_keyword(text, CONTACT_ANALYSIS_KEYWORDS) is not None
            filtered = find_keyword(text, CONTACT_FILTER_KEYWORDS) is not None
        else:
            if hit in PHOTO_SEARCH_VERBS:
                confidence = self.confidence.keyword_match
            else:
                confidence = self.confidence.photo
            calculation = find_keyword(text, PHOTO_ANALYSIS_KEYWORDS) is not None
            filtered = find_keyword(text, PHOTO_FILTER_KEYWORDS) is not None

        return {
            "intent": intent,
            "sub_type": sub_type,
            "requires_calculation": calculation,
            "requires_filter": filtered,
            "confidence": confidence,
            "reason": f"Keyword '{hit}' matched {intent.value} vocabulary",
        }
