"""Model-backed intent classifier."""

import logging
from dataclasses import dataclass

from twin.intent.protocol import format_instructions
from twin.intent.taxonomy import (
    CONTACT_NOUNS,
    INTENT_RULES,
    PHOTO_SEARCH_VERBS,
    PRECEDENCE,
    ErrorKind,
    Intent,
)
from twin.llm.base import ContentPolicyError, LLMProvider

logger = logging.getLogger(__name__)

_QUESTIONS = {
    Intent.INVOICE_SEARCH: "Does it mention invoices, expenses, payments, charges or totals?",
    Intent.DOCUMENT_SEARCH: "Does it mention contracts, licenses, certificates or other formal documents?",
    Intent.PROFILE_SEARCH: "Does it ask for the user's own personal data (my name, my email, where do I live)?",
    Intent.CONTACT_SEARCH: (
        "Does it ask about another person: contacts, someone's phone, email or address, "
        "or a proper name next to a contact detail?"
    ),
    Intent.PHOTO_SEARCH: "Does it mention photos, images or galleries, or ask to show or find something?",
}


@dataclass(frozen=True)
class ClassifierReply:
    """Outcome of one classifier call: raw answer text or a typed failure."""

    text: str | None = None
    error_kind: ErrorKind = ErrorKind.NONE
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error_kind == ErrorKind.NONE


def build_instructions() -> str:
    """Build the classifier instructions from the intent taxonomy."""
    sections = [
        "You classify the intention of questions sent to a personal digital twin.",
        "Questions may be written in Spanish or English.",
        "",
        "CATEGORIES:",
    ]
    for intent in PRECEDENCE:
        rule = INTENT_RULES[intent]
        sections.append(f"\n## {intent.value}\n{rule.summary}")
        if rule.keywords:
            sections.append(f"Keywords: {', '.join(rule.keywords)}")
        if intent == Intent.CONTACT_SEARCH:
            sections.append(f"Contact details: {', '.join(CONTACT_NOUNS)}")
        if intent == Intent.PHOTO_SEARCH:
            sections.append(f"Search verbs: {', '.join(PHOTO_SEARCH_VERBS)}")
        sections.append("Examples:")
        sections.extend(f'- "{example}"' for example in rule.examples)

    sections.extend(["", "DECISION STEPS (stop at the first YES):"])
    for step, intent in enumerate(PRECEDENCE[:-1], start=1):
        sections.append(f"{step}. {_QUESTIONS[intent]} YES -> {intent.value}")
    sections.append(f"{len(PRECEDENCE)}. Otherwise -> {PRECEDENCE[-1].value}")

    sections.extend(
        [
            "",
            "RULES:",
            f"- {Intent.CONTACT_SEARCH.value} is about OTHER people; "
            f"{Intent.PROFILE_SEARCH.value} is about the user.",
            f"- SUBTYPE applies only to {Intent.DOCUMENT_SEARCH.value}; answer NONE otherwise.",
            "- REQUIRES_CALCULATION is YES when totals, sums, counts or comparisons are asked.",
            "- REQUIRES_FILTER is YES when a vendor, person, date, period or amount narrows the search.",
            "- Keep REASON under 30 words.",
            "",
            "Answer with exactly these lines and nothing else:",
            format_instructions(),
        ]
    )
    return "\n".join(sections)


class IntentClassifier:
    """Single-shot classifier backed by an LLM provider.

    Performs exactly one backend call per question with tool calling off and
    low temperature. Failures come back as a typed ``ClassifierReply`` rather
    than exceptions; there is no retry and no caching.
    """

    def __init__(
        self,
        llm_provider: LLMProvider,
        temperature: float = 0.0,
        max_tokens: int = 200,
    ) -> None:
        self.llm_provider = llm_provider
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.instructions = build_instructions()

    async def classify(self, question: str, session_id: str) -> ClassifierReply:
        """Ask the backend to classify a question.

        Args:
            question: Raw question text
            session_id: Twin/user identifier, used for tracing only

        Returns:
            ClassifierReply with the raw answer or the failure kind
        """
        logger.info(f"Classifying question for twin {session_id}")

        try:
            result = await self.llm_provider.generate_response(
                prompt=question,
                system=self.instructions,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except ContentPolicyError as e:
            logger.warning(f"Classifier call blocked by content policy for twin {session_id}: {e}")
            return ClassifierReply(error_kind=ErrorKind.CONTENT_POLICY_BLOCKED, error=str(e))
        except Exception as e:
            logger.error(f"Classifier call failed for twin {session_id}: {e}")
            return ClassifierReply(error_kind=ErrorKind.TRANSPORT_ERROR, error=str(e))

        if not result.success:
            logger.error(f"Classifier call failed for twin {session_id}: {result.error}")
            return ClassifierReply(error_kind=ErrorKind.TRANSPORT_ERROR, error=result.error)

        logger.debug(f"Raw classification response: {result.content}")
        return ClassifierReply(text=result.content)
