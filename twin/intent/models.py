"""Classification result model."""

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from twin.intent.filters import extract_filter_criteria
from twin.intent.taxonomy import ClassificationSource, DocumentSubType, ErrorKind, Intent

MAX_REASON_WORDS = 30


class SearchComplexity(str, Enum):
    """How much work a search handler is expected to do."""

    ADVANCED = "advanced"
    FILTERED = "filtered"
    CALCULATED = "calculated"
    SIMPLE = "simple"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ClassificationResult(BaseModel):
    """Normalized outcome of classifying one question.

    Created once per question and never changed afterwards. The validators
    enforce the invariants every consumer relies on:

    - an unsuccessful result is always ``Generic`` with zero confidence
    - ``sub_type`` is ``NotApplicable`` unless the intent is ``DocumentSearch``
    - ``confidence`` is clamped into ``[0, 1]``
    - ``reason`` is kept to ``MAX_REASON_WORDS`` words
    """

    model_config = ConfigDict(frozen=True)

    intent: Intent = Intent.GENERIC
    sub_type: DocumentSubType = DocumentSubType.NOT_APPLICABLE
    requires_calculation: bool = False
    requires_filter: bool = False
    confidence: float = 0.0
    reason: str = ""
    original_question: str = ""
    session_id: str = ""
    processed_at: datetime = Field(default_factory=_utcnow)
    success: bool = True
    error_kind: ErrorKind = ErrorKind.NONE
    error_message: str | None = None
    source: ClassificationSource = ClassificationSource.PRIMARY

    @model_validator(mode="before")
    @classmethod
    def _apply_invariants(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("success") is False:
            data["intent"] = Intent.GENERIC
            data["confidence"] = 0.0
        if data.get("intent", Intent.GENERIC) != Intent.DOCUMENT_SEARCH:
            data["sub_type"] = DocumentSubType.NOT_APPLICABLE
        return data

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: Any) -> float:
        try:
            value = float(value)
        except (TypeError, ValueError):
            return 0.0
        if math.isnan(value):
            return 0.0
        return min(max(value, 0.0), 1.0)

    @field_validator("reason", mode="before")
    @classmethod
    def _bound_reason(cls, value: Any) -> str:
        words = str(value or "").split()
        return " ".join(words[:MAX_REASON_WORDS])

    def has_sufficient_confidence(self, minimum_threshold: float = 0.6) -> bool:
        """Check if the classification succeeded with at least the given confidence."""
        return self.success and self.confidence >= minimum_threshold

    @property
    def is_invoice_related(self) -> bool:
        return self.intent == Intent.INVOICE_SEARCH

    @property
    def is_license_related(self) -> bool:
        return (
            self.intent == Intent.DOCUMENT_SEARCH
            and self.sub_type == DocumentSubType.LICENSES
        )

    @property
    def needs_advanced_search(self) -> bool:
        return self.requires_filter or self.requires_calculation

    def search_complexity(self) -> SearchComplexity:
        """Get search complexity level based on the filter and calculation hints."""
        if self.requires_filter and self.requires_calculation:
            return SearchComplexity.ADVANCED
        elif self.requires_filter:
            return SearchComplexity.FILTERED
        elif self.requires_calculation:
            return SearchComplexity.CALCULATED
        else:
            return SearchComplexity.SIMPLE

    def filter_criteria(self) -> dict[str, str]:
        """Extract filter hints from the original question.

        Relative periods such as "this year" resolve against ``processed_at``.
        """
        return extract_filter_criteria(self.original_question, reference=self.processed_at)
