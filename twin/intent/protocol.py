"""Line protocol spoken by the intent classifier.

The classifier is asked to answer with six ``KEY: value`` lines::

    INTENT: <Generic|InvoiceSearch|DocumentSearch|ProfileSearch|ContactSearch|PhotoSearch>
    SUBTYPE: <Contracts|Licenses|Certificates|Legal|Other|NONE>
    REQUIRES_CALCULATION: <YES|NO>
    REQUIRES_FILTER: <YES|NO>
    CONFIDENCE: <float between 0.0 and 1.0>
    REASON: <short text>

Model output is not guaranteed character for character, so decoding is
tolerant: keys are case-insensitive, bullets, list numbers and emphasis
around keys are ignored, unknown lines are skipped, and a value that does not
convert is treated as a missing key. Decoding never raises.
"""

import logging
import math
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from twin.intent.models import ClassificationResult
from twin.intent.taxonomy import DocumentSubType, ErrorKind, Intent, normalize_text

logger = logging.getLogger(__name__)

INTENT_KEY = "INTENT"
SUBTYPE_KEY = "SUBTYPE"
CALCULATION_KEY = "REQUIRES_CALCULATION"
FILTER_KEY = "REQUIRES_FILTER"
CONFIDENCE_KEY = "CONFIDENCE"
REASON_KEY = "REASON"

# Alternative spellings, including the Spanish protocol the assistant was first prompted with.
KEY_ALIASES: dict[str, str] = {
    "INTENT": INTENT_KEY,
    "INTENCION": INTENT_KEY,
    "SUBTYPE": SUBTYPE_KEY,
    "SUB_TYPE": SUBTYPE_KEY,
    "SUB_TIPO": SUBTYPE_KEY,
    "REQUIRES_CALCULATION": CALCULATION_KEY,
    "REQUIERE_CALCULO": CALCULATION_KEY,
    "REQUIRES_FILTER": FILTER_KEY,
    "REQUIERE_FILTRO": FILTER_KEY,
    "CONFIDENCE": CONFIDENCE_KEY,
    "CONFIANZA": CONFIDENCE_KEY,
    "REASON": REASON_KEY,
    "RAZON": REASON_KEY,
}

INTENT_ALIASES: dict[str, Intent] = {
    **{intent.value.upper(): intent for intent in Intent},
    "GENERICA": Intent.GENERIC,
    "BUSQUEDAFACTURAS": Intent.INVOICE_SEARCH,
    "BUSQUEDADOCUMENTOS": Intent.DOCUMENT_SEARCH,
    "BUSQUEDAPERFIL": Intent.PROFILE_SEARCH,
    "BUSCACONTACTOS": Intent.CONTACT_SEARCH,
    "BUSCAFOTOS": Intent.PHOTO_SEARCH,
}

SUBTYPE_ALIASES: dict[str, DocumentSubType] = {
    **{sub_type.value.upper(): sub_type for sub_type in DocumentSubType},
    "NONE": DocumentSubType.NOT_APPLICABLE,
    "NA": DocumentSubType.NOT_APPLICABLE,
    "NOAPLICA": DocumentSubType.NOT_APPLICABLE,
    "CONTRATOS": DocumentSubType.CONTRACTS,
    "LICENCIAS": DocumentSubType.LICENSES,
    "CERTIFICADOS": DocumentSubType.CERTIFICATES,
    "LEGALES": DocumentSubType.LEGAL,
    "OTHERS": DocumentSubType.OTHER,
    "OTROS": DocumentSubType.OTHER,
    "OTROSDOCUMENTOS": DocumentSubType.OTHER,
}

TRUE_WORDS = {"YES", "Y", "TRUE", "SI"}
FALSE_WORDS = {"NO", "N", "FALSE"}

_KEY_LINE = re.compile(r"^([A-Za-z_* ]+?)\s*:\s*(.*)$")
_LIST_NUMBER = re.compile(r"^\d+[.)]\s*")
_NUMBER = re.compile(r"[-+]?(?:\d+(?:[.,]\d+)?|[.,]\d+)\s*%?")
_LINE_MARKERS = "-*#>• \t"
_KEY_MARKERS = "*_ "
_VALUE_MARKERS = "*`\"'[]() \t"


def _token(value: str) -> str:
    return normalize_text(value).replace(" ", "").replace("_", "").upper()


def _to_intent(value: str) -> Intent:
    try:
        return INTENT_ALIASES[_token(value)]
    except KeyError:
        raise ValueError(f"unknown intent {value!r}")


def _to_sub_type(value: str) -> DocumentSubType:
    try:
        return SUBTYPE_ALIASES[_token(value)]
    except KeyError:
        raise ValueError(f"unknown sub-type {value!r}")


def _to_bool(value: str) -> bool:
    token = _token(value)
    if token in TRUE_WORDS:
        return True
    if token in FALSE_WORDS:
        return False
    raise ValueError(f"not a yes/no value: {value!r}")


def _to_confidence(value: str) -> float:
    # Leading number only, so "0.9 (high)" keeps its score.
    match = _NUMBER.match(value.strip())
    if not match:
        raise ValueError(f"not a number: {value!r}")
    text = match.group(0).replace(",", ".").strip()
    scale = 1.0
    if text.endswith("%"):
        text, scale = text[:-1].strip(), 100.0
    number = float(text) / scale
    if not math.isfinite(number):
        raise ValueError(f"confidence is not finite: {value!r}")
    return number


# key -> (field name, converter)
FIELD_TABLE: dict[str, tuple[str, Callable[[str], Any]]] = {
    INTENT_KEY: ("intent", _to_intent),
    SUBTYPE_KEY: ("sub_type", _to_sub_type),
    CALCULATION_KEY: ("requires_calculation", _to_bool),
    FILTER_KEY: ("requires_filter", _to_bool),
    CONFIDENCE_KEY: ("confidence", _to_confidence),
    REASON_KEY: ("reason", str),
}


@dataclass(frozen=True)
class ProtocolFields:
    """Values decoded from a classifier answer, defaults for anything missing."""

    intent: Intent = Intent.GENERIC
    sub_type: DocumentSubType = DocumentSubType.NOT_APPLICABLE
    requires_calculation: bool = False
    requires_filter: bool = False
    confidence: float = 0.0
    reason: str = ""
    recognized: frozenset[str] = field(default_factory=frozenset)

    @property
    def has_intent(self) -> bool:
        """True when the answer carried a usable INTENT line."""
        return INTENT_KEY in self.recognized

    def to_result(
        self,
        question: str,
        session_id: str,
        processed_at: datetime | None = None,
        error_kind: ErrorKind = ErrorKind.NONE,
    ) -> ClassificationResult:
        """Build a successful ``ClassificationResult`` from the decoded fields."""
        extra = {"processed_at": processed_at} if processed_at is not None else {}
        return ClassificationResult(
            intent=self.intent,
            sub_type=self.sub_type,
            requires_calculation=self.requires_calculation,
            requires_filter=self.requires_filter,
            confidence=self.confidence,
            reason=self.reason,
            original_question=question,
            session_id=session_id,
            success=True,
            error_kind=error_kind,
            **extra,
        )


def decode_protocol(text: str | None) -> ProtocolFields:
    """Decode classifier output into protocol fields.

    When a key appears more than once, the first usable value wins.
    """
    values: dict[str, Any] = {}
    recognized: set[str] = set()

    for raw_line in (text or "").splitlines():
        line = raw_line.strip().lstrip(_LINE_MARKERS)
        line = _LIST_NUMBER.sub("", line).lstrip(_LINE_MARKERS)
        match = _KEY_LINE.match(line)
        if not match:
            continue

        key = KEY_ALIASES.get(match.group(1).strip(_KEY_MARKERS).upper().replace(" ", "_"))
        if key is None or key in recognized:
            continue

        name, convert = FIELD_TABLE[key]
        raw_value = match.group(2).strip().strip(_VALUE_MARKERS)
        try:
            values[name] = convert(raw_value)
        except ValueError as e:
            logger.debug(f"Ignoring {key} line: {e}")
            continue
        recognized.add(key)

    return ProtocolFields(**values, recognized=frozenset(recognized))


def parse_classification(
    text: str | None,
    *,
    question: str,
    session_id: str,
    processed_at: datetime | None = None,
) -> ClassificationResult:
    """Decode a classifier answer into a ``ClassificationResult``.

    Args:
        text: Raw classifier answer
        question: Question that was classified
        session_id: Twin/user identifier the question belongs to
        processed_at: Timestamp to stamp on the result, now when omitted

    Returns:
        Result with ``success=True``; fields missing from ``text`` keep their defaults
    """
    return decode_protocol(text).to_result(question, session_id, processed_at)


def format_instructions() -> str:
    """Render the answer format section of the classifier prompt."""
    intents = "|".join(intent.value for intent in Intent)
    sub_types = "|".join(
        s.value for s in DocumentSubType if s is not DocumentSubType.NOT_APPLICABLE
    )
    return (
        f"{INTENT_KEY}: <{intents}>\n"
        f"{SUBTYPE_KEY}: <{sub_types}|NONE>\n"
        f"{CALCULATION_KEY}: <YES|NO>\n"
        f"{FILTER_KEY}: <YES|NO>\n"
        f"{CONFIDENCE_KEY}: <number between 0.0 and 1.0>\n"
        f"{REASON_KEY}: <short explanation, at most 30 words>"
    )
