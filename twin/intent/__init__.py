"""Intent classification module."""

from .classifier import ClassifierReply, IntentClassifier, build_instructions
from .fallback import KeywordClassifier
from .filters import extract_filter_criteria
from .models import ClassificationResult, SearchComplexity
from .protocol import ProtocolFields, decode_protocol, parse_classification
from .service import IntentService
from .taxonomy import PRECEDENCE, ClassificationSource, DocumentSubType, ErrorKind, Intent

__all__ = [
    "PRECEDENCE",
    "ClassificationResult",
    "ClassificationSource",
    "ClassifierReply",
    "DocumentSubType",
    "ErrorKind",
    "Intent",
    "IntentClassifier",
    "IntentService",
    "KeywordClassifier",
    "ProtocolFields",
    "SearchComplexity",
    "build_instructions",
    "decode_protocol",
    "extract_filter_criteria",
    "parse_classification",
]
