"""Intent taxonomy shared by the classifier prompt, the keyword classifier and the router.

The order of ``PRECEDENCE`` is the decision order both classifiers apply: the
first rule family whose vocabulary appears in the question wins, and
``Intent.GENERIC`` is the default when nothing matches.
"""

import re
import unicodedata
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache


class Intent(str, Enum):
    """Closed set of question intents."""

    GENERIC = "Generic"
    INVOICE_SEARCH = "InvoiceSearch"
    DOCUMENT_SEARCH = "DocumentSearch"
    PROFILE_SEARCH = "ProfileSearch"
    CONTACT_SEARCH = "ContactSearch"
    PHOTO_SEARCH = "PhotoSearch"


class DocumentSubType(str, Enum):
    """Document families distinguished inside ``Intent.DOCUMENT_SEARCH``."""

    CONTRACTS = "Contracts"
    LICENSES = "Licenses"
    CERTIFICATES = "Certificates"
    LEGAL = "Legal"
    OTHER = "Other"
    NOT_APPLICABLE = "NotApplicable"


class ErrorKind(str, Enum):
    """Why a classification could not be taken from the primary classifier."""

    NONE = "None"
    CONTENT_POLICY_BLOCKED = "ContentPolicyBlocked"
    PARSE_ERROR = "ParseError"
    TRANSPORT_ERROR = "TransportError"


class ClassificationSource(str, Enum):
    """Classifier that produced a result."""

    PRIMARY = "primary"
    FALLBACK = "fallback"


PRECEDENCE: tuple[Intent, ...] = (
    Intent.INVOICE_SEARCH,
    Intent.DOCUMENT_SEARCH,
    Intent.PROFILE_SEARCH,
    Intent.CONTACT_SEARCH,
    Intent.PHOTO_SEARCH,
    Intent.GENERIC,
)


@dataclass(frozen=True)
class IntentRule:
    """Vocabulary and worked examples for one intent."""

    intent: Intent
    summary: str
    keywords: tuple[str, ...]
    examples: tuple[str, ...]

    def match(self, normalized: str) -> str | None:
        """Return the first keyword found in a normalized question."""
        return find_keyword(normalized, self.keywords)


# Keywords are written in normalized form: lower case, no diacritics.
INTENT_RULES: dict[Intent, IntentRule] = {
    Intent.INVOICE_SEARCH: IntentRule(
        intent=Intent.INVOICE_SEARCH,
        summary="Financial questions: invoices, expenses, payments, charges and totals.",
        keywords=(
            "factura", "facturas", "gasto", "gastos", "gastado", "gaste", "pague",
            "pagado", "pago", "pagos", "total", "suma", "cargo", "cargos", "monto",
            "costo", "dinero", "invoice", "invoices", "expense", "expenses", "paid",
            "spent", "charge", "charges", "payment", "payments",
        ),
        examples=(
            "¿Cuánto he gastado?",
            "Busca facturas de Microsoft",
            "Total pagado en 2024",
            "How much did I pay Amazon last year?",
        ),
    ),
    Intent.DOCUMENT_SEARCH: IntentRule(
        intent=Intent.DOCUMENT_SEARCH,
        summary="Non-financial formal documents: contracts, licenses, certificates, legal papers.",
        keywords=(
            "contrato", "contratos", "licencia", "licencias", "certificado",
            "certificados", "documento", "documentos", "legal", "legales", "poliza",
            "polizas", "contract", "contracts", "license", "licenses", "licence",
            "certificate", "certificates", "document", "documents",
        ),
        examples=(
            "Busca contratos",
            "¿Tienes mi licencia?",
            "Encuentra certificados",
            "When does my lease contract expire?",
        ),
    ),
    Intent.PROFILE_SEARCH: IntentRule(
        intent=Intent.PROFILE_SEARCH,
        summary="The user's own personal data: name, email, phone, address, job, age.",
        keywords=(
            "mi nombre", "mi email", "mi correo", "mi telefono", "mi numero",
            "donde vivo", "mi direccion", "mi trabajo", "mi ocupacion", "mi perfil",
            "mi edad", "anos tengo", "que idiomas hablo", "my name", "my email",
            "my phone", "where do i live", "my address", "my job", "my occupation",
            "my profile", "my age", "how old am i", "what languages do i speak",
        ),
        examples=(
            "¿Cuál es mi nombre?",
            "¿Dónde vivo?",
            "¿Cuál es mi email?",
            "What is my phone number?",
        ),
    ),
    Intent.CONTACT_SEARCH: IntentRule(
        intent=Intent.CONTACT_SEARCH,
        summary="Other people: contacts, and the phone, email or address of someone else.",
        keywords=(
            "contacto", "contactos", "telefono de", "email de", "correo de",
            "numero de", "encuentra a", "busca a", "dame el", "direccion de",
            "contact", "contacts", "phone of", "phone number of", "email of",
            "address of",
        ),
        examples=(
            "Envíame el teléfono de mi contacto Angeles Ruiz",
            "Busca el número de Jorge Luna",
            "Dame los contactos de mi familia",
            "What is Maria's email?",
        ),
    ),
    Intent.PHOTO_SEARCH: IntentRule(
        intent=Intent.PHOTO_SEARCH,
        summary="Photos, pictures, images and galleries.",
        keywords=(
            "foto", "fotos", "fotografia", "fotografias", "imagen", "imagenes",
            "galeria", "album", "photo", "photos", "picture", "pictures", "image",
            "images", "gallery",
        ),
        examples=(
            "Muéstrame fotos",
            "Encuentra fotos de familia",
            "Fotos con Juan",
            "Show me pictures from the beach",
        ),
    ),
    Intent.GENERIC: IntentRule(
        intent=Intent.GENERIC,
        summary="General conversation with no personal data: greetings, time, small talk.",
        keywords=(),
        examples=(
            "Hola, ¿cómo estás?",
            "¿Qué hora es?",
            "¿Cómo funcionas?",
        ),
    ),
}

# Search verbs that point at photos when nothing more specific matched.
PHOTO_SEARCH_VERBS: tuple[str, ...] = (
    "busca", "buscame", "encuentra", "encuentrame", "muestrame", "ensename",
    "show me", "find", "search",
)

# Nouns that, next to a proper name, mean "someone else's contact detail".
CONTACT_NOUNS: tuple[str, ...] = (
    "telefono", "numero", "celular", "movil", "email", "correo", "direccion",
    "phone", "number", "mobile", "address",
)

SUB_TYPE_KEYWORDS: tuple[tuple[DocumentSubType, tuple[str, ...]], ...] = (
    (DocumentSubType.CONTRACTS, ("contrato", "contratos", "contract", "contracts")),
    (DocumentSubType.LICENSES, ("licencia", "licencias", "license", "licenses", "licence")),
    (DocumentSubType.CERTIFICATES, ("certificado", "certificados", "certificate", "certificates")),
    (DocumentSubType.LEGAL, ("legal", "legales", "poliza", "polizas")),
)

_NAME_TOKEN = re.compile(r"[^\W\d_][\w'’-]*")
_NOT_NAMES = {"I", "Twin"}


def normalize_text(text: str) -> str:
    """Lower-case, strip diacritics and punctuation, collapse whitespace."""
    decomposed = unicodedata.normalize("NFKD", text.lower())
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    stripped = re.sub(r"[^\w\s$€]", " ", stripped)
    return re.sub(r"\s+", " ", stripped).strip()


@lru_cache(maxsize=None)
def _keyword_pattern(keywords: tuple[str, ...]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(k) for k in sorted(keywords, key=len, reverse=True))
    return re.compile(rf"(?<!\w)(?:{alternatives})(?!\w)")


def find_keyword(normalized: str, keywords: tuple[str, ...]) -> str | None:
    """Return the first whole-word keyword occurring in ``normalized``."""
    if not keywords or not normalized:
        return None
    match = _keyword_pattern(keywords).search(normalized)
    return match.group(0) if match else None


def mentions_named_contact(question: str) -> bool:
    """True when a proper name appears together with a contact noun.

    The first word is ignored, since sentence-initial capitals are not names.
    """
    if find_keyword(normalize_text(question), CONTACT_NOUNS) is None:
        return False
    tokens = _NAME_TOKEN.findall(question)
    return any(t[0].isupper() and t not in _NOT_NAMES for t in tokens[1:])


def document_sub_type(normalized: str) -> DocumentSubType:
    """Map document vocabulary to its sub-type, ``OTHER`` when unspecific."""
    for sub_type, keywords in SUB_TYPE_KEYWORDS:
        if find_keyword(normalized, keywords):
            return sub_type
    return DocumentSubType.OTHER
