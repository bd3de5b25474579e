"""Best-effort filter extraction from free-text questions.

The criteria are hints for calculation-capable handlers, never an
authoritative parse: a question can yield an empty dict.
"""

import re
from datetime import datetime, timezone

from twin.intent.taxonomy import find_keyword, normalize_text

KNOWN_VENDORS: tuple[str, ...] = (
    "microsoft", "amazon", "google", "apple", "oracle", "salesforce", "adobe",
)

MONTHS: dict[str, int] = {
    "enero": 1, "febrero": 2, "marzo": 3, "abril": 4, "mayo": 5, "junio": 6,
    "julio": 7, "agosto": 8, "septiembre": 9, "setiembre": 9, "octubre": 10,
    "noviembre": 11, "diciembre": 12,
    "january": 1, "february": 2, "march": 3, "april": 4, "june": 6, "july": 7,
    "august": 8, "september": 9, "october": 10, "november": 11, "december": 12,
}

QUARTERS: dict[str, int] = {
    "primer trimestre": 1, "segundo trimestre": 2, "tercer trimestre": 3,
    "cuarto trimestre": 4, "first quarter": 1, "second quarter": 2,
    "third quarter": 3, "fourth quarter": 4,
}

CURRENCY_WORDS: tuple[str, ...] = ("dolares", "euros", "pesos", "dollars", "usd", "eur", "mxn")

# Later entries win, so a question with "between" and "more than" reads as a range.
AMOUNT_OPERATORS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (">", ("mas de", "more than", "over", "above")),
    ("<", ("menos de", "less than", "under", "below")),
    ("BETWEEN", ("entre", "between")),
)

_YEAR = re.compile(r"(?<!\d)((?:19|20)\d{2})(?!\d)")
_QUARTER = re.compile(r"(?<!\w)q([1-4])(?!\w)")


def extract_filter_criteria(question: str, reference: datetime | None = None) -> dict[str, str]:
    """Extract vendor, year, month, quarter and amount operator hints.

    Args:
        question: Original user question
        reference: Moment relative years ("this year") are resolved against

    Returns:
        Mapping of criterion name to value, only for criteria found
    """
    reference = reference or datetime.now(timezone.utc)
    text = normalize_text(question)
    filters: dict[str, str] = {}

    vendor = find_keyword(text, KNOWN_VENDORS)
    if vendor:
        filters["vendor"] = vendor

    year = _YEAR.search(text)
    if year:
        filters["year"] = year.group(1)
    if find_keyword(text, ("este ano", "this year")):
        filters["year"] = str(reference.year)
    if find_keyword(text, ("ano pasado", "last year")):
        filters["year"] = str(reference.year - 1)

    month = find_keyword(text, tuple(MONTHS))
    if month:
        filters["month"] = str(MONTHS[month])

    quarter = _QUARTER.search(text)
    if quarter:
        filters["quarter"] = quarter.group(1)
    else:
        named_quarter = find_keyword(text, tuple(QUARTERS))
        if named_quarter:
            filters["quarter"] = str(QUARTERS[named_quarter])

    if "$" in text or "€" in text or find_keyword(text, CURRENCY_WORDS):
        for operator, phrases in AMOUNT_OPERATORS:
            if find_keyword(text, phrases):
                filters["amount_operator"] = operator

    return filters
