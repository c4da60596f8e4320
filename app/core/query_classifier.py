"""Keyword classification of todo chat questions.

Decides how a question selects the todos it is answered from:
date-like language goes through date-range extraction, questions about
edits read every todo, everything else uses similarity search. This is a
heuristic: false positives just widen or narrow the candidate set.
"""

import re

from app.core.schemas_chat import QueryIntent

METADATA_TERMS: tuple[str, ...] = ("updated", "modified", "changed")

DATE_PHRASES: tuple[str, ...] = (
    "today",
    "tonight",
    "yesterday",
    "tomorrow",
    "this week",
    "last week",
    "this month",
    "last month",
    "this year",
    "last year",
    "ago",
    "since",
    "created on",
    "created at",
    "created in",
    "added on",
    "recent",
    "recently",
)

WEEKDAYS: tuple[str, ...] = (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
)

MONTHS: tuple[str, ...] = (
    "january", "february", "march", "april", "may", "june", "july",
    "august", "september", "october", "november", "december",
)

_DATE_WORDS_RE = re.compile(
    r"\b(" + "|".join(re.escape(w) for w in DATE_PHRASES + WEEKDAYS + MONTHS) + r")\b"
)
_ISO_DATE_RE = re.compile(r"\b\d{4}-\d{1,2}-\d{1,2}\b")
_SLASH_DATE_RE = re.compile(r"\b\d{1,2}/\d{1,2}(/\d{2,4})?\b")


def has_date_intent(query: str) -> bool:
    """True when the question mentions a date or relative time."""
    lowered = query.lower()
    return bool(
        _DATE_WORDS_RE.search(lowered)
        or _ISO_DATE_RE.search(lowered)
        or _SLASH_DATE_RE.search(lowered)
    )


def has_metadata_intent(query: str) -> bool:
    """True when the question is about edits to todos."""
    lowered = query.lower()
    return any(term in lowered for term in METADATA_TERMS)


def classify_query(query: str) -> QueryIntent:
    """Classify a chat question. Date intent wins over metadata intent."""
    if has_date_intent(query):
        return QueryIntent.DATE_RANGE
    if has_metadata_intent(query):
        return QueryIntent.METADATA
    return QueryIntent.SEMANTIC
