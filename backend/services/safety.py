"""Keyword gates deciding whether a question may, and should, go to web search."""

_BLOCKED_TERMS = (
    "password",
    "passcode",
    "social security",
    "ssn",
    "credit card",
    "card number",
    "cvv",
    "pin code",
    "pin number",
    "security code",
    "routing number",
    "account number",
)

_SEARCH_TRIGGERS = (
    "news",
    "latest",
    "today",
    "current",
    "rate",
    "inflation",
    "recession",
    "market",
    "economy",
    "stock",
    "crypto",
    "yield",
    "tax law",
    "regulation",
    "what is",
    "who is",
    "define",
    "definition",
    "history of",
)


def is_safe_to_search(question: str) -> bool:
    """False when the question mentions sensitive data that must not leave the service."""
    q = (question or "").lower()
    return not any(term in q for term in _BLOCKED_TERMS)


def should_search(question: str) -> bool:
    """True when the question looks like it needs current or external information."""
    q = (question or "").lower()
    if not q.strip():
        return False
    return any(trigger in q for trigger in _SEARCH_TRIGGERS)
