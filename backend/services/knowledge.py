"""Static finance snippets fed to the model as background hints."""

DISCLAIMER = (
    "Aurora is not a tax, legal, or investment advisor. "
    "Treat these outputs as educational guidance, not directives."
)

_TOPICS: list[tuple[tuple[str, ...], tuple[str, ...]]] = [
    (
        ("budget", "spend", "saving"),
        (
            "Good budgeting often routes 20-30% of net income into savings and investing, "
            "with fixed costs kept below ~50%.",
            "Tracking spend by category (housing, food, transport, subscriptions) makes it "
            "easier to decide where to trim.",
        ),
    ),
    (
        ("invest", "stock", "etf"),
        (
            "Diversification across low-cost ETFs is a common way to spread risk rather than "
            "betting on single names.",
            "Time in the market usually matters more than timing the market; short-term moves "
            "are hard to predict.",
        ),
    ),
    (
        ("crypto",),
        (
            "Crypto assets can be extremely volatile. Many guides suggest treating them as a "
            "small, higher-risk sleeve.",
        ),
    ),
]


def get_knowledge_snippets(question: str) -> list[str]:
    q = (question or "").lower()
    snippets: list[str] = []
    for keywords, texts in _TOPICS:
        if any(k in q for k in keywords):
            snippets.extend(texts)
    snippets.append(DISCLAIMER)
    return snippets
