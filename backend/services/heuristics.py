"""
Deterministic fallback answers.

Used whenever the language model is not configured or fails, and by the
route's catch-all. No I/O.
"""

from schemas import AuroraAnswer

HEURISTIC_CONFIDENCE = 0.78

GENERIC_ANSWER = (
    "Here's a high-level perspective on your finances. I can help you break this down by "
    "accounts, categories, or time horizon if you like."
)
BUDGET_ANSWER = (
    "Most people get the largest leverage by looking at their top 2-3 variable categories: "
    "often food, transport, and subscriptions. If you trim those by 10-15% while keeping rent "
    "and essentials stable, your budget usually feels better without feeling restrictive."
)
SAVINGS_ANSWER = (
    "A common pattern is to target a savings rate in the 15-25% range of net income, then "
    "adjust up or down based on stability and goals. We can look at your fixed costs and "
    "recent spending to see what level is realistic for you."
)
INVESTING_ANSWER = (
    "Investing typically starts with building an emergency buffer, then allocating surplus "
    "into diversified, low-cost investments like broad-market ETFs. From there, you can decide "
    "how much risk to take based on your time horizon and volatility comfort."
)
RUNWAY_ANSWER = (
    "Runway is essentially your liquid assets divided by your average monthly burn. If we keep "
    "your burn stable and increase savings, that runway extends. Small, persistent changes in "
    "discretionary categories compound into meaningful extra months."
)
CRYPTO_ANSWER = (
    "Crypto should usually be treated as a high-volatility sleeve in a broader plan. Many "
    "approaches keep it to a small percentage of total net worth, rebalanced occasionally, "
    "rather than relying on it for near-term goals."
)

# First match wins.
_RULES: list[tuple[tuple[str, ...], str]] = [
    (("budget", "spend"), BUDGET_ANSWER),
    (("save", "savings"), SAVINGS_ANSWER),
    (("invest", "stock", "etf"), INVESTING_ANSWER),
    (("runway", "forecast"), RUNWAY_ANSWER),
    (("crypto",), CRYPTO_ANSWER),
]


def basic_heuristic_answer(question: str, confidence: float = HEURISTIC_CONFIDENCE) -> AuroraAnswer:
    lower = (question or "").lower()
    text = GENERIC_ANSWER
    for keywords, answer in _RULES:
        if any(k in lower for k in keywords):
            text = answer
            break
    return AuroraAnswer(text=text, confidence=confidence)
