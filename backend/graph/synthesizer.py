import logging

from langchain_anthropic import ChatAnthropic
from langchain_core.messages import HumanMessage, SystemMessage

from config import Settings
from graph.state import ChatState
from schemas import AuroraAnswer
from services.heuristics import basic_heuristic_answer

logger = logging.getLogger(__name__)

MODEL_CONFIDENCE = 0.92
MAX_WEB_RESULTS_IN_PROMPT = 4
MAX_CATEGORIES_IN_PROMPT = 4
DEFAULT_QUESTION = "Explain my finances in simple terms."

SYSTEM_PROMPT = (
    "You are Aurora, an AI finance copilot inside a futuristic finance dashboard. "
    "You answer questions about personal finance, investing, banking, and markets using clear, "
    "calm language. You can reference recent spending patterns, live market data, and educational "
    "finance concepts. You are not a tax, legal, or investment advisor; avoid giving directives, "
    "and instead present options and trade-offs."
)


def _make_llm(settings: Settings):
    if not settings.llm_configured:
        return None
    return ChatAnthropic(
        model=settings.llm_model,
        api_key=settings.anthropic_api_key,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
    )


def _resolve_question(state: ChatState) -> str:
    if state.get("question"):
        return state["question"]
    user_texts = [m.text for m in state.get("messages", []) if m.role == "user" and m.text]
    return user_texts[-1] if user_texts else DEFAULT_QUESTION


def _content_text(content) -> str:
    """Flatten a chat model's content (plain string or list of blocks)."""
    if isinstance(content, str):
        return content.strip()
    parts = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts).strip()


def build_context_message(state: ChatState, fx_base: str = "USD", vs_currency: str = "usd") -> str:
    """Single user-role message summarising everything gathered for this question."""
    market = state.get("market") or {}
    fx_rates = market.get("fx_rates") or {}
    stock_quotes = market.get("stock_quotes") or {}
    crypto_prices = market.get("crypto_prices") or {}

    fx_summary = ", ".join(f"{sym}: {rate:.3f}" for sym, rate in fx_rates.items())

    stock_parts = []
    for sym, quote in stock_quotes.items():
        price = f"{quote['price']:.2f}" if quote.get("price") is not None else "n/a"
        currency = f" {quote['currency']}" if quote.get("currency") else ""
        stock_parts.append(f"{sym}: {price}{currency}")
    stock_summary = ", ".join(stock_parts)

    vs = vs_currency.upper()
    crypto_summary = ", ".join(f"{sym}: {price:.2f} {vs}" for sym, price in crypto_prices.items())

    profile = state.get("profile")
    if profile is not None:
        user_snapshot = (
            f"User monthly income ~{profile.monthly_income:g} "
            f"with fixed costs ~{profile.monthly_fixed_costs:g} "
            f"and savings rate ~{profile.savings_rate * 100:.0f}%."
        )
    else:
        user_snapshot = "not available."

    lines = [
        "Here is a brief summary you can use:",
        f"- FX snapshot (base {fx_base}): {fx_summary or 'not available at the moment.'}",
        f"- User profile: {user_snapshot}",
    ]

    transactions = state.get("transactions") or []
    if transactions:
        categories: list[str] = []
        for t in transactions:
            if t.category and t.category not in categories:
                categories.append(t.category)
        categories = categories[:MAX_CATEGORIES_IN_PROMPT]
        cats = f" (categories seen: {', '.join(categories)})" if categories else ""
        lines.append(f"- Recent transactions: {len(transactions)} loaded{cats}")

    if stock_summary:
        lines.append(f"- Stock quotes: {stock_summary}")
    if crypto_summary:
        lines.append(f"- Crypto prices ({vs}): {crypto_summary}")

    kb_snippets = state.get("kb_snippets") or []
    if kb_snippets:
        lines.append("- Knowledge hints:")
        lines.extend(f"- {s}" for s in kb_snippets)

    web_results = (state.get("web_results") or [])[:MAX_WEB_RESULTS_IN_PROMPT]
    if web_results:
        lines.append("- Web search results:")
        for i, r in enumerate(web_results, start=1):
            snippet = f" - {r['snippet']}" if r.get("snippet") else ""
            lines.append(f"{i}. {r['title']}{snippet} (Source: {r['url']})")

    return "\n".join(lines)


async def generate_answer(state: ChatState, settings: Settings, llm=None) -> AuroraAnswer:
    """
    Ask the language model for an answer built from the gathered context.

    Falls back to the heuristic responder when no model is configured, the
    call raises, or the model returns nothing.
    """
    question = _resolve_question(state)
    llm = llm or _make_llm(settings)
    if llm is None:
        return basic_heuristic_answer(question)

    messages = [
        SystemMessage(content=SYSTEM_PROMPT),
        HumanMessage(content=build_context_message(
            state, fx_base=settings.fx_base, vs_currency=settings.crypto_vs_currency
        )),
        HumanMessage(content=f"Question: {question}"),
    ]

    try:
        response = await llm.ainvoke(messages)
        text = _content_text(response.content)
    except Exception as exc:
        logger.error("Aurora model call failed: %s", exc)
        return basic_heuristic_answer(question)

    if not text:
        logger.warning("Aurora model returned empty content; using heuristic answer")
        return basic_heuristic_answer(question)

    sources = (state.get("web_results") or [])[:MAX_WEB_RESULTS_IN_PROMPT]
    return AuroraAnswer(
        text=text,
        confidence=MODEL_CONFIDENCE,
        sources=sources,
        used_search=bool(sources),
    )
