import asyncio
import logging

from langgraph.graph import END, START, StateGraph

from config import Settings
from graph import synthesizer
from graph.state import ChatState
from services import prices, user_data, web_search
from services.cache import SearchCache
from services.connectors import run_connector
from services.knowledge import get_knowledge_snippets

logger = logging.getLogger(__name__)


def compile_chat_graph(settings: Settings, cache: SearchCache, llm=None):
    """Build and compile the Aurora chat pipeline: detect -> gather -> generate."""

    def detect_node(state: ChatState) -> dict:
        """Pick out the stock tickers and crypto symbols the question mentions."""
        stocks, crypto = prices.detect_instruments(state.get("question", ""))
        return {"stock_symbols": stocks, "crypto_symbols": crypto}

    async def gather_node(state: ChatState) -> dict:
        """Run every upstream connector concurrently; each settles to a value or its default."""
        user_id = state["user_id"]
        question = state.get("question", "")
        timeout = settings.connector_timeout_seconds

        results = await asyncio.gather(
            run_connector(
                "profile",
                user_data.get_user_financial_profile(user_id, settings),
                user_data.mock_financial_profile(user_id),
                timeout,
            ),
            run_connector(
                "transactions",
                user_data.get_recent_transactions(user_id, settings, settings.transaction_fetch_limit),
                [],
                timeout,
            ),
            run_connector(
                "fx_rates",
                prices.get_fx_rates(settings.fx_base, settings.fx_symbols, settings),
                {},
                timeout,
            ),
            run_connector(
                "stock_quotes",
                prices.get_stock_quotes(state.get("stock_symbols", []), settings),
                {},
                timeout,
            ),
            run_connector(
                "crypto_prices",
                prices.get_crypto_prices(
                    state.get("crypto_symbols", []), settings.crypto_vs_currency, settings
                ),
                {},
                timeout,
            ),
            run_connector(
                "web_search",
                web_search.get_web_results_for_question(question, settings, cache),
                [],
                timeout,
            ),
        )
        profile, transactions, fx_rates, stock_quotes, crypto_prices, web_results = results

        status = {r.name: r.status for r in results}
        degraded = [name for name, s in status.items() if s != "ok"]
        if degraded:
            logger.info("Answering %s with degraded connectors: %s", user_id, ", ".join(degraded))

        return {
            "profile": profile.value,
            "transactions": transactions.value[: settings.transaction_fetch_limit],
            "market": {
                "fx_rates": fx_rates.value,
                "stock_quotes": stock_quotes.value,
                "crypto_prices": crypto_prices.value,
            },
            "web_results": web_results.value,
            "kb_snippets": get_knowledge_snippets(question),
            "connector_status": status,
        }

    async def generate_node(state: ChatState) -> dict:
        answer = await synthesizer.generate_answer(state, settings, llm=llm)
        return {"answer": answer}

    graph = StateGraph(ChatState)

    graph.add_node("detect", detect_node)
    graph.add_node("gather", gather_node)
    graph.add_node("generate", generate_node)

    graph.add_edge(START, "detect")
    graph.add_edge("detect", "gather")
    graph.add_edge("gather", "generate")
    graph.add_edge("generate", END)

    return graph.compile()
