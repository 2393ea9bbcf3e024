from typing_extensions import TypedDict

from schemas import AuroraAnswer, ChatMessage, FinancialProfile, TransactionRecord
from services.prices import StockQuote
from services.web_search import SearchResult


class MarketSnapshot(TypedDict):
    fx_rates: dict[str, float]
    stock_quotes: dict[str, StockQuote]
    crypto_prices: dict[str, float]


class ChatState(TypedDict, total=False):
    user_id: str
    question: str
    messages: list[ChatMessage]
    # Filled by detect
    stock_symbols: list[str]
    crypto_symbols: list[str]
    # Filled by gather
    profile: FinancialProfile
    transactions: list[TransactionRecord]
    market: MarketSnapshot
    web_results: list[SearchResult]
    kb_snippets: list[str]
    connector_status: dict[str, str]  # connector name -> "ok" | "degraded"
    # Filled by generate
    answer: AuroraAnswer
