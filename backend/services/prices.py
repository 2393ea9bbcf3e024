"""
Market data connectors.

FX rates and equity quotes come from yfinance; yfinance is synchronous, so
those calls run inside asyncio.to_thread to avoid blocking the event loop.
Crypto prices come from CoinGecko's simple-price endpoint over httpx.

A single failing symbol is skipped; the rest of the map is still returned.
"""

import asyncio
import logging
import re
from typing import TYPE_CHECKING

import httpx
import yfinance as yf
from typing_extensions import TypedDict

if TYPE_CHECKING:
    from config import Settings

logger = logging.getLogger(__name__)


class StockQuote(TypedDict):
    price: float | None
    currency: str


# ---------------------------------------------------------------------------
# Instrument detection
# ---------------------------------------------------------------------------

# keyword -> ticker, matched on word boundaries
STOCK_KEYWORDS: dict[str, str] = {
    "aapl": "AAPL",
    "apple": "AAPL",
    "tsla": "TSLA",
    "tesla": "TSLA",
    "msft": "MSFT",
    "microsoft": "MSFT",
    "nvda": "NVDA",
    "nvidia": "NVDA",
    "amzn": "AMZN",
    "amazon": "AMZN",
    "googl": "GOOGL",
    "alphabet": "GOOGL",
}

CRYPTO_KEYWORDS: dict[str, str] = {
    "btc": "BTC",
    "bitcoin": "BTC",
    "eth": "ETH",
    "ethereum": "ETH",
    "sol": "SOL",
    "solana": "SOL",
}

COINGECKO_IDS: dict[str, str] = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "SOL": "solana",
}


def _match_vocabulary(text: str, vocabulary: dict[str, str]) -> list[str]:
    found: list[str] = []
    for keyword, symbol in vocabulary.items():
        if symbol in found:
            continue
        if re.search(rf"\b{re.escape(keyword)}\b", text, re.IGNORECASE):
            found.append(symbol)
    return found


def detect_instruments(question: str) -> tuple[list[str], list[str]]:
    """Returns (stock_symbols, crypto_symbols) mentioned in the question."""
    text = question or ""
    return _match_vocabulary(text, STOCK_KEYWORDS), _match_vocabulary(text, CRYPTO_KEYWORDS)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _fetch_fx_rate(base: str, symbol: str) -> float:
    """Synchronous fetch, runs in a thread."""
    t = yf.Ticker(f"{base}{symbol}=X")
    hist = t.history(period="2d")
    if hist.empty:
        raise ValueError(f"No FX data for {base}/{symbol}")
    return float(hist["Close"].iloc[-1])


def _fetch_quote(ticker: str) -> StockQuote:
    """Synchronous fetch, runs in a thread."""
    t = yf.Ticker(ticker)
    hist = t.history(period="5d")
    if hist.empty:
        raise ValueError(f"No price data for {ticker}")

    currency = "USD"
    try:
        currency = t.fast_info.currency or currency
    except Exception:
        pass

    return StockQuote(price=float(hist["Close"].iloc[-1]), currency=currency.upper())


# ---------------------------------------------------------------------------
# Public async API
# ---------------------------------------------------------------------------

async def get_fx_rates(base: str, symbols: list[str], settings: "Settings") -> dict[str, float]:
    """Returns {symbol: rate} for each symbol quoted against base."""
    if not settings.market_data_enabled or not symbols:
        return {}

    results = await asyncio.gather(
        *[asyncio.to_thread(_fetch_fx_rate, base, s) for s in symbols],
        return_exceptions=True,
    )
    rates: dict[str, float] = {}
    for symbol, result in zip(symbols, results):
        if isinstance(result, Exception):
            logger.warning("FX rate %s/%s unavailable: %s", base, symbol, result)
            continue
        rates[symbol] = result
    return rates


async def get_stock_quotes(symbols: list[str], settings: "Settings") -> dict[str, StockQuote]:
    """Fetches all tickers in parallel. Returns dict keyed by upper-case ticker."""
    if not settings.market_data_enabled or not symbols:
        return {}

    results = await asyncio.gather(
        *[asyncio.to_thread(_fetch_quote, s) for s in symbols],
        return_exceptions=True,
    )
    quotes: dict[str, StockQuote] = {}
    for symbol, result in zip(symbols, results):
        if isinstance(result, Exception):
            logger.warning("Quote for %s unavailable: %s", symbol, result)
            continue
        quotes[symbol.upper()] = result
    return quotes


async def get_crypto_prices(
    symbols: list[str],
    vs_currency: str,
    settings: "Settings",
) -> dict[str, float]:
    """
    Batch price lookup. Only symbols with a known CoinGecko id are requested;
    anything the provider omits is left out of the result.
    """
    if not settings.crypto_prices_enabled:
        return {}

    upper = [s.upper() for s in symbols]
    ids: list[str] = []
    for sym in upper:
        coin_id = COINGECKO_IDS.get(sym)
        if coin_id and coin_id not in ids:
            ids.append(coin_id)
    if not ids:
        return {}

    vs = vs_currency.lower()
    async with httpx.AsyncClient(timeout=settings.connector_timeout_seconds) as client:
        response = await client.get(
            settings.coingecko_url,
            params={"ids": ",".join(ids), "vs_currencies": vs},
        )
        response.raise_for_status()
        payload = response.json()

    prices: dict[str, float] = {}
    for sym in upper:
        entry = payload.get(COINGECKO_IDS.get(sym, ""), {})
        price = entry.get(vs) if isinstance(entry, dict) else None
        if isinstance(price, (int, float)) and not isinstance(price, bool):
            prices[sym] = float(price)
    return prices
