"""
DuckDuckGo web search connector for Aurora.
Returns articles relevant to a finance question, with citations.
"""

import asyncio
import logging
import warnings
from typing import TYPE_CHECKING

from typing_extensions import TypedDict

from services.safety import is_safe_to_search, should_search

if TYPE_CHECKING:
    from config import Settings
    from services.cache import SearchCache

logger = logging.getLogger(__name__)

# Suppress the rename warning from duckduckgo_search
warnings.filterwarnings("ignore", message=".*has been renamed.*")

MAX_RESULTS = 5


class SearchResult(TypedDict):
    title: str
    url: str
    snippet: str


async def web_search(query: str, max_results: int = MAX_RESULTS, region: str = "us-en") -> list[SearchResult]:
    """
    Search DuckDuckGo for pages relevant to a finance question.
    Runs the sync DDGS call in a thread pool to avoid blocking the event loop.
    Provider errors propagate to the caller.
    """
    def _sync_search() -> list[SearchResult]:
        from duckduckgo_search import DDGS

        results: list[SearchResult] = []
        with DDGS() as ddgs:
            for r in ddgs.text(query, max_results=max_results, region=region):
                href = r.get("href", "")
                if not href:
                    continue
                results.append(
                    SearchResult(
                        title=r.get("title") or href,
                        url=href,
                        snippet=r.get("body", ""),
                    )
                )
        return results[:max_results]

    return await asyncio.to_thread(_sync_search)


async def get_web_results_for_question(
    question: str,
    settings: "Settings",
    cache: "SearchCache",
) -> list[SearchResult]:
    """
    Web results for the question, or [] when search is disabled, the question
    carries sensitive data, or nothing in it calls for current information.
    """
    if not settings.web_search_enabled:
        return []
    query = (question or "").strip()
    if not query or not is_safe_to_search(query) or not should_search(query):
        return []

    cached = cache.get(query)
    if cached is not None:
        return cached

    results = await web_search(
        query,
        max_results=min(settings.web_search_max_results, MAX_RESULTS),
        region=settings.web_search_region,
    )
    cache.put(query, results)
    logger.info("Web search for %r returned %d results", query, len(results))
    return results
