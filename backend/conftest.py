"""Shared pytest fixtures. Settings are always built explicitly so host credentials never leak in."""

import datetime

import pytest
from langchain_core.messages import AIMessage

from config import Settings
from database import Transaction, create_tables, get_session_factory


def make_settings(**overrides) -> Settings:
    values = {
        "database_url": None,
        "seed_demo_data": False,
        "anthropic_api_key": None,
        "market_data_enabled": False,
        "fx_base": "USD",
        "fx_symbols": ["EUR", "GBP"],
        "crypto_prices_enabled": False,
        "web_search_enabled": False,
        "search_cache_ttl_seconds": 300.0,
        "search_cache_capacity": 50,
        "connector_timeout_seconds": 2.0,
        "transaction_fetch_limit": 25,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


async def insert_transactions(database_url: str, user_id: str, count: int) -> None:
    """Creates the tables and adds `count` rows, one minute apart, newest first by index."""
    await create_tables(database_url)
    now = datetime.datetime.utcnow()
    async with get_session_factory(database_url)() as session:
        session.add_all([
            Transaction(
                user_id=user_id,
                timestamp=now - datetime.timedelta(minutes=i),
                description=f"purchase {i}",
                amount=-5.0,
                category="food",
            )
            for i in range(count)
        ])
        await session.commit()


class FakeChatModel:
    """Stands in for ChatAnthropic: records prompts, returns canned content or raises."""

    def __init__(self, content="Here is what your numbers suggest.", exc: Exception | None = None):
        self.content = content
        self.exc = exc
        self.calls: list[list] = []

    async def ainvoke(self, messages):
        self.calls.append(messages)
        if self.exc is not None:
            raise self.exc
        return AIMessage(content=self.content)


@pytest.fixture
def settings() -> Settings:
    return make_settings()
