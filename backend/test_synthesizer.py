import pytest
from langchain_core.messages import HumanMessage, SystemMessage

from conftest import FakeChatModel, make_settings
from graph import synthesizer
from schemas import ChatMessage, TransactionRecord
from services.heuristics import INVESTING_ANSWER, SAVINGS_ANSWER
from services.knowledge import get_knowledge_snippets
from services.user_data import mock_financial_profile

WEB_RESULTS = [
    {"title": f"Article {i}", "url": f"https://news.example.com/{i}", "snippet": f"Snippet {i}" if i % 2 else ""}
    for i in range(1, 6)
]


def _state(question="Should I invest in AAPL?", **extra):
    state = {
        "user_id": "u1",
        "question": question,
        "messages": [ChatMessage(role="user", text=question)],
        "profile": mock_financial_profile("u1"),
        "transactions": [],
        "market": {"fx_rates": {}, "stock_quotes": {}, "crypto_prices": {}},
        "web_results": [],
        "kb_snippets": get_knowledge_snippets(question),
    }
    state.update(extra)
    return state


@pytest.mark.asyncio
async def test_without_credential_uses_heuristic(settings):
    answer = await synthesizer.generate_answer(_state(), settings)
    assert answer.text == INVESTING_ANSWER
    assert answer.confidence == 0.78
    assert answer.used_search is False


@pytest.mark.asyncio
async def test_model_answer_with_sources():
    llm = FakeChatModel(content="  Diversify first.  ")
    answer = await synthesizer.generate_answer(
        _state(web_results=WEB_RESULTS), make_settings(), llm=llm
    )
    assert answer.text == "Diversify first."
    assert answer.confidence == 0.92
    assert answer.sources == WEB_RESULTS[:4]
    assert answer.used_search is True

    system, context, question = llm.calls[0]
    assert isinstance(system, SystemMessage)
    assert "not a tax, legal, or investment advisor" in system.content
    assert isinstance(context, HumanMessage)
    assert question.content == "Question: Should I invest in AAPL?"


@pytest.mark.asyncio
async def test_model_answer_without_web_results_has_no_sources():
    answer = await synthesizer.generate_answer(_state(), make_settings(), llm=FakeChatModel())
    assert answer.sources == []
    assert answer.used_search is False


@pytest.mark.asyncio
async def test_model_failure_falls_back():
    llm = FakeChatModel(exc=RuntimeError("overloaded"))
    answer = await synthesizer.generate_answer(_state(web_results=WEB_RESULTS), make_settings(), llm=llm)
    assert answer.text == INVESTING_ANSWER
    assert answer.confidence == 0.78
    assert answer.sources == []


@pytest.mark.asyncio
async def test_empty_model_output_falls_back():
    answer = await synthesizer.generate_answer(_state(), make_settings(), llm=FakeChatModel(content="   "))
    assert answer.text == INVESTING_ANSWER


@pytest.mark.asyncio
async def test_block_content_is_flattened():
    llm = FakeChatModel(content=[{"type": "text", "text": "Part one. "}, {"type": "text", "text": "Part two."}])
    answer = await synthesizer.generate_answer(_state(), make_settings(), llm=llm)
    assert answer.text == "Part one. Part two."


@pytest.mark.asyncio
async def test_configured_key_builds_model(monkeypatch):
    llm = FakeChatModel(content="From the configured model.")
    monkeypatch.setattr(synthesizer, "_make_llm", lambda settings: llm if settings.llm_configured else None)

    answer = await synthesizer.generate_answer(_state(), make_settings(anthropic_api_key="sk-test"))
    assert answer.text == "From the configured model."
    assert len(llm.calls) == 1


@pytest.mark.asyncio
async def test_question_falls_back_to_latest_user_message(settings):
    state = _state(question="")
    state["messages"] = [
        ChatMessage(role="user", text="How do I save more?"),
        ChatMessage(role="ai", text="Let's look at your budget."),
    ]
    answer = await synthesizer.generate_answer(state, settings)
    assert answer.text == SAVINGS_ANSWER


def test_context_message_lists_gathered_data():
    state = _state(
        transactions=[
            TransactionRecord(id=i, timestamp="2026-10-01T00:00:00", amount=-10.0, category=c)
            for i, c in enumerate(["food", "food", "rent", "transport", "fun", "travel"])
        ],
        market={
            "fx_rates": {"EUR": 0.92134, "GBP": 0.79},
            "stock_quotes": {"AAPL": {"price": 187.456, "currency": "USD"}},
            "crypto_prices": {"BTC": 64250.1},
        },
        web_results=WEB_RESULTS,
    )
    text = synthesizer.build_context_message(state)

    assert "- FX snapshot (base USD): EUR: 0.921, GBP: 0.790" in text
    assert "User monthly income ~5200 with fixed costs ~2800 and savings rate ~18%." in text
    assert "- Recent transactions: 6 loaded (categories seen: food, rent, transport, fun)" in text
    assert "- Stock quotes: AAPL: 187.46 USD" in text
    assert "- Crypto prices (USD): BTC: 64250.10 USD" in text
    assert "- Knowledge hints:" in text
    assert "1. Article 1 - Snippet 1 (Source: https://news.example.com/1)" in text
    assert "2. Article 2 (Source: https://news.example.com/2)" in text
    assert "Article 5" not in text


def test_context_message_when_nothing_gathered():
    text = synthesizer.build_context_message(_state(kb_snippets=[]))
    assert "not available at the moment." in text
    assert "Recent transactions" not in text
    assert "Stock quotes" not in text
    assert "Web search results" not in text


@pytest.mark.asyncio
async def test_crypto_prices_labelled_with_vs_currency():
    llm = FakeChatModel()
    state = _state(market={"fx_rates": {}, "stock_quotes": {}, "crypto_prices": {"ETH": 2900.5}})
    await synthesizer.generate_answer(state, make_settings(crypto_vs_currency="eur"), llm=llm)
    assert "- Crypto prices (EUR): ETH: 2900.50 EUR" in llm.calls[0][1].content
