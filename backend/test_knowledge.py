import pytest
from pydantic import ValidationError

from schemas import AuroraAnswer
from services.heuristics import (
    BUDGET_ANSWER,
    CRYPTO_ANSWER,
    GENERIC_ANSWER,
    INVESTING_ANSWER,
    RUNWAY_ANSWER,
    SAVINGS_ANSWER,
    basic_heuristic_answer,
)
from services.knowledge import DISCLAIMER, get_knowledge_snippets


def test_disclaimer_is_always_last():
    assert get_knowledge_snippets("") == [DISCLAIMER]
    assert get_knowledge_snippets("tell me a joke") == [DISCLAIMER]


def test_topic_buckets_combine():
    snippets = get_knowledge_snippets("Should I invest in crypto or stick to my budget?")
    assert snippets[-1] == DISCLAIMER
    # 2 budgeting + 2 investing + 1 crypto + disclaimer
    assert len(snippets) == 6
    assert any("ETFs" in s for s in snippets)
    assert any("volatile" in s for s in snippets)


@pytest.mark.parametrize(
    "question, expected",
    [
        ("Help me with my budget", BUDGET_ANSWER),
        ("Where do I SPEND too much?", BUDGET_ANSWER),
        ("How much can I save this month?", SAVINGS_ANSWER),
        ("Should I buy an ETF?", INVESTING_ANSWER),
        ("What's my runway?", RUNWAY_ANSWER),
        ("Is crypto a good idea?", CRYPTO_ANSWER),
        ("Hello there", GENERIC_ANSWER),
        ("", GENERIC_ANSWER),
    ],
)
def test_heuristic_keyword_mapping(question, expected):
    answer = basic_heuristic_answer(question)
    assert answer.text == expected
    assert answer.confidence == 0.78
    assert answer.sources == []
    assert answer.used_search is False


def test_budget_rule_wins_over_savings():
    assert basic_heuristic_answer("budget to save more").text == BUDGET_ANSWER


def test_answer_rejects_search_without_sources():
    with pytest.raises(ValidationError):
        AuroraAnswer(text="x", confidence=0.9, used_search=True)


def test_answer_is_frozen():
    answer = basic_heuristic_answer("budget")
    with pytest.raises(ValidationError):
        answer.text = "changed"


def test_answer_confidence_bounds():
    with pytest.raises(ValidationError):
        AuroraAnswer(text="x", confidence=1.5)
