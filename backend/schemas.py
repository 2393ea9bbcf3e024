from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from services.web_search import SearchResult


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "ai", "assistant"]
    text: str = ""


class ChatRequest(_CamelModel):
    user_id: str | None = None
    messages: list[ChatMessage] = Field(min_length=1)

    @field_validator("user_id", mode="before")
    @classmethod
    def _numeric_user_id(cls, v):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class Goal(BaseModel):
    name: str
    target: float = 0.0
    progress: float = 0.0


class FinancialProfile(_CamelModel):
    user_id: str
    currency: str = "USD"
    monthly_income: float = 0.0
    monthly_fixed_costs: float = 0.0
    avg_discretionary: float = 0.0
    savings_rate: float = 0.0
    goals: list[Goal] = Field(default_factory=list)


class TransactionRecord(_CamelModel):
    id: int | str
    timestamp: str
    description: str = ""
    amount: float  # negative = outflow
    category: str | None = None


class AuroraAnswer(_CamelModel):
    """One answer per request. Never mutated after construction."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    text: str
    confidence: float = Field(ge=0.0, le=1.0)
    sources: list[SearchResult] = Field(default_factory=list)
    used_search: bool = False

    @model_validator(mode="after")
    def _search_needs_sources(self) -> "AuroraAnswer":
        if self.used_search and not self.sources:
            raise ValueError("used_search requires at least one source")
        return self


class UsedLiveData(_CamelModel):
    fx_symbols: list[str] = Field(default_factory=list)
    stocks: list[str] = Field(default_factory=list)
    crypto: list[str] = Field(default_factory=list)
    transaction_count: int = 0


class ChatResponse(_CamelModel):
    text: str
    confidence: float
    sources: list[SearchResult] = Field(default_factory=list)
    used_search: bool = False
    used_live_data: UsedLiveData


class FallbackResponse(_CamelModel):
    text: str
    confidence: float
    fallback: bool = True
    sources: list[SearchResult] = Field(default_factory=list)
    used_search: bool = False
