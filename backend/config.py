from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_COINGECKO_SIMPLE_PRICE = "https://api.coingecko.com/api/v3/simple/price"


class Settings(BaseSettings):
    """Runtime configuration for the Aurora chat backend.

    Every upstream connector reads its credential or enable flag from here;
    a missing value degrades that connector to its default instead of failing.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Storage
    database_url: str | None = Field(default=None, description="SQLAlchemy URL for profile/transaction tables.")
    seed_demo_data: bool = False

    # Language model
    anthropic_api_key: str | None = None
    llm_model: str = "claude-sonnet-4-6"
    llm_temperature: float = Field(0.2, ge=0.0, le=1.0)
    llm_max_tokens: int = Field(1024, ge=64)

    # Market data
    market_data_enabled: bool = False
    fx_base: str = "USD"
    fx_symbols: list[str] = Field(default_factory=lambda: ["EUR", "GBP"])
    crypto_prices_enabled: bool = True
    crypto_vs_currency: str = "usd"
    coingecko_url: str = _COINGECKO_SIMPLE_PRICE

    # Web search
    web_search_enabled: bool = False
    web_search_region: str = "us-en"
    web_search_max_results: int = Field(5, ge=1, le=5)
    search_cache_ttl_seconds: float = Field(300.0, gt=0)
    search_cache_capacity: int = Field(50, ge=1)

    connector_timeout_seconds: float = Field(4.0, gt=0)
    transaction_fetch_limit: int = Field(25, ge=1, le=25)

    frontend_url: str = "http://localhost:3000"
    log_level: str = "INFO"

    @field_validator("database_url")
    @classmethod
    def _use_async_driver(cls, value: str | None) -> str | None:
        if not value:
            return None
        return value.replace("sqlite:///", "sqlite+aiosqlite:///", 1) if value.startswith("sqlite:///") else value

    @field_validator("anthropic_api_key")
    @classmethod
    def _blank_key_is_absent(cls, value: str | None) -> str | None:
        return value or None

    @property
    def storage_configured(self) -> bool:
        return self.database_url is not None

    @property
    def llm_configured(self) -> bool:
        return self.anthropic_api_key is not None


@lru_cache
def get_settings() -> Settings:
    return Settings()
