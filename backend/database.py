import datetime
import json
import logging
from functools import lru_cache
from pathlib import Path

from sqlalchemy import JSON, DateTime, Float, Integer, String, Text, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.pool import NullPool

logger = logging.getLogger(__name__)

_DEMO_USER = Path(__file__).parent / "data" / "demo_user.json"


class Base(DeclarativeBase):
    pass


class FinancialOverview(Base):
    __tablename__ = "financial_overview"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(String, unique=True, index=True)
    currency: Mapped[str | None] = mapped_column(String, nullable=True)
    monthly_income: Mapped[float | None] = mapped_column(Float, nullable=True)
    monthly_fixed_costs: Mapped[float | None] = mapped_column(Float, nullable=True)
    avg_discretionary: Mapped[float | None] = mapped_column(Float, nullable=True)
    savings_rate: Mapped[float | None] = mapped_column(Float, nullable=True)
    goals: Mapped[list | None] = mapped_column(JSON, nullable=True)  # [{name, target, progress}]
    emergency_goal_target: Mapped[float | None] = mapped_column(Float, nullable=True)
    emergency_goal_progress: Mapped[float | None] = mapped_column(Float, nullable=True)
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime, default=datetime.datetime.utcnow
    )


class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(String, index=True)
    timestamp: Mapped[datetime.datetime] = mapped_column(
        DateTime, default=datetime.datetime.utcnow, index=True
    )
    description: Mapped[str] = mapped_column(Text, default="")
    amount: Mapped[float] = mapped_column(Float)  # negative = outflow
    category: Mapped[str | None] = mapped_column(String, nullable=True)


@lru_cache
def get_engine(database_url: str) -> AsyncEngine:
    if database_url.startswith("sqlite"):
        # aiosqlite connections are bound to the loop that opened them
        return create_async_engine(database_url, echo=False, poolclass=NullPool)
    return create_async_engine(database_url, echo=False)


def get_session_factory(database_url: str) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(get_engine(database_url), expire_on_commit=False)


async def create_tables(database_url: str) -> None:
    async with get_engine(database_url).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_demo_user(database_url: str, path: Path = _DEMO_USER) -> bool:
    """Insert the demo user's overview and transactions unless already present."""
    demo = json.loads(path.read_text(encoding="utf-8"))
    user_id = demo["user_id"]

    async with get_session_factory(database_url)() as session:
        result = await session.execute(
            select(FinancialOverview).where(FinancialOverview.user_id == user_id)
        )
        if result.scalar_one_or_none():
            return False

        overview = demo["overview"]
        session.add(FinancialOverview(
            user_id=user_id,
            currency=overview["currency"],
            monthly_income=overview["monthly_income"],
            monthly_fixed_costs=overview["monthly_fixed_costs"],
            avg_discretionary=overview["avg_discretionary"],
            savings_rate=overview["savings_rate"],
            goals=overview["goals"],
        ))

        now = datetime.datetime.utcnow()
        for t in demo["transactions"]:
            session.add(Transaction(
                user_id=user_id,
                timestamp=now - datetime.timedelta(days=t["days_ago"]),
                description=t["description"],
                amount=t["amount"],
                category=t["category"],
            ))

        await session.commit()
    logger.info("Seeded demo user %s", user_id)
    return True
