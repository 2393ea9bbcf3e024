"""
User profile and transaction connectors backed by the SQL store.

Without a configured database the profile falls back to a fixed mock and
the transaction list is empty.
"""

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select

from database import FinancialOverview, Transaction, get_session_factory
from schemas import FinancialProfile, Goal, TransactionRecord

if TYPE_CHECKING:
    from config import Settings

logger = logging.getLogger(__name__)

TRANSACTION_FETCH_LIMIT = 25


def mock_financial_profile(user_id: str) -> FinancialProfile:
    return FinancialProfile(
        user_id=user_id,
        currency="USD",
        monthly_income=5200,
        monthly_fixed_costs=2800,
        avg_discretionary=900,
        savings_rate=0.18,
        goals=[
            Goal(name="Emergency fund", target=10000, progress=0.6),
            Goal(name="Long-term investing", target=50000, progress=0.22),
        ],
    )


def _profile_from_row(user_id: str, row: FinancialOverview) -> FinancialProfile:
    if isinstance(row.goals, list):
        goals = [Goal(**g) for g in row.goals if isinstance(g, dict)]
    else:
        goals = [
            Goal(
                name="Emergency fund",
                target=row.emergency_goal_target or 0,
                progress=row.emergency_goal_progress or 0,
            )
        ]
    return FinancialProfile(
        user_id=user_id,
        currency=row.currency or "USD",
        monthly_income=row.monthly_income or 0,
        monthly_fixed_costs=row.monthly_fixed_costs or 0,
        avg_discretionary=row.avg_discretionary or 0,
        savings_rate=row.savings_rate or 0,
        goals=goals,
    )


async def get_user_financial_profile(user_id: str, settings: "Settings") -> FinancialProfile:
    if not settings.storage_configured:
        return mock_financial_profile(user_id)

    async with get_session_factory(settings.database_url)() as session:
        result = await session.execute(
            select(FinancialOverview).where(FinancialOverview.user_id == user_id)
        )
        row = result.scalar_one_or_none()

    if row is None:
        logger.info("No financial overview stored for %s; using mock profile", user_id)
        return mock_financial_profile(user_id)
    return _profile_from_row(user_id, row)


async def get_recent_transactions(
    user_id: str,
    settings: "Settings",
    limit: int = TRANSACTION_FETCH_LIMIT,
) -> list[TransactionRecord]:
    """Most recent first, at most `limit` rows."""
    if not settings.storage_configured:
        return []

    limit = max(0, min(limit, TRANSACTION_FETCH_LIMIT))
    async with get_session_factory(settings.database_url)() as session:
        result = await session.execute(
            select(Transaction)
            .where(Transaction.user_id == user_id)
            .order_by(Transaction.timestamp.desc())
            .limit(limit)
        )
        rows = result.scalars().all()

    return [
        TransactionRecord(
            id=t.id,
            timestamp=t.timestamp.isoformat(),
            description=t.description or "",
            amount=t.amount,
            category=t.category,
        )
        for t in rows
    ]
