"""Financial context aggregation for the assistant.

``summarize`` is the pure computation; ``build_context`` fetches the owner's
rows and feeds them through it.
"""
import logging
from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from finance_assistant.errors import DataUnavailableError
from finance_assistant.models.schemas import (
    BudgetStatus, ExpenseContext, RecentTransaction,
)
from finance_assistant.services.db_loader import get_budgets, get_expenses

logger = logging.getLogger(__name__)

RECENT_LIMIT = 10
ZERO = Decimal("0")


def previous_month(month: int, year: int) -> Tuple[int, int]:
    if month == 1:
        return 12, year - 1
    return month - 1, year


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps float inputs from dragging binary noise into the sums
    return Decimal(str(value))


def summarize(expenses: Iterable, budgets: Iterable, reference: datetime) -> ExpenseContext:
    """Build an ExpenseContext from expense and budget rows.

    ``budgets`` should already be scoped to the reference month; every row
    passed in is reported.
    """
    this_month, this_year = reference.month, reference.year
    last_month, last_year = previous_month(this_month, this_year)

    ordered = sorted(expenses, key=lambda e: e.date, reverse=True)

    total = ZERO
    this_month_total = ZERO
    last_month_total = ZERO
    breakdown = defaultdict(Decimal)

    for e in ordered:
        amount = _to_decimal(e.amount)
        total += amount

        period = (e.date.month, e.date.year)
        if period == (this_month, this_year):
            this_month_total += amount
            breakdown[e.category] += amount
        elif period == (last_month, last_year):
            last_month_total += amount

    recent = [
        RecentTransaction(
            title=e.title,
            amount=_to_decimal(e.amount),
            category=e.category,
            date=e.date,
        )
        for e in ordered[:RECENT_LIMIT]
    ]

    budget_status = [
        BudgetStatus(
            category=b.category,
            amount=_to_decimal(b.amount),
            spent=breakdown.get(b.category, ZERO),
        )
        for b in budgets
    ]

    return ExpenseContext(
        total_expenses=total,
        this_month_total=this_month_total,
        last_month_total=last_month_total,
        category_breakdown=dict(breakdown),
        recent_transactions=recent,
        budgets=budget_status,
    )


async def build_context(
    session: AsyncSession, user_id: int, reference: Optional[datetime] = None
) -> ExpenseContext:
    """Fetch a user's rows and aggregate them relative to ``reference`` (default: now)."""
    reference = reference or datetime.now()

    try:
        expenses = await get_expenses(session, user_id)
        budgets = await get_budgets(session, user_id, month=reference.month, year=reference.year)
    except SQLAlchemyError as e:
        logger.error(f"❌ Failed to load financial data for user {user_id}: {e}")
        raise DataUnavailableError() from e

    context = summarize(expenses, budgets, reference)
    logger.info(
        f"📊 Built context for user {user_id}: {len(expenses)} expenses, "
        f"{len(budgets)} budgets, this month {context.this_month_total}"
    )
    return context
