from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finance_assistant.models.orm import Budget, Expense


async def get_expenses(session: AsyncSession, user_id: int) -> List[Expense]:
    """All of a user's expenses, newest first."""
    query = (
        select(Expense)
        .where(Expense.user_id == user_id)
        .order_by(Expense.date.desc(), Expense.id.desc())
    )
    result = await session.execute(query)
    return list(result.scalars().all())


async def get_expense(session: AsyncSession, user_id: int, expense_id: int) -> Optional[Expense]:
    result = await session.execute(
        select(Expense).where(Expense.id == expense_id, Expense.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def get_budgets(
    session: AsyncSession,
    user_id: int,
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> List[Budget]:
    """A user's budgets, optionally scoped to one month/year, by category."""
    query = select(Budget).where(Budget.user_id == user_id)

    if month is not None and year is not None:
        query = query.where(Budget.month == month, Budget.year == year)

    query = query.order_by(Budget.category.asc())
    result = await session.execute(query)
    return list(result.scalars().all())


async def get_budget(session: AsyncSession, user_id: int, budget_id: int) -> Optional[Budget]:
    result = await session.execute(
        select(Budget).where(Budget.id == budget_id, Budget.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def find_budget(session: AsyncSession, user_id: int, category: str, month: int, year: int) -> Optional[Budget]:
    result = await session.execute(
        select(Budget).where(
            Budget.user_id == user_id,
            Budget.category == category,
            Budget.month == month,
            Budget.year == year,
        )
    )
    return result.scalars().first()
