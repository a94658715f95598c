import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from finance_assistant.database import get_db
from finance_assistant.errors import ConflictError, NotFoundError
from finance_assistant.models.orm import Budget
from finance_assistant.models.schemas import BudgetCreate, BudgetOut, BudgetUpdate
from finance_assistant.security import get_current_user_id
from finance_assistant.services.db_loader import find_budget, get_budget, get_budgets

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/budgets", tags=["budgets"])

DUPLICATE_BUDGET = "Budget already exists for this category in this month"


@router.get("", response_model=List[BudgetOut])
async def list_budgets(
    month: Optional[int] = None,
    year: Optional[int] = None,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db),
):
    """All budgets, or just one month's when both ``month`` and ``year`` are given."""
    return await get_budgets(session, user_id, month=month, year=year)


@router.post("", response_model=BudgetOut, status_code=201)
async def create_budget(
    payload: BudgetCreate,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db),
):
    if await find_budget(session, user_id, payload.category, payload.month, payload.year):
        raise ConflictError(DUPLICATE_BUDGET)

    budget = Budget(
        user_id=user_id,
        category=payload.category,
        amount=payload.amount,
        month=payload.month,
        year=payload.year,
    )
    session.add(budget)
    try:
        await session.commit()
    except IntegrityError:
        # lost a race with a concurrent create for the same period
        await session.rollback()
        raise ConflictError(DUPLICATE_BUDGET)
    await session.refresh(budget)

    logger.info(f"✅ Created {budget.category} budget {budget.month}/{budget.year} for user {user_id}")
    return budget


@router.put("/{budget_id}", response_model=BudgetOut)
async def update_budget(
    budget_id: int,
    payload: BudgetUpdate,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db),
):
    budget = await get_budget(session, user_id, budget_id)
    if budget is None:
        raise NotFoundError("Budget not found or unauthorized")

    budget.amount = payload.amount
    await session.commit()
    await session.refresh(budget)
    return budget


@router.delete("/{budget_id}")
async def delete_budget(
    budget_id: int,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db),
):
    budget = await get_budget(session, user_id, budget_id)
    if budget is None:
        raise NotFoundError("Budget not found or unauthorized")

    await session.delete(budget)
    await session.commit()

    logger.info(f"🗑️ Deleted budget {budget_id} for user {user_id}")
    return {"message": "Budget deleted successfully"}
