import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from finance_assistant.database import get_db
from finance_assistant.errors import NotFoundError
from finance_assistant.models.orm import Expense
from finance_assistant.models.schemas import ExpenseIn, ExpenseOut
from finance_assistant.security import get_current_user_id
from finance_assistant.services.db_loader import get_expense, get_expenses

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/expenses", tags=["expenses"])


@router.get("", response_model=List[ExpenseOut])
async def list_expenses(
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db),
):
    return await get_expenses(session, user_id)


@router.post("", response_model=ExpenseOut, status_code=201)
async def create_expense(
    payload: ExpenseIn,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db),
):
    expense = Expense(
        user_id=user_id,
        title=payload.title,
        amount=payload.amount,
        category=payload.category,
        description=payload.description or None,
        date=payload.date,
    )
    session.add(expense)
    await session.commit()
    await session.refresh(expense)

    logger.info(f"✅ Saved expense {expense.id} for user {user_id}")
    return expense


@router.put("/{expense_id}")
async def update_expense(
    expense_id: int,
    payload: ExpenseIn,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db),
):
    expense = await get_expense(session, user_id, expense_id)
    if expense is None:
        raise NotFoundError("Expense not found or unauthorized")

    expense.title = payload.title
    expense.amount = payload.amount
    expense.category = payload.category
    expense.description = payload.description or None
    expense.date = payload.date
    await session.commit()
    await session.refresh(expense)

    return {"expense": ExpenseOut.model_validate(expense)}


@router.delete("/{expense_id}")
async def delete_expense(
    expense_id: int,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db),
):
    expense = await get_expense(session, user_id, expense_id)
    if expense is None:
        raise NotFoundError("Expense not found or unauthorized")

    await session.delete(expense)
    await session.commit()

    logger.info(f"🗑️ Deleted expense {expense_id} for user {user_id}")
    return {"message": "Expense deleted successfully"}
