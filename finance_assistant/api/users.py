import logging

from fastapi import APIRouter, Depends
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from finance_assistant.database import get_db
from finance_assistant.errors import BadRequestError, NotFoundError
from finance_assistant.models.orm import Budget, Expense, User
from finance_assistant.models.schemas import AccountDelete, PasswordChange, ProfileUpdate, UserOut
from finance_assistant.security import get_current_user_id, hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user", tags=["user"])


async def _load_user(session: AsyncSession, user_id: int) -> User:
    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundError("User not found")
    return user


@router.get("/profile")
async def get_profile(
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db),
):
    user = await _load_user(session, user_id)
    return {
        "user": {
            "id": user.id,
            "email": user.email,
            "name": user.name,
            "createdAt": user.created_at,
        }
    }


@router.patch("/profile")
async def update_profile(
    payload: ProfileUpdate,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db),
):
    user = await _load_user(session, user_id)
    user.name = payload.name
    await session.commit()
    await session.refresh(user)

    return {"message": "Profile updated successfully", "user": UserOut.model_validate(user)}


@router.patch("/password")
async def change_password(
    payload: PasswordChange,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db),
):
    user = await _load_user(session, user_id)
    if not verify_password(payload.current_password, user.password_hash):
        raise BadRequestError("Current password is incorrect")

    user.password_hash = hash_password(payload.new_password)
    await session.commit()

    logger.info(f"🔑 Password changed for user {user_id}")
    return {"message": "Password changed successfully"}


@router.delete("/delete")
async def delete_account(
    payload: AccountDelete,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db),
):
    """Delete the account together with all of its expenses and budgets."""
    user = await _load_user(session, user_id)
    if not verify_password(payload.password, user.password_hash):
        raise BadRequestError("Password is incorrect")

    await session.execute(delete(Expense).where(Expense.user_id == user_id))
    await session.execute(delete(Budget).where(Budget.user_id == user_id))
    await session.execute(delete(User).where(User.id == user_id))
    await session.commit()

    logger.info(f"🗑️ Deleted account {user_id}")
    return {"message": "Account deleted successfully"}
