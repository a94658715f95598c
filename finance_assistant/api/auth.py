import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finance_assistant.database import get_db
from finance_assistant.errors import AuthError, ConflictError
from finance_assistant.models.orm import User
from finance_assistant.models.schemas import AuthResponse, LoginRequest, SignupRequest, UserOut
from finance_assistant.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


async def get_user_by_email(session: AsyncSession, email: str):
    result = await session.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


@router.post("/signup", response_model=AuthResponse, status_code=201)
async def signup(payload: SignupRequest, request: Request, session: AsyncSession = Depends(get_db)):
    if await get_user_by_email(session, payload.email):
        raise ConflictError("User already exists with this email")

    user = User(
        email=payload.email,
        name=payload.name,
        password_hash=hash_password(payload.password),
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)

    logger.info(f"✅ Registered user {user.id}")
    token = create_access_token(request.app.state.settings, user.id, user.email)
    return AuthResponse(
        message="User created successfully",
        user=UserOut.model_validate(user),
        token=token,
    )


@router.post("/login", response_model=AuthResponse)
async def login(payload: LoginRequest, request: Request, session: AsyncSession = Depends(get_db)):
    user = await get_user_by_email(session, payload.email)
    if not user or not verify_password(payload.password, user.password_hash):
        logger.warning("⚠️ Failed login attempt")
        raise AuthError("Invalid email or password")

    token = create_access_token(request.app.state.settings, user.id, user.email)
    return AuthResponse(
        message="Login successful",
        user=UserOut.model_validate(user),
        token=token,
    )
