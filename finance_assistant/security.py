import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext

from finance_assistant.config import Settings
from finance_assistant.errors import AuthError

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"

# Password hashing context
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def create_access_token(settings: Settings, user_id: int, email: str, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    payload = {
        "userId": user_id,
        "email": email,
        "iat": now,
        "exp": now + timedelta(days=settings.jwt_expires_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)


def decode_access_token(settings: Settings, token: str) -> dict:
    """Return the token payload or raise AuthError for anything invalid or expired."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthError("Token expired")
    except jwt.InvalidTokenError as e:
        logger.warning(f"⚠️ Rejected bearer token: {e}")
        raise AuthError("Invalid token")

    if not isinstance(payload.get("userId"), int):
        raise AuthError("Invalid token")
    return payload


async def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> int:
    """Authenticated owner id from the ``Authorization: Bearer`` header."""
    if credentials is None or not credentials.credentials:
        raise AuthError("Unauthorized")

    payload = decode_access_token(request.app.state.settings, credentials.credentials)
    return payload["userId"]
