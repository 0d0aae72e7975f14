"""
JWT Authentication utilities
"""

from datetime import timedelta
from jose import JWTError, jwt
from typing import Dict, Optional
import uuid

from pos_backend.core.clock import utcnow
from pos_backend.core.config import get_settings
from pos_backend.schemas.token import Actor, TokenPayload

settings = get_settings()


def create_access_token(
    user_id: uuid.UUID,
    role: str,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create JWT access token with user claims"""
    if expires_delta:
        expire = utcnow() + expires_delta
    else:
        expire = utcnow() + timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "sub": str(user_id),
        "role": role,
        "exp": expire,
        "iat": utcnow(),
    }

    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict]:
    """Decode and validate JWT token"""
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None


def actor_from_token(token: str) -> Optional[Actor]:
    """Resolve the acting staff member from a token, None if invalid"""
    payload = decode_access_token(token)
    if payload is None:
        return None

    try:
        token_data = TokenPayload(**payload)
        user_id = uuid.UUID(token_data.sub)
    except ValueError:
        return None
    return Actor(user_id=user_id, role=token_data.role)
