"""Authentication utilities: JWT tokens and password hashing."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Annotated

import bcrypt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from coin_oracle.infra.config import settings
from coin_oracle.models.flip import User
from coin_oracle.storage.base import Storage
from coin_oracle.storage.manager import get_storage


# --- Password hashing ---


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(plain_password.encode(), hashed_password.encode())
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False


# --- Token schemas ---


class TokenData(BaseModel):
    user_id: int
    exp: datetime


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    expires_at: datetime


# --- JWT utilities ---


def create_access_token(user_id: int) -> TokenResponse:
    """Create a JWT access token for a user."""
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    payload = {"sub": str(user_id), "exp": expires_at}
    token = jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return TokenResponse(
        access_token=token,
        user_id=user_id,
        expires_at=expires_at,
    )


def decode_access_token(token: str) -> TokenData:
    """Decode and validate a JWT token. Raises HTTPException on failure."""
    try:
        payload = jwt.decode(
            token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
        )
    except JWTError as e:
        raise HTTPException(status_code=401, detail=f"Invalid token: {e}")
    subject = payload.get("sub", "")
    if not subject or not str(subject).isdigit():
        raise HTTPException(status_code=401, detail="Invalid token: missing subject")
    exp = datetime.fromtimestamp(payload.get("exp", 0), tz=timezone.utc)
    return TokenData(user_id=int(subject), exp=exp)


async def authenticate_by_password(storage: Storage, username: str, password: str) -> User | None:
    """Authenticate a user by username + password. Returns User or None."""
    user = await storage.get_user_by_username(username)
    if user is None or not verify_password(password, user.password):
        return None
    return user


# --- FastAPI Dependencies ---

_bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
    storage: Annotated[Storage, Depends(get_storage)],
) -> User:
    """Dependency: extract user from JWT Bearer token."""
    if credentials is None:
        raise HTTPException(status_code=401, detail="Missing authorization header")
    token_data = decode_access_token(credentials.credentials)
    user = await storage.get_user(token_data.user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    return user


async def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
    storage: Annotated[Storage, Depends(get_storage)],
) -> User | None:
    """Dependency: the bearer-token user if a token was sent, else None.

    A token that is sent but invalid is still rejected.
    """
    if credentials is None:
        return None
    return await get_current_user(credentials, storage)
