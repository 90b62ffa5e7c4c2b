"""Auth API: registration, login, current user."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from coin_oracle.infra.auth import (
    authenticate_by_password,
    create_access_token,
    get_current_user,
    hash_password,
)
from coin_oracle.models.flip import User, UserCreate
from coin_oracle.storage.base import Storage
from coin_oracle.storage.manager import get_storage

router = APIRouter(prefix="/api/auth", tags=["auth"])


# --- Request schemas ---


class RegisterRequest(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=1)


class PasswordLoginRequest(BaseModel):
    username: str
    password: str


# --- Endpoints ---


@router.post("/register")
async def register(
    req: RegisterRequest,
    storage: Annotated[Storage, Depends(get_storage)],
) -> dict:
    """Register a new user with a username and password."""
    if await storage.get_user_by_username(req.username) is not None:
        raise HTTPException(status_code=409, detail="Username already registered")

    user = await storage.create_user(
        UserCreate(username=req.username, password=hash_password(req.password))
    )
    token = create_access_token(user.id)

    return {
        "user_id": user.id,
        "access_token": token.access_token,
        "expires_at": token.expires_at.isoformat(),
    }


@router.post("/login")
async def login(
    req: PasswordLoginRequest,
    storage: Annotated[Storage, Depends(get_storage)],
) -> dict:
    """Login via username + password. Returns JWT token."""
    user = await authenticate_by_password(storage, req.username, req.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token(user.id)
    return {
        "user_id": user.id,
        "access_token": token.access_token,
        "expires_at": token.expires_at.isoformat(),
    }


@router.get("/me")
async def get_me(user: Annotated[User, Depends(get_current_user)]) -> dict:
    """Return the current authenticated user's profile."""
    return {"user_id": user.id, "username": user.username}
