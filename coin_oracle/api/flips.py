"""Flip API: flipping, history, stats and coin settings."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response

from coin_oracle.domain import flips
from coin_oracle.infra.auth import get_optional_user
from coin_oracle.infra.cache import ResponseCaches, get_response_caches
from coin_oracle.infra.config import settings
from coin_oracle.models.flip import (
    CoinSettings,
    CoinSettingsUpdate,
    FlipCreate,
    FlipRecord,
    FlipStats,
    Outcome,
    User,
)
from coin_oracle.storage.base import Storage
from coin_oracle.storage.manager import get_storage

logger = logging.getLogger("coin-oracle.api")

router = APIRouter(prefix="/api", tags=["flips"])

StorageDep = Annotated[Storage, Depends(get_storage)]
CachesDep = Annotated[ResponseCaches, Depends(get_response_caches)]


def add_cache_headers(response: Response, max_age: int) -> None:
    expires = datetime.now(timezone.utc) + timedelta(seconds=max_age)
    response.headers["Cache-Control"] = f"public, max-age={max_age}"
    response.headers["Expires"] = format_datetime(expires, usegmt=True)


# --- Request schemas ---


class FlipRequest(FlipCreate):
    outcome: Outcome | None = None  # server flips when omitted
    user_id: str | None = None


# --- Endpoints ---


@router.get("/history", response_model=list[FlipRecord])
async def get_history(response: Response, storage: StorageDep, caches: CachesDep):
    try:
        history = await flips.get_history(storage, caches)
    except Exception:
        logger.exception("Failed to fetch flip history")
        raise HTTPException(status_code=500, detail="Failed to fetch flip history")
    add_cache_headers(response, settings.history_cache_ttl_seconds)
    return history


@router.delete("/history")
async def delete_history(storage: StorageDep, caches: CachesDep) -> dict:
    try:
        await flips.clear_history(storage, caches)
    except Exception:
        logger.exception("Failed to clear flip history")
        raise HTTPException(status_code=500, detail="Failed to clear flip history")
    return {"message": "Flip history and statistics cleared successfully"}


@router.get("/stats", response_model=FlipStats)
async def get_stats(response: Response, storage: StorageDep, caches: CachesDep):
    try:
        stats = await flips.get_stats(storage, caches)
    except Exception:
        logger.exception("Failed to fetch statistics")
        raise HTTPException(status_code=500, detail="Failed to fetch statistics")
    add_cache_headers(response, settings.stats_cache_ttl_seconds)
    return stats


@router.post("/flip", response_model=FlipRecord, status_code=201)
async def post_flip(
    body: FlipRequest,
    storage: StorageDep,
    caches: CachesDep,
    user: Annotated[User | None, Depends(get_optional_user)],
):
    """Save a flip. The outcome is drawn server-side when the client omits it."""
    payer_id = str(user.id) if user is not None else (body.user_id or "default")
    if settings.require_payment and not await storage.get_payment_status(payer_id):
        raise HTTPException(status_code=402, detail="Payment required before flipping")

    flip = FlipCreate(
        outcome=body.outcome or flips.flip_coin(),
        **body.model_dump(exclude={"outcome", "user_id"}),
    )
    try:
        return await flips.record_flip(storage, caches, flip)
    except Exception:
        logger.exception("Failed to add flip to history")
        raise HTTPException(status_code=500, detail="Failed to add flip to history")


@router.get("/settings", response_model=CoinSettings)
async def get_settings(response: Response, storage: StorageDep, caches: CachesDep):
    try:
        coin_settings = await flips.get_settings(storage, caches)
    except Exception:
        logger.exception("Failed to fetch coin settings")
        raise HTTPException(status_code=500, detail="Failed to fetch coin settings")
    add_cache_headers(response, settings.settings_cache_ttl_seconds)
    return coin_settings


@router.post("/settings", response_model=CoinSettings)
async def post_settings(body: CoinSettingsUpdate, storage: StorageDep, caches: CachesDep):
    try:
        return await flips.update_settings(storage, caches, body)
    except Exception:
        logger.exception("Failed to update coin settings")
        raise HTTPException(status_code=500, detail="Failed to update coin settings")
