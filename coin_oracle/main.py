"""coin-oracle: FastAPI application entry point.

Run with: python -m coin_oracle.main  (or: uvicorn coin_oracle.main:app)
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from importlib.metadata import version, PackageNotFoundError

from fastapi import FastAPI, Request

from coin_oracle.api import auth, flips, payments
from coin_oracle.infra.cache import ResponseCaches
from coin_oracle.infra.config import settings
from coin_oracle.storage.manager import StorageManager, initialize_storage

logger = logging.getLogger("coin-oracle")

try:
    __version__ = version("coin-oracle")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"


@asynccontextmanager
async def lifespan(app: FastAPI):  # type: ignore[no-untyped-def]
    manager: StorageManager = app.state.storage_manager
    kind = await initialize_storage(manager)
    logger.info("Serving with %s storage (env=%s).", kind, settings.app_env)
    yield
    await manager.dispose()


app = FastAPI(
    title="coin-oracle",
    description="Coin Flip Oracle: paid coin flips with AI suggestions",
    version=__version__,
    debug=settings.app_debug,
    lifespan=lifespan,
)

app.state.storage_manager = StorageManager(settings.async_database_url)
app.state.response_caches = ResponseCaches()

app.include_router(auth.router)
app.include_router(flips.router)
app.include_router(payments.router)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok", "engine": "coin-oracle", "version": __version__}


@app.get("/api/health")
async def api_health(request: Request) -> dict:
    """Probe the live storage backend."""
    manager: StorageManager = request.app.state.storage_manager
    report = {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.app_env,
        "storageKind": manager.kind,
        "database": "unknown",
        "storage": "unknown",
    }
    try:
        await manager.storage.get_flip_stats()
        report["database"] = "connected" if manager.kind == "database" else "not used"
        report["storage"] = "operational"
    except Exception:
        logger.warning("Health probe failed against %s storage.", manager.kind, exc_info=True)
        report["database"] = "error"
        report["storage"] = "error"
    return report


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.DEBUG if settings.app_debug else logging.INFO)
    uvicorn.run(app, host=settings.app_host, port=settings.app_port)
