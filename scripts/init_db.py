"""Create the coin-oracle tables and default coin settings row.

Usage:
    DATABASE_URL=postgresql://... python scripts/init_db.py
"""

from __future__ import annotations

import asyncio
import sys

from coin_oracle.infra.config import settings
from coin_oracle.infra.db import build_engine, initialize_database


async def init(database_url: str) -> bool:
    engine = build_engine(database_url)
    try:
        return await initialize_database(engine)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    if not settings.database_url:
        print("Error: DATABASE_URL is not set.")
        sys.exit(1)
    if not asyncio.run(init(settings.async_database_url)):
        print("Error: database initialization failed (see log output).")
        sys.exit(1)
    print("Database initialized.")
