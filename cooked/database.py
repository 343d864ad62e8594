import json
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import aiosqlite


async def get_db_connection(path: str):
    db = await aiosqlite.connect(path)
    db.row_factory = aiosqlite.Row
    await create_tables(db)
    return db


async def create_tables(db: aiosqlite.Connection):
    await db.execute("""
        CREATE TABLE IF NOT EXISTS api_cache (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            url TEXT UNIQUE NOT NULL,
            data TEXT NOT NULL,
            timestamp DATETIME DEFAULT CURRENT_TIMESTAMP
        )
    """)
    await db.commit()


async def read_cached(path: str, url: str, ttl_seconds: int) -> Optional[Any]:
    """Return the cached payload for ``url`` unless it is missing or older than the TTL."""
    db = await get_db_connection(path)
    try:
        cursor = await db.execute("SELECT data, timestamp FROM api_cache WHERE url = ?", (url,))
        row = await cursor.fetchone()
        if not row:
            return None
        timestamp = datetime.fromisoformat(row["timestamp"])
        if datetime.now(timezone.utc) - timestamp >= timedelta(seconds=ttl_seconds):
            return None
        return json.loads(row["data"])
    finally:
        await db.close()


async def write_cached(path: str, url: str, data: Any):
    db = await get_db_connection(path)
    try:
        await db.execute(
            "INSERT OR REPLACE INTO api_cache (url, data, timestamp) VALUES (?, ?, ?)",
            (url, json.dumps(data), datetime.now(timezone.utc).isoformat()),
        )
        await db.commit()
    finally:
        await db.close()
