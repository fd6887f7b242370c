import sqlite3
import aiosqlite
from contextlib import asynccontextmanager
from typing import Optional

from advocates_api.config import settings


def get_database_path() -> str:
    return settings.database_path


def py_lower(value):
    # SQLite's built-in LOWER only folds ASCII; searches fold like str.lower()
    return value.lower() if value is not None else None


@asynccontextmanager
async def get_db_connection(database_path: Optional[str] = None):
    """Async context manager for SQLite connection."""
    conn = await aiosqlite.connect(database_path or get_database_path())
    await conn.execute('PRAGMA journal_mode=WAL')
    await conn.create_function("py_lower", 1, py_lower, deterministic=True)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        await conn.close()
