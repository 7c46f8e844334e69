"""
Database connection and initialization.
"""

from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from lovii.logging import get_logger

logger = get_logger('database')

SCHEMA_PATH = Path(__file__).parent / "init_db.sql"


async def connect(db_path: str) -> aiosqlite.Connection:
    """
    Open a connection with row access by column name and foreign keys enforced.

    :param db_path: Path to the SQLite database
    :type db_path: str
    :return: Open database connection
    :rtype: aiosqlite.Connection
    """
    db = await aiosqlite.connect(db_path)
    db.row_factory = aiosqlite.Row
    await db.execute("PRAGMA foreign_keys = ON")
    return db


@asynccontextmanager
async def savepoint(db: aiosqlite.Connection, name: str):
    """
    Run the enclosed statements as one unit: all of them persist or none do.

    :param db: Open database connection
    :type db: aiosqlite.Connection
    :param name: Savepoint identifier
    :type name: str
    """
    await db.execute(f"SAVEPOINT {name}")
    try:
        yield db
    except Exception:
        await db.execute(f"ROLLBACK TO SAVEPOINT {name}")
        await db.execute(f"RELEASE SAVEPOINT {name}")
        raise
    await db.execute(f"RELEASE SAVEPOINT {name}")


async def init_db(db_path: str) -> None:
    """
    Initialize database with schema.

    :param db_path: Path to the SQLite database
    :type db_path: str
    :return: None
    :rtype: None
    """
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    async with aiosqlite.connect(db_path) as db:
        with open(SCHEMA_PATH) as f:
            await db.executescript(f.read())
        await db.commit()
    logger.info(f"Database initialized at {db_path}")
