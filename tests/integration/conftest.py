"""Integration-test fixtures.

Need a migrated PostgreSQL (`alembic upgrade head`) at DATABASE_URL.
Every test here is skipped when the database cannot be reached.

All integration tests share a single event loop so that the module-level
SQLAlchemy async engine pool (created at import time) stays valid across
the whole session.
"""

import uuid
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, OperationalError

from src.tm_common.database import async_session_factory, engine


@pytest_asyncio.fixture(loop_scope="session", scope="session", autouse=True)
async def database_available() -> AsyncGenerator[None, None]:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1 FROM matches LIMIT 1"))
    except (OSError, OperationalError, DBAPIError) as exc:
        pytest.skip(f"PostgreSQL not available or not migrated: {exc}")
    yield
    await engine.dispose()


@pytest.fixture
def run_id() -> str:
    """Unique suffix so repeated runs never collide on user or match ids."""
    return uuid.uuid4().hex[:10]


@pytest_asyncio.fixture(loop_scope="session")
async def cleanup(run_id: str) -> AsyncGenerator[None, None]:
    yield
    async with async_session_factory() as db:
        pattern = f"%{run_id}%"
        await db.execute(text("DELETE FROM match_queue WHERE user_id LIKE :p"), {"p": pattern})
        await db.execute(text("DELETE FROM match_history WHERE player_id LIKE :p"), {"p": pattern})
        await db.execute(
            text("DELETE FROM match_settlements WHERE match_id LIKE :p OR match_id IN "
                 "(SELECT id FROM matches WHERE players::text LIKE :p)"),
            {"p": pattern},
        )
        await db.execute(text("DELETE FROM matches WHERE players::text LIKE :p"), {"p": pattern})
        await db.commit()
