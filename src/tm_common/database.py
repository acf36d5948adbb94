"""Async engine, session factories and the conflict-retrying transaction runner.

Two session factories share one connection pool:
  - async_session_factory: READ COMMITTED, used by request-scoped reads.
  - serializable_session_factory: SERIALIZABLE, used by run_transaction().

run_transaction() is the only shared-mutation discipline in the service.
Postgres validates the read set at commit; a conflicting concurrent writer
surfaces as SQLSTATE 40001 (or 40P01 for a lock cycle) and the whole unit of
work is re-run from scratch on a fresh session.
"""

import asyncio
import logging
import random
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any, TypeVar

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from config.settings import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

TransactionWork = Callable[[AsyncSession], Awaitable[T]]

# Signature of run_transaction as seen by services (tests inject an inline runner)
Transact = Callable[[TransactionWork[Any]], Awaitable[Any]]

_RETRYABLE_SQLSTATES = frozenset({"40001", "40P01"})
_BACKOFF_BASE_SECONDS = 0.02

engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=20,
    max_overflow=10,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

serializable_session_factory = async_sessionmaker(
    engine.execution_options(isolation_level="SERIALIZABLE"),
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields an AsyncSession, auto-closes after request."""
    async with async_session_factory() as session:
        yield session


def is_retryable(exc: BaseException) -> bool:
    """True for serialization failures and deadlocks reported by Postgres."""
    if not isinstance(exc, DBAPIError):
        return False
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return sqlstate in _RETRYABLE_SQLSTATES


async def run_transaction(
    work: TransactionWork[T],
    *,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    max_attempts: int | None = None,
) -> T:
    """Run `work` inside one SERIALIZABLE transaction, retrying on conflicts.

    `work` must be a pure function of the rows it reads: it may be called
    several times and must not perform network I/O. The transaction commits
    when `work` returns and rolls back when it raises.
    """
    factory = session_factory or serializable_session_factory
    attempts = max_attempts or settings.TRANSACTION_MAX_ATTEMPTS

    for attempt in range(1, attempts + 1):
        try:
            async with factory() as session:
                async with session.begin():
                    return await work(session)
        except DBAPIError as exc:
            if not is_retryable(exc) or attempt == attempts:
                raise
            delay = _BACKOFF_BASE_SECONDS * attempt * (1 + random.random())
            logger.info(
                "Transaction conflict (attempt %d/%d), retrying in %.0fms",
                attempt,
                attempts,
                delay * 1000,
            )
            await asyncio.sleep(delay)

    raise RuntimeError("unreachable: run_transaction exhausted without result")
