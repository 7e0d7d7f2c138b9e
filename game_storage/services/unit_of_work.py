import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from game_storage.create_sqlite_engine import BEGIN_IMMEDIATE
from game_storage.exceptions import ConflictError

# ignored by backends other than SQLite
WRITE_OPTIONS = {BEGIN_IMMEDIATE: True}


def is_lock_timeout(e: OperationalError) -> bool:
    return "database is locked" in str(e.orig)


@asynccontextmanager
async def unit_of_work(
    Session: async_sessionmaker, code: str | None = None, write: bool = True
) -> AsyncIterator[AsyncSession]:
    """One transaction around every write a lifecycle operation makes.

    Commits when the block exits normally and rolls back on any exception,
    including cancellation. Losing a concurrent update on the same game, or
    waiting too long for another request's lock, shows up as ConflictError.

    NOTE: Do not call anything that commit()s inside this block.

    Args:
        Session (async_sessionmaker): Session factory
        code (str | None): Game code, attached to ConflictError for diagnostics
        write (bool): Take the write lock when the transaction begins. Pass False
            for read-only work so it never waits on a writer.
    """
    async with Session() as session:
        try:
            async with session.begin():
                if write:
                    await session.connection(execution_options=WRITE_OPTIONS)
                yield session
        except StaleDataError as e:
            logging.warning(f"Game {code} was changed by a concurrent request: {e}")
            raise ConflictError(f"Game {code} was modified concurrently", code) from e
        except IntegrityError as e:
            logging.warning(f"Integrity conflict on game {code}: {e.orig}")
            raise ConflictError(f"Game {code} conflicts with an existing record", code) from e
        except OperationalError as e:
            if not is_lock_timeout(e):
                raise
            logging.warning(f"Gave up waiting for the lock on game {code}: {e.orig}")
            raise ConflictError(f"Game {code} is locked by another request", code) from e
