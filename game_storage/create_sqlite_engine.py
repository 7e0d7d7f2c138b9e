import pathlib

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from game_storage.load_secrets import sqlite_busy_timeout, sqlite_path

file_path = pathlib.Path(sqlite_path) if sqlite_path else pathlib.Path(__file__).parent / "game_storage.sqlite3"
sqlite_url = f"sqlite+aiosqlite:///{file_path}"

# execution option set by write units of work
BEGIN_IMMEDIATE = "sqlite_begin_immediate"


def create_sqlite_engine(url: str, busy_timeout: float = sqlite_busy_timeout, **kwargs) -> AsyncEngine:
    """Create an aiosqlite engine whose write transactions take the write lock up front.

    SQLite has no SELECT ... FOR UPDATE, so a connection carrying the
    BEGIN_IMMEDIATE execution option starts its transaction with BEGIN IMMEDIATE.
    Two transitions on the same game are serialized the same way a row lock
    serializes them on PostgreSQL. Everything else gets a deferred BEGIN, so
    reads are not held up by a write that is waiting on the match service.

    Args:
        url (str): sqlite+aiosqlite URL
        busy_timeout (float): Seconds to wait for the write lock before "database is locked"
        **kwargs: passed through to create_async_engine

    Returns:
        AsyncEngine: engine with the connect/begin hooks installed
    """
    kwargs["connect_args"] = {"timeout": busy_timeout, **kwargs.get("connect_args", {})}
    new_engine = create_async_engine(url, **kwargs)

    @event.listens_for(new_engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        # let the "begin" hook below emit BEGIN instead of the driver
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(new_engine.sync_engine, "begin")
    def do_begin(conn):
        if conn.get_execution_options().get(BEGIN_IMMEDIATE):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")

    return new_engine


engine = create_sqlite_engine(sqlite_url, echo=False)
