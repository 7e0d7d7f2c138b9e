import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager

from game_storage.db import Session, engine
from game_storage.load_secrets import (
    log_level,
    match_service_retries,
    match_service_timeout,
    match_service_url,
)
from game_storage.models.schemas import Base
from game_storage.routers import game
from game_storage.services.game_lifecycle import GameLifecycle
from game_storage.services.notifier import MatchNotifier

logging.basicConfig(level=log_level)


@asynccontextmanager
async def lifespan(app):
    """Create the tables and the shared match service client.
    This function is called to start the server.
    """
    async with engine.begin() as conn:
        # Existing tables are skipped
        await conn.run_sync(Base.metadata.create_all)

    notifier = MatchNotifier(
        match_service_url,
        timeout=match_service_timeout,
        retries=match_service_retries,
    )
    app.state.game_lifecycle = GameLifecycle(Session, notifier)
    try:
        yield
    finally:
        await notifier.close()
        await engine.dispose()
        logging.info("Stop Server")


app = FastAPI(lifespan=lifespan)
app.include_router(game.game_router)

