import argparse
import asyncio
import logging

from sqlalchemy.ext.asyncio import async_sessionmaker

from game_storage.crud import CreateData, ReadData
from game_storage.db import Session, engine
from game_storage.exceptions import ConflictError
from game_storage.models.schemas import Base
from game_storage.models.schema_models import TeamSchema
from game_storage.services.unit_of_work import unit_of_work


async def register_team(code: str, name: str, session_maker: async_sessionmaker) -> TeamSchema:
    """Register a team so that games can reference it by code

    Args:
        code (str): Unique team code
        name (str): Display name
        session_maker (async_sessionmaker): Session factory

    Raises:
        ConflictError: A team with this code already exists

    Returns:
        TeamSchema: The stored team
    """
    async with unit_of_work(session_maker, code) as session:
        if await ReadData.read_team_by_code(code, session) is not None:
            raise ConflictError(f"Team {code} already exists", code)
        team = await CreateData.create_team(code, name, session)
        registered = TeamSchema.model_validate(team)
    logging.info(f"Team {code} registered.")
    return registered


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Register a team")
    parser.add_argument("--code", type=str, help="Unique team code", required=True)
    parser.add_argument("--name", type=str, help="Team name", required=True)
    return parser

async def main(code: str, name: str):

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    team = await register_team(code, name, Session)
    print(team.id, team.code, team.name)
    await engine.dispose()


if __name__ == "__main__":
    parser = get_parser()
    args = parser.parse_args()
    asyncio.run(main(args.code, args.name))
