from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from sqlalchemy.orm import selectinload
from datetime import datetime
from typing import List
from uuid6 import uuid7

from game_storage.domain.game_rules import GameState, page_offset
from game_storage.models.schemas import Game, Team, TeamGameSummary

# None of these helpers commit. The caller owns the transaction
# (see game_storage.services.unit_of_work).


def generate_game_code() -> str:
    """Human-facing game code taken from the random tail of a UUIDv7."""
    return uuid7().hex[-10:].upper()


def _detailed_game_query():
    return select(Game).options(
        selectinload(Game.participations).selectinload(TeamGameSummary.team)
    )


class ReadData:
    @staticmethod
    async def read_team_by_code(code: str, session: AsyncSession) -> Team | None:
        """Resolve a team by its unique code

        Args:
            code (str): Team code
            session (AsyncSession): AsyncSession object to interact with database

        Returns:
            Team | None: The team, or None if the code is unknown
        """
        stmt = select(Team).where(Team.code == code)
        result = await session.execute(stmt)
        return result.scalars().first()

    @staticmethod
    async def read_game_by_code(code: str, session: AsyncSession, for_update: bool = False) -> Game | None:
        """Read a game with both participations and their teams

        Args:
            code (str): Game code
            session (AsyncSession): AsyncSession object to interact with database
            for_update (bool): Lock the game row until the transaction ends

        Returns:
            Game | None: The detailed game, or None if the code is unknown
        """
        stmt = _detailed_game_query().where(Game.code == code)
        if for_update:
            stmt = stmt.with_for_update(of=Game)
        result = await session.execute(stmt)
        return result.scalars().first()

    @staticmethod
    async def read_recent_created_games(session: AsyncSession) -> List[Game]:
        """Read games still waiting to start, most recent first"""
        stmt = (
            _detailed_game_query()
            .where(Game.state == GameState.created)
            .order_by(desc(Game.id))
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def read_game_page(page: int, page_size: int, session: AsyncSession) -> List[Game]:
        """Read one page of games ordered by id descending

        Args:
            page (int): Page number, starting at 1
            page_size (int): Games per page
            session (AsyncSession): AsyncSession object to interact with database

        Returns:
            List[Game]: At most page_size games
        """
        stmt = (
            _detailed_game_query()
            .order_by(desc(Game.id))
            .offset(page_offset(page, page_size))
            .limit(page_size)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())


class CreateData:
    @staticmethod
    def create_participation(team: Team, position: int) -> TeamGameSummary:
        """Allocate an unattached participation for a team.

        It is persisted together with the game it is handed to.
        """
        return TeamGameSummary(team=team, team_id=team.id, position=position, is_winner=False)

    @staticmethod
    async def create_game(
        start_time: datetime,
        first_summary: TeamGameSummary,
        second_summary: TeamGameSummary,
        duration_minutes: int,
        session: AsyncSession,
    ) -> Game:
        """Create a game in Created state owning both participations

        Args:
            start_time (datetime): Scheduled start
            first_summary (TeamGameSummary): Participation at position 0
            second_summary (TeamGameSummary): Participation at position 1
            duration_minutes (int): Planned length of the game
            session (AsyncSession): AsyncSession object to interact with database

        Returns:
            Game: The new game, flushed so that ids are assigned
        """
        new_game = Game(
            code=generate_game_code(),
            start_time=start_time,
            duration_minutes=duration_minutes,
            state=GameState.created,
            created_at=datetime.now(),
            participations=[first_summary, second_summary],
        )
        session.add(new_game)
        await session.flush()
        return new_game

    @staticmethod
    async def create_team(code: str, name: str, session: AsyncSession) -> Team:
        new_team = Team(code=code, name=name)
        session.add(new_team)
        await session.flush()
        return new_team


class UpdateData:
    @staticmethod
    async def update_game(game: Game, session: AsyncSession) -> None:
        """Flush pending changes of a loaded game.

        The version column is checked here, so a concurrent writer surfaces as
        StaleDataError from this call.
        """
        session.add(game)
        await session.flush()


class DeleteData:
    @staticmethod
    async def delete_participation(summary: TeamGameSummary, session: AsyncSession) -> None:
        await session.delete(summary)

    @staticmethod
    async def delete_game(game: Game, session: AsyncSession) -> None:
        await session.delete(game)
        await session.flush()
