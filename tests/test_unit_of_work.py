import sqlite3
from datetime import timedelta

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from game_storage.crud import CreateData, ReadData
from game_storage.exceptions import ConflictError, NotFoundError
from game_storage.models.schemas import Team
from game_storage.register_team import register_team
from game_storage.services.unit_of_work import unit_of_work

from conftest import IN_TWO_HOURS


class TestUnitOfWork:
    @pytest.mark.asyncio
    async def test_commits_on_success(self, Session):
        async with unit_of_work(Session) as session:
            await CreateData.create_team("ORG", "Orange", session)

        async with Session() as session:
            assert await ReadData.read_team_by_code("ORG", session) is not None

    @pytest.mark.asyncio
    async def test_rolls_back_on_error(self, Session):
        with pytest.raises(NotFoundError):
            async with unit_of_work(Session) as session:
                await CreateData.create_team("ORG", "Orange", session)
                raise NotFoundError("Game", "G1")

        async with Session() as session:
            assert (await session.execute(select(Team))).scalars().all() == []

    @pytest.mark.asyncio
    async def test_stale_version_becomes_conflict(self, Session):
        with pytest.raises(ConflictError) as excinfo:
            async with unit_of_work(Session, "G1"):
                raise StaleDataError("UPDATE statement on table 'game' expected to update 1 row(s)")
        assert excinfo.value.code == "G1"

    @pytest.mark.asyncio
    async def test_lock_timeout_becomes_conflict(self, Session):
        with pytest.raises(ConflictError) as excinfo:
            async with unit_of_work(Session, "G1"):
                raise OperationalError("BEGIN IMMEDIATE", None, sqlite3.OperationalError("database is locked"))
        assert excinfo.value.code == "G1"

    @pytest.mark.asyncio
    async def test_other_operational_errors_propagate(self, Session):
        with pytest.raises(OperationalError):
            async with unit_of_work(Session, "G1"):
                raise OperationalError("SELECT", None, sqlite3.OperationalError("disk I/O error"))

    @pytest.mark.asyncio
    async def test_duplicate_key_becomes_conflict(self, Session, teams):
        with pytest.raises(ConflictError):
            async with unit_of_work(Session, "RED") as session:
                await CreateData.create_team("RED", "Another Red", session)

    @pytest.mark.asyncio
    async def test_lost_update_becomes_conflict(self, lifecycle, Session):
        game = await lifecycle.create_game(IN_TWO_HOURS, "RED", "BLU", 60)
        async with Session() as session:
            stale = await ReadData.read_game_by_code(game.code, session)
        await lifecycle.update_game(game.code, IN_TWO_HOURS + timedelta(hours=1), 90)

        with pytest.raises(ConflictError) as excinfo:
            async with unit_of_work(Session, game.code) as session:
                stale.duration_minutes = 30
                session.add(stale)

        assert excinfo.value.code == game.code
        assert (await lifecycle.find_game(game.code)).duration_minutes == 90


class TestRegisterTeam:
    @pytest.mark.asyncio
    async def test_registered_team_can_be_looked_up(self, Session):
        team = await register_team("ORG", "Orange", Session)

        async with Session() as session:
            stored = await ReadData.read_team_by_code("ORG", session)
        assert stored.id == team.id
        assert stored.name == "Orange"

    @pytest.mark.asyncio
    async def test_duplicate_code_conflicts(self, Session, teams):
        with pytest.raises(ConflictError):
            await register_team("RED", "Red Again", Session)
