"""Game lifecycle use cases.

- Routers should not touch DB sessions directly; they call this module.
- This layer owns session/transaction boundaries (one unit of work per call).
- State legality comes from domain.game_rules.transition, never ad hoc checks.
- No Game objects are kept between calls; every operation reads fresh rows.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, List

from sqlalchemy.ext.asyncio import async_sessionmaker

from game_storage.converter import DataConverter
from game_storage.crud import CreateData, DeleteData, ReadData, UpdateData
from game_storage.domain.game_rules import (
    PAGE_SIZE,
    GameOperation,
    transition,
    validate_distinct_teams,
    validate_duration,
    validate_page,
    validate_start_time,
)
from game_storage.exceptions import ExternalServiceError, NotFoundError, ValidationError
from game_storage.models.schema_models import GameSchema
from game_storage.models.schemas import Game
from game_storage.services.notifier import MatchNotifier
from game_storage.services.unit_of_work import unit_of_work

data_converter = DataConverter()


class GameLifecycle:
    def __init__(
        self,
        Session: async_sessionmaker,
        notifier: MatchNotifier,
        clock: Callable[[], datetime] = datetime.now,
        page_size: int = PAGE_SIZE,
    ):
        self.Session = Session
        self.notifier = notifier
        self.clock = clock
        self.page_size = page_size

    async def _load_for_update(self, code: str, session) -> Game:
        game = await ReadData.read_game_by_code(code, session, for_update=True)
        if game is None:
            raise NotFoundError("Game", code)
        return game

    async def create_game(
        self,
        start_time: datetime,
        first_team_code: str,
        second_team_code: str,
        duration_minutes: int,
    ) -> GameSchema:
        """Schedule a new game between two registered teams

        Args:
            start_time (datetime): Must be at least one minute from now
            first_team_code (str): Team at position 0
            second_team_code (str): Team at position 1
            duration_minutes (int): Planned length, > 0

        Raises:
            ValidationError: Start too soon, bad duration or the same team twice
            NotFoundError: A team code does not resolve

        Returns:
            GameSchema: The created game in Created state
        """
        logging.info(
            f"Game creation request started. Date = {start_time}, FirstTeam = {first_team_code}, "
            f"SecondTeam = {second_team_code}, Duration = {duration_minutes}"
        )
        start_time = validate_start_time(start_time, self.clock())
        validate_duration(duration_minutes)
        validate_distinct_teams(first_team_code, second_team_code)

        async with unit_of_work(self.Session) as session:
            first_team = await ReadData.read_team_by_code(first_team_code, session)
            if first_team is None:
                logging.error(f"Invalid game creation request: FirstTeam {first_team_code} not found.")
                raise NotFoundError("Team", first_team_code)
            second_team = await ReadData.read_team_by_code(second_team_code, session)
            if second_team is None:
                logging.error(f"Invalid game creation request: SecondTeam {second_team_code} not found.")
                raise NotFoundError("Team", second_team_code)

            first_summary = CreateData.create_participation(first_team, 0)
            second_summary = CreateData.create_participation(second_team, 1)
            game = await CreateData.create_game(
                start_time, first_summary, second_summary, duration_minutes, session
            )
            created = data_converter.convert_game_to_gameschema(game)

        logging.info(f"Finished game creation request: Game {created.code} created.")
        return created

    async def start_game(self, code: str) -> GameSchema:
        """Move a game to Going once the match service has accepted it

        The game row stays locked while the match service is called, and the new
        state is written only after it answers, so a failed or concurrent start
        leaves the game as it was.

        Raises:
            NotFoundError: Unknown game code
            InvalidTransitionError: The game is not in Created state
            ExternalServiceError: The match service did not accept the game
        """
        logging.info(f"Game start request started on game {code}")
        async with unit_of_work(self.Session, code) as session:
            game = await self._load_for_update(code, session)
            next_state = transition(game.state, GameOperation.start, code)

            start_game = data_converter.convert_game_to_startgamemodel(game)
            accepted = await self.notifier.announce_start(start_game)
            if not accepted:
                logging.error(f"Invalid game start request ({code}): GameService Error.")
                raise ExternalServiceError(code)

            game.state = next_state
            await UpdateData.update_game(game, session)
            started = data_converter.convert_game_to_gameschema(game)

        logging.info(f"Finished game start request: Game {code} has been started.")
        return started

    async def finish_game(
        self,
        code: str,
        winner_code: str,
        scores: Dict[str, int] | None = None,
    ) -> GameSchema:
        """Record the result of a game that is being played

        Args:
            code (str): Game code
            winner_code (str): Code of the winning team, must be a participant
            scores (Dict[str, int] | None): Final score per participant team code

        Raises:
            NotFoundError: Unknown game code
            ValidationError: Winner or a score key is not a participant
            InvalidTransitionError: The game is not in Going state

        Returns:
            GameSchema: The finished game with exactly one winner
        """
        logging.info(f"Attempt to finish game {code} with winner {winner_code}")
        async with unit_of_work(self.Session, code) as session:
            game = await self._load_for_update(code, session)
            next_state = transition(game.state, GameOperation.finish, code)

            by_team_code = {summary.team.code: summary for summary in game.participations}
            if winner_code not in by_team_code:
                logging.warning(f"Winner {winner_code} does not play in game {code}")
                raise ValidationError(f"Team {winner_code} does not play in game {code}", code)
            unknown = set(scores or {}) - set(by_team_code)
            if unknown:
                logging.warning(f"Scores for teams {sorted(unknown)} not in game {code}")
                raise ValidationError(f"Teams {sorted(unknown)} do not play in game {code}", code)

            for team_code, summary in by_team_code.items():
                summary.is_winner = team_code == winner_code
                if scores and team_code in scores:
                    summary.score = scores[team_code]
            game.finished_at = self.clock()
            game.state = next_state
            await UpdateData.update_game(game, session)
            finished = data_converter.convert_game_to_gameschema(game)

        logging.info(f"Game {code} finished. Winner: {winner_code}")
        return finished

    async def update_game(self, code: str, start_time: datetime, duration_minutes: int) -> GameSchema:
        """Reschedule a game that has not started yet"""
        start_time = validate_start_time(start_time, self.clock())
        validate_duration(duration_minutes)

        async with unit_of_work(self.Session, code) as session:
            game = await self._load_for_update(code, session)
            game.state = transition(game.state, GameOperation.update, code)
            game.start_time = start_time
            game.duration_minutes = duration_minutes
            await UpdateData.update_game(game, session)
            updated = data_converter.convert_game_to_gameschema(game)

        logging.info(f"Game {code} has been updated.")
        return updated

    async def delete_game(self, code: str) -> GameSchema:
        """Delete a game together with both of its participations

        Raises:
            NotFoundError: Unknown game code
            InvalidTransitionError: The game is Going on the match service

        Returns:
            GameSchema: Snapshot of the game as it was before deletion
        """
        logging.warning(f"Game DELETE request started on game {code}.")
        async with unit_of_work(self.Session, code) as session:
            game = await self._load_for_update(code, session)
            transition(game.state, GameOperation.delete, code)
            deleted = data_converter.convert_game_to_gameschema(game)

            for summary in list(game.participations):
                await DeleteData.delete_participation(summary, session)
            await DeleteData.delete_game(game, session)

        logging.warning(f"Finished game delete request: Game {code} has been deleted.")
        return deleted

    async def list_recent_created(self) -> List[GameSchema]:
        async with unit_of_work(self.Session, write=False) as session:
            games = await ReadData.read_recent_created_games(session)
            result = [data_converter.convert_game_to_gameschema(game) for game in games]
        logging.info(f"Game index requested. Returned {len(result)} games")
        return result

    async def list_page(self, page: int) -> List[GameSchema]:
        validate_page(page)
        async with unit_of_work(self.Session, write=False) as session:
            games = await ReadData.read_game_page(page, self.page_size, session)
            result = [data_converter.convert_game_to_gameschema(game) for game in games]
        logging.info(f"Returned game page {page}.")
        return result

    async def find_game(self, code: str) -> GameSchema:
        logging.info(f"FindGame request received on given code {code}")
        async with unit_of_work(self.Session, code, write=False) as session:
            game = await ReadData.read_game_by_code(code, session)
            if game is None:
                logging.error(f"Invalid FindGame request: Game {code} not found.")
                raise NotFoundError("Game", code)
            return data_converter.convert_game_to_gameschema(game)
