from game_storage.models.dc_models import StartGameModel, StartGameTeamModel
from game_storage.models.schema_models import GameSchema
from game_storage.models.schemas import Game


class DataConverter:
    """This class is used to convert data between different formats."""

    def convert_game_to_gameschema(self, game: Game) -> GameSchema:
        """Take a detached snapshot of a loaded game

        Args:
            game (Game): Game with participations and teams loaded

        Returns:
            GameSchema: Snapshot safe to use after the session is closed
        """
        return GameSchema.model_validate(game)

    def convert_game_to_startgamemodel(self, game: Game) -> StartGameModel:
        """Convert the Game to the StartGameModel to send to the match service

        Args:
            game (Game): Game with participations and teams loaded

        Returns:
            StartGameModel: Game code, teams in position order and schedule
        """
        teams = [
            StartGameTeamModel(code=summary.team.code, id=summary.team.id)
            for summary in sorted(game.participations, key=lambda s: s.position)
        ]
        return StartGameModel(
            code=game.code,
            teams=teams,
            start_time=game.start_time,
            duration_minutes=game.duration_minutes,
        )
