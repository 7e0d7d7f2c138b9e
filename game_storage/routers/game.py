from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from game_storage.exceptions import (
    ConflictError,
    ExternalServiceError,
    GameStorageException,
    NotFoundError,
    ValidationError,
)
from game_storage.models.dc_models import (
    FinishGameModel,
    GameCodeModel,
    GameUpdateModel,
    SetUpGameModel,
)
from game_storage.models.schema_models import GameSchema
from game_storage.services.game_lifecycle import GameLifecycle

game_router = APIRouter(prefix="/api/game")

STATUS_BY_ERROR = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (ExternalServiceError, status.HTTP_502_BAD_GATEWAY),
]


def get_game_lifecycle(request: Request) -> GameLifecycle:
    return request.app.state.game_lifecycle


def to_http_exception(e: GameStorageException) -> HTTPException:
    for error_class, status_code in STATUS_BY_ERROR:
        if isinstance(e, error_class):
            return HTTPException(status_code=status_code, detail=str(e))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


class GameAPI:
    @staticmethod
    @game_router.get("", response_model=List[GameSchema])
    async def index(lifecycle: GameLifecycle = Depends(get_game_lifecycle)):
        """Games still waiting to start, most recent first"""
        return await lifecycle.list_recent_created()

    @staticmethod
    @game_router.get("/list/{page}", response_model=List[GameSchema])
    async def get_page_list(page: int, lifecycle: GameLifecycle = Depends(get_game_lifecycle)):
        try:
            return await lifecycle.list_page(page)
        except GameStorageException as e:
            raise to_http_exception(e)

    @staticmethod
    @game_router.post("/create", response_model=GameSchema, status_code=status.HTTP_201_CREATED)
    async def set_up(
        game: SetUpGameModel,
        request: Request,
        response: Response,
        lifecycle: GameLifecycle = Depends(get_game_lifecycle),
    ):
        """Schedule a game between two registered teams

        Args:
            game (SetUpGameModel): start_time, first_team_code, second_team_code, duration_minutes

        Returns:
            GameSchema: The created game; Location points at its detail URL
        """
        try:
            created = await lifecycle.create_game(
                game.start_time,
                game.first_team_code,
                game.second_team_code,
                game.duration_minutes,
            )
        except GameStorageException as e:
            raise to_http_exception(e)
        response.headers["Location"] = str(request.url_for("find_game", code=created.code))
        return created

    @staticmethod
    @game_router.post("/start", response_model=GameSchema)
    async def start_the_game(
        game_code: GameCodeModel,
        lifecycle: GameLifecycle = Depends(get_game_lifecycle),
    ):
        """Start the game and hand it to the match-execution service

        A 502 means the service did not accept the game and it is still Created;
        the request can be retried.
        """
        try:
            return await lifecycle.start_game(game_code.code)
        except GameStorageException as e:
            raise to_http_exception(e)

    @staticmethod
    @game_router.post("/finish", response_model=GameSchema)
    async def finish_game(
        finish_game: FinishGameModel,
        lifecycle: GameLifecycle = Depends(get_game_lifecycle),
    ):
        try:
            return await lifecycle.finish_game(
                finish_game.game_code, finish_game.winner_code, finish_game.scores
            )
        except GameStorageException as e:
            raise to_http_exception(e)

    @staticmethod
    @game_router.get("/{code}", response_model=GameSchema, name="find_game")
    async def find_game(code: str, lifecycle: GameLifecycle = Depends(get_game_lifecycle)):
        try:
            return await lifecycle.find_game(code)
        except GameStorageException as e:
            raise to_http_exception(e)

    @staticmethod
    @game_router.put("/update/{code}", status_code=status.HTTP_204_NO_CONTENT)
    async def update(
        code: str,
        updated_game: GameUpdateModel,
        lifecycle: GameLifecycle = Depends(get_game_lifecycle),
    ) -> None:
        if code != updated_game.code:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Path code {code} does not match body code {updated_game.code}",
            )
        try:
            await lifecycle.update_game(code, updated_game.start_time, updated_game.duration_minutes)
        except GameStorageException as e:
            raise to_http_exception(e)

    @staticmethod
    @game_router.delete("/delete/{code}", response_model=GameSchema)
    async def delete(code: str, lifecycle: GameLifecycle = Depends(get_game_lifecycle)):
        try:
            return await lifecycle.delete_game(code)
        except GameStorageException as e:
            raise to_http_exception(e)
