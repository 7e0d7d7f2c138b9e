from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import datetime


class SetUpGameModel(BaseModel):
    start_time: datetime
    first_team_code: str
    second_team_code: str
    duration_minutes: int = Field(gt=0)


class GameCodeModel(BaseModel):
    code: str


class FinishGameModel(BaseModel):
    game_code: str
    winner_code: str
    scores: Optional[Dict[str, int]] = None  # team code -> final score


class GameUpdateModel(BaseModel):
    code: str
    start_time: datetime
    duration_minutes: int = Field(gt=0)


class StartGameTeamModel(BaseModel):
    code: str
    id: int


class StartGameModel(BaseModel):
    """Body of the start announcement sent to the match-execution service."""
    code: str
    teams: List[StartGameTeamModel]
    start_time: datetime
    duration_minutes: int
