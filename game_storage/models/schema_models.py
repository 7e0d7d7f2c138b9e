from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from game_storage.domain.game_rules import GameState


class TeamSchema(BaseModel):
    id: int
    code: str
    name: Optional[str] = None

    class Config:
        from_attributes = True


class ParticipationSchema(BaseModel):
    id: Optional[int] = None
    position: int
    is_winner: bool = False
    score: Optional[int] = None
    team: TeamSchema

    class Config:
        from_attributes = True


class GameSchema(BaseModel):
    id: int
    code: str
    start_time: datetime
    duration_minutes: int
    state: GameState
    created_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    participations: List[ParticipationSchema]

    class Config:
        from_attributes = True
