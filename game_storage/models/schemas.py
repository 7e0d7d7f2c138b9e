from datetime import datetime

from sqlalchemy import ForeignKey, Index, UniqueConstraint, text
from sqlalchemy.orm import DeclarativeBase, relationship
from sqlalchemy.schema import Column
from sqlalchemy.types import Boolean, DateTime, Enum, Integer, String

from game_storage.domain.game_rules import GameState


class Base(DeclarativeBase):
    pass


class Team(Base):
    __tablename__ = "team"
    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String, unique=True, nullable=False, index=True)
    name = Column(String)


class Game(Base):
    __tablename__ = "game"
    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String, unique=True, nullable=False, index=True)
    start_time = Column(DateTime, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    state = Column(
        Enum(GameState, name="game_state", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=GameState.created,
    )
    created_at = Column(DateTime, default=datetime.now)
    finished_at = Column(DateTime, nullable=True)
    version = Column(Integer, nullable=False)

    participations = relationship(
        "TeamGameSummary",
        back_populates="game",
        order_by="TeamGameSummary.position",
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"version_id_col": version}


class TeamGameSummary(Base):
    """Participation of one team in one game."""

    __tablename__ = "team_game_summary"
    id = Column(Integer, primary_key=True, autoincrement=True)
    game_id = Column(Integer, ForeignKey("game.id", ondelete="CASCADE"), nullable=False)
    team_id = Column(Integer, ForeignKey("team.id"), nullable=False)
    position = Column(Integer, nullable=False)
    is_winner = Column(Boolean, nullable=False, default=False)
    score = Column(Integer, nullable=True)

    game = relationship("Game", back_populates="participations")
    team = relationship("Team")

    __table_args__ = (
        UniqueConstraint("game_id", "team_id", name="uq_team_game_summary_team"),
        UniqueConstraint("game_id", "position", name="uq_team_game_summary_position"),
        # at most one winner per game
        Index(
            "uq_team_game_summary_winner",
            "game_id",
            unique=True,
            postgresql_where=text("is_winner"),
            sqlite_where=text("is_winner"),
        ),
    )
