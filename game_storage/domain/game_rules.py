"""Game lifecycle rules that are independent from HTTP and DB.

Rule of thumb:
- OK: the state machine, validation, pure transformations.
- Not OK: touching DB sessions, httpx, FastAPI, datetime.now(), etc.
"""

import enum
from datetime import datetime, timedelta

from game_storage.exceptions import InvalidTransitionError, ValidationError

MINIMUM_START_LEAD = timedelta(minutes=1)
PAGE_SIZE = 10


class GameState(str, enum.Enum):
    created = "Created"
    going = "Going"
    finished = "Finished"


class GameOperation(str, enum.Enum):
    start = "start"
    finish = "finish"
    update = "update"
    delete = "delete"


# (current state, operation) -> next state. Anything missing is rejected.
# Delete removes the record, so it leaves the state as it was. A Going game
# is running on the match service and has to be finished first.
TRANSITIONS = {
    (GameState.created, GameOperation.start): GameState.going,
    (GameState.created, GameOperation.update): GameState.created,
    (GameState.created, GameOperation.delete): GameState.created,
    (GameState.going, GameOperation.finish): GameState.finished,
    (GameState.finished, GameOperation.delete): GameState.finished,
}


def transition(current: GameState, operation: GameOperation, code: str | None = None) -> GameState:
    """Return the state a game moves to when `operation` is applied.

    Args:
        current (GameState): State the game is in now
        operation (GameOperation): Requested lifecycle operation
        code (str | None): Game code, only used in the error message

    Raises:
        InvalidTransitionError: The pair is not in TRANSITIONS

    Returns:
        GameState: The next state
    """
    try:
        return TRANSITIONS[(GameState(current), operation)]
    except KeyError:
        raise InvalidTransitionError(code, GameState(current), operation) from None


def to_local_naive(value: datetime) -> datetime:
    """Stored times are naive local time; convert aware inputs to match."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def validate_start_time(start_time: datetime, now: datetime) -> datetime:
    """Check the scheduled start is at least a minute ahead of `now`.

    Returns the start time as naive local time.
    """
    start_time = to_local_naive(start_time)
    if start_time - to_local_naive(now) < MINIMUM_START_LEAD:
        raise ValidationError(
            f"Start time {start_time.isoformat()} must be at least one minute from now"
        )
    return start_time


def validate_duration(duration_minutes: int) -> None:
    if duration_minutes <= 0:
        raise ValidationError(f"Duration must be positive, got {duration_minutes}")


def validate_distinct_teams(first_team_code: str, second_team_code: str) -> None:
    if first_team_code == second_team_code:
        raise ValidationError(
            f"A game needs two different teams, got {first_team_code} twice",
            first_team_code,
        )


def validate_page(page: int) -> None:
    if page < 1:
        raise ValidationError(f"Requested page {page} < 1")


def page_offset(page: int, page_size: int = PAGE_SIZE) -> int:
    return (page - 1) * page_size
