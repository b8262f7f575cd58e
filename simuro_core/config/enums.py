from __future__ import annotations

from enum import Enum, IntEnum, auto


class Side(Enum):
    """Team colour. NOBODY is used where no team applies (no goal, no actor)."""

    NOBODY = "nobody"
    BLUE = "blue"
    YELLOW = "yellow"

    def other(self) -> "Side":
        if self is Side.BLUE:
            return Side.YELLOW
        if self is Side.YELLOW:
            return Side.BLUE
        raise ValueError("Side.NOBODY has no opposite side")


class MatchPhase(IntEnum):
    """Ordered phases of a match. FINISHED is terminal."""

    FIRST_HALF = 0
    SECOND_HALF = 1
    OVERTIME_FIRST = 2
    OVERTIME_SECOND = 3
    PENALTY_SHOOTOUT = 4
    FINISHED = 5

    def next_phase(self) -> "MatchPhase":
        if self is MatchPhase.FINISHED:
            return MatchPhase.FINISHED
        return MatchPhase(self + 1)

    @property
    def is_overtime(self) -> bool:
        return self in (MatchPhase.OVERTIME_FIRST, MatchPhase.OVERTIME_SECOND)


class ResultType(Enum):
    GAME_OVER = -1
    NORMAL_MATCH = 0
    NEXT_PHASE = 1
    PLACE_KICK = 2
    GOAL_KICK = 3
    PENALTY_KICK = 4
    FREE_KICK_RIGHT_TOP = 5
    FREE_KICK_RIGHT_BOT = 6
    FREE_KICK_LEFT_TOP = 7
    FREE_KICK_LEFT_BOT = 8

    @property
    def is_repositioning(self) -> bool:
        return self.value >= ResultType.PLACE_KICK.value

    @property
    def is_free_kick(self) -> bool:
        return self.value >= ResultType.FREE_KICK_RIGHT_TOP.value


class EventType(Enum):
    """Lifecycle events published on the EventBus."""

    MATCH_START = auto()
    MATCH_STOP = auto()
    MATCH_INFO_UPDATE = auto()
    AUTO_PLACEMENT = auto()
    PLATFORM_EXITING = auto()
    STRATEGY_FAULT = auto()
