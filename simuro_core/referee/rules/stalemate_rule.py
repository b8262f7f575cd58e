"""StalemateRule: the ball has been stuck in one place for too long."""

from __future__ import annotations

from typing import Optional

from simuro_core.config.enums import ResultType, Side
from simuro_core.entities.data.vector import Vector2D
from simuro_core.entities.match.match_info import MatchInfo
from simuro_core.referee.geometry import RefereeGeometry
from simuro_core.referee.rules.base_rule import BaseRule, RuleViolation


def free_kick_for(x: float, y: float) -> tuple[ResultType, Side]:
    """Free kick variant for the quadrant holding (x, y), taken by the side attacking that half."""
    if x >= 0:
        result_type = ResultType.FREE_KICK_RIGHT_TOP if y >= 0 else ResultType.FREE_KICK_RIGHT_BOT
        return result_type, Side.BLUE
    result_type = ResultType.FREE_KICK_LEFT_TOP if y >= 0 else ResultType.FREE_KICK_LEFT_BOT
    return result_type, Side.YELLOW


class StalemateRule(BaseRule):
    """Fires a free kick when the ball stays within ``radius`` of one point for ``stalemate_ticks`` ticks."""

    def __init__(self, stalemate_ticks: int, radius: float = 5.0) -> None:
        self._stalemate_ticks = stalemate_ticks
        self._radius = radius
        self._anchor: Optional[Vector2D] = None
        self._still_ticks = 0

    def check(self, match_info: MatchInfo, geometry: RefereeGeometry) -> Optional[RuleViolation]:
        ball_pos = match_info.ball.pos

        if self._anchor is None or self._anchor.distance_to(ball_pos) > self._radius:
            self._anchor = ball_pos
            self._still_ticks = 0
            return None

        self._still_ticks += 1
        if self._still_ticks < self._stalemate_ticks:
            return None

        result_type, actor = free_kick_for(ball_pos.x, ball_pos.y)
        self.reset()
        return RuleViolation(
            rule_name="stalemate",
            result_type=result_type,
            actor=actor,
            status_message="Ball stalemate",
        )

    def reset(self) -> None:
        self._anchor = None
        self._still_ticks = 0
