"""GoalAreaRule: attackers crowding the opponent's goal area."""

from __future__ import annotations

from typing import Dict, Optional

from simuro_core.config.enums import ResultType, Side
from simuro_core.entities.match.match_info import MatchInfo
from simuro_core.referee.geometry import RefereeGeometry
from simuro_core.referee.rules.base_rule import BaseRule, RuleViolation


class GoalAreaRule(BaseRule):
    """Awards a goal kick to the defenders when too many attackers stay in their goal area."""

    def __init__(self, max_attackers: int = 1, violation_persistence_ticks: int = 30) -> None:
        self._max_attackers = max_attackers
        self._persistence = violation_persistence_ticks
        self._violation_count: Dict[Side, int] = {Side.BLUE: 0, Side.YELLOW: 0}

    def check(self, match_info: MatchInfo, geometry: RefereeGeometry) -> Optional[RuleViolation]:
        for attacking in (Side.BLUE, Side.YELLOW):
            defending = attacking.other()
            n_in_area = sum(
                1
                for r in match_info.robots(attacking)
                if geometry.is_in_own_goal_area(defending, r.pos.x, r.pos.y)
            )
            if n_in_area > self._max_attackers:
                self._violation_count[attacking] += 1
            else:
                self._violation_count[attacking] = 0

            if self._violation_count[attacking] >= self._persistence:
                self._violation_count[attacking] = 0
                return RuleViolation(
                    rule_name="goal_area",
                    result_type=ResultType.GOAL_KICK,
                    actor=defending,
                    status_message=f"Too many {attacking.value} attackers in the goal area",
                )
        return None

    def reset(self) -> None:
        self._violation_count = {Side.BLUE: 0, Side.YELLOW: 0}
