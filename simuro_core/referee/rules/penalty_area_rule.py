"""PenaltyAreaRule: too many defenders crowding their own penalty area."""

from __future__ import annotations

from typing import Dict, Optional

from simuro_core.config.enums import ResultType, Side
from simuro_core.entities.match.match_info import MatchInfo
from simuro_core.referee.geometry import RefereeGeometry
from simuro_core.referee.rules.base_rule import BaseRule, RuleViolation


class PenaltyAreaRule(BaseRule):
    """Awards a penalty kick when a team keeps more than ``max_defenders`` robots in its own penalty area.

    The infringement has to persist for ``violation_persistence_ticks``
    consecutive ticks, which filters out robots merely passing through.
    """

    def __init__(self, max_defenders: int = 1, violation_persistence_ticks: int = 30) -> None:
        self._max_defenders = max_defenders
        self._persistence = violation_persistence_ticks
        self._violation_count: Dict[Side, int] = {Side.BLUE: 0, Side.YELLOW: 0}

    def check(self, match_info: MatchInfo, geometry: RefereeGeometry) -> Optional[RuleViolation]:
        for defending in (Side.BLUE, Side.YELLOW):
            n_in_area = sum(
                1
                for r in match_info.robots(defending)
                if geometry.is_in_own_penalty_area(defending, r.pos.x, r.pos.y)
            )
            if n_in_area > self._max_defenders:
                self._violation_count[defending] += 1
            else:
                self._violation_count[defending] = 0

            if self._violation_count[defending] >= self._persistence:
                self._violation_count[defending] = 0
                return RuleViolation(
                    rule_name="penalty_area",
                    result_type=ResultType.PENALTY_KICK,
                    actor=defending.other(),
                    status_message=f"Too many {defending.value} defenders in own penalty area",
                )
        return None

    def reset(self) -> None:
        self._violation_count = {Side.BLUE: 0, Side.YELLOW: 0}
