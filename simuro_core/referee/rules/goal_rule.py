"""GoalRule: detects when the ball crosses a goal line."""

from __future__ import annotations

from typing import Optional

from simuro_core.config.enums import ResultType, Side
from simuro_core.entities.match.match_info import MatchInfo
from simuro_core.referee.geometry import RefereeGeometry
from simuro_core.referee.rules.base_rule import BaseRule, RuleViolation


class GoalRule(BaseRule):
    """Credits the goal and hands the kick-off to the side that conceded."""

    def check(self, match_info: MatchInfo, geometry: RefereeGeometry) -> Optional[RuleViolation]:
        bx, by = match_info.ball.pos.x, match_info.ball.pos.y

        # Blue attacks the right goal, yellow the left goal.
        if geometry.is_in_right_goal(bx, by):
            return RuleViolation(
                rule_name="goal",
                result_type=ResultType.PLACE_KICK,
                actor=Side.YELLOW,
                status_message="Goal by Blue",
                who_goal=Side.BLUE,
            )

        if geometry.is_in_left_goal(bx, by):
            return RuleViolation(
                rule_name="goal",
                result_type=ResultType.PLACE_KICK,
                actor=Side.BLUE,
                status_message="Goal by Yellow",
                who_goal=Side.YELLOW,
            )

        return None
