"""Referee: turns the current MatchInfo into a JudgeResult each tick."""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional

from simuro_core.config.config_loader import RefereeConfig, RulesConfig
from simuro_core.config.defaults import BLUE_START, YELLOW_START
from simuro_core.config.enums import MatchPhase, ResultType, Side
from simuro_core.config.settings import ROBOTS_PER_TEAM, TICKS_PER_SECOND
from simuro_core.entities.data.judge_result import JudgeResult
from simuro_core.entities.data.objects import Ball, Robot, normalize_rotation
from simuro_core.entities.data.vector import Vector2D
from simuro_core.entities.match.match_info import MatchInfo
from simuro_core.referee.geometry import RefereeGeometry
from simuro_core.referee.rules import (
    BaseRule,
    GoalAreaRule,
    GoalRule,
    PenaltyAreaRule,
    RuleViolation,
    StalemateRule,
)

logger = logging.getLogger(__name__)

_KICK_OFF_SIDE = {
    MatchPhase.FIRST_HALF: Side.BLUE,
    MatchPhase.SECOND_HALF: Side.YELLOW,
    MatchPhase.OVERTIME_FIRST: Side.BLUE,
    MatchPhase.OVERTIME_SECOND: Side.YELLOW,
}

_START_LAYOUT = {Side.BLUE: BLUE_START, Side.YELLOW: YELLOW_START}

# separation and kick restrictions alternate at most this many times; restrictions always run last
_PLACEMENT_PASSES = 4


def _build_active_rules(rules_cfg: RulesConfig, ticks_per_second: int) -> List[BaseRule]:
    """Construct the ordered list of active rules from a RulesConfig."""
    active: List[BaseRule] = []

    # Priority order: GoalRule → PenaltyAreaRule → GoalAreaRule → StalemateRule
    if rules_cfg.goal_detection.enabled:
        active.append(GoalRule())

    if rules_cfg.penalty_area.enabled:
        active.append(
            PenaltyAreaRule(
                max_defenders=rules_cfg.penalty_area.max_defenders,
                violation_persistence_ticks=rules_cfg.penalty_area.violation_persistence_ticks,
            )
        )

    if rules_cfg.goal_area.enabled:
        active.append(
            GoalAreaRule(
                max_attackers=rules_cfg.goal_area.max_attackers,
                violation_persistence_ticks=rules_cfg.goal_area.violation_persistence_ticks,
            )
        )

    if rules_cfg.stalemate.enabled:
        active.append(
            StalemateRule(
                stalemate_ticks=int(rules_cfg.stalemate.stalemate_seconds * ticks_per_second),
                radius=rules_cfg.stalemate.radius,
            )
        )

    return active


class Referee:
    """Stateful referee for one match.

    ``judge`` never modifies the MatchInfo it is given: every consequence of a
    decision (score, phase, tick) is reported through the returned
    JudgeResult and applied by the MatchRunner. The referee keeps only its own
    bookkeeping (rule persistence counters and the penalty shoot-out tally),
    which is why a fresh Referee is created for every match.

    Usage::

        referee = Referee(load_config("default").referee)
        result = referee.judge(match_info)
    """

    def __init__(self, config: Optional[RefereeConfig] = None, ticks_per_second: int = TICKS_PER_SECOND) -> None:
        self._config = config if config is not None else RefereeConfig()
        self._geometry: RefereeGeometry = self._config.geometry
        self._ticks_per_second = ticks_per_second
        self._rules: List[BaseRule] = _build_active_rules(self._config.rules, ticks_per_second)
        self._phase: Optional[MatchPhase] = None

        self._kicker: Side = Side.BLUE
        self._shootout_kicks: Dict[Side, int] = {Side.BLUE: 0, Side.YELLOW: 0}
        self._shootout_goals: Dict[Side, int] = {Side.BLUE: 0, Side.YELLOW: 0}

    # ------------------------------------------------------------------
    # Main loop interface
    # ------------------------------------------------------------------

    def judge(self, match_info: MatchInfo) -> JudgeResult:
        """Decide what happens on this tick.

        Malformed state is judged NORMAL_MATCH so a bad tick never ends the match.
        """
        if not self._is_well_formed(match_info):
            return JudgeResult.normal_match()
        try:
            return self._judge(match_info)
        except Exception:
            logger.exception("Referee failed on tick %d, judging normal play", match_info.tick_match)
            return JudgeResult.normal_match()

    def judge_auto_placement(self, match_info: MatchInfo, judge_result: JudgeResult) -> None:
        """Enforce placement legality on a merged candidate, rewriting it in place.

        Strategies are not trusted to propose legal layouts: the ball is put on
        the spot required by the kick, robots are kept inside the field and out
        of restricted zones, and overlapping robots are pushed apart.
        """
        ball_pos = self._placement_ball(match_info.ball.pos, judge_result)
        match_info.ball = Ball(pos=ball_pos)

        for side in (Side.BLUE, Side.YELLOW):
            robots = [self._legal_pose(r, side, i) for i, r in enumerate(match_info.robots(side))]
            match_info.update_from(robots, side)

        for _ in range(_PLACEMENT_PASSES):
            self._restrict_all(match_info, judge_result, ball_pos)
            if not self._separate_robots(match_info):
                break
        else:
            self._restrict_all(match_info, judge_result, ball_pos)
        logger.debug(
            "Auto placement for %s (actor %s): ball at (%.1f, %.1f)",
            judge_result.result_type.name,
            judge_result.actor.value,
            ball_pos.x,
            ball_pos.y,
        )

    @property
    def geometry(self) -> RefereeGeometry:
        return self._geometry

    # ------------------------------------------------------------------
    # Judging
    # ------------------------------------------------------------------

    def _judge(self, match_info: MatchInfo) -> JudgeResult:
        phase = match_info.match_phase
        if phase != self._phase:
            self._phase = phase
            self._reset_rules()

        if phase is MatchPhase.FINISHED:
            return JudgeResult(ResultType.GAME_OVER, reason="Match finished")

        if match_info.tick_match == 0:
            return self._judge_phase_start(phase)

        if phase is MatchPhase.PENALTY_SHOOTOUT:
            return self._judge_shootout(match_info)

        violation = self._first_violation(match_info)

        if violation is not None and violation.rule_name == "goal":
            if phase.is_overtime:
                logger.info("Golden goal by %s", violation.who_goal.value)
                return JudgeResult(ResultType.GAME_OVER, who_goal=violation.who_goal, reason="Golden goal")
            return self._reposition(violation)

        if match_info.tick_match >= self._phase_ticks(phase):
            return self._judge_phase_end(match_info)

        if violation is not None:
            return self._reposition(violation)

        return JudgeResult.normal_match()

    def _judge_phase_start(self, phase: MatchPhase) -> JudgeResult:
        self._reset_rules()

        if phase is MatchPhase.PENALTY_SHOOTOUT:
            self._kicker = Side.BLUE
            self._shootout_kicks = {Side.BLUE: 0, Side.YELLOW: 0}
            self._shootout_goals = {Side.BLUE: 0, Side.YELLOW: 0}
            return JudgeResult.reposition(ResultType.PENALTY_KICK, self._kicker, "Penalty shoot-out starts")

        if phase.is_overtime and not self._config.overtime_enabled:
            return JudgeResult(ResultType.NEXT_PHASE, reason="Overtime disabled")

        actor = _KICK_OFF_SIDE[phase]
        return JudgeResult.reposition(ResultType.PLACE_KICK, actor, f"{phase.name} kick-off")

    def _judge_phase_end(self, match_info: MatchInfo) -> JudgeResult:
        phase = match_info.match_phase
        if phase is MatchPhase.SECOND_HALF and match_info.score.leader is not Side.NOBODY:
            return JudgeResult(ResultType.GAME_OVER, reason="Full time")
        return JudgeResult(ResultType.NEXT_PHASE, reason=f"End of {phase.name}")

    def _judge_shootout(self, match_info: MatchInfo) -> JudgeResult:
        bx, by = match_info.ball.pos.x, match_info.ball.pos.y
        if self._kicker is Side.BLUE:
            scored = self._geometry.is_in_right_goal(bx, by)
            missed = self._geometry.is_in_left_goal(bx, by)
        else:
            scored = self._geometry.is_in_left_goal(bx, by)
            missed = self._geometry.is_in_right_goal(bx, by)

        timed_out = match_info.tick_round >= self._config.penalty_kick_seconds * self._ticks_per_second
        if not (scored or missed or timed_out):
            return JudgeResult.normal_match()

        kicker = self._kicker
        self._shootout_kicks[kicker] += 1
        who_goal = Side.NOBODY
        if scored:
            self._shootout_goals[kicker] += 1
            who_goal = kicker
        logger.info(
            "Penalty by %s %s (shoot-out %d:%d)",
            kicker.value,
            "scored" if scored else "missed",
            self._shootout_goals[Side.BLUE],
            self._shootout_goals[Side.YELLOW],
        )

        if self._shootout_decided():
            return JudgeResult(ResultType.GAME_OVER, who_goal=who_goal, reason="Penalty shoot-out decided")

        self._kicker = kicker.other()
        return JudgeResult.reposition(ResultType.PENALTY_KICK, self._kicker, "Next penalty kick", who_goal=who_goal)

    def _shootout_decided(self) -> bool:
        rounds = self._config.shootout_rounds
        b_kicks, y_kicks = self._shootout_kicks[Side.BLUE], self._shootout_kicks[Side.YELLOW]
        b_goals, y_goals = self._shootout_goals[Side.BLUE], self._shootout_goals[Side.YELLOW]

        if b_kicks <= rounds and y_kicks <= rounds:
            # Regular rounds: decided once one side cannot catch up any more.
            b_left, y_left = rounds - b_kicks, rounds - y_kicks
            return b_goals + b_left < y_goals or y_goals + y_left < b_goals

        # Sudden death: compare after every pair of kicks.
        return b_kicks == y_kicks and b_goals != y_goals

    def _first_violation(self, match_info: MatchInfo) -> Optional[RuleViolation]:
        """First matching rule (in priority order) wins; subsequent rules are not evaluated."""
        for rule in self._rules:
            result = rule.check(match_info, self._geometry)
            if result is not None:
                self._reset_rules()
                return result
        return None

    def _reposition(self, violation: RuleViolation) -> JudgeResult:
        logger.info("%s → %s for %s", violation.status_message, violation.result_type.name, violation.actor.value)
        return JudgeResult.reposition(
            violation.result_type,
            violation.actor,
            violation.status_message,
            who_goal=violation.who_goal,
        )

    def _phase_ticks(self, phase: MatchPhase) -> int:
        if phase.is_overtime:
            return int(self._config.overtime_duration_seconds * self._ticks_per_second)
        return int(self._config.half_duration_seconds * self._ticks_per_second)

    def _reset_rules(self) -> None:
        for rule in self._rules:
            rule.reset()

    @staticmethod
    def _is_well_formed(match_info: MatchInfo) -> bool:
        if match_info.tick_match < 0 or match_info.tick_round < 0:
            logger.warning("Negative tick counters (%d, %d)", match_info.tick_match, match_info.tick_round)
            return False
        if len(match_info.blue_robots) != ROBOTS_PER_TEAM or len(match_info.yellow_robots) != ROBOTS_PER_TEAM:
            logger.warning("Unexpected robot count in match state")
            return False
        if not match_info.ball.pos.is_finite():
            logger.warning("Ball position is not finite: %s", match_info.ball.pos)
            return False
        return True

    # ------------------------------------------------------------------
    # Auto placement helpers
    # ------------------------------------------------------------------

    def _placement_ball(self, proposed: Vector2D, judge_result: JudgeResult) -> Vector2D:
        geo = self._geometry
        result_type = judge_result.result_type
        actor = judge_result.actor

        if result_type is ResultType.PENALTY_KICK:
            return Vector2D(geo.penalty_spot(actor.other()))

        if result_type is ResultType.GOAL_KICK:
            # The defending side may choose the spot, as long as it lies in its goal area.
            if proposed.is_finite() and geo.is_in_own_goal_area(actor, proposed.x, proposed.y):
                return proposed
            return Vector2D(geo.goal_kick_spot(actor))

        if result_type.is_free_kick:
            sx = 1.0 if result_type in (ResultType.FREE_KICK_RIGHT_TOP, ResultType.FREE_KICK_RIGHT_BOT) else -1.0
            sy = 1.0 if result_type in (ResultType.FREE_KICK_RIGHT_TOP, ResultType.FREE_KICK_LEFT_TOP) else -1.0
            return Vector2D(sx * geo.free_kick_x, sy * geo.free_kick_y)

        return Vector2D(0.0, 0.0)

    def _legal_pose(self, robot: Robot, side: Side, index: int) -> Robot:
        """Clamp a proposed pose into the field. Non-finite proposals fall back to the default layout."""
        geo = self._geometry
        if not robot.pos.is_finite() or not math.isfinite(robot.rotation):
            x, y, theta = _START_LAYOUT[side][index]
            logger.warning("Invalid %s placement for robot %d, using default pose", side.value, index)
            return Robot(pos=Vector2D(x, y), rotation=theta)

        x, y = geo.clamp_to_field(robot.pos.x, robot.pos.y, margin=geo.robot_size / 2)
        return Robot(pos=Vector2D(x, y), rotation=normalize_rotation(robot.rotation))

    def _restrict_all(self, match_info: MatchInfo, judge_result: JudgeResult, ball_pos: Vector2D) -> None:
        for side in (Side.BLUE, Side.YELLOW):
            robots = self._apply_kick_restrictions(list(match_info.robots(side)), side, judge_result, ball_pos)
            match_info.update_from(robots, side)

    def _apply_kick_restrictions(
        self,
        robots: List[Robot],
        side: Side,
        judge_result: JudgeResult,
        ball_pos: Vector2D,
    ) -> List[Robot]:
        geo = self._geometry
        result_type = judge_result.result_type
        is_actor = side is judge_result.actor
        half_size = geo.robot_size / 2

        if result_type is ResultType.PLACE_KICK:
            placed = []
            for r in robots:
                x = r.pos.x
                if not geo.is_in_own_half(side, x):
                    x = -geo.attack_sign(side) * half_size
                pos = Vector2D(x, r.pos.y)
                if not is_actor:
                    pos = self._push_out_of_circle(pos, ball_pos, geo.center_circle_radius + half_size, side)
                placed.append(Robot(pos=pos, rotation=r.rotation))
            return placed

        if result_type is ResultType.PENALTY_KICK:
            defending = judge_result.actor.other()
            line_x = geo.half_length - geo.penalty_area_depth - half_size
            kicker = self._closest_to(robots, ball_pos) if is_actor else None
            placed = []
            for i, r in enumerate(robots):
                x, y = r.pos.x, r.pos.y
                if side is defending and i == 0:
                    # Goalkeeper stays on its goal line, inside the goal area.
                    x = -geo.attack_sign(defending) * (geo.half_length - half_size)
                    y = max(-geo.half_goal_area_width, min(geo.half_goal_area_width, y))
                elif i != kicker and geo.is_in_own_penalty_area(defending, x, y):
                    x = -geo.attack_sign(defending) * line_x
                placed.append(Robot(pos=Vector2D(x, y), rotation=r.rotation))
            return placed

        if result_type is ResultType.GOAL_KICK and not is_actor:
            defending = judge_result.actor
            line_x = geo.half_length - geo.penalty_area_depth - half_size
            return [
                Robot(pos=Vector2D(-geo.attack_sign(defending) * line_x, r.pos.y), rotation=r.rotation)
                if geo.is_in_own_penalty_area(defending, r.pos.x, r.pos.y)
                else r
                for r in robots
            ]

        if result_type.is_free_kick and not is_actor:
            return [
                Robot(
                    pos=self._push_out_of_circle(r.pos, ball_pos, geo.center_circle_radius + half_size, side),
                    rotation=r.rotation,
                )
                for r in robots
            ]

        return robots

    def _push_out_of_circle(self, pos: Vector2D, centre: Vector2D, radius: float, side: Side) -> Vector2D:
        offset = pos - centre
        if offset.mag() >= radius:
            return pos
        direction = offset.norm()
        if direction.mag() == 0.0:
            # Exactly on the centre: retreat toward own goal.
            direction = Vector2D(-self._geometry.attack_sign(side), 0.0)
        pushed = centre + direction * radius
        return Vector2D(self._geometry.clamp_to_field(pushed.x, pushed.y, margin=self._geometry.robot_size / 2))

    @staticmethod
    def _closest_to(robots: List[Robot], point: Vector2D) -> int:
        return min(range(len(robots)), key=lambda i: robots[i].pos.distance_to(point))

    def _separate_robots(self, match_info: MatchInfo) -> bool:
        """Push apart robots closer than one robot size, later robots yielding to earlier ones.

        Returns True if any robot was moved.
        """
        moved_any = False
        geo = self._geometry
        min_dist = geo.robot_size
        everyone = [(Side.BLUE, i) for i in range(ROBOTS_PER_TEAM)] + [(Side.YELLOW, i) for i in range(ROBOTS_PER_TEAM)]

        for a_idx, (a_side, a_i) in enumerate(everyone):
            for b_side, b_i in everyone[a_idx + 1 :]:
                a = match_info.robots(a_side)[a_i]
                b = match_info.robots(b_side)[b_i]
                offset = b.pos - a.pos
                if offset.mag() >= min_dist:
                    continue
                direction = offset.norm()
                if direction.mag() == 0.0:
                    direction = Vector2D(0.0, 1.0 if a.pos.y <= 0 else -1.0)
                moved = a.pos + direction * min_dist
                x, y = geo.clamp_to_field(moved.x, moved.y, margin=geo.robot_size / 2)
                match_info.robots(b_side)[b_i] = Robot(pos=Vector2D(x, y), rotation=b.rotation)
                moved_any = True
        return moved_any
