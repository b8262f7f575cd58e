"""Tests for Referee.judge_auto_placement: ball spots, restricted zones and overlap."""

from __future__ import annotations

import math

import numpy as np
import pytest

from simuro_core.config.defaults import BLUE_START
from simuro_core.config.enums import ResultType, Side
from simuro_core.entities.data.judge_result import JudgeResult
from simuro_core.entities.data.objects import Ball, Robot, Wheel
from simuro_core.entities.data.vector import Vector2D
from simuro_core.entities.match.match_info import MatchInfo
from simuro_core.referee.referee import Referee

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

REFEREE = Referee()
GEO = REFEREE.geometry
HALF_SIZE = GEO.robot_size / 2
PENALTY_LINE = GEO.half_length - GEO.penalty_area_depth - HALF_SIZE


def _place(mi: MatchInfo, side: Side, index: int, x: float, y: float, **kwargs) -> None:
    robots = list(mi.robots(side))
    robots[index] = Robot(pos=Vector2D(x, y), **kwargs)
    mi.update_from(robots, side)


def _placed(result_type: ResultType, actor: Side, setup=None, ball=(0.0, 0.0)) -> MatchInfo:
    mi = MatchInfo.new_default()
    mi.ball = Ball(pos=Vector2D(ball))
    if setup is not None:
        setup(mi)
    Referee().judge_auto_placement(mi, JudgeResult.reposition(result_type, actor, "test"))
    return mi


# ---------------------------------------------------------------------------
# Kick-off
# ---------------------------------------------------------------------------


class TestPlaceKick:
    def test_ball_on_centre_spot(self, side):
        mi = _placed(ResultType.PLACE_KICK, side, ball=(50.0, 50.0))
        assert mi.ball.pos == Vector2D(0.0, 0.0)

    def test_robots_pulled_back_into_own_half(self, side):
        sign = GEO.attack_sign(side)

        def setup(mi):
            _place(mi, side, 3, sign * 30.0, 40.0)

        mi = _placed(ResultType.PLACE_KICK, side, setup)
        assert mi.robots(side)[3].pos.x == pytest.approx(-sign * HALF_SIZE)
        assert mi.robots(side)[3].pos.y == pytest.approx(40.0)

    def test_defenders_kept_out_of_centre_circle(self, side):
        defender = side.other()
        sign = GEO.attack_sign(defender)

        def setup(mi):
            _place(mi, defender, 3, -sign * 5.0, 0.0)

        mi = _placed(ResultType.PLACE_KICK, side, setup)
        robot = mi.robots(defender)[3]
        assert robot.pos.mag() >= GEO.center_circle_radius
        assert GEO.is_in_own_half(defender, robot.pos.x)

    def test_rotation_normalised_and_robots_still(self):
        def setup(mi):
            _place(mi, Side.BLUE, 1, -60.0, 30.0, rotation=270.0, wheel=Wheel(5.0, 5.0))

        robot = _placed(ResultType.PLACE_KICK, Side.BLUE, setup).blue_robots[1]
        assert robot.rotation == pytest.approx(-90.0)
        assert robot.wheel == Wheel()
        assert robot.velocity == Vector2D(0.0, 0.0)


# ---------------------------------------------------------------------------
# Penalty kick
# ---------------------------------------------------------------------------


class TestPenaltyKick:
    def test_ball_on_penalty_spot_of_defending_goal(self, side):
        mi = _placed(ResultType.PENALTY_KICK, side)
        sign = GEO.attack_sign(side)
        assert mi.ball.pos == Vector2D(sign * GEO.penalty_spot_distance, 0.0)

    def test_only_goalkeeper_and_kicker_near_goal(self, side):
        defender = side.other()
        sign = GEO.attack_sign(side)

        def setup(mi):
            _place(mi, defender, 1, sign * 90.0, 10.0)
            _place(mi, side, 3, sign * GEO.penalty_spot_distance, 0.0)
            _place(mi, side, 4, sign * 100.0, -30.0)

        mi = _placed(ResultType.PENALTY_KICK, side, setup)

        goalie = mi.robots(defender)[0]
        assert goalie.pos.x == pytest.approx(sign * (GEO.half_length - HALF_SIZE))
        assert abs(goalie.pos.y) <= GEO.half_goal_area_width

        assert mi.robots(defender)[1].pos.x == pytest.approx(sign * PENALTY_LINE)
        assert mi.robots(side)[3].pos == Vector2D(sign * GEO.penalty_spot_distance, 0.0)
        assert mi.robots(side)[4].pos.x == pytest.approx(sign * PENALTY_LINE)


# ---------------------------------------------------------------------------
# Goal kick
# ---------------------------------------------------------------------------


class TestGoalKick:
    def test_ball_inside_goal_area_is_kept(self, side):
        sign = GEO.attack_sign(side)
        mi = _placed(ResultType.GOAL_KICK, side, ball=(-sign * 100.0, 5.0))
        assert mi.ball.pos == Vector2D(-sign * 100.0, 5.0)

    def test_ball_outside_goal_area_moves_to_spot(self, side):
        mi = _placed(ResultType.GOAL_KICK, side, ball=(0.0, 0.0))
        assert mi.ball.pos == Vector2D(GEO.goal_kick_spot(side))

    def test_attackers_leave_penalty_area(self, side):
        sign = GEO.attack_sign(side)
        attacker = side.other()

        def setup(mi):
            _place(mi, attacker, 3, -sign * 90.0, 20.0)

        mi = _placed(ResultType.GOAL_KICK, side, setup)
        robot = mi.robots(attacker)[3]
        assert robot.pos.x == pytest.approx(-sign * PENALTY_LINE)
        assert not GEO.is_in_own_penalty_area(side, robot.pos.x, robot.pos.y)


# ---------------------------------------------------------------------------
# Free kick
# ---------------------------------------------------------------------------


class TestFreeKick:
    @pytest.mark.parametrize(
        "result_type, spot",
        [
            (ResultType.FREE_KICK_RIGHT_TOP, (55.0, 60.0)),
            (ResultType.FREE_KICK_RIGHT_BOT, (55.0, -60.0)),
            (ResultType.FREE_KICK_LEFT_TOP, (-55.0, 60.0)),
            (ResultType.FREE_KICK_LEFT_BOT, (-55.0, -60.0)),
        ],
    )
    def test_ball_on_free_kick_spot(self, result_type, spot):
        mi = _placed(result_type, Side.BLUE)
        assert mi.ball.pos == Vector2D(spot)

    def test_opponents_keep_their_distance(self):
        def setup(mi):
            _place(mi, Side.BLUE, 3, -50.0, 60.0)
            _place(mi, Side.YELLOW, 3, -50.0, 40.0)

        mi = _placed(ResultType.FREE_KICK_LEFT_TOP, Side.YELLOW, setup)
        for robot in mi.blue_robots:
            assert robot.pos.distance_to(mi.ball.pos) >= GEO.center_circle_radius
        # The kicking side may stay close.
        assert mi.yellow_robots[3].pos == Vector2D(-50.0, 40.0)


# ---------------------------------------------------------------------------
# General legality
# ---------------------------------------------------------------------------


class TestPlacementLegality:
    def test_overlapping_robots_are_separated(self):
        def setup(mi):
            _place(mi, Side.BLUE, 3, -40.0, 10.0)
            _place(mi, Side.BLUE, 4, -40.0, 10.0)

        mi = _placed(ResultType.PLACE_KICK, Side.BLUE, setup)
        assert mi.blue_robots[3].pos.distance_to(mi.blue_robots[4].pos) >= GEO.robot_size - 1e-6

    def test_separation_never_undoes_kick_restrictions(self):
        outside = GEO.center_circle_radius + HALF_SIZE

        def setup(mi):
            # Robot 3 is pushed out of the circle right next to robot 1; moving it
            # away from robot 1 would put it back inside.
            _place(mi, Side.YELLOW, 1, outside + 1.0, 0.0)
            _place(mi, Side.YELLOW, 3, outside - 8.0, 0.0)

        mi = _placed(ResultType.PLACE_KICK, Side.BLUE, setup)
        for robot in mi.yellow_robots:
            assert robot.pos.distance_to(mi.ball.pos) >= GEO.center_circle_radius
            assert GEO.is_in_own_half(Side.YELLOW, robot.pos.x)

    def test_non_finite_pose_falls_back_to_default(self):
        def setup(mi):
            _place(mi, Side.BLUE, 2, math.nan, 0.0)

        mi = _placed(ResultType.PLACE_KICK, Side.BLUE, setup)
        x, y, _ = BLUE_START[2]
        assert mi.blue_robots[2].pos == Vector2D(x, y)

    def test_random_placements_end_up_legal(self, seed):
        rng = np.random.default_rng(seed)
        result_type = ResultType(int(rng.integers(ResultType.PLACE_KICK.value, ResultType.FREE_KICK_LEFT_BOT.value + 1)))
        actor = Side.BLUE if rng.random() < 0.5 else Side.YELLOW

        mi = MatchInfo.new_default()
        for side in (Side.BLUE, Side.YELLOW):
            robots = [
                Robot(
                    pos=Vector2D(rng.uniform(-150.0, 150.0), rng.uniform(-120.0, 120.0)),
                    rotation=float(rng.uniform(-720.0, 720.0)),
                    wheel=Wheel(3.0, -3.0),
                )
                for _ in range(5)
            ]
            mi.update_from(robots, side)
        mi.ball = Ball(pos=Vector2D(rng.uniform(-150.0, 150.0), rng.uniform(-120.0, 120.0)))

        REFEREE.judge_auto_placement(mi, JudgeResult.reposition(result_type, actor, "random"))

        assert GEO.is_in_field(mi.ball.pos.x, mi.ball.pos.y)
        for robot in mi.blue_robots + mi.yellow_robots:
            assert robot.pos.is_finite()
            assert GEO.is_in_field(robot.pos.x, robot.pos.y)
            assert -180.0 < robot.rotation <= 180.0
            assert robot.wheel == Wheel()
