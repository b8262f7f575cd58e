"""Scenario tests for MatchRunner: tick dispatch, repositioning, faults and lifecycle."""

import signal
import threading
from unittest.mock import MagicMock

import pytest

from simuro_core.config.config_loader import PlatformConfig
from simuro_core.config.enums import EventType, MatchPhase, ResultType, Side
from simuro_core.entities.data.command import PlacementInfo, TeamInfo, WheelInfo
from simuro_core.entities.data.judge_result import JudgeResult
from simuro_core.entities.data.objects import Ball, Robot, Wheel
from simuro_core.entities.data.vector import Vector2D
from simuro_core.errors import IllegalStateError, RpcTimeoutError
from simuro_core.field_host import InMemoryFieldHost
from simuro_core.referee.referee import Referee
from simuro_core.run.match_runner import MatchRunner
from simuro_core.strategy.abstract_strategy import AbstractStrategy
from simuro_core.strategy.strategy_manager import StrategyManager

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _echo_placement(view):
    return PlacementInfo(robots=view.home_robots, ball=view.ball, mirrored=view.mirrored)


def _strategy(name: str, placement_log: list) -> MagicMock:
    strategy = MagicMock(spec=AbstractStrategy)
    strategy.get_team_info.return_value = TeamInfo(name)
    strategy.get_instruction.return_value = WheelInfo.still()

    def place(view):
        placement_log.append(name)
        return _echo_placement(view)

    strategy.get_placement.side_effect = place
    return strategy


class Env:
    def __init__(self, real_referee: bool = False, config=None):
        self.clock = FakeClock()
        self.host = InMemoryFieldHost()
        self.placement_log = []
        self.blue = _strategy("blue", self.placement_log)
        self.yellow = _strategy("yellow", self.placement_log)
        by_endpoint = {"blue": self.blue, "yellow": self.yellow}
        manager = StrategyManager(connector=lambda endpoint, side, cfg: by_endpoint[endpoint])

        if not real_referee:
            self.referee = MagicMock(spec=Referee)
            self.referee.judge.return_value = JudgeResult.normal_match()
            factory = lambda: self.referee  # noqa: E731
        else:
            self.referee = None
            factory = None

        self.runner = MatchRunner(self.host, manager, config=config, clock=self.clock, referee_factory=factory)
        self.events = []
        for event_type in EventType:
            self.runner.event_bus.subscribe(event_type, lambda payload, et=event_type: self.events.append((et, payload)))
        self.runner.init()
        self.runner.load_strategies("blue", "yellow")

    def start(self, tick: int = 0):
        self.runner.start_match()
        self.runner.resume_match()
        self.runner.match_info.tick_match = tick
        self.runner.match_info.tick_round = tick
        self.events.clear()

    def judge(self, result: JudgeResult):
        self.referee.judge.return_value = result

    def published(self, event_type: EventType):
        return [payload for et, payload in self.events if et is event_type]


@pytest.fixture
def env():
    e = Env()
    yield e
    e.runner.shutdown()


@pytest.fixture
def sigint():
    # run() installs its own SIGINT handler
    previous = signal.getsignal(signal.SIGINT)
    yield
    signal.signal(signal.SIGINT, previous)


def _blue_layout():
    return tuple(Robot(pos=Vector2D(-50.0, 10.0 * i - 20.0), rotation=0.0) for i in range(5))


# ---------------------------------------------------------------------------
# Normal play
# ---------------------------------------------------------------------------


class TestNormalTick:
    def test_wheels_pushed_and_tick_advanced(self, env):
        env.start(tick=5)
        env.blue.get_instruction.return_value = WheelInfo((Wheel(200.0, -200.0),) + (Wheel(1.0, 2.0),) * 4)

        result = env.runner.tick()

        assert result.result_type is ResultType.NORMAL_MATCH
        assert env.runner.match_info.tick_match == 6
        assert env.runner.match_info.tick_round == 6
        assert env.host.blue_wheels.wheels[0] == Wheel(125.0, -125.0)
        assert env.host.blue_wheels.wheels[1] == Wheel(1.0, 2.0)
        assert env.host.yellow_wheels == WheelInfo.still()

        updates = env.published(EventType.MATCH_INFO_UPDATE)
        assert len(updates) == 1
        assert updates[0].tick_match == 6
        assert updates[0] is not env.runner.match_info

    def test_yellow_sees_mirrored_view(self, env):
        env.start(tick=5)
        env.runner.tick()

        blue_view = env.blue.get_instruction.call_args[0][0]
        yellow_view = env.yellow.get_instruction.call_args[0][0]
        assert not blue_view.mirrored
        assert yellow_view.mirrored
        assert yellow_view.home_robots[0].pos == -env.host.yellow_robots[0].pos
        assert blue_view.home_robots[0].pos == env.host.blue_robots[0].pos

    def test_yellow_view_unmirrored_when_disabled(self):
        config = PlatformConfig()
        config.strategy.convert_yellow_data = False
        e = Env(config=config)
        try:
            e.start(tick=5)
            e.runner.tick()
            assert not e.yellow.get_instruction.call_args[0][0].mirrored
        finally:
            e.runner.shutdown()

    def test_field_state_is_read_every_tick(self, env):
        env.start(tick=5)
        env.host.ball = Ball(pos=Vector2D(30.0, -20.0))
        env.runner.tick()
        assert env.runner.match_info.ball.pos == Vector2D(30.0, -20.0)
        judged = env.referee.judge.call_args[0][0]
        assert judged is env.runner.match_info


class TestGating:
    def test_paused_match_is_not_judged(self, env):
        env.runner.start_match()
        assert env.runner.tick() is None
        env.referee.judge.assert_not_called()
        assert env.runner.status == "paused"

    def test_missing_strategy_is_not_judged(self, env):
        env.start(tick=5)
        env.runner.strategies.close_yellow()
        assert env.runner.tick() is None
        env.referee.judge.assert_not_called()

    def test_stopped_match_is_not_judged(self, env):
        assert env.runner.status == "stopped"
        assert env.runner.tick() is None
        env.referee.judge.assert_not_called()


# ---------------------------------------------------------------------------
# Phases and game over
# ---------------------------------------------------------------------------


class TestPhases:
    def test_next_phase_resets_clocks(self, env):
        env.start(tick=40)
        env.judge(JudgeResult(ResultType.NEXT_PHASE, reason="Half time"))

        env.runner.tick()

        mi = env.runner.match_info
        assert mi.match_phase is MatchPhase.SECOND_HALF
        assert (mi.tick_match, mi.tick_round) == (0, 0)
        assert env.runner.started
        env.blue.on_round_stop.assert_called_once()
        env.yellow.on_round_stop.assert_called_once()

    def test_next_phase_into_finished_stops_match(self, env):
        env.start(tick=40)
        env.runner.match_info.match_phase = MatchPhase.PENALTY_SHOOTOUT
        env.judge(JudgeResult(ResultType.NEXT_PHASE))

        env.runner.tick()

        assert env.runner.match_info.match_phase is MatchPhase.FINISHED
        assert not env.runner.started
        env.blue.on_match_stop.assert_called_once()
        env.yellow.on_match_stop.assert_called_once()

    def test_game_over_credits_goal_and_stops(self, env):
        env.start(tick=12)
        env.judge(JudgeResult(ResultType.GAME_OVER, who_goal=Side.YELLOW, reason="Golden goal"))

        env.runner.tick()

        assert env.runner.match_info.score.yellow_score == 1
        assert not env.runner.started
        assert env.host.paused
        stops = env.published(EventType.MATCH_STOP)
        assert len(stops) == 1
        assert stops[0].score.yellow_score == 1

    def test_notification_failure_is_tolerated(self, env):
        env.start(tick=40)
        env.blue.on_round_stop.side_effect = RpcTimeoutError("on_event", "no answer")
        env.judge(JudgeResult(ResultType.NEXT_PHASE))

        env.runner.tick()

        assert env.runner.started
        env.yellow.on_round_stop.assert_called_once()


# ---------------------------------------------------------------------------
# Repositioning
# ---------------------------------------------------------------------------


class TestReposition:
    def test_goal_pauses_then_places_then_resumes(self, env):
        env.start(tick=5)
        env.judge(JudgeResult.reposition(ResultType.PLACE_KICK, Side.YELLOW, "Goal by Blue", who_goal=Side.BLUE))
        env.blue.get_placement.side_effect = lambda view: PlacementInfo(robots=_blue_layout())
        yellow_before = [r.pos for r in env.host.yellow_robots]

        env.runner.tick()
        assert env.runner.match_info.score.blue_score == 1
        assert env.runner.paused and env.host.paused
        env.blue.on_round_stop.assert_called_once()
        env.blue.get_placement.assert_not_called()

        # Nothing happens until the placement pause has elapsed.
        env.clock.advance(1.0)
        assert env.runner.tick() is None
        env.blue.get_placement.assert_not_called()

        env.clock.advance(1.0)
        assert env.runner.tick() is None

        # Blue (first mover) placed, and yellow saw blue's layout in its mirrored view.
        env.blue.get_placement.assert_called_once()
        yellow_view = env.yellow.get_placement.call_args[0][0]
        assert yellow_view.mirrored
        assert yellow_view.opponent_robots[0].pos == Vector2D(50.0, 20.0)

        assert [r.pos for r in env.host.blue_robots] == [r.pos for r in _blue_layout()]
        # Yellow's mirrored answer was converted back to the field frame.
        assert [r.pos for r in env.host.yellow_robots] == yellow_before
        assert env.host.ball.pos == Vector2D(0.0, 0.0)
        start = env.host.calls.index("set_blue_placement")
        assert env.host.calls[start : start + 4] == [
            "set_blue_placement",
            "set_yellow_placement",
            "set_ball_placement",
            "set_still",
        ]

        mi = env.runner.match_info
        assert (mi.tick_match, mi.tick_round) == (6, 0)
        assert len(env.published(EventType.MATCH_INFO_UPDATE)) == 1
        assert len(env.published(EventType.AUTO_PLACEMENT)) == 1
        env.yellow.on_round_start.assert_called_once()
        env.referee.judge_auto_placement.assert_called_once()
        assert env.runner.paused

        # Play resumes after the hold.
        env.judge(JudgeResult.normal_match())
        env.clock.advance(2.0)
        result = env.runner.tick()
        assert result.result_type is ResultType.NORMAL_MATCH
        assert not env.runner.paused
        assert env.runner.match_info.tick_match == 7

    def test_reposition_at_tick_zero_is_immediate(self, env):
        env.start(tick=0)
        env.judge(JudgeResult.reposition(ResultType.PLACE_KICK, Side.BLUE, "Kick-off"))

        env.runner.tick()

        # The kicker places last.
        assert env.placement_log == ["yellow", "blue"]
        assert env.runner.match_info.tick_match == 1
        assert len(env.published(EventType.AUTO_PLACEMENT)) == 1
        assert env.runner.paused

    def test_placement_from_stopped_match_is_dropped(self, env):
        env.start(tick=5)
        env.judge(JudgeResult.reposition(ResultType.GOAL_KICK, Side.BLUE, "Goal area"))
        env.runner.tick()

        env.runner.stop_match()
        env.start(tick=0)
        env.judge(JudgeResult.normal_match())
        env.clock.advance(2.0)
        env.runner.tick()

        env.blue.get_placement.assert_not_called()
        env.yellow.get_placement.assert_not_called()
        assert env.runner.match_info.tick_match == 1

    def test_missing_first_mover_drops_the_tick(self, env, caplog):
        env.start(tick=5)
        env.judge(JudgeResult(ResultType.GOAL_KICK, actor=Side.BLUE))

        assert env.runner.tick() is None

        assert "referee error" in caplog.text
        assert env.runner.started
        assert not env.runner.paused
        assert env.runner.match_info.tick_match == 5
        env.blue.get_placement.assert_not_called()
        env.yellow.get_placement.assert_not_called()

        env.judge(JudgeResult.normal_match())
        assert env.runner.tick().result_type is ResultType.NORMAL_MATCH
        assert env.runner.match_info.tick_match == 6

    def test_rejected_placement_at_tick_zero_keeps_playing(self, env):
        env.start(tick=0)
        env.judge(JudgeResult.reposition(ResultType.PLACE_KICK, Side.BLUE, "Kick-off"))
        env.referee.judge_auto_placement.side_effect = IllegalStateError("bad placement")

        assert env.runner.tick() is None

        assert env.runner.started
        assert not env.runner.paused
        assert env.published(EventType.AUTO_PLACEMENT) == []
        assert "set_blue_placement" not in env.host.calls

    def test_rejected_delayed_placement_resumes_on_next_tick(self, env):
        env.start(tick=5)
        env.judge(JudgeResult.reposition(ResultType.GOAL_KICK, Side.BLUE, "Goal area"))
        env.referee.judge_auto_placement.side_effect = IllegalStateError("bad placement")
        env.runner.tick()
        assert env.runner.paused

        env.judge(JudgeResult.normal_match())
        env.clock.advance(2.0)
        assert env.runner.tick() is None
        assert env.runner.paused

        assert env.runner.tick().result_type is ResultType.NORMAL_MATCH
        assert not env.runner.paused
        assert env.published(EventType.AUTO_PLACEMENT) == []


# ---------------------------------------------------------------------------
# Strategy faults
# ---------------------------------------------------------------------------


class TestStrategyFault:
    def test_timeout_stops_match_and_blames_side(self, env):
        env.start(tick=5)
        env.blue.get_instruction.side_effect = RpcTimeoutError("get_instruction", "no answer")

        assert env.runner.tick() is None

        fault = env.runner.last_fault
        assert fault.side is Side.BLUE
        assert fault.is_timeout
        assert not env.runner.started
        env.yellow.on_match_stop.assert_called_once()
        env.blue.on_match_stop.assert_not_called()
        assert env.published(EventType.STRATEGY_FAULT) == [fault]
        assert len(env.published(EventType.MATCH_STOP)) == 1
        assert env.runner.match_info.tick_match == 5

    def test_blue_reported_when_both_fail(self, env):
        env.start(tick=5)
        env.blue.get_instruction.side_effect = RpcTimeoutError("get_instruction", "blue")
        env.yellow.get_instruction.side_effect = RpcTimeoutError("get_instruction", "yellow")

        env.runner.tick()
        assert env.runner.last_fault.side is Side.BLUE

    def test_fault_during_placement(self, env):
        env.start(tick=0)
        env.judge(JudgeResult.reposition(ResultType.PLACE_KICK, Side.BLUE, "Kick-off"))
        env.blue.get_placement.side_effect = RpcTimeoutError("get_placement", "no answer")

        env.runner.tick()

        assert env.runner.last_fault.side is Side.BLUE
        assert env.runner.last_fault.call == "get_placement"
        assert not env.runner.started
        assert env.published(EventType.AUTO_PLACEMENT) == []


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    def test_start_resets_host_and_notifies(self, env):
        env.runner.start_match()
        assert env.runner.started
        assert env.host.calls[-3:] == ["set_to_default", "set_still", "pause"]
        env.blue.on_match_start.assert_called_once()
        env.yellow.on_match_start.assert_called_once()

    def test_remove_strategy_stops_match(self, env):
        env.start(tick=5)
        env.runner.remove_strategy(Side.BLUE)
        assert not env.runner.started
        env.blue.close.assert_called_once()
        assert env.runner.strategies.is_yellow_ready

    def test_remove_nobody_rejected(self, env):
        with pytest.raises(ValueError):
            env.runner.remove_strategy(Side.NOBODY)

    def test_shutdown_closes_everything(self, env):
        env.start(tick=5)
        env.runner.shutdown()
        assert not env.runner.started
        env.blue.close.assert_called_once()
        env.yellow.close.assert_called_once()
        assert len(env.published(EventType.PLATFORM_EXITING)) == 1

    def test_run_returns_when_game_is_over(self, env, sigint):
        env.start(tick=5)
        env.judge(JudgeResult(ResultType.GAME_OVER, reason="Full time"))
        env.runner.run(stop_event=threading.Event())
        assert not env.runner.started
        env.referee.judge.assert_called_once()

    def test_run_honours_stop_event(self, env, sigint):
        env.start(tick=5)
        stop = threading.Event()
        stop.set()
        env.runner.run(stop_event=stop)
        env.referee.judge.assert_not_called()

    def test_run_survives_referee_errors(self, env, sigint):
        env.start(tick=5)
        env.judge(JudgeResult(ResultType.GOAL_KICK, actor=Side.BLUE))
        stop = threading.Event()
        timer = threading.Timer(0.2, stop.set)
        timer.start()
        try:
            env.runner.run(stop_event=stop)
        finally:
            timer.cancel()
        assert env.runner.started
        assert env.referee.judge.call_count >= 1
        assert env.runner.match_info.tick_match == 5


# ---------------------------------------------------------------------------
# With the real referee
# ---------------------------------------------------------------------------


def test_kick_off_goal_and_restart_with_real_referee():
    e = Env(real_referee=True)
    try:
        e.start(tick=0)
        runner = e.runner

        # Kick-off placement happens straight away.
        result = runner.tick()
        assert result.result_type is ResultType.PLACE_KICK
        assert result.actor is Side.BLUE
        assert runner.match_info.tick_match == 1

        e.clock.advance(2.0)
        assert runner.tick().result_type is ResultType.NORMAL_MATCH

        e.host.ball = Ball(pos=Vector2D(115.0, 0.0))
        result = runner.tick()
        assert result.who_goal is Side.BLUE
        assert runner.match_info.score.blue_score == 1

        e.clock.advance(2.0)
        runner.tick()
        # The ball from yellow's placement was outside the field; the referee put it back on the spot.
        assert e.host.ball.pos == Vector2D(0.0, 0.0)
        assert len(e.published(EventType.AUTO_PLACEMENT)) == 2
    finally:
        e.runner.shutdown()
