import logging
import signal
import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, Dict, Iterable, Optional, Sequence, Tuple

from rich.live import Live
from rich.text import Text

from simuro_core.config.config_loader import PlatformConfig
from simuro_core.config.enums import EventType, MatchPhase, ResultType, Side
from simuro_core.config.settings import STATUS_PRINT_INTERVAL
from simuro_core.entities.data.command import TeamInfo, WheelInfo
from simuro_core.entities.data.judge_result import JudgeResult
from simuro_core.entities.data.objects import Ball, Robot
from simuro_core.entities.match.match_info import MatchInfo
from simuro_core.entities.match.side_info import SideInfo
from simuro_core.errors import IllegalStateError, RpcError, StrategyFault
from simuro_core.field_host.field_host_abstract import AbstractFieldHost
from simuro_core.referee.referee import Referee
from simuro_core.run.event_bus import EventBus
from simuro_core.run.timed_pause import TimedPauseScheduler
from simuro_core.strategy.strategy_manager import StrategyManager

logger = logging.getLogger(__name__)

_SIDES = (Side.BLUE, Side.YELLOW)


class MatchRunner:
    """Drives one match: judges every tick, queries the strategies and pushes the outcome to the field host.

    All match state is owned by the thread that calls ``tick()``. Instruction calls run on a
    two-worker pool but the tick waits for both before touching the state again.

    Args:
        field_host (AbstractFieldHost): Owner of the physical field.
        strategy_manager (StrategyManager): Connected strategies of both teams.
        config (PlatformConfig, optional): Platform profile. Defaults to PlatformConfig().
        event_bus (EventBus, optional): Where lifecycle events are published. A private bus is created if omitted.
        clock (Callable[[], float], optional): Monotonic clock used for timed pauses.
        referee_factory (Callable[[], Referee], optional): Builds the referee for each new match.
    """

    def __init__(
        self,
        field_host: AbstractFieldHost,
        strategy_manager: StrategyManager,
        config: Optional[PlatformConfig] = None,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], float] = time.monotonic,
        referee_factory: Optional[Callable[[], Referee]] = None,
    ):
        self.config = config if config is not None else PlatformConfig()
        self.field_host = field_host
        self.strategies = strategy_manager
        self.event_bus = event_bus if event_bus is not None else EventBus()
        self._referee_factory = referee_factory or (
            lambda: Referee(self.config.referee, self.config.match.ticks_per_second)
        )

        self._scheduler = TimedPauseScheduler(clock)
        self._executor: Optional[ThreadPoolExecutor] = None
        # Bumped on every start/stop; work belonging to an older epoch is dropped.
        self._epoch = 0

        self.started = False
        self.paused = True
        self.match_info = MatchInfo.new_default(referee=self._referee_factory())
        self.last_judge_result: Optional[JudgeResult] = None
        self.last_fault: Optional[StrategyFault] = None

        self._stop_event = threading.Event()
        self._status_live: Optional[Live] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def init(self) -> None:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="strategy")
        logger.info("Match runner initialised with profile '%s'", self.config.profile_name)

    def shutdown(self) -> None:
        """Stops a running match, closes both strategies and releases the worker pool."""
        logger.info("Shutting down match runner...")
        if self.started:
            self.stop_match()
        self.strategies.close_all()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        if self._status_live is not None:
            self._status_live.stop()
            self._status_live = None
        self.event_bus.publish(EventType.PLATFORM_EXITING)

    @property
    def status(self) -> str:
        if not self.started:
            return "stopped"
        return "paused" if self.paused else "running"

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    def load_strategies(self, blue_endpoint: str, yellow_endpoint: str) -> Tuple[TeamInfo, TeamInfo]:
        """Connects both teams.

        Raises:
            EndpointFormatError: If an endpoint is malformed.
            StrategyConnectionError: Naming the side that could not be connected.
        """
        blue = self.strategies.connect_blue(blue_endpoint)
        yellow = self.strategies.connect_yellow(yellow_endpoint)
        logger.info("Loaded strategies: %s (blue) vs %s (yellow)", blue.name, yellow.name)
        return blue, yellow

    def remove_strategy(self, side: Optional[Side] = None) -> None:
        """Disconnects one team, or both when ``side`` is None. A running match is stopped first."""
        if self.started:
            self.stop_match()
        if side is None:
            self.strategies.close_all()
        elif side is Side.BLUE:
            self.strategies.close_blue()
        elif side is Side.YELLOW:
            self.strategies.close_yellow()
        else:
            raise ValueError("Cannot remove the strategy of Side.NOBODY")

    # ------------------------------------------------------------------
    # Match control
    # ------------------------------------------------------------------

    def start_match(self) -> None:
        """Resets the match state and leaves the match started but paused."""
        self._epoch += 1
        self.match_info = MatchInfo.new_default(referee=self._referee_factory())
        self.last_judge_result = None
        self.last_fault = None

        self.field_host.set_to_default()
        self.field_host.set_still()
        self.field_host.pause()
        self.started = True
        self.paused = True

        self._notify(_SIDES, "on_match_start")
        logger.info("Match started")
        self.event_bus.publish(EventType.MATCH_START, self.match_info.clone())

    def stop_match(self, notify_strategies: bool = True) -> None:
        self._stop(_SIDES if notify_strategies else ())

    def _stop(self, notify_sides: Iterable[Side]) -> None:
        self._epoch += 1
        self.started = False
        self.paused = True
        self.field_host.pause()
        self._notify(notify_sides, "on_match_stop")
        score = self.match_info.score
        logger.info("Match stopped at %d:%d", score.blue_score, score.yellow_score)
        self.event_bus.publish(EventType.MATCH_STOP, self.match_info.clone())

    def pause_match(self) -> None:
        if not self.started:
            return
        self.paused = True
        self.field_host.pause()

    def resume_match(self) -> None:
        if not self.started:
            return
        self.paused = False
        self.field_host.resume()

    def update_field_state(self, blue_robots: Sequence[Robot], yellow_robots: Sequence[Robot], ball: Ball) -> None:
        """Copies the observed field into the match state."""
        self.match_info.update_from(blue_robots, Side.BLUE)
        self.match_info.update_from(yellow_robots, Side.YELLOW)
        self.match_info.ball = ball

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self) -> Optional[JudgeResult]:
        """Runs one step of the match. Returns the referee's decision, or None if nothing was judged."""
        try:
            self._scheduler.poll()
            if not (self.strategies.both_ready and self.started and not self.paused):
                return None

            state = self.field_host.read_field()
            self.update_field_state(state.blue_robots, state.yellow_robots, state.ball)
            return self._judge_and_apply()
        except StrategyFault as fault:
            logger.exception("Stopping match after strategy fault")
            self._handle_fault(fault)
            return None
        except IllegalStateError:
            logger.exception("Dropping tick %d after a referee error", self.match_info.tick_match)
            return None

    def _judge_and_apply(self) -> JudgeResult:
        mi = self.match_info
        result = mi.referee.judge(mi)
        self.last_judge_result = result
        result_type = result.result_type

        if result_type is ResultType.GAME_OVER:
            mi.score.add_goal(result.who_goal)
            logger.info("Game over (%s)", result.reason)
            self.stop_match()
        elif result_type is ResultType.NEXT_PHASE:
            self._next_phase(result)
        elif result_type is ResultType.NORMAL_MATCH:
            self._normal_match()
        else:
            self._reposition(result)
        return result

    def _next_phase(self, result: JudgeResult) -> None:
        mi = self.match_info
        mi.match_phase = mi.match_phase.next_phase()
        mi.tick_match = 0
        mi.tick_round = 0
        logger.info("Entering %s (%s)", mi.match_phase.name, result.reason)
        self._notify(_SIDES, "on_round_stop")
        if mi.match_phase is MatchPhase.FINISHED:
            self.stop_match()

    def _normal_match(self) -> None:
        mi = self.match_info
        views = {side: self._view_for(side, mi) for side in _SIDES}
        wheels = self._fetch_instructions(views)

        self.field_host.set_blue_wheels(wheels[Side.BLUE].normalize())
        self.field_host.set_yellow_wheels(wheels[Side.YELLOW].normalize())
        mi.tick_match += 1
        mi.tick_round += 1
        self.event_bus.publish(EventType.MATCH_INFO_UPDATE, mi.clone())

    def _fetch_instructions(self, views: Dict[Side, SideInfo]) -> Dict[Side, WheelInfo]:
        if self._executor is None:
            self.init()
        futures = {
            side: self._executor.submit(self._call, side, "get_instruction", views[side]) for side in _SIDES
        }
        wait(futures.values())
        # Blue is reported first when both sides fail.
        return {side: futures[side].result() for side in _SIDES}

    def _reposition(self, result: JudgeResult) -> None:
        mi = self.match_info
        if result.who_is_first is Side.NOBODY:
            logger.error("Referee returned %s without a first mover", result.result_type.name)
            raise IllegalStateError(f"{result.result_type.name} requires who_is_first to be BLUE or YELLOW")

        mi.score.add_goal(result.who_goal)
        logger.info("%s: %s, %s to kick", result.result_type.name, result.reason, result.actor.value)
        self._notify(_SIDES, "on_round_stop")

        epoch = self._epoch
        if mi.tick_match == 0:
            self._apply_placement(result, epoch)
        else:
            self.pause_match()
            self._scheduler.schedule(
                self.config.match.placement_pause_seconds,
                lambda: self._apply_placement(result, epoch),
            )

    def _apply_placement(self, result: JudgeResult, epoch: int) -> None:
        if epoch != self._epoch:
            logger.debug("Skipping placement scheduled for an earlier match")
            return

        mi = self.match_info
        first = result.who_is_first
        second = first.other()

        # The second mover sees the first mover's layout already on the field.
        working = mi.clone()
        first_placement = self._call(first, "get_placement", self._view_for(first, working)).in_field_frame()
        working.update_from(first_placement.robot_list, first)
        second_placement = self._call(second, "get_placement", self._view_for(second, working)).in_field_frame()

        placements = {first: first_placement, second: second_placement}
        merged = MatchInfo.from_placements(placements[Side.BLUE], placements[Side.YELLOW], result.actor)
        try:
            mi.referee.judge_auto_placement(merged, result)
        except IllegalStateError:
            # the restart is abandoned; play carries on from the current field
            self._scheduler.schedule(0.0, lambda: self._resume_if_current(epoch))
            raise

        mi.update_from(merged.blue_robots, Side.BLUE)
        mi.update_from(merged.yellow_robots, Side.YELLOW)
        mi.ball = merged.ball
        self.field_host.set_blue_placement(mi.blue_robots)
        self.field_host.set_yellow_placement(mi.yellow_robots)
        self.field_host.set_ball_placement(mi.ball)
        self.field_host.set_still()

        mi.tick_match += 1
        mi.tick_round = 0
        self.event_bus.publish(EventType.MATCH_INFO_UPDATE, mi.clone())
        self.event_bus.publish(EventType.AUTO_PLACEMENT, mi.clone())
        self._notify(_SIDES, "on_round_start")

        self.pause_match()
        self._scheduler.schedule(
            self.config.match.post_placement_hold_seconds,
            lambda: self._resume_if_current(epoch),
        )

    def _resume_if_current(self, epoch: int) -> None:
        if epoch == self._epoch:
            self.resume_match()

    def _view_for(self, side: Side, match_info: MatchInfo) -> SideInfo:
        view = match_info.get_side(side)
        if side is Side.YELLOW and self.config.strategy.convert_yellow_data:
            view = view.convert_to_other_side()
        return view

    def _call(self, side: Side, call: str, *args):
        strategy = self.strategies.get(side)
        try:
            return getattr(strategy, call)(*args)
        except RpcError as e:
            raise StrategyFault(side, call, e) from e

    def _notify(self, sides: Iterable[Side], call: str) -> None:
        for side in sides:
            if not self.strategies.is_ready(side):
                continue
            try:
                getattr(self.strategies.get(side), call)()
            except RpcError as e:
                logger.warning("%s strategy did not acknowledge %s: %s", side.value, call, e)

    def _handle_fault(self, fault: StrategyFault) -> None:
        self.last_fault = fault
        self._stop([fault.side.other()])
        self.event_bus.publish(EventType.STRATEGY_FAULT, fault)

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def _handle_sigint(self, sig, frame):
        self._stop_event.set()

    def run(self, stop_event: Optional[threading.Event] = None, show_status: bool = False) -> None:
        """Calls ``tick()`` at the configured rate until the match ends, SIGINT or ``stop_event``.

        Must be called from the main thread, which owns the SIGINT handler.
        """
        if stop_event is not None:
            self._stop_event = stop_event
        signal.signal(signal.SIGINT, self._handle_sigint)
        self.init()

        if show_status:
            self._status_live = Live(auto_refresh=False)
            self._status_live.start()  # manually control it so it never overrides prints

        timestep = 1.0 / self.config.match.ticks_per_second
        elapsed = 0.0
        try:
            while not self._stop_event.is_set() and (self.started or self._scheduler.busy):
                frame_start = time.perf_counter()
                self.tick()

                # --- rate limiting ---
                processing_time = time.perf_counter() - frame_start
                time.sleep(max(0.0, timestep - processing_time))

                elapsed += time.perf_counter() - frame_start
                if self._status_live is not None and elapsed >= STATUS_PRINT_INTERVAL:
                    self._status_live.update(Text(self._status_line()))
                    self._status_live.refresh()
                    elapsed = 0.0
        except Exception:
            logger.exception("Exception occurred during run loop:")
            raise
        finally:
            if self._stop_event.is_set():
                logger.info("Stopping run loop due to interrupt.")
            if self._status_live is not None:
                self._status_live.stop()
                self._status_live = None

    def _status_line(self) -> str:
        mi = self.match_info
        return (
            f"{mi.match_phase.name} | tick {mi.tick_match} | "
            f"blue {mi.score.blue_score} : {mi.score.yellow_score} yellow | {self.status}"
        )
