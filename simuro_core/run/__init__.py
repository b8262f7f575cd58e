from simuro_core.run.event_bus import EventBus
from simuro_core.run.match_runner import MatchRunner
from simuro_core.run.timed_pause import TimedPauseScheduler

__all__ = ["EventBus", "MatchRunner", "TimedPauseScheduler"]
