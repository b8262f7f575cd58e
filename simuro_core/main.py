import argparse
import logging

from simuro_core.config.config_loader import load_config
from simuro_core.config.enums import EventType
from simuro_core.config.settings import LOG_FILE
from simuro_core.field_host import InMemoryFieldHost
from simuro_core.run import EventBus, MatchRunner
from simuro_core.strategy import StrategyManager

logger = logging.getLogger(__name__)


def _log_fault(fault) -> None:
    logger.error("Match stopped by strategy fault: %s", fault)
    print(f"Match stopped: {fault}")


def run_match(blue: str, yellow: str, profile: str = "default", show_status: bool = False) -> MatchRunner:
    """Connects both strategies and plays one match on an in-memory field until it ends."""
    config = load_config(profile)
    field_host = InMemoryFieldHost(config.referee.geometry)
    event_bus = EventBus()
    event_bus.subscribe(EventType.STRATEGY_FAULT, _log_fault)

    runner = MatchRunner(
        field_host,
        StrategyManager(config.strategy),
        config=config,
        event_bus=event_bus,
    )
    runner.init()
    try:
        blue_info, yellow_info = runner.load_strategies(blue, yellow)
        print(f"{blue_info.name} (blue) vs {yellow_info.name} (yellow)")
        runner.start_match()
        runner.resume_match()
        runner.run(show_status=show_status)
    finally:
        runner.shutdown()

    score = runner.match_info.score
    print(f"Final score: blue {score.blue_score} : {score.yellow_score} yellow")
    return runner


def main():
    parser = argparse.ArgumentParser(description="Run a 5v5 match between two strategy processes.")
    parser.add_argument("--blue", type=str, required=True, help="Blue strategy endpoint, host[:port].")
    parser.add_argument("--yellow", type=str, required=True, help="Yellow strategy endpoint, host[:port].")
    parser.add_argument(
        "--profile",
        type=str,
        default="default",
        help="Built-in profile name or path to a YAML profile.",
    )
    parser.add_argument("--status", action="store_true", default=False, help="Show a live status line.")
    parser.add_argument("--log-level", type=str, default="INFO", help="Logging level written to the log file.")
    args = parser.parse_args()

    logging.basicConfig(
        filename=LOG_FILE,
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        filemode="w",
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.captureWarnings(True)

    run_match(args.blue, args.yellow, args.profile, args.status)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
