import logging
from typing import Callable, Dict, Optional

from simuro_core.config.config_loader import StrategyConfig
from simuro_core.config.enums import Side
from simuro_core.entities.data.command import TeamInfo
from simuro_core.errors import RpcError, StrategyConnectionError
from simuro_core.strategy.abstract_strategy import AbstractStrategy
from simuro_core.strategy.rpc_strategy import RPCStrategy

logger = logging.getLogger(__name__)

Connector = Callable[[str, Side, StrategyConfig], AbstractStrategy]


class StrategyManager:
    """
    Holds the strategy handle of each team together with its TeamInfo and ready flag.

    The two sides are independent: connecting, failing to connect or closing one side never
    touches the other.

    Args:
        config (StrategyConfig): Ports and timeouts passed to the connector.
        connector (Connector): Opens a strategy for an endpoint. Defaults to ``RPCStrategy.connect``.
    """

    def __init__(self, config: Optional[StrategyConfig] = None, connector: Optional[Connector] = None):
        self.config = config if config is not None else StrategyConfig()
        self._connector = connector if connector is not None else RPCStrategy.connect
        self._strategies: Dict[Side, Optional[AbstractStrategy]] = {Side.BLUE: None, Side.YELLOW: None}
        self._team_info: Dict[Side, Optional[TeamInfo]] = {Side.BLUE: None, Side.YELLOW: None}

    @property
    def is_blue_ready(self) -> bool:
        return self._strategies[Side.BLUE] is not None

    @property
    def is_yellow_ready(self) -> bool:
        return self._strategies[Side.YELLOW] is not None

    @property
    def both_ready(self) -> bool:
        return self.is_blue_ready and self.is_yellow_ready

    def is_ready(self, side: Side) -> bool:
        return self._strategies.get(side) is not None

    def connect_blue(self, endpoint: str) -> TeamInfo:
        return self._connect(Side.BLUE, endpoint)

    def connect_yellow(self, endpoint: str) -> TeamInfo:
        return self._connect(Side.YELLOW, endpoint)

    def _connect(self, side: Side, endpoint: str) -> TeamInfo:
        # A reconnect replaces the old handle; the side is not ready until the new one answers.
        self._close(side)
        strategy = self._connector(endpoint, side, self.config)
        try:
            team_info = strategy.get_team_info()
        except RpcError as e:
            strategy.close()
            raise StrategyConnectionError(side, f"no team info: {e}") from e
        self._strategies[side] = strategy
        self._team_info[side] = team_info
        logger.info("%s strategy ready: %s", side.value, team_info.name)
        return team_info

    def close_blue(self) -> None:
        self._close(Side.BLUE)

    def close_yellow(self) -> None:
        self._close(Side.YELLOW)

    def close_all(self) -> None:
        self._close(Side.BLUE)
        self._close(Side.YELLOW)

    def _close(self, side: Side) -> None:
        strategy = self._strategies[side]
        self._strategies[side] = None
        self._team_info[side] = None
        if strategy is None:
            return
        try:
            strategy.close()
        except OSError as e:
            logger.warning("Error closing %s strategy: %s", side.value, e)
        logger.info("%s strategy closed", side.value)

    def get(self, side: Side) -> AbstractStrategy:
        """Returns the live strategy of ``side``; raises StrategyConnectionError if it is not connected."""
        strategy = self._strategies.get(side)
        if strategy is None:
            raise StrategyConnectionError(side, "not connected")
        return strategy

    def team_info(self, side: Side) -> Optional[TeamInfo]:
        return self._team_info.get(side)
