import logging
from typing import Optional

from simuro_core.config.config_loader import StrategyConfig
from simuro_core.config.enums import Side
from simuro_core.entities.data.command import PlacementInfo, TeamInfo, WheelInfo
from simuro_core.entities.match.side_info import SideInfo
from simuro_core.errors import RpcError, RpcProtocolError, StrategyConnectionError
from simuro_core.strategy.abstract_strategy import AbstractStrategy
from simuro_core.strategy.rpc import converters, messages
from simuro_core.strategy.rpc.client import StrategyClient, parse_endpoint

logger = logging.getLogger(__name__)


class RPCStrategy(AbstractStrategy):
    """
    Strategy living in another process, reached through a StrategyClient.

    Use ``RPCStrategy.connect`` to open one; the constructor only wraps an existing client.
    """

    def __init__(self, client: StrategyClient, team_info: Optional[TeamInfo] = None):
        self.client = client
        self.team_info = team_info

    @classmethod
    def connect(cls, endpoint: str, side: Side, config: Optional[StrategyConfig] = None) -> "RPCStrategy":
        """
        Opens a connection to the strategy at ``endpoint`` and fetches its TeamInfo.

        Args:
            endpoint (str): ``host[:port]``; the port defaults to the side's configured port.
            side (Side): The team this strategy will play for.
            config (StrategyConfig): Ports and timeouts. Defaults to StrategyConfig().

        Raises:
            EndpointFormatError: If the endpoint is malformed.
            StrategyConnectionError: If the strategy cannot be reached or does not answer in time.
        """
        config = config if config is not None else StrategyConfig()
        default_port = config.blue_port if side is Side.BLUE else config.yellow_port
        host, port = parse_endpoint(endpoint, default_port)

        try:
            client = StrategyClient((host, port), timeout=config.call_timeout)
        except OSError as e:
            raise StrategyConnectionError(side, f"cannot open {host}:{port}: {e}") from e

        strategy = cls(client)
        try:
            strategy.team_info = strategy._fetch_team_info(timeout=config.connect_timeout)
        except RpcError as e:
            client.close()
            raise StrategyConnectionError(side, f"no answer from {host}:{port}: {e}") from e

        logger.info("Connected %s strategy '%s' at %s:%d", side.value, strategy.team_info.name, host, port)
        return strategy

    def _fetch_team_info(self, timeout: Optional[float] = None) -> TeamInfo:
        request = messages.RpcRequest()
        request.get_team_info.SetInParent()
        reply = self.client.call(request, "team_info", timeout=timeout)
        return TeamInfo(name=reply.team_name)

    def get_team_info(self) -> TeamInfo:
        if self.team_info is None:
            self.team_info = self._fetch_team_info()
        return self.team_info

    def _notify(self, event: str) -> None:
        request = messages.RpcRequest()
        request.on_event.type = messages.EventType.Value(event)
        self.client.call(request, "ack")

    def on_match_start(self) -> None:
        self._notify("MATCH_START")

    def on_match_stop(self) -> None:
        self._notify("MATCH_STOP")

    def on_round_start(self) -> None:
        self._notify("ROUND_START")

    def on_round_stop(self) -> None:
        self._notify("ROUND_STOP")

    def get_instruction(self, side_info: SideInfo) -> WheelInfo:
        request = messages.RpcRequest()
        request.get_instruction.field.CopyFrom(converters.side_info_to_field(side_info))
        reply = self.client.call(request, "instruction")
        try:
            return converters.wheel_info_from_instruction(reply)
        except ValueError as e:
            raise RpcProtocolError("get_instruction", str(e)) from e

    def get_placement(self, side_info: SideInfo) -> PlacementInfo:
        request = messages.RpcRequest()
        request.get_placement.field.CopyFrom(converters.side_info_to_field(side_info))
        reply = self.client.call(request, "placement")
        try:
            return converters.placement_info_from_message(reply, mirrored=side_info.mirrored)
        except ValueError as e:
            raise RpcProtocolError("get_placement", str(e)) from e

    def close(self) -> None:
        self.client.close()
