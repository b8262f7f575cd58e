from abc import ABC, abstractmethod

from simuro_core.entities.data.command import PlacementInfo, TeamInfo, WheelInfo
from simuro_core.entities.match.side_info import SideInfo


class AbstractStrategy(ABC):
    """
    Capabilities the match core needs from one team's decision-making process.

    Implementations raise a subclass of ``RpcError`` when a call cannot be completed; they never
    retry or reconnect on their own.
    """

    @abstractmethod
    def get_team_info(self) -> TeamInfo:
        """Static metadata about the team."""
        ...

    @abstractmethod
    def on_match_start(self) -> None: ...

    @abstractmethod
    def on_match_stop(self) -> None: ...

    @abstractmethod
    def on_round_start(self) -> None: ...

    @abstractmethod
    def on_round_stop(self) -> None: ...

    @abstractmethod
    def get_instruction(self, side_info: SideInfo) -> WheelInfo:
        """Wheel speeds for the next tick, computed from ``side_info``.

        The result is not trusted to be within the wheel speed limit.
        """
        ...

    @abstractmethod
    def get_placement(self, side_info: SideInfo) -> PlacementInfo:
        """Proposed robot poses (and ball position) for a reposition.

        The placement is expressed in the same frame as ``side_info``; its
        ``mirrored`` flag matches ``side_info.mirrored``.
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the connection. Later calls raise ``RpcClosedError``."""
        ...
