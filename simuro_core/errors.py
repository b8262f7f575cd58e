"""Exception types raised by the referee core and the strategy RPC layer."""

from __future__ import annotations

from typing import Optional

from simuro_core.config.enums import Side


class EndpointFormatError(ValueError):
    """A strategy endpoint string is not of the form ``host[:port]``."""


class StrategyConnectionError(RuntimeError):
    """A strategy could not be connected (refused, unreachable or timed out)."""

    def __init__(self, side: Side, message: str):
        super().__init__(f"{side.value} strategy: {message}")
        self.side = side


class RpcError(Exception):
    """Base class for failures of a single strategy RPC call."""

    def __init__(self, call: str, message: str):
        super().__init__(f"{call}: {message}")
        self.call = call


class RpcTimeoutError(RpcError, TimeoutError):
    """The strategy did not answer within the configured timeout."""


class RpcTransportError(RpcError):
    """The socket failed while sending or receiving."""


class RpcProtocolError(RpcTransportError):
    """The strategy answered with a malformed or unexpected message."""


class RpcClosedError(RpcError):
    """A call was made on a client that has already been closed."""


class StrategyFault(RuntimeError):
    """A strategy call failed during a match. Stops the match, never retried."""

    def __init__(self, side: Side, call: str, cause: Optional[BaseException] = None):
        super().__init__(f"{side.value} strategy faulted during {call}: {cause}")
        self.side = side
        self.call = call
        self.cause = cause

    @property
    def is_timeout(self) -> bool:
        return isinstance(self.cause, TimeoutError)


class IllegalStateError(RuntimeError):
    """The referee produced a judgment that violates its own contract."""
