import logging
import socket
import threading
import time
from typing import Optional, Tuple

from google.protobuf.message import DecodeError

from simuro_core.config.settings import RPC_BUFFER_SIZE
from simuro_core.errors import (
    EndpointFormatError,
    RpcClosedError,
    RpcProtocolError,
    RpcTimeoutError,
    RpcTransportError,
)
from simuro_core.strategy.rpc import messages

logger = logging.getLogger(__name__)

_MAX_SEQ = 0xFFFFFFFF


def parse_endpoint(endpoint: str, default_port: int) -> Tuple[str, int]:
    """
    Splits a ``host[:port]`` endpoint string.

    Args:
        endpoint (str): Endpoint as typed by the user, e.g. ``"127.0.0.1:20000"`` or ``"localhost"``.
        default_port (int): Port used when the endpoint does not name one.

    Returns:
        Tuple[str, int]: The host and port.

    Raises:
        EndpointFormatError: If the host is empty, the port is not an integer in 1..65535,
            or the string holds more than one ``:``.
    """
    text = endpoint.strip() if endpoint else ""
    if not text:
        raise EndpointFormatError("Endpoint is empty")

    if text.count(":") > 1:
        raise EndpointFormatError(f"Endpoint '{endpoint}' is not of the form host[:port]")

    host, sep, port_text = text.partition(":")
    if not host:
        raise EndpointFormatError(f"Endpoint '{endpoint}' has no host")
    if not sep:
        return host, default_port

    if not port_text.isdigit():
        raise EndpointFormatError(f"Endpoint '{endpoint}' has a non-numeric port")
    port = int(port_text)
    if not 1 <= port <= 65535:
        raise EndpointFormatError(f"Endpoint '{endpoint}' port {port} is out of range")
    return host, port


class StrategyClient:
    """
    Request/response channel to one strategy process over UDP.

    Every request carries a sequence number; the client waits for the response with the same number and
    discards anything else (typically a late answer to a call that already timed out). Calls are serialised,
    so a client may be shared between threads.

    Args:
        address (Tuple[str, int]): Host and port of the strategy.
        timeout (float): Default time in seconds to wait for each response.
    """

    def __init__(self, address: Tuple[str, int], timeout: float):
        self.address = address
        self.timeout = timeout
        self._seq = 0
        self._lock = threading.Lock()
        self._closed = False

        self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            self._sock.connect(address)
        except OSError:
            self._sock.close()
            raise
        logger.info("Strategy client ready for %s:%d (timeout %.2fs)", address[0], address[1], timeout)

    @property
    def closed(self) -> bool:
        return self._closed

    def call(self, request, expect: str, timeout: Optional[float] = None):
        """
        Sends ``request`` and returns the ``expect`` member of the matching response.

        Raises:
            RpcClosedError: If the client has been closed.
            RpcTimeoutError: If no matching response arrives in time.
            RpcTransportError: If the socket fails.
            RpcProtocolError: If the response is undecodable, reports an error, or holds the wrong result.
        """
        call_name = request.WhichOneof("call") or "unknown"
        timeout = self.timeout if timeout is None else timeout

        with self._lock:
            if self._closed:
                raise RpcClosedError(call_name, "client is closed")

            self._seq = self._seq + 1 if self._seq < _MAX_SEQ else 1
            request.seq = self._seq
            try:
                self._sock.send(request.SerializeToString())
            except OSError as e:
                raise RpcTransportError(call_name, f"send failed: {e}") from e

            response = self._receive(call_name, self._seq, timeout)

        kind = response.WhichOneof("result")
        if kind == "error":
            raise RpcProtocolError(call_name, f"strategy reported an error: {response.error}")
        if kind != expect:
            raise RpcProtocolError(call_name, f"expected {expect}, got {kind}")
        return getattr(response, expect)

    def _receive(self, call_name: str, seq: int, timeout: float):
        deadline = time.monotonic() + timeout
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise RpcTimeoutError(call_name, f"no answer within {timeout:.2f}s")
            self._sock.settimeout(remaining)

            try:
                data = self._sock.recv(RPC_BUFFER_SIZE)
            except socket.timeout as e:
                raise RpcTimeoutError(call_name, f"no answer within {timeout:.2f}s") from e
            except OSError as e:
                raise RpcTransportError(call_name, f"receive failed: {e}") from e

            response = messages.RpcResponse()
            try:
                response.ParseFromString(data)
            except DecodeError as e:
                raise RpcProtocolError(call_name, "undecodable response") from e

            if response.seq != seq:
                logger.debug("Discarding stale response %d while waiting for %d", response.seq, seq)
                continue
            return response

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._sock.close()
        logger.info("Strategy client for %s:%d closed", self.address[0], self.address[1])
