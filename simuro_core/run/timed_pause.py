import logging
import time
from collections import deque
from typing import Callable, Deque, Optional, Tuple

logger = logging.getLogger(__name__)


class TimedPauseScheduler:
    """Single-flight delayed callbacks, serviced by polling from the tick thread.

    Only one pause is in flight at a time. A queued request starts counting its
    delay when it takes over from the previous one; when the delay has elapsed its
    callback runs and only then is the next request taken up. Nothing runs on a
    background thread, so callbacks may touch match state freely.

    Args:
        clock (Callable[[], float]): Monotonic time source in seconds. Injected in tests.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._queue: Deque[Tuple[float, Callable[[], None]]] = deque()
        self._active: Optional[Tuple[float, Callable[[], None]]] = None
        self._polling = False

    @property
    def busy(self) -> bool:
        return self._active is not None or bool(self._queue)

    def schedule(self, seconds: float, callback: Callable[[], None]) -> None:
        """Queues ``callback`` to run ``seconds`` after it acquires the pause.

        With nothing in flight and ``seconds <= 0`` the callback runs before this returns.
        """
        self._queue.append((seconds, callback))
        self.poll()

    def poll(self) -> int:
        """Runs every callback whose delay has elapsed. Returns how many ran."""
        if self._polling:
            # Called from inside a callback; the outer poll picks up new requests.
            return 0

        fired = 0
        self._polling = True
        try:
            while True:
                if self._active is None:
                    if not self._queue:
                        return fired
                    seconds, callback = self._queue.popleft()
                    self._active = (self._clock() + max(seconds, 0.0), callback)

                deadline, callback = self._active
                if self._clock() < deadline:
                    return fired
                try:
                    callback()
                finally:
                    self._active = None
                fired += 1
        finally:
            self._polling = False
