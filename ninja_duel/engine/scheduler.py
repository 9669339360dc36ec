# ninja_duel/engine/scheduler.py
import logging
import random
import threading
import time
from typing import Callable, Dict, Optional

from ..content.balance import AI

logger = logging.getLogger(__name__)


def _thread_spawn(fn: Callable[[], None]) -> None:
    threading.Thread(target=fn, daemon=True).start()


class OpponentTurnScheduler:
    """
    Runs the automated side's move after a short "thinking" delay.

    One pending task per key (room id). Scheduling again for a key cancels
    the earlier task; a cancelled task that wakes up anyway does nothing.
    The callback is expected to re-read the match and drop stale moves.

    spawn/sleep default to a daemon thread and time.sleep. The Socket.IO host
    passes socketio.start_background_task and socketio.sleep; tests pass
    synchronous stand-ins.
    """

    def __init__(
        self,
        spawn: Optional[Callable[[Callable[[], None]], object]] = None,
        sleep: Optional[Callable[[float], None]] = None,
        delay_range=None,
        rng: Optional[random.Random] = None,
    ):
        self._spawn = spawn or _thread_spawn
        self._sleep = sleep or time.sleep
        self.delay_range = delay_range or (AI["think_delay_min"], AI["think_delay_max"])
        self._rng = rng or random.Random()
        self._pending: Dict[str, threading.Event] = {}
        self._lock = threading.Lock()

    def schedule(self, key: str, callback: Callable[[], None]) -> threading.Event:
        cancelled = threading.Event()
        with self._lock:
            previous = self._pending.get(key)
            if previous is not None:
                previous.set()
            self._pending[key] = cancelled
        delay = self._rng.uniform(*self.delay_range)

        def run():
            self._sleep(delay)
            with self._lock:
                if cancelled.is_set() or self._pending.get(key) is not cancelled:
                    logger.debug("dropping cancelled opponent move for %s", key)
                    return
                del self._pending[key]
            callback()

        self._spawn(run)
        return cancelled

    def cancel(self, key: str) -> bool:
        with self._lock:
            cancelled = self._pending.pop(key, None)
        if cancelled is None:
            return False
        cancelled.set()
        return True

    def is_pending(self, key: str) -> bool:
        with self._lock:
            return key in self._pending
