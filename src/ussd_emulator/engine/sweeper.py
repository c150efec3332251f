from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from ussd_emulator.engine.session_store import SessionStore


logger = logging.getLogger(__name__)


class ExpirySweeper:
    """Background thread that periodically drops expired sessions."""

    def __init__(
        self,
        store: SessionStore,
        timeout: float,
        interval: float,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.timeout = timeout
        self.interval = interval
        self.clock = clock
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.interval <= 0 or self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="ussd-session-sweeper", daemon=True)
        self._thread.start()
        logger.debug("[USSD] Session sweeper started (every %ss, timeout %ss)", self.interval, self.timeout)

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=self.interval + 1)
            self._thread = None

    def sweep_once(self) -> int:
        return self.store.sweep_expired(self.clock(), self.timeout)

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.sweep_once()
            except Exception:
                logger.exception("[USSD] Session sweep failed")
