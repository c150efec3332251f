from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, Protocol

from ussd_emulator.engine.core.models import Session


logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """Storage contract used by the session engine.

    `locked(session_id)` must exclude every other read-modify-write on the same
    session, including the expiry sweep.
    """

    def get(self, session_id: str) -> Session | None: ...

    def put(self, session: Session) -> None: ...

    def delete(self, session_id: str) -> bool: ...

    def sweep_expired(self, now: float, timeout: float) -> int: ...

    def locked(self, session_id: str): ...


@dataclass
class InMemorySessionStore:
    """Process-local session table guarded by a single re-entrant lock.

    Contention is expected to be low, so one lock covers every session.
    Sessions are lost on restart.
    """

    _sessions: dict[str, Session] = field(default_factory=dict)
    _lock: threading.RLock = field(default_factory=threading.RLock)

    def get(self, session_id: str) -> Session | None:
        with self._lock:
            return self._sessions.get(session_id)

    def put(self, session: Session) -> None:
        with self._lock:
            self._sessions[session.session_id] = session

    def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def sweep_expired(self, now: float, timeout: float) -> int:
        # Age is measured from started_at, not from the last input.
        with self._lock:
            expired = [sid for sid, s in self._sessions.items() if now - s.started_at > timeout]
            for sid in expired:
                del self._sessions[sid]

        if expired:
            logger.info("[USSD] Swept %d expired session(s)", len(expired))
        return len(expired)

    @contextmanager
    def locked(self, session_id: str) -> Iterator[None]:
        with self._lock:
            yield

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions
