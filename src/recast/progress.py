"""In-memory progress sessions for streaming status updates to the browser."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field

from recast.models import new_id

logger = logging.getLogger(__name__)


@dataclass
class ProgressSession:
    """Append-only log of status messages for one in-flight request."""

    id: str
    messages: list[str] = field(default_factory=list)
    updated_at: float = field(default_factory=time.monotonic)
    finished: bool = False
    result_id: str | None = None
    error: str | None = None


class ProgressStore:
    """Thread-safe map of session id to ``ProgressSession``.

    Sessions idle for longer than ``ttl_seconds`` are dropped by
    ``cleanup()``, which ``start_cleanup()`` runs on a timer.
    """

    def __init__(self, ttl_seconds: float = 1800, cleanup_interval: float = 300) -> None:
        self._ttl = ttl_seconds
        self._interval = cleanup_interval
        self._sessions: dict[str, ProgressSession] = {}
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._stopped = True

    def create(self, session_id: str | None = None) -> ProgressSession:
        session = ProgressSession(id=session_id or new_id())
        with self._lock:
            self._sessions[session.id] = session
        return session

    def append(self, session_id: str, message: str) -> None:
        with self._lock:
            session = self._sessions[session_id]
            session.messages.append(message)
            session.updated_at = time.monotonic()

    def finish(
        self, session_id: str, result_id: str | None = None, error: str | None = None
    ) -> None:
        with self._lock:
            session = self._sessions[session_id]
            session.finished = True
            session.result_id = result_id
            session.error = error
            session.updated_at = time.monotonic()

    def get(self, session_id: str) -> ProgressSession:
        with self._lock:
            return self._sessions[session_id]

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def messages(self, session_id: str, start: int = 0) -> list[str]:
        """Return a copy of the messages recorded from index ``start`` on."""
        with self._lock:
            return list(self._sessions[session_id].messages[start:])

    def cleanup(self, now: float | None = None) -> int:
        """Drop idle sessions and return how many were removed."""
        now = time.monotonic() if now is None else now
        with self._lock:
            expired = [
                sid for sid, s in self._sessions.items() if now - s.updated_at > self._ttl
            ]
            for sid in expired:
                del self._sessions[sid]
        if expired:
            logger.debug("Dropped %d idle progress sessions", len(expired))
        return len(expired)

    def start_cleanup(self) -> None:
        """Run ``cleanup()`` now and then every ``cleanup_interval`` seconds on a daemon timer."""
        with self._lock:
            self._stopped = False
        self._run_cleanup()

    def stop_cleanup(self) -> None:
        with self._lock:
            self._stopped = True
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

    def _run_cleanup(self) -> None:
        self.cleanup()
        with self._lock:
            # No new timer once stop_cleanup() has been called
            if self._stopped:
                return
            timer = threading.Timer(self._interval, self._run_cleanup)
            timer.daemon = True
            self._timer = timer
            timer.start()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
