"""Per-key locks used to serialize work on a single mediation session."""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator


class SessionLockRegistry:
    """Hands out one lock per session id."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    def lock_for(self, session_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(session_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[session_id] = lock
            return lock

    @contextmanager
    def hold(self, session_id: str) -> Iterator[None]:
        lock = self.lock_for(session_id)
        with lock:
            yield
