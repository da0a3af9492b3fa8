import threading
from contextlib import contextmanager

from slotbook.core.errors import ConflictError


class ResourceLocks:
    """Per-resource mutual exclusion for admission control in this process.

    Waiting is bounded; a caller that cannot get in before the timeout gets a
    ConflictError and decides itself whether to retry.
    """

    def __init__(self, timeout: float):
        self.timeout = timeout
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, resource_id: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(resource_id, threading.Lock())

    @contextmanager
    def hold(self, resource_id: str):
        lock = self._lock_for(resource_id)
        if not lock.acquire(timeout=self.timeout):
            raise ConflictError(f"resource {resource_id} is busy with another booking, retry")
        try:
            yield
        finally:
            lock.release()
