from __future__ import annotations

import logging
import threading
import weakref
from contextlib import contextmanager

from hackcore.apps.hackathons.exceptions import PersistenceError

logger = logging.getLogger(__name__)

# Un Lock por submission; record_score recalcula sin volver a tomarlo
_locks: "weakref.WeakValueDictionary[int, threading.Lock]" = weakref.WeakValueDictionary()
_registry_lock = threading.Lock()


def _lock_for(submission_id: int):
    with _registry_lock:
        lock = _locks.get(submission_id)
        if lock is None:
            lock = threading.Lock()
            _locks[submission_id] = lock
        return lock


@contextmanager
def submission_lock(submission_id: int, timeout: float):
    """Sección crítica por submission (submissions distintos no se bloquean entre sí)."""
    lock = _lock_for(submission_id)
    if not lock.acquire(timeout=timeout):
        logger.warning("Timed out after %ss waiting for submission %s", timeout, submission_id)
        raise PersistenceError(f"Timed out waiting to update scores for submission {submission_id}.")
    try:
        yield
    finally:
        lock.release()
