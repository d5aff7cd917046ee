# --- File: core/guid.py ---
import hashlib
import logging
import os
import threading
import time

logger = logging.getLogger(__name__)


class GuidGenerator:
    """
    Process-wide source of unique file-name tokens.

    Each token hashes a strictly increasing counter together with the process id,
    the current time and fresh random bytes, so two calls never return the same value
    even when they race from different request threads.
    """
    def __init__(self):
        self._lock = threading.Lock()
        self._counter = 0
        self._pid = os.getpid()

    def next(self) -> str:
        with self._lock:
            self._counter += 1
            sequence = self._counter
        seed = f"{self._pid}:{sequence}:{time.time_ns()}:".encode('ascii') + os.urandom(16)
        return hashlib.md5(seed).hexdigest()

    @property
    def issued(self) -> int:
        """Number of tokens handed out so far."""
        with self._lock:
            return self._counter
