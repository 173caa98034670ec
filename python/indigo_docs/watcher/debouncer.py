"""
Event debouncing for the change watcher.

This module provides the DebounceQueue class that collects bursts of raw
filesystem notifications and hands each path over once its burst has settled.
"""

import logging
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger("indigo_docs.watcher")


class DebounceQueue:
    """
    Queue that collects rapid path changes and flushes each path once it is quiet.

    Behavior:
    ---------
    When a file changes many times in a row (editor save, bulk copy), we only
    want to report it once. Instead:
    1. Every raw event records its path and the time of that event
    2. Paths are deduplicated (same path, many events -> one entry)
    3. A path is flushed once no event arrived for it for debounce_delay
       seconds; activity on other paths does not hold it back
    4. One timer is armed for the earliest pending deadline; paths due at the
       same moment are delivered together, on the timer thread

    Example:
    --------
    notes.md modified at t=0ms
    notes.md modified at t=50ms    } Collect these
    notes.md modified at t=100ms   }
    log.md   modified every 100ms  } Keeps only log.md pending
    -> Flush at t=600ms with a single "notes.md" entry

    After close(), pending paths are discarded and nothing is flushed again.
    """

    def __init__(
        self,
        debounce_delay: float = 0.5,
        flush_callback: Optional[Callable[[list[str]], None]] = None,
    ) -> None:
        """
        Initialize debounce queue.

        Args:
        -----
        debounce_delay: Seconds of quiet per path before flushing (default: 0.5)
        flush_callback: Called with each batch of distinct paths

        Raises:
        -------
        ValueError: If debounce_delay invalid
        """
        if debounce_delay <= 0 or debounce_delay > 10:
            raise ValueError("debounce_delay must be between 0 and 10 seconds")

        self._debounce_delay = debounce_delay
        self._flush_callback = flush_callback

        # Pending path -> monotonic time of its latest raw event (first-seen order)
        self._queue: dict[str, float] = {}
        self._timer: Optional[threading.Timer] = None
        self._closed = False

        # Guards queue and timer
        self._lock = threading.Lock()
        # Held while a batch is delivered; re-entrant so a callback may close us
        self._deliver_lock = threading.RLock()

    def _arm(self, interval: float) -> None:
        """Start the timer for the next deadline. Caller holds _lock."""
        self._timer = threading.Timer(interval, self._flush_due)
        self._timer.daemon = True
        self._timer.start()

    def add(self, path: str) -> None:
        """
        Record a raw event for path and push back that path's deadline.

        Args:
        -----
        path: Absolute path reported by the filesystem notification
        """
        with self._lock:
            if self._closed:
                return

            self._queue[path] = time.monotonic()

            # An armed timer fires no later than this path's deadline
            if self._timer is None:
                self._arm(self._debounce_delay)

    def pending(self) -> list[str]:
        """Return the paths waiting to be flushed."""
        with self._lock:
            return list(self._queue)

    def _flush_due(self) -> None:
        """Timer callback: deliver paths quiet for the whole window, re-arm for the rest."""
        with self._deliver_lock:
            with self._lock:
                if self._closed:
                    return

                self._timer = None
                now = time.monotonic()
                due = [
                    path
                    for path, last_event in self._queue.items()
                    if now - last_event >= self._debounce_delay
                ]
                for path in due:
                    del self._queue[path]

                if self._queue:
                    next_deadline = min(self._queue.values()) + self._debounce_delay
                    self._arm(max(next_deadline - now, 0.0))

            self._deliver(due)

    def flush(self) -> None:
        """
        Flush all pending paths to the callback, due or not.

        close() waits for an in-flight delivery, so no batch is delivered after
        it returns. Exceptions from the callback are caught and logged.
        """
        with self._deliver_lock:
            with self._lock:
                if self._closed:
                    return

                if self._timer is not None:
                    self._timer.cancel()
                    self._timer = None

                paths = list(self._queue)
                self._queue.clear()

            self._deliver(paths)

    def _deliver(self, paths: list[str]) -> None:
        """Hand one batch to the callback. Caller holds _deliver_lock."""
        if not paths or self._flush_callback is None:
            return

        try:
            self._flush_callback(paths)
        except Exception as e:
            # Log error but don't raise (keep watching)
            logger.error(f"Error in flush callback: {e}", exc_info=True)

    def close(self) -> None:
        """Discard pending paths and stop all future flushes."""
        with self._lock:
            self._closed = True
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            dropped = len(self._queue)
            self._queue.clear()

        # Wait for a delivery running on another thread
        with self._deliver_lock:
            pass

        if dropped:
            logger.debug(f"Discarded {dropped} pending change(s) on close")

    @property
    def closed(self) -> bool:
        return self._closed
