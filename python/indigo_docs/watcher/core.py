"""
Core change watcher implementation.

This module provides the ChangeWatcher class that watches the directories
resolved from the HQ scopes and delivers debounced, classified change events
to a single subscriber.

States:
-------
Idle (no subscription) -> Watching (one subscription) -> Idle (stop/replace)

Starting while already watching replaces the subscription; it never stacks.
The subscription slot is the only shared state and is swapped under a lock.
The lock is never held while touching the filesystem or the observer.
"""

import logging
import os
import threading
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence, Union

from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from ..exclusion import is_excluded_path
from ..workspace.discovery import resolve_scope_directories
from .debouncer import DebounceQueue
from .handlers import ChangeEventHandler
from .types import ChangeEvent, ChangeKind, ChangeSink

logger = logging.getLogger("indigo_docs.watcher")

# Fixed debounce window for raw filesystem notifications
DEBOUNCE_SECONDS = 0.5

# How long teardown waits for the observer thread to exit
STOP_TIMEOUT_SECONDS = 5.0


def classify_path(path: str, roots: Iterable[Union[str, Path]] = ()) -> Optional[ChangeEvent]:
    """
    Classify one debounced path.

    Excluded paths yield None. Otherwise the path is re-checked on disk: if it
    exists the change is a MODIFY (this covers creations too), if not it is a
    REMOVE. Watchdog's own event tags are not trusted for this decision.
    Segments above the watched root are deliberately not checked for exclusion.

    Args:
        path: Absolute path taken from a raw event
        roots: Watched directories (exclusion is checked below these)

    Returns:
        ChangeEvent, or None if the path must never be reported
    """
    if is_excluded_path(path, roots):
        return None
    kind = ChangeKind.MODIFY if os.path.exists(path) else ChangeKind.REMOVE
    return ChangeEvent(path=path, kind=kind)


def _watch_roots(directories: Sequence[Path]) -> list[Path]:
    """Watched directories plus their resolved targets, for exclusion checks."""
    roots = list(directories)
    for directory in directories:
        try:
            resolved = directory.resolve()
        except (OSError, RuntimeError):
            continue
        if resolved not in roots:
            roots.append(resolved)
    return roots


@dataclass
class _Subscription:
    """One active observer with its debounce queue."""

    observer: BaseObserver
    queue: DebounceQueue
    directories: list[Path] = field(default_factory=list)

    def close(self) -> None:
        """Stop deliveries, then release the OS-level watches."""
        self.queue.close()
        self.observer.stop()
        if self.observer.is_alive() and threading.current_thread() is not self.observer:
            self.observer.join(timeout=STOP_TIMEOUT_SECONDS)


class ChangeWatcher:
    """
    Watches resolved scope directories and pushes ChangeEvents to a sink.

    Example Usage:
    --------------
    >>> watcher = ChangeWatcher()
    >>> watcher.start("/path/to/hq", ["knowledge/public"], print)
    >>> # ... events arrive on a background thread ...
    >>> watcher.stop()

    Error Conditions:
    -----------------
    - HQ path is not a directory -> ValueError, nothing changes
    - No scope resolves to a directory -> RuntimeError, nothing changes
    - A directory cannot be watched -> RuntimeError, the new observer is torn
      down and the previous subscription (if any) stays active
    - Sink raises -> logged, watcher keeps running
    """

    def __init__(
        self,
        debounce_delay: float = DEBOUNCE_SECONDS,
        observer_factory: Callable[[], BaseObserver] = Observer,
    ) -> None:
        self._debounce_delay = debounce_delay
        self._observer_factory = observer_factory

        self._lock = threading.Lock()
        self._subscription: Optional[_Subscription] = None

    def start(
        self,
        hq_path: Union[str, Path],
        scopes: Iterable[Union[str, Sequence[str]]],
        sink: ChangeSink,
    ) -> list[Path]:
        """
        Start watching the directories the scopes resolve to.

        Scopes are resolved afresh (nothing is shared with earlier scans).
        Any previous subscription is replaced once the new one is fully set up.

        Args:
            hq_path: HQ root directory
            scopes: Scope patterns (``/``-separated, ``*`` wildcard segment)
            sink: Callable receiving each ChangeEvent on the delivery thread

        Returns:
            The directories now being watched

        Raises:
            ValueError: If hq_path is not a directory
            TypeError: If sink is not callable
            RuntimeError: If nothing can be watched or a watch cannot be set up
        """
        hq = Path(hq_path)
        if not hq.is_dir():
            raise ValueError(f"HQ path is not a directory: {hq_path}")
        if not callable(sink):
            raise TypeError("sink must be callable")

        directories = resolve_scope_directories(hq, scopes)
        if not directories:
            raise RuntimeError("No valid directories to watch")

        subscription = self._subscribe(directories, sink)

        with self._lock:
            previous, self._subscription = self._subscription, subscription

        if previous is not None:
            logger.info("Replacing previous file watcher")
            previous.close()

        logger.info(f"Watching {len(directories)} director(ies) under {hq}")
        return list(directories)

    def _subscribe(self, directories: list[Path], sink: ChangeSink) -> _Subscription:
        """Create and start an observer with one recursive watch per directory."""
        roots = _watch_roots(directories)
        queue = DebounceQueue(
            debounce_delay=self._debounce_delay,
            flush_callback=partial(self._deliver, roots, sink),
        )
        handler = ChangeEventHandler(queue, roots)

        observer = self._observer_factory()
        observer.start()
        try:
            for directory in directories:
                # Observer is running, so schedule() starts the emitter right away
                # and surfaces registration errors here
                try:
                    observer.schedule(handler, str(directory), recursive=True)
                except Exception as e:
                    raise RuntimeError(f"Failed to watch {directory}: {e}") from e
        except Exception:
            queue.close()
            observer.stop()
            observer.join(timeout=STOP_TIMEOUT_SECONDS)
            raise

        return _Subscription(observer=observer, queue=queue, directories=list(directories))

    @staticmethod
    def _deliver(roots: list[Path], sink: ChangeSink, paths: list[str]) -> None:
        """Classify a debounced batch and push each event to the sink."""
        for path in paths:
            event = classify_path(path, roots)
            if event is None:
                continue
            try:
                sink(event)
            except Exception as e:
                logger.error(f"Error in change sink for {path}: {e}", exc_info=True)

    def stop(self) -> None:
        """
        Stop watching. Safe to call when idle.

        Pending changes are discarded and no event is delivered after this
        returns (unless called from within the sink itself).
        """
        with self._lock:
            previous, self._subscription = self._subscription, None

        if previous is not None:
            logger.info("Stopping file watcher")
            previous.close()

    def is_running(self) -> bool:
        """Check if a subscription is active."""
        with self._lock:
            subscription = self._subscription
        return subscription is not None and subscription.observer.is_alive()

    def watched_directories(self) -> list[Path]:
        """Return the directories of the active subscription (empty when idle)."""
        with self._lock:
            subscription = self._subscription
        return list(subscription.directories) if subscription else []
